"""
strategy_interface.py
~~~~~~~~~~~~~~~~~~~~~
Descheduling 策略的抽象基类。
新策略请继承并实现 `run()` 方法，再在 descheduler.STRATEGIES 里注册。
"""

from abc import ABC, abstractmethod
from typing import List

from .evictions import EvictionBudget
from .resource_types import Node


class BaseStrategy(ABC):
    """
    任何策略都必须：
      • 接受 【本轮 Ready 节点列表】+ 【共享的驱逐预算】
      • 返回 本策略在这一轮驱逐的 Pod 数
    """

    name: str = ""

    @abstractmethod
    def run(self, nodes: List[Node], budget: EvictionBudget) -> int:
        """
        Parameters
        ----------
        nodes : List[Node]
            本轮参与 descheduling 的节点，顺序即处理顺序。
        budget : EvictionBudget
            各策略共享的每节点驱逐计数，策略必须遵守其上限。

        Returns
        -------
        evicted : int
            本策略驱逐（dry-run 时为“将会驱逐”）的 Pod 数。
        """
        raise NotImplementedError
