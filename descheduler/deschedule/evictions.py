"""
evictions.py
~~~~~~~~~~~~
单个 Pod 的驱逐操作 + 每节点驱逐预算。
"""
from __future__ import annotations
import logging
from typing import Dict, Iterable

import urllib3
from kubernetes.client.rest import ApiException

from ..cluster.ClusterMonitor import ClusterMonitor
from .resource_types import Node, Pod


class EvictionError(Exception):
    """The eviction API refused or could not be reached."""

    def __init__(self, pod: Pod, reason: str):
        super().__init__(f"evict {pod.full_name}: {reason}")
        self.pod = pod
        self.reason = reason


class PodEvictor:
    """
    Parameters
    ----------
    monitor : ClusterMonitor
    policy_group_version : str
        Eviction 对象使用的 API 版本，例如 "policy/v1"。
    """

    def __init__(self, monitor: ClusterMonitor, policy_group_version: str):
        self.monitor = monitor
        self.policy_group_version = policy_group_version
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def evict(self, pod: Pod, dry_run: bool = False) -> None:
        """dry_run 时不调用 API，视为成功。失败抛出 EvictionError。"""
        if dry_run:
            self.logger.debug("[dry-run] would evict %s", pod.full_name)
            return
        try:
            self.monitor.evict_pod(pod.name, pod.namespace, self.policy_group_version)
        except ApiException as exc:
            # 404/410：Pod 已经不在了；429：被 PodDisruptionBudget 拒绝
            raise EvictionError(pod, f"status {exc.status} {exc.reason}") from exc
        except urllib3.exceptions.HTTPError as exc:
            raise EvictionError(pod, str(exc)) from exc


class EvictionBudget:
    """
    一轮 descheduling 内、所有策略共享的每节点驱逐计数。
    max_per_node <= 0 表示不限制。
    """

    def __init__(self, nodes: Iterable[Node], max_per_node: int = 0):
        self.max_per_node = max_per_node
        self._count: Dict[str, int] = {n.name: 0 for n in nodes}

    def exhausted(self, node: Node) -> bool:
        return self.max_per_node > 0 and self.evicted_on(node) + 1 > self.max_per_node

    def record(self, node: Node) -> None:
        self._count[node.name] = self._count.get(node.name, 0) + 1

    def evicted_on(self, node: Node) -> int:
        return self._count.get(node.name, 0)

    @property
    def total(self) -> int:
        return sum(self._count.values())
