"""
运行参数：由 app.py 的命令行参数填充
"""
from dataclasses import dataclass

from .constants import (DEFAULT_DESCHEDULING_INTERVAL, DEFAULT_KUBECONFIG,
                        DEFAULT_MAX_PODS_TO_EVICT_PER_NODE)


@dataclass(frozen=True)
class DeschedulerOptions:
    kubeconfig: str = DEFAULT_KUBECONFIG
    policy_config_file: str = ""
    dry_run: bool = False
    node_selector: str = ""
    max_pods_to_evict_per_node: int = DEFAULT_MAX_PODS_TO_EVICT_PER_NODE
    descheduling_interval: int = DEFAULT_DESCHEDULING_INTERVAL     # 秒
