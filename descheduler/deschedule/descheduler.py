"""
descheduler.py
~~~~~~~~~~~~~~
Descheduler 主模块：定期循环
  • 读取 policy
  • 确认集群支持 Eviction API
  • 采集 Ready 节点 → 按 policy 依次执行各策略
  • 所有策略共享同一份每节点驱逐预算
"""
from __future__ import annotations
import logging
import time
from typing import Callable, Dict

from ..cluster.ClusterMonitor import ClusterMonitor
from .cluster_state import ClusterSnapshot
from .constants import STRATEGY_REMOVE_DUPLICATES
from .duplicates import RemoveDuplicatePods
from .evictions import EvictionBudget, PodEvictor
from .options import DeschedulerOptions
from .policy import load_policy
from .strategy_interface import BaseStrategy

# name -> factory(config, snapshot, evictor, dry_run)
STRATEGIES: Dict[str, Callable[..., BaseStrategy]] = {
    STRATEGY_REMOVE_DUPLICATES:
        lambda cfg, snapshot, evictor, dry_run:
            RemoveDuplicatePods(cfg.enabled, snapshot, evictor, dry_run),
}


class Descheduler:
    """
    Parameters
    ----------
    options : DeschedulerOptions
        命令行参数。
    monitor : ClusterMonitor | None
        K8s API 访问入口；None 时按 options.kubeconfig 创建。
    """

    def __init__(self,
                 options: DeschedulerOptions,
                 monitor: ClusterMonitor | None = None):
        self.options = options
        self.monitor = monitor or ClusterMonitor(options.kubeconfig)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.cycle_id = 0

    # ──────────────────────────────────────────────
    # 主循环
    # ──────────────────────────────────────────────
    def run_forever(self):
        """
        descheduling_interval <= 0 时只跑一轮；否则 while-true，Ctrl+C 可退出。
        """
        interval = self.options.descheduling_interval
        self.logger.info("Descheduler started. interval=%ss dry_run=%s",
                         interval, self.options.dry_run)
        while True:
            start = time.time()
            try:
                self.run_once()
            except Exception as exc:     # noqa
                self.logger.exception("descheduler run_once failed: %s", exc)
            self.cycle_id += 1
            if interval <= 0:
                return

            # 维持固定间隔
            elapsed = time.time() - start
            time.sleep(max(0, interval - elapsed))

    # ──────────────────────────────────────────────
    # 单轮
    # ──────────────────────────────────────────────
    def run_once(self) -> int:
        policy = load_policy(self.options.policy_config_file)
        if policy is None:
            self.logger.info("no descheduler policy, nothing to do")
            return 0

        group_version = self.monitor.eviction_policy_group_version()
        if not group_version:
            self.logger.error("eviction API is not supported by the cluster, skip this cycle")
            return 0

        snapshot = ClusterSnapshot(self.monitor, self.options.node_selector)
        nodes = snapshot.ready_nodes()
        if len(nodes) <= 1:
            self.logger.info("the cluster size is %d, evicting would only disrupt "
                             "workloads, skip this cycle", len(nodes))
            return 0

        budget = EvictionBudget(nodes, self.options.max_pods_to_evict_per_node)
        evictor = PodEvictor(self.monitor, group_version)

        total = 0
        for name, cfg in policy.strategies.items():
            factory = STRATEGIES.get(name)
            if factory is None:
                self.logger.warning("strategy %s is not supported, skipped", name)
                continue
            if not cfg.enabled:
                self.logger.info("strategy %s disabled", name)
                continue
            strategy = factory(cfg, snapshot, evictor, self.options.dry_run)
            evicted = strategy.run(nodes, budget)
            self.logger.info("strategy %s evicted %d pod(s)", name, evicted)
            total += evicted

        self.logger.info("cycle %d finished | nodes=%d evicted=%d dry_run=%s",
                         self.cycle_id, len(nodes), total, self.options.dry_run)
        return total
