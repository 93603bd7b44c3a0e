"""
duplicates.py
~~~~~~~~~~~~~
RemoveDuplicates 策略：同一节点上属于同一 owner（kind/name）的 Pod 只保留一个。

  • 分组：节点上的可驱逐 Pod 按 OwnerKey 分组，第一个 Pod 永远保留
  • 饱和：owner 已经在它所有“可放置”的节点上各有 Pod 时，驱逐没有意义，跳过
  • 驱逐：遵守每节点预算；单个失败只记日志，不中断本轮
"""
from __future__ import annotations
import logging
from typing import Callable, Dict, Iterable, List

from . import node_util, pod_util
from .cluster_state import SnapshotError
from .constants import STRATEGY_REMOVE_DUPLICATES
from .evictions import EvictionBudget, EvictionError
from .resource_types import Node, OwnerKey, Pod
from .strategy_interface import BaseStrategy

logger = logging.getLogger(__name__)

DuplicatePodsMap = Dict[OwnerKey, List[Pod]]
NodePredicate = Callable[[Pod, Node], bool]


# ──────────────────────────────────────────────
# 分组
# ──────────────────────────────────────────────
def find_duplicate_pods(pods: Iterable[Pod]) -> DuplicatePodsMap:
    """
    Group pods by owner. A pod with several owner references lands in
    every matching group; a pod without owners lands in none.
    """
    dpm: DuplicatePodsMap = {}
    for pod in pods:
        # owner 与 Pod 同 namespace，key 不带 namespace
        for owner in pod_util.owner_refs(pod):
            dpm.setdefault(owner, []).append(pod)
    return dpm


def list_duplicate_pods_on_node(snapshot, node: Node) -> DuplicatePodsMap:
    """snapshot 需提供 evictable_pods(node)；列举失败时该节点视为没有重复 Pod。"""
    try:
        pods = snapshot.evictable_pods(node)
    except SnapshotError as exc:
        logger.error("failed to list evictable pods on node %s: %s", node.name, exc)
        return {}
    return find_duplicate_pods(pods)


# ──────────────────────────────────────────────
# 饱和度
# ──────────────────────────────────────────────
def compute_creator_saturation(
        nodes: List[Node],
        dpm_by_node: Dict[str, DuplicatePodsMap],
        fits: NodePredicate = node_util.pod_fits_node,
        tolerates: NodePredicate = node_util.pod_tolerates_node_taints,
) -> Dict[OwnerKey, bool]:
    """
    An owner is saturated when the number of nodes its representative pod
    could run on equals the number of nodes already running one of its pods.

    The representative is the first pod of the owner's group on the first
    node (in ``nodes`` order) holding that owner.
    """
    assigned: Dict[OwnerKey, List[Node]] = {}
    for node in nodes:
        for owner in dpm_by_node.get(node.name, {}):
            assigned.setdefault(owner, []).append(node)

    saturated: Dict[OwnerKey, bool] = {}
    for owner, node_list in assigned.items():
        pod = dpm_by_node[node_list[0].name][owner][0]
        possible = [n for n in nodes if fits(pod, n) and tolerates(pod, n)]
        saturated[owner] = len(possible) == len(node_list)
        logger.debug("owner %s: assigned=%d possible=%d saturated=%s",
                     owner, len(node_list), len(possible), saturated[owner])
    return saturated


# ──────────────────────────────────────────────
# 驱逐
# ──────────────────────────────────────────────
def delete_duplicate_pods(nodes: List[Node],
                          dpm_by_node: Dict[str, DuplicatePodsMap],
                          saturation: Dict[OwnerKey, bool],
                          evictor,
                          dry_run: bool,
                          budget: EvictionBudget) -> int:
    """
    Evict all but the first pod of every non-saturated duplicate group.
    Returns the number of pods evicted by this call.
    """
    pods_evicted = 0
    for node in nodes:
        logger.info("Processing node: %s", node.name)
        evicted_here = 0
        for owner, pods in dpm_by_node.get(node.name, {}).items():
            if len(pods) <= 1 or saturation.get(owner, False):
                continue
            logger.info("duplicate pods of %s on node %s: %d",
                        owner, node.name, len(pods))
            # pods[0] 永远保留
            for pod in pods[1:]:
                if budget.exhausted(node):
                    break
                try:
                    evictor.evict(pod, dry_run)
                except EvictionError as exc:
                    logger.warning("Error when evicting pod %s: %s", pod.full_name, exc.reason)
                    continue
                budget.record(node)
                evicted_here += 1
                logger.info("Evicted pod: %s%s", pod.full_name, " (dry run)" if dry_run else "")
            if budget.exhausted(node):
                logger.info("eviction limit reached on node %s", node.name)
                break
        pods_evicted += evicted_here
    return pods_evicted


# ──────────────────────────────────────────────
# 策略入口
# ──────────────────────────────────────────────
class RemoveDuplicatePods(BaseStrategy):
    """
    Parameters
    ----------
    enabled : bool
        policy 中该策略是否开启。
    snapshot : ClusterSnapshot
        提供 evictable_pods(node)。
    evictor : PodEvictor
        提供 evict(pod, dry_run)。
    dry_run : bool
        原样传给 evictor。
    """

    name = STRATEGY_REMOVE_DUPLICATES

    def __init__(self, enabled: bool, snapshot, evictor, dry_run: bool = False,
                 fits: NodePredicate = node_util.pod_fits_node,
                 tolerates: NodePredicate = node_util.pod_tolerates_node_taints):
        self.enabled = enabled
        self.snapshot = snapshot
        self.evictor = evictor
        self.dry_run = dry_run
        self.fits = fits
        self.tolerates = tolerates

    def run(self, nodes: List[Node], budget: EvictionBudget) -> int:
        if not self.enabled:
            return 0
        dpm_by_node = {n.name: list_duplicate_pods_on_node(self.snapshot, n) for n in nodes}
        # 一轮只算一次，驱逐过程中不再更新
        saturation = compute_creator_saturation(nodes, dpm_by_node,
                                                self.fits, self.tolerates)
        return delete_duplicate_pods(nodes, dpm_by_node, saturation,
                                     self.evictor, self.dry_run, budget)
