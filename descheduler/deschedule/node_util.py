"""
node_util.py
~~~~~~~~~~~~
节点侧判定：Ready 状态、nodeSelector / nodeAffinity 匹配、容量、taint 容忍。
这些都是纯函数，饱和度分析对每个 (owner, node) 调用一次。
"""
from __future__ import annotations

from .constants import SCHEDULING_TAINT_EFFECTS
from .resource_types import Node, NodeSelectorRequirement, Pod, Taint, Toleration


# —— 节点状态 —— #
def is_ready(node: Node) -> bool:
    conds = node.conditions
    if conds.get("Ready") != "True":
        return False
    # 老版本 kubelet 还会上报这两个条件
    for bad in ("OutOfDisk", "NetworkUnavailable"):
        if conds.get(bad) == "True":
            return False
    return True


# —— 选择器 / 亲和性 —— #
def _match_requirement(req: NodeSelectorRequirement, labels: dict) -> bool:
    op = req.operator
    if op == "In":
        return req.key in labels and labels[req.key] in req.values
    if op == "NotIn":
        return labels.get(req.key) not in req.values
    if op == "Exists":
        return req.key in labels
    if op == "DoesNotExist":
        return req.key not in labels
    if op in ("Gt", "Lt"):
        if req.key not in labels or len(req.values) != 1:
            return False
        try:
            have = int(labels[req.key])
            want = int(req.values[0])
        except ValueError:
            return False
        return have > want if op == "Gt" else have < want
    return False


def pod_matches_node_selector(pod: Pod, node: Node) -> bool:
    """nodeSelector 全部命中，且 required nodeAffinity 至少一个 term 命中。"""
    for k, v in pod.node_selector.items():
        if node.labels.get(k) != v:
            return False
    if not pod.affinity_terms:
        return True
    for term in pod.affinity_terms:
        # 空 term 不匹配任何节点
        if term and all(_match_requirement(r, node.labels) for r in term):
            return True
    return False


def pod_fits_node(pod: Pod, node: Node) -> bool:
    """Pod 能否放在该节点上（不考虑节点上现有负载）。"""
    if not pod_matches_node_selector(pod, node):
        return False
    return pod.cpu <= node.cpu_cap and pod.mem <= node.mem_cap


# —— taint / toleration —— #
def tolerates_taint(toleration: Toleration, taint: Taint) -> bool:
    if toleration.effect and toleration.effect != taint.effect:
        return False
    if toleration.key and toleration.key != taint.key:
        return False
    if toleration.operator == "Exists":
        return True
    if toleration.operator in ("Equal", ""):
        # 空 key 匹配任意 key，只比较 value
        return toleration.value == taint.value
    return False


def pod_tolerates_node_taints(pod: Pod, node: Node) -> bool:
    for taint in node.taints:
        if taint.effect not in SCHEDULING_TAINT_EFFECTS:
            continue
        if not any(tolerates_taint(t, taint) for t in pod.tolerations):
            return False
    return True
