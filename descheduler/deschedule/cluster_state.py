"""
cluster_state.py
~~~~~~~~~~~~~~~~
负责把 ClusterMonitor 提供的实时信息转换成 resource_types 里的 Pod / Node，
供 descheduler 策略使用。策略模块**只依赖 ClusterSnapshot**，
不直接访问 K8s API。
"""
from __future__ import annotations
import logging
from typing import Dict, List

import urllib3
from kubernetes.client.rest import ApiException
from kubernetes.utils import parse_quantity

from ..cluster.ClusterMonitor import ClusterMonitor
from . import node_util, pod_util
from .resource_types import (Node, NodeSelectorRequirement, OwnerKey, Pod,
                             Taint, Toleration)

logger = logging.getLogger(__name__)


class SnapshotError(Exception):
    """Listing or converting the pods of a node failed."""


# —— 基础解析 —— #
# 非法 quantity 由 parse_quantity 抛 ValueError
def _parse_cpu(cpu_str) -> float:
    return float(parse_quantity(cpu_str))


def _parse_mem(mem_str) -> float:
    """内存 quantity → Gi"""
    return float(parse_quantity(mem_str)) / 1024 ** 3


def _pod_requests(spec) -> tuple[float, float]:
    # requests 缺省时 k8s 会用 limits 补齐
    cpu_req = 0.0
    mem_req = 0.0
    for c in spec.containers or []:
        res = c.resources
        reqs = dict((res.limits or {}) if res else {})
        reqs.update((res.requests or {}) if res else {})
        cpu_req += _parse_cpu(reqs.get("cpu", "0"))
        mem_req += _parse_mem(reqs.get("memory", "0"))
    return cpu_req, mem_req


def _affinity_terms(spec) -> List[List[NodeSelectorRequirement]]:
    aff = spec.affinity
    if not aff or not aff.node_affinity:
        return []
    required = aff.node_affinity.required_during_scheduling_ignored_during_execution
    if not required:
        return []
    terms = []
    for t in required.node_selector_terms or []:
        terms.append([
            NodeSelectorRequirement(e.key, e.operator, tuple(e.values or ()))
            for e in t.match_expressions or []
        ])
    return terms


def _volume_kinds(volumes) -> List[str]:
    kinds = []
    for v in volumes or []:
        if v.empty_dir is not None:
            kinds.append("emptyDir")
        elif v.host_path is not None:
            kinds.append("hostPath")
        else:
            kinds.append("other")
    return kinds


def pod_from_k8s(p) -> Pod:
    meta, spec = p.metadata, p.spec
    cpu, mem = _pod_requests(spec)
    return Pod(
        name=meta.name,
        namespace=meta.namespace,
        node_name=spec.node_name,
        owners=[OwnerKey(o.kind, o.name) for o in meta.owner_references or []],
        annotations=meta.annotations or {},
        priority=spec.priority,
        cpu=cpu,
        mem=mem,
        node_selector=spec.node_selector or {},
        affinity_terms=_affinity_terms(spec),
        tolerations=[
            Toleration(t.key or "", t.operator or "Equal", t.value or "", t.effect or "")
            for t in spec.tolerations or []
        ],
        volumes=_volume_kinds(spec.volumes),
    )


def node_from_k8s(n) -> Node:
    status = n.status
    alloc = (status.allocatable or {}) if status else {}
    conds: Dict[str, str] = {}
    if status:
        conds = {c.type: c.status for c in status.conditions or []}
    return Node(
        name=n.metadata.name,
        labels=n.metadata.labels or {},
        taints=[Taint(t.key, t.value or "", t.effect)
                for t in (n.spec.taints if n.spec else None) or []],
        cpu_cap=_parse_cpu(alloc["cpu"]) if "cpu" in alloc else float("inf"),
        mem_cap=_parse_mem(alloc["memory"]) if "memory" in alloc else float("inf"),
        conditions=conds,
    )


class ClusterSnapshot:
    """
    每一轮 descheduling 都重新创建；节点按名字排序，保证遍历顺序稳定。

    Parameters
    ----------
    monitor : ClusterMonitor
        K8s API 访问入口。
    node_selector : str
        label selector，只处理匹配的节点。
    """

    def __init__(self, monitor: ClusterMonitor, node_selector: str = ""):
        self.monitor = monitor
        self.node_selector = node_selector

    def ready_nodes(self) -> List[Node]:
        ready = []
        for raw in self.monitor.list_nodes(self.node_selector):
            try:
                node = node_from_k8s(raw)
            except ValueError as exc:
                logger.warning("node %s has an invalid allocatable, skipped: %s",
                               raw.metadata.name, exc)
                continue
            if not node_util.is_ready(node):
                logger.info("node %s is not ready, skipped", node.name)
                continue
            ready.append(node)
        return sorted(ready, key=lambda n: n.name)

    def evictable_pods(self, node: Node) -> List[Pod]:
        try:
            items = self.monitor.list_pods_on_node(node.name)
        except (ApiException, urllib3.exceptions.HTTPError) as exc:
            raise SnapshotError(f"list pods on node {node.name} failed: {exc}") from exc
        try:
            pods = [pod_from_k8s(p) for p in items]
        except ValueError as exc:
            raise SnapshotError(f"invalid pod on node {node.name}: {exc}") from exc
        return pod_util.evictable_pods(pods)
