"""
resource_types.py
~~~~~~~~~~~~~~~~~
轻量级 Pod / Node 抽象，只保留 descheduler 判定所需字段。
算法模块只依赖这里的类型，不直接接触 kubernetes.client 的对象。
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class OwnerKey:
    """Controller identity inside a namespace: (kind, name)."""
    kind: str
    name: str

    def __str__(self):
        return f"{self.kind}/{self.name}"


@dataclass(frozen=True)
class Taint:
    key: str
    value: str = ""
    effect: str = ""


@dataclass(frozen=True)
class Toleration:
    key: str = ""
    operator: str = "Equal"
    value: str = ""
    effect: str = ""


@dataclass(frozen=True)
class NodeSelectorRequirement:
    key: str
    operator: str
    values: Tuple[str, ...] = ()


class Pod:
    """Kubernetes Pod 的极简描述"""
    __slots__ = ("name", "namespace", "node_name", "owners",
                 "annotations", "priority",
                 "cpu", "mem", "node_selector", "affinity_terms",
                 "tolerations", "volumes")

    def __init__(self,
                 name: str,
                 namespace: str = "default",
                 node_name: str | None = None,
                 owners: List[OwnerKey] | None = None,
                 annotations: Dict[str, str] | None = None,
                 priority: int | None = None,
                 cpu: float = 0.0,
                 mem: float = 0.0,
                 node_selector: Dict[str, str] | None = None,
                 affinity_terms: List[List[NodeSelectorRequirement]] | None = None,
                 tolerations: List[Toleration] | None = None,
                 volumes: List[str] | None = None,
                 ):
        self.name = name
        self.namespace = namespace
        self.node_name = node_name
        self.owners = owners or []          # ownerReferences 顺序
        self.annotations = annotations or {}
        self.priority = priority
        self.cpu = cpu          # 请求 CPU，单位：核
        self.mem = mem          # 请求内存，单位：Gi
        self.node_selector = node_selector or {}
        # requiredDuringSchedulingIgnoredDuringExecution：term 之间 OR，term 内 AND
        self.affinity_terms = affinity_terms or []
        self.tolerations = tolerations or []
        self.volumes = volumes or []        # volume source 类型，如 "emptyDir"

    @property
    def full_name(self) -> str:
        return f"{self.namespace}/{self.name}"

    def __eq__(self, other):
        return isinstance(other, Pod) and other.full_name == self.full_name

    def __hash__(self):
        return hash(self.full_name)

    def __repr__(self):
        return (f"Pod({self.full_name}, node={self.node_name}, "
                f"owners={[str(o) for o in self.owners]})")


class Node:
    """集群节点描述：标签 + taint + allocatable + 状态"""
    __slots__ = ("name", "labels", "taints", "cpu_cap", "mem_cap",
                 "conditions")

    def __init__(self,
                 name: str,
                 labels: Dict[str, str] | None = None,
                 taints: List[Taint] | None = None,
                 cpu_cap: float = float("inf"),
                 mem_cap: float = float("inf"),
                 conditions: Dict[str, str] | None = None):
        self.name = name
        self.labels = labels or {}
        self.taints = taints or []
        self.cpu_cap = cpu_cap
        self.mem_cap = mem_cap
        # {condition_type: "True" | "False" | "Unknown"}
        self.conditions = conditions if conditions is not None else {"Ready": "True"}

    def __eq__(self, other):
        return isinstance(other, Node) and other.name == self.name

    def __hash__(self):
        return hash(self.name)

    def __repr__(self):
        return (f"Node({self.name}, cpu={self.cpu_cap}, mem={self.mem_cap}, "
                f"taints={len(self.taints)})")
