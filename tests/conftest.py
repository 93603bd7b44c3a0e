import pytest
from kubernetes import client

from descheduler.deschedule.cluster_state import SnapshotError
from descheduler.deschedule.evictions import EvictionError
from descheduler.deschedule.resource_types import Node, OwnerKey, Pod


def _owner(spec: str) -> OwnerKey:
    kind, name = spec.split("/", 1)
    return OwnerKey(kind, name)


class FakeSnapshot:
    """In-memory stand-in for ClusterSnapshot.evictable_pods."""

    def __init__(self, pods_by_node=None, failing=()):
        self.pods_by_node = pods_by_node or {}
        self.failing = set(failing)
        self.calls = []

    def evictable_pods(self, node):
        self.calls.append(node.name)
        if node.name in self.failing:
            raise SnapshotError(f"list pods on node {node.name} failed")
        return list(self.pods_by_node.get(node.name, []))


class RecordingEvictor:
    """Records every eviction attempt; pods named in ``fail`` are refused."""

    def __init__(self, fail=()):
        self.fail = set(fail)
        self.calls = []
        self.dry_runs = []

    def evict(self, pod, dry_run=False):
        self.calls.append(pod.full_name)
        self.dry_runs.append(dry_run)
        if pod.full_name in self.fail:
            raise EvictionError(pod, "status 429 Too Many Requests")


@pytest.fixture
def make_pod():
    def _make(name, *owners, node="node-1", namespace="default", **kw):
        return Pod(name, namespace, node_name=node,
                   owners=[_owner(o) for o in owners], **kw)
    return _make


@pytest.fixture
def make_nodes():
    def _make(*names, **kw):
        return [Node(n, **kw) for n in names]
    return _make


@pytest.fixture
def fake_snapshot():
    return FakeSnapshot


@pytest.fixture
def recording_evictor():
    return RecordingEvictor


# —— kubernetes.client 对象 —— #
@pytest.fixture
def k8s_pod():
    def _make(name, node, owners=(("ReplicaSet", "foo"),), namespace="default",
              annotations=None, priority=None, volumes=None, requests=None,
              tolerations=None, node_selector=None, affinity=None):
        return client.V1Pod(
            metadata=client.V1ObjectMeta(
                name=name,
                namespace=namespace,
                annotations=annotations,
                owner_references=[
                    client.V1OwnerReference(api_version="apps/v1", kind=k, name=n,
                                            uid=f"uid-{k}-{n}")
                    for k, n in owners
                ] or None,
            ),
            spec=client.V1PodSpec(
                node_name=node,
                priority=priority,
                node_selector=node_selector,
                affinity=affinity,
                tolerations=tolerations,
                volumes=volumes,
                containers=[client.V1Container(
                    name="app",
                    image="nginx",
                    resources=client.V1ResourceRequirements(requests=requests),
                )],
            ),
        )
    return _make


@pytest.fixture
def k8s_node():
    def _make(name, ready=True, taints=None, labels=None,
              allocatable=None, extra_conditions=None):
        conditions = [client.V1NodeCondition(type="Ready",
                                             status="True" if ready else "False")]
        conditions += extra_conditions or []
        return client.V1Node(
            metadata=client.V1ObjectMeta(name=name, labels=labels),
            spec=client.V1NodeSpec(taints=taints),
            status=client.V1NodeStatus(
                allocatable=allocatable or {"cpu": "4", "memory": "16Gi"},
                conditions=conditions,
            ),
        )
    return _make
