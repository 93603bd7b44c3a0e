from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from kubernetes import client
from kubernetes.client.rest import ApiException

from descheduler.cluster.ClusterMonitor import ClusterMonitor


@pytest.fixture
def monitor():
    # 不加载 kubeconfig，直接注入假的 API 对象
    m = ClusterMonitor.__new__(ClusterMonitor)
    m.logger = MagicMock()
    m.core_v1 = MagicMock()
    m.apis = MagicMock()
    return m


def _groups(*pairs):
    return SimpleNamespace(groups=[
        SimpleNamespace(name=name, preferred_version=SimpleNamespace(group_version=gv))
        for name, gv in pairs
    ])


def _resources(*pairs):
    return SimpleNamespace(resources=[SimpleNamespace(name=n, kind=k) for n, k in pairs])


def test_group_version_when_eviction_supported(monitor):
    monitor.apis.get_api_versions.return_value = _groups(("apps", "apps/v1"),
                                                         ("policy", "policy/v1"))
    monitor.core_v1.get_api_resources.return_value = _resources(("pods", "Pod"),
                                                                ("pods/eviction", "Eviction"))

    assert monitor.eviction_policy_group_version() == "policy/v1"


def test_no_policy_group(monitor):
    monitor.apis.get_api_versions.return_value = _groups(("apps", "apps/v1"))

    assert monitor.eviction_policy_group_version() == ""
    monitor.core_v1.get_api_resources.assert_not_called()


def test_no_eviction_subresource(monitor):
    monitor.apis.get_api_versions.return_value = _groups(("policy", "policy/v1beta1"))
    monitor.core_v1.get_api_resources.return_value = _resources(("pods", "Pod"))

    assert monitor.eviction_policy_group_version() == ""


def test_list_pods_on_node_uses_field_selector(monitor):
    monitor.core_v1.list_pod_for_all_namespaces.return_value = SimpleNamespace(items=["p"])

    assert monitor.list_pods_on_node("node-1") == ["p"]
    monitor.core_v1.list_pod_for_all_namespaces.assert_called_once_with(
        field_selector="spec.nodeName=node-1,status.phase!=Succeeded,status.phase!=Failed")


def test_list_nodes_passes_label_selector(monitor):
    monitor.core_v1.list_node.return_value = SimpleNamespace(items=["n"])

    assert monitor.list_nodes("role=worker") == ["n"]
    monitor.core_v1.list_node.assert_called_once_with(label_selector="role=worker")

    monitor.list_nodes()
    monitor.core_v1.list_node.assert_called_with()


def test_evict_pod_posts_eviction(monitor):
    monitor.evict_pod("web-1", "shop", "policy/v1")

    kwargs = monitor.core_v1.create_namespaced_pod_eviction.call_args.kwargs
    assert kwargs["name"] == "web-1"
    assert kwargs["namespace"] == "shop"
    body = kwargs["body"]
    assert isinstance(body, client.V1Eviction)
    assert body.api_version == "policy/v1"
    assert body.kind == "Eviction"
    assert body.metadata.name == "web-1"


def test_evict_pod_propagates_api_exception(monitor):
    monitor.core_v1.create_namespaced_pod_eviction.side_effect = ApiException(status=429)

    with pytest.raises(ApiException):
        monitor.evict_pod("web-1", "shop", "policy/v1")
