import logging

import urllib3
from kubernetes import client, config
from kubernetes.client.rest import ApiException

from ..deschedule.constants import EVICTION_KIND, EVICTION_SUBRESOURCE, POLICY_GROUP

urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)


class ClusterMonitor:
    """通过Kubernetes API与集群交互"""
    def __init__(self, kubeconfig: str = "./config/config"):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        try:
            config.load_incluster_config()
        except config.ConfigException:
            config.load_kube_config(kubeconfig)
            self.logger.info(f"在本地连接到远程集群 kubeconfig={kubeconfig}")

        self.core_v1 = client.CoreV1Api()
        self.apis = client.ApisApi()

    def list_nodes(self, label_selector: str = ""):
        """
        返回集群中（满足 label_selector 的）全部 V1Node。
        """
        kwargs = {"label_selector": label_selector} if label_selector else {}
        return self.core_v1.list_node(**kwargs).items

    def list_pods_on_node(self, node_name: str):
        """
        列出某节点上尚未结束（非 Succeeded / Failed）的全部 V1Pod。
        """
        field = (f"spec.nodeName={node_name},"
                 "status.phase!=Succeeded,status.phase!=Failed")
        return self.core_v1.list_pod_for_all_namespaces(field_selector=field).items

    def eviction_policy_group_version(self) -> str:
        """
        通过 discovery 判断集群是否支持 Eviction 子资源：
          • 找到 "policy" group 的 preferred version，例如 "policy/v1"
          • 确认 core v1 下存在 pods/eviction (kind=Eviction)
        不支持时返回空字符串。
        """
        group_version = ""
        for g in self.apis.get_api_versions().groups or []:
            if g.name == POLICY_GROUP:
                group_version = g.preferred_version.group_version
                break
        if not group_version:
            self.logger.warning("policy API group not found on the server")
            return ""

        for r in self.core_v1.get_api_resources().resources or []:
            if r.name == EVICTION_SUBRESOURCE and r.kind == EVICTION_KIND:
                return group_version
        self.logger.warning("pods/eviction subresource not served by core/v1")
        return ""

    def evict_pod(self, name: str, namespace: str, policy_group_version: str):
        """
        Post an Eviction for the pod; raises ApiException on refusal.
        """
        eviction = client.V1Eviction(
            api_version=policy_group_version,
            kind=EVICTION_KIND,
            metadata=client.V1ObjectMeta(name=name, namespace=namespace),
            delete_options=client.V1DeleteOptions(),
        )
        try:
            self.core_v1.create_namespaced_pod_eviction(
                name=name, namespace=namespace, body=eviction
            )
            self.logger.debug(f"Eviction triggered for Pod {namespace}/{name}")
        except ApiException as e:
            self.logger.debug(f"Eviction failed for {namespace}/{name} (status {e.status})")
            raise
