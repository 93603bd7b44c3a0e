"""
Descheduler 常量与默认参数
"""
# 运行参数默认值
DEFAULT_KUBECONFIG: str = "./config/config"
DEFAULT_DESCHEDULING_INTERVAL: int = 0     # 秒；<=0 只跑一轮
DEFAULT_MAX_PODS_TO_EVICT_PER_NODE: int = 0  # <=0 不限制

# Policy 文件
POLICY_API_VERSION: str = "descheduler/v1alpha1"
POLICY_KIND: str = "DeschedulerPolicy"
STRATEGY_REMOVE_DUPLICATES: str = "RemoveDuplicates"

# Pod 注解 / 优先级
MIRROR_POD_ANNOTATION: str = "kubernetes.io/config.mirror"
CRITICAL_POD_ANNOTATION: str = "scheduler.alpha.kubernetes.io/critical-pod"
SYSTEM_CRITICAL_PRIORITY: int = 2 * 1000000000

# 不可驱逐的 owner / volume 类型
DAEMONSET_KIND: str = "DaemonSet"
LOCAL_STORAGE_VOLUMES = ("emptyDir", "hostPath")

# 只有这两类 taint 会阻止调度
SCHEDULING_TAINT_EFFECTS = ("NoSchedule", "NoExecute")

# Eviction API discovery
POLICY_GROUP: str = "policy"
EVICTION_KIND: str = "Eviction"
EVICTION_SUBRESOURCE: str = "pods/eviction"
