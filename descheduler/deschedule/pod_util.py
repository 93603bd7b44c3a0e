"""
pod_util.py
~~~~~~~~~~~
判断 Pod 是否可以被驱逐。
DaemonSet / mirror / critical / 本地存储 Pod 一律不动。
"""
from __future__ import annotations
from typing import Iterable, List

from .constants import (CRITICAL_POD_ANNOTATION, DAEMONSET_KIND,
                        LOCAL_STORAGE_VOLUMES, MIRROR_POD_ANNOTATION,
                        SYSTEM_CRITICAL_PRIORITY)
from .resource_types import OwnerKey, Pod


def owner_refs(pod: Pod) -> List[OwnerKey]:
    return list(pod.owners)


def is_mirror_pod(pod: Pod) -> bool:
    return MIRROR_POD_ANNOTATION in pod.annotations


def is_daemonset_pod(pod: Pod) -> bool:
    return any(o.kind == DAEMONSET_KIND for o in pod.owners)


def is_critical_pod(pod: Pod) -> bool:
    if CRITICAL_POD_ANNOTATION in pod.annotations:
        return True
    return pod.priority is not None and pod.priority >= SYSTEM_CRITICAL_PRIORITY


def is_local_storage_pod(pod: Pod) -> bool:
    return any(v in LOCAL_STORAGE_VOLUMES for v in pod.volumes)


def is_evictable(pod: Pod) -> bool:
    return not (is_mirror_pod(pod)
                or is_daemonset_pod(pod)
                or is_critical_pod(pod)
                or is_local_storage_pod(pod))


def evictable_pods(pods: Iterable[Pod]) -> List[Pod]:
    """保持原有顺序，过滤掉不可驱逐的 Pod。"""
    return [p for p in pods if is_evictable(p)]
