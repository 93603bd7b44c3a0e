"""
policy.py
~~~~~~~~~
读取 DeschedulerPolicy (YAML)：

    apiVersion: "descheduler/v1alpha1"
    kind: "DeschedulerPolicy"
    strategies:
      "RemoveDuplicates":
         enabled: true
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

import yaml

from .constants import POLICY_API_VERSION, POLICY_KIND

logger = logging.getLogger(__name__)


class PolicyError(Exception):
    """Policy file missing, unreadable or malformed."""


@dataclass
class StrategyConfig:
    enabled: bool = False
    weight: int = 0
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass
class DeschedulerPolicy:
    strategies: Dict[str, StrategyConfig] = field(default_factory=dict)

    def strategy(self, name: str) -> StrategyConfig:
        return self.strategies.get(name, StrategyConfig())


def _parse_strategy(name: str, raw: Any) -> StrategyConfig:
    if raw is None:
        return StrategyConfig()
    if not isinstance(raw, dict):
        raise PolicyError(f"strategy {name!r} must be a mapping")
    enabled = raw.get("enabled", False)
    if not isinstance(enabled, bool):
        raise PolicyError(f"strategy {name!r}: 'enabled' must be a boolean")
    try:
        weight = int(raw.get("weight", 0) or 0)
    except (TypeError, ValueError) as exc:
        raise PolicyError(f"strategy {name!r}: 'weight' must be an integer") from exc
    params = raw.get("params") or {}
    if not isinstance(params, dict):
        raise PolicyError(f"strategy {name!r}: 'params' must be a mapping")
    return StrategyConfig(enabled=enabled, weight=weight, params=params)


def parse_policy(text: str) -> DeschedulerPolicy:
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise PolicyError(f"invalid policy yaml: {exc}") from exc
    if not isinstance(raw, dict):
        raise PolicyError("policy must be a yaml mapping")

    api_version = raw.get("apiVersion")
    kind = raw.get("kind")
    if api_version != POLICY_API_VERSION or kind != POLICY_KIND:
        raise PolicyError(f"unsupported policy {api_version}/{kind}, "
                          f"expected {POLICY_API_VERSION}/{POLICY_KIND}")

    strategies = raw.get("strategies") or {}
    if not isinstance(strategies, dict):
        raise PolicyError("'strategies' must be a mapping")
    return DeschedulerPolicy(
        strategies={name: _parse_strategy(name, s) for name, s in strategies.items()}
    )


def load_policy(path: str | Path | None) -> DeschedulerPolicy | None:
    """
    path 为空时返回 None（什么都不做）。
    """
    if not path:
        logger.warning("policy config file not specified")
        return None
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise PolicyError(f"failed to read policy config file {path}: {exc}") from exc
    return parse_policy(text)
