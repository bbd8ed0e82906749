"""
Name-based registry for update policies.

Optimizer configurations store their update policy as a
``{"type": <name>, "config": {...}}`` node. This registry maps the stored
name back to a class when a configuration is loaded.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Type

_POLICY_REGISTRY: Dict[str, Type[Any]] = {}


def register_update_policy(
    name: Optional[str] = None,
) -> Callable[[Type[Any]], Type[Any]]:
    """
    Decorator to register an update policy class for config deserialization.
    """

    def deco(cls: Type[Any]) -> Type[Any]:
        key = name or cls.__name__
        _POLICY_REGISTRY[key] = cls
        return cls

    return deco


def _registered_name(cls: Type[Any]) -> str:
    for key, registered in _POLICY_REGISTRY.items():
        if registered is cls:
            return key
    return cls.__name__


def policy_to_config(policy: Any) -> Dict[str, Any]:
    """
    Convert an update policy into a JSON-serializable configuration node.

    The stored type is the name the class was registered under, falling back
    to the class name for unregistered policies.
    """
    get_cfg = getattr(policy, "get_config", None)
    cfg = get_cfg() if callable(get_cfg) else {}
    return {"type": _registered_name(type(policy)), "config": cfg}


def policy_from_config(node: Dict[str, Any]) -> Any:
    """
    Rebuild an update policy from a configuration node.
    """
    type_name = str(node["type"])
    if type_name not in _POLICY_REGISTRY:
        raise ValueError(
            f"Unknown update policy type '{type_name}'. "
            f"Register it via @register_update_policy."
        )

    cls = _POLICY_REGISTRY[type_name]
    cfg = node.get("config", {}) or {}

    from_cfg = getattr(cls, "from_config", None)
    if callable(from_cfg):
        return from_cfg(cfg)
    return cls(**cfg)
