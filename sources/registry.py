from __future__ import annotations

from typing import Any, Callable, Dict

from ports.source import TriggerSourcePort


_REGISTRY: Dict[str, Callable[..., TriggerSourcePort]] = {}


def register(name: str, factory: Callable[..., TriggerSourcePort]) -> None:
    _REGISTRY[name] = factory


def get_source(name: str, **deps: Any) -> TriggerSourcePort:
    if name not in _REGISTRY:
        raise KeyError(f"Unknown trigger source: {name}")
    return _REGISTRY[name](**deps)


def available_sources() -> Dict[str, Any]:
    return dict(_REGISTRY)


def _register_builtins() -> None:
    from sources.direct_upload import DirectUploadSource
    from sources.storage_event import StorageEventSource

    register(DirectUploadSource.trigger, DirectUploadSource)
    register(StorageEventSource.trigger, StorageEventSource)


_register_builtins()
