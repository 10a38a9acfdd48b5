"""Plugin contract and registry entry definitions.

Objects
~~~~~~~
``RouteEntry``
    Dataclass stored in the registry for every named route. Fields:

    - ``name`` – unique route name
    - ``path`` – zero-argument provider returning the composed template
    - ``builder`` – raw parameter builder (``raw -> template params``)
    - ``route`` – the :class:`~smartreverse.core.route.Route` node, if any
    - ``router`` – Router scope that published the entry, if any
    - ``plugins`` – plugin names applied to the entry (order matters)
    - ``metadata`` – mutable dict used by plugins to store annotations

    ``build_params`` runs the builder, going through the router's plugin
    pipeline when the entry belongs to a Router.

``BasePlugin``
    Base class every plugin subclasses.

    Required class attributes:

    - ``plugin_code`` – unique identifier used for registration
    - ``plugin_description`` – human-readable description

    ``configure(**config)``
        Subclasses declare accepted options in the signature. The method is
        wrapped by ``__init_subclass__`` to parse ``flags`` strings
        (``"enabled,before:off"``), route ``_target`` (``"--base--"`` for
        router level, a route name, or ``"a,b"`` for several) and validate
        the options with pydantic ``validate_call`` before storing them.

    ``configuration(route_name=None)``
        merged router-level + per-route configuration.

    ``on_decore(router, builder, entry)``
        called once when a named route is declared on the router.

    ``wrap_handler(router, entry, call_next)``
        wraps the parameter builder; must return a callable with the same
        signature.

Configuration lives on the owning router (``router._plugin_info``), never on
the plugin instance.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from pydantic import validate_call

__all__ = ["BasePlugin", "RouteEntry", "identity_builder"]


def identity_builder(params: Any) -> Any:
    """Default parameter builder: parameters are used as given."""
    return params


@dataclass
class RouteEntry:
    """Registry record for a named route."""

    name: str
    path: Callable[[], str]
    builder: Callable = identity_builder
    route: Any = None
    router: Any = None
    plugins: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def build_params(self, *args: Any, **kwargs: Any) -> Any:
        if self.router is not None:
            return self.router.call(self.name, *args, **kwargs)
        return self.builder(*args, **kwargs)


def _wrap_configure(original_configure: Callable) -> Callable:
    """Wrap a plugin's configure() method to handle flags, _target, validation, and storage."""
    validated = validate_call(original_configure)

    def wrapper(
        self: "BasePlugin", *, _target: str = "--base--", flags: Optional[str] = None, **kwargs: Any
    ) -> None:
        if flags:
            kwargs.update(self._parse_flags(flags))

        if "," in _target:
            for target in [t.strip() for t in _target.split(",") if t.strip()]:
                wrapper(self, _target=target, **kwargs)
            return

        validated(self, **kwargs)
        self._write_config(_target, kwargs)

    return wrapper


class BasePlugin:
    """Hook interface + configuration helpers for router plugins."""

    __slots__ = ("name", "_router")

    plugin_code: str = ""
    plugin_description: str = ""

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "configure" in cls.__dict__:
            cls.configure = _wrap_configure(cls.__dict__["configure"])

    def __init__(self, router: Any, **config: Any):
        self.name = self.plugin_code
        self._router = router
        self._init_store()
        self.configure(**config)

    def _init_store(self) -> None:
        store = self._get_store()
        store.setdefault(self.name, {}).setdefault(
            "--base--", {"config": {"enabled": True}, "locals": {}}
        )

    def configure(self, *, _target: str = "--base--", flags: Optional[str] = None) -> None:
        """Base implementation accepts only ``flags``."""
        if flags:
            self._write_config(_target, self._parse_flags(flags))

    def _write_config(self, target: str, config: Dict[str, Any]) -> None:
        if not config:
            return
        store = self._get_store()
        plugin_bucket = store.setdefault(self.name, {})
        bucket = plugin_bucket.setdefault(target, {"config": {}, "locals": {}})
        bucket["config"].update(config)

    def configuration(self, route_name: Optional[str] = None) -> Dict[str, Any]:
        """Read merged configuration (base + optional per-route override)."""
        store = self._get_store()
        plugin_bucket = store.get(self.name)
        if not plugin_bucket:
            return {}
        merged = dict(plugin_bucket.get("--base--", {}).get("config", {}))
        if route_name:
            merged.update(plugin_bucket.get(route_name, {}).get("config", {}))
        return merged

    def _parse_flags(self, flags: str) -> Dict[str, bool]:
        mapping: Dict[str, bool] = {}
        for chunk in flags.split(","):
            chunk = chunk.strip()
            if not chunk:
                continue
            if ":" in chunk:
                name, value = chunk.split(":", 1)
                mapping[name.strip()] = value.strip().lower() != "off"
            else:
                mapping[chunk] = True
        return mapping

    def on_decore(
        self, router: Any, builder: Callable, entry: RouteEntry
    ) -> None:  # pragma: no cover - default no-op
        """Hook run when a named route is declared."""

    def wrap_handler(
        self,
        router: Any,
        entry: RouteEntry,
        call_next: Callable,
    ) -> Callable:
        """Wrap parameter building; default passthrough."""
        return call_next

    def entry_metadata(self, router: Any, entry: RouteEntry) -> Dict[str, Any]:
        """Extra data exposed by ``members()`` for this entry."""
        return {}

    def _get_store(self) -> Dict[str, Any]:
        return getattr(self._router, "_plugin_info")
