"""Router with plugin pipeline.

``Router`` extends ``BaseRouter`` with a global plugin registry, per-router
plugin instances, parameter-builder wrapping and plugin state stored on the
router instance.

Internal state
--------------
- ``_plugin_specs``: list of ``_PluginSpec`` (factory, kwargs copy).
- ``_plugins``: instantiated plugins in the order they were attached.
- ``_plugins_by_name``: name -> plugin instance (own and inherited).
- ``_inherited_from``: ids of parents already inherited from.
- ``_plugin_info``: per-plugin state store on the router.

Global registry
---------------
``Router.register_plugin(plugin_class, name=None)`` validates that
``plugin_class`` is a ``BasePlugin`` subclass with a ``plugin_code``.
Re-registering an existing code with a different class raises
``ValueError`` unless ``name`` is given explicitly. ``available_plugins``
returns a shallow copy of the registry.

Attaching plugins
-----------------
``plug(plugin_name, **config)`` looks the class up in the global registry
(``ValueError`` listing available names when missing), instantiates it,
applies ``plugin.on_decore`` to every route already declared and rebuilds the
builder table. ``__getattr__`` exposes attached plugins by name.

Runtime flags and data
----------------------
Stored under ``_plugin_info[plugin_code]`` with a reserved ``"--base--"``
bucket for router-level defaults and one bucket per route name, each with
``config`` and ``locals``. ``set_plugin_enabled`` / ``is_plugin_enabled`` and
``set_runtime_data`` / ``get_runtime_data`` read/write these buckets.

Wrapping pipeline
-----------------
``_wrap_handler(entry, call_next)`` layers plugins in reverse order (last
attached closest to the builder); each layer is skipped while
``is_plugin_enabled`` is False for the route.

Inheritance
-----------
When a child scope is mounted, parent plugins it does not have are exposed on
the child and applied to its routes (once per parent).
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import wraps
from typing import Any, Callable, Dict, List, Optional, Type

from smartreverse.core.base_router import BaseRouter
from smartreverse.plugins._base_plugin import BasePlugin, RouteEntry

__all__ = ["Router"]

_PLUGIN_REGISTRY: Dict[str, Type[BasePlugin]] = {}


@dataclass
class _PluginSpec:
    factory: Type[BasePlugin]
    kwargs: Dict[str, Any]

    def instantiate(self, router: "Router") -> BasePlugin:
        return self.factory(router=router, **self.kwargs)

    def clone(self) -> "_PluginSpec":
        return _PluginSpec(self.factory, dict(self.kwargs))


class Router(BaseRouter):
    """Router scope with plugin registry/pipeline support."""

    __slots__ = (
        "_plugin_specs",
        "_plugins",
        "_plugins_by_name",
        "_inherited_from",
        "_plugin_info",
    )

    def __init__(self, *args, **kwargs):
        self._plugin_specs: List[_PluginSpec] = []
        self._plugins: List[BasePlugin] = []
        self._plugins_by_name: Dict[str, BasePlugin] = {}
        self._inherited_from: set[int] = set()
        self._plugin_info: Dict[str, Dict[str, Any]] = {}
        super().__init__(*args, **kwargs)

    # ------------------------------------------------------------------
    # Plugin registration
    # ------------------------------------------------------------------
    @classmethod
    def register_plugin(cls, plugin_class: Type[BasePlugin], name: Optional[str] = None) -> None:
        """Register a plugin class globally.

        Args:
            plugin_class: A BasePlugin subclass with plugin_code defined
            name: Optional override name. If provided, overwrites any existing
                  registration. If not provided, uses plugin_code and raises
                  if already registered with another class.
        """
        if not isinstance(plugin_class, type) or not issubclass(plugin_class, BasePlugin):
            raise TypeError("plugin_class must be a BasePlugin subclass")
        if not getattr(plugin_class, "plugin_code", None):
            raise ValueError(
                f"Plugin {plugin_class.__name__} not following standards: missing plugin_code"
            )
        code = name or plugin_class.plugin_code
        if name is None:
            existing = _PLUGIN_REGISTRY.get(code)
            if existing is not None and existing is not plugin_class:
                raise ValueError(f"Plugin '{code}' already registered")
        _PLUGIN_REGISTRY[code] = plugin_class

    @classmethod
    def available_plugins(cls) -> Dict[str, Type[BasePlugin]]:
        return dict(_PLUGIN_REGISTRY)

    def _is_known_plugin(self, prefix: str) -> bool:
        return prefix in _PLUGIN_REGISTRY

    def plug(self, plugin: str, **config: Any) -> "Router":
        """Attach a plugin by name (previously registered globally)."""
        if not isinstance(plugin, str):
            raise TypeError(
                f"Plugin must be referenced by name string, got {type(plugin).__name__}"
            )
        plugin_class = _PLUGIN_REGISTRY.get(plugin)
        if plugin_class is None:
            available = ", ".join(sorted(_PLUGIN_REGISTRY)) or "none"
            raise ValueError(
                f"Unknown plugin '{plugin}'. Register it first. Available plugins: {available}"
            )
        spec = _PluginSpec(plugin_class, dict(config))
        self._plugin_specs.append(spec)
        instance = spec.instantiate(self)
        self._plugins.append(instance)
        self._plugins_by_name[instance.name] = instance
        self._apply_plugin_to_entries(instance)
        self._rebuild_handlers()
        return self

    def iter_plugins(self) -> List[BasePlugin]:  # type: ignore[override]
        """Return attached plugin instances in application order."""
        return list(self._plugins)

    def get_config(self, plugin_name: str, route_name: Optional[str] = None) -> Dict[str, Any]:
        """Return plugin config (global + per-route overrides) for an attached plugin."""
        plugin = self._plugins_by_name.get(plugin_name)
        if plugin is None:
            raise AttributeError(
                f"No plugin named '{plugin_name}' attached to router '{self.name}'"
            )
        return plugin.configuration(route_name)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        plugin = self._plugins_by_name.get(name)
        if plugin is None:
            raise AttributeError(f"No plugin named '{name}' attached to router '{self.name}'")
        return plugin

    def _get_plugin_bucket(self, plugin_name: str) -> Dict[str, Any]:
        bucket = self._plugin_info.get(plugin_name)
        if bucket is None:
            raise AttributeError(
                f"No plugin named '{plugin_name}' attached to router '{self.name}'"
            )
        bucket.setdefault("--base--", {"config": {}, "locals": {}})
        return bucket

    # ------------------------------------------------------------------
    # Runtime helpers (state stored on plugin_info)
    # ------------------------------------------------------------------
    def set_plugin_enabled(self, route_name: str, plugin_name: str, enabled: bool = True) -> None:
        bucket = self._get_plugin_bucket(plugin_name)
        entry = bucket.setdefault(route_name, {"config": {}, "locals": {}})
        entry.setdefault("locals", {})["enabled"] = bool(enabled)

    def is_plugin_enabled(self, route_name: str, plugin_name: str) -> bool:
        bucket = self._plugin_info.get(plugin_name)
        if bucket is None:
            # inherited plugins keep their state on the parent router
            plugin = self._plugins_by_name.get(plugin_name)
            if plugin is None:
                raise AttributeError(
                    f"No plugin named '{plugin_name}' attached to router '{self.name}'"
                )
            return True
        entry_locals = bucket.get(route_name, {}).get("locals", {})
        if "enabled" in entry_locals:
            return bool(entry_locals["enabled"])
        base_locals = bucket.get("--base--", {}).get("locals", {})
        return bool(base_locals.get("enabled", True))

    def set_runtime_data(self, route_name: str, plugin_name: str, key: str, value: Any) -> None:
        bucket = self._get_plugin_bucket(plugin_name)
        entry = bucket.setdefault(route_name, {"config": {}, "locals": {}})
        entry.setdefault("locals", {})[key] = value

    def get_runtime_data(
        self, route_name: str, plugin_name: str, key: str, default: Any = None
    ) -> Any:
        bucket = self._get_plugin_bucket(plugin_name)
        return bucket.get(route_name, {}).get("locals", {}).get(key, default)

    # ------------------------------------------------------------------
    # Overrides/hooks
    # ------------------------------------------------------------------
    def _wrap_handler(self, entry: RouteEntry, call_next: Callable) -> Callable:  # type: ignore[override]
        wrapped = call_next
        for plugin in reversed(self._active_plugins()):
            plugin_call = plugin.wrap_handler(self, entry, wrapped)
            wrapped = self._create_wrapper(plugin, entry, plugin_call, wrapped)
        return wrapped

    def _active_plugins(self) -> List[BasePlugin]:
        own = list(self._plugins)
        inherited = [p for p in self._plugins_by_name.values() if p not in own]
        return inherited + own

    def _create_wrapper(
        self,
        plugin: BasePlugin,
        entry: RouteEntry,
        plugin_call: Callable,
        next_handler: Callable,
    ) -> Callable:
        @wraps(next_handler)
        def wrapper(*args, **kwargs):
            if not self.is_plugin_enabled(entry.name, plugin.name):
                return next_handler(*args, **kwargs)
            return plugin_call(*args, **kwargs)

        return wrapper

    def _apply_plugin_to_entries(self, plugin: BasePlugin) -> None:
        for entry in self._entries.values():
            if plugin.name not in entry.plugins:
                entry.plugins.append(plugin.name)
            plugin.on_decore(self, entry.builder, entry)

    def _on_attached_to_parent(self, parent: BaseRouter) -> None:  # type: ignore[override]
        parent_id = id(parent)
        if parent_id in self._inherited_from:
            return
        self._inherited_from.add(parent_id)
        inherited_plugins = []
        for parent_plugin in getattr(parent, "_plugins", []):
            if parent_plugin.name not in self._plugins_by_name:
                self._plugins_by_name[parent_plugin.name] = parent_plugin
                inherited_plugins.append(parent_plugin)
        for plugin in inherited_plugins:
            self._apply_plugin_to_entries(plugin)
        if inherited_plugins:
            self._rebuild_handlers()

    def _after_entry_registered(self, entry: RouteEntry) -> None:  # type: ignore[override]
        plugin_options = entry.metadata.get("plugin_config", {})
        for pname, cfg in plugin_options.items():
            bucket = self._plugin_info.setdefault(
                pname, {"--base--": {"config": {}, "locals": {}}}
            )
            entry_bucket = bucket.setdefault(entry.name, {"config": {}, "locals": {}})
            entry_bucket["config"].update(cfg)
        for plugin in self._active_plugins():
            if plugin.name not in entry.plugins:
                entry.plugins.append(plugin.name)
            plugin.on_decore(self, entry.builder, entry)

    def _describe_entry_extra(  # type: ignore[override]
        self, entry: RouteEntry, base_description: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Gather plugin config and metadata for a route."""
        plugins_info: Dict[str, Dict[str, Any]] = {}
        for plugin in self._active_plugins():
            plugin_data: Dict[str, Any] = {}
            config = plugin.configuration(entry.name)
            if config:
                plugin_data["config"] = config
            meta = plugin.entry_metadata(self, entry)
            if meta:
                plugin_data["metadata"] = meta
            if plugin_data:
                plugins_info[plugin.name] = plugin_data
        if plugins_info:
            return {"plugins": plugins_info}
        return {}
