"""Plugin-free router scope.

The module exposes :class:`BaseRouter`, a scope in the mount tree that
declares routes, mounts child scopes and publishes named routes into a
:class:`~smartreverse.core.registry.ReverseRegistry`. Subclasses add the
plugin pipeline but must preserve these semantics.

Constructor and slots
---------------------
``BaseRouter(name=None, *, registry=None)``

- ``name`` labels the scope for introspection and is the default alias used
  when the scope is mounted into a parent.
- ``registry`` defaults to the process-wide ``default_registry``.
- Slots: ``name``, ``registry``, ``_routes`` (declared Route nodes),
  ``_entries`` (route name -> RouteEntry), ``_handlers`` (route name ->
  wrapped parameter builder), ``_children`` (alias -> child router),
  ``_mount`` (the Route this scope is mounted on) and ``_parent`` (the scope
  that Route belongs to).

Declaration
-----------
``define(name=None, builder=None, **options)``

- Creates a :class:`~smartreverse.core.route.Route` in this scope.
- When ``name`` is given, publishes ``route.full_path`` (deferred provider)
  and ``builder`` into the registry; ``DuplicateNameError`` propagates.
- Options named ``<plugin>_<key>`` for a registered plugin are stored as
  per-route plugin config; other options become entry metadata.
- Returns the Route so the caller binds its segment with ``get``/``use``/...

``mount(path, router=None, *, name=None, builder=None)``

- Declares a route bound to ``path`` and mounts ``router`` (a new scope of
  the same class sharing the registry when omitted) below it. Returns the
  child scope.

Mounting
--------
A scope is mounted once: mounting it below a second route raises
``ValueError``. Mounted scopes are listed in the parent's ``_children``
under their name (or mount path); a different scope under the same alias
raises ``ValueError``. Both checks run before ``mount`` declares its route,
so a rejected mount leaves the registry untouched.

A mounted scope keeps its mount route and enclosing scope alive (routes
only reference their own scope weakly), so a chain declared as
``Router().mount("/api").mount("/v1")`` stays resolvable after the
intermediate scopes go out of reach.

Walk
----
``context_path()`` is the context path of the mount route, ``[]`` for a
root scope. ``full_path()`` joins it.

Lookup and introspection
------------------------
- ``get(selector)`` returns the wrapped parameter builder; dotted selectors
  traverse children (``KeyError`` on missing children), unknown names raise
  ``UnknownRouteError``. ``__getitem__`` aliases ``get``; ``call`` fetches
  and invokes.
- ``entries()`` lists route names declared on this scope.
- ``members()`` builds a nested dict of routes and child routers; empty
  scopes return ``{}``.

Hooks for subclasses
--------------------
``_wrap_handler``, ``_after_entry_registered``, ``_on_attached_to_parent``,
``_describe_entry_extra``; default implementations are no-ops/passthrough.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple

from smartreverse.core.paths import join_segments, normalize_segment
from smartreverse.core.registry import ReverseRegistry, default_registry
from smartreverse.core.route import Route
from smartreverse.exceptions import MissingArgumentError, UnknownRouteError
from smartreverse.plugins._base_plugin import RouteEntry

__all__ = ["BaseRouter"]


class BaseRouter:
    """Plugin-free router scope.

    Responsibilities:
    - declare routes and publish named ones into the registry
    - mount child scopes and walk the mount chain
    - expose parameter builders and introspection data
    """

    __slots__ = (
        "name",
        "registry",
        "_routes",
        "_entries",
        "_handlers",
        "_children",
        "_mount",
        "_parent",
        "__weakref__",
    )

    def __init__(
        self,
        name: Optional[str] = None,
        *,
        registry: Optional[ReverseRegistry] = None,
    ) -> None:
        self.name = name
        self.registry = registry if registry is not None else default_registry
        self._routes: List[Route] = []
        self._entries: Dict[str, RouteEntry] = {}
        self._handlers: Dict[str, Callable] = {}
        self._children: Dict[str, BaseRouter] = {}
        self._mount: Optional[Route] = None
        self._parent: Optional[BaseRouter] = None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name or '<anonymous>'}>"

    def _is_known_plugin(self, prefix: str) -> bool:
        return False

    # ------------------------------------------------------------------
    # Declaration
    # ------------------------------------------------------------------
    def define(
        self,
        name: Optional[str] = None,
        builder: Optional[Callable] = None,
        **options: Any,
    ) -> Route:
        """Declare a route in this scope.

        Args:
            name: Unique route name; anonymous routes are not published.
            builder: Parameter builder (``raw -> template params``).
            options: Plugin-scoped config (``<plugin>_<key>``) or metadata.

        Returns:
            The new Route, whose segment is bound afterwards.

        Raises:
            DuplicateNameError: ``name`` is already registered.
        """
        route = Route(self, name)
        if name is None:
            self._routes.append(route)
            return route

        plugin_options: Dict[str, Dict[str, Any]] = {}
        metadata: Dict[str, Any] = {}
        for key, value in options.items():
            if "_" in key:
                plugin_name, plug_key = key.split("_", 1)
                if plugin_name and plug_key and self._is_known_plugin(plugin_name):
                    plugin_options.setdefault(plugin_name, {})[plug_key] = value
                    continue
            metadata[key] = value
        if plugin_options:
            metadata["plugin_config"] = plugin_options

        entry = self.registry.register(
            name, route.full_path, builder, route=route, router=self, metadata=metadata
        )
        self._routes.append(route)
        self._entries[name] = entry
        self._after_entry_registered(entry)
        self._rebuild_handlers()
        return route

    def mount(
        self,
        path: str,
        router: Optional["BaseRouter"] = None,
        *,
        name: Optional[str] = None,
        builder: Optional[Callable] = None,
    ) -> "BaseRouter":
        """Mount ``router`` (or a new child scope) at ``path`` and return it."""
        if path is None:
            raise MissingArgumentError('Required parameter "path" missing')
        child = router if router is not None else type(self)(registry=self.registry)
        child._check_attachable(self, path)
        self.define(name, builder).use(path, child)
        return child

    def _mount_alias(self, segment: Optional[str]) -> str:
        return self.name or normalize_segment(segment or "") or "child"

    def _check_attachable(self, parent: Optional["BaseRouter"], segment: Optional[str]) -> None:
        """Raise ``ValueError`` when this scope cannot be mounted below ``parent``."""
        if self._mount is not None:
            raise ValueError(f"Router {self!r} is already mounted")
        if parent is None:
            return
        alias = self._mount_alias(segment)
        existing = parent._children.get(alias)
        if existing is not None and existing is not self:
            raise ValueError(f"Child name collision: {alias!r}")

    def _attach_to(self, route: Route) -> None:
        if self._mount is route:
            return
        parent = route.router
        self._check_attachable(parent, route.segment)
        if parent is not None:
            parent._children[self._mount_alias(route.segment)] = self
        self._mount = route
        self._parent = parent
        if parent is not None:
            self._on_attached_to_parent(parent)

    # ------------------------------------------------------------------
    # Walk
    # ------------------------------------------------------------------
    @property
    def mount_route(self) -> Optional[Route]:
        return self._mount

    @property
    def parent(self) -> Optional["BaseRouter"]:
        return self._parent

    def context_path(self) -> List[str]:
        route = self.mount_route
        if route is None:
            return []
        return route.context_path()

    def full_path(self) -> str:
        return join_segments(self.context_path())

    # ------------------------------------------------------------------
    # Handler table
    # ------------------------------------------------------------------
    def _wrap_handler(
        self, entry: RouteEntry, call_next: Callable
    ) -> Callable:  # pragma: no cover - overridden by plugin routers
        return call_next

    def _rebuild_handlers(self) -> None:
        handlers: Dict[str, Callable] = {}
        for route_name, entry in self._entries.items():
            handlers[route_name] = self._wrap_handler(entry, entry.builder)
        self._handlers = handlers

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def get(self, selector: str) -> Callable:
        """Return the (wrapped) parameter builder for ``selector``."""
        node, route_name = self._resolve_path(selector)
        handler = node._handlers.get(route_name)
        if handler is None:
            raise UnknownRouteError(selector)
        return handler

    __getitem__ = get

    def call(self, selector: str, *args: Any, **kwargs: Any) -> Any:
        """Fetch and invoke a parameter builder in one step."""
        return self.get(selector)(*args, **kwargs)

    def entries(self) -> Tuple[str, ...]:
        return tuple(self._handlers.keys())

    def routes(self) -> Tuple[Route, ...]:
        return tuple(self._routes)

    def _resolve_path(self, selector: str) -> Tuple["BaseRouter", str]:
        if "." not in selector or selector in self._handlers:
            return self, selector
        node: BaseRouter = self
        parts = selector.split(".")
        for segment in parts[:-1]:
            node = node._children[segment]
        return node, parts[-1]

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def members(self) -> Dict[str, Any]:
        """Return a tree of routes/routers/metadata."""
        routes = {
            entry.name: self._entry_member_info(entry) for entry in self._entries.values()
        }
        routers = {alias: child.members() for alias, child in self._children.items()}
        routers = {alias: info for alias, info in routers.items() if info}

        if not routes and not routers:
            return {}

        result: Dict[str, Any] = {
            "name": self.name,
            "router": self,
            "path": self.full_path(),
            "plugin_info": self._get_plugin_info(),
        }
        if routes:
            result["routes"] = routes
        if routers:
            result["routers"] = routers
        return result

    def _entry_member_info(self, entry: RouteEntry) -> Dict[str, Any]:
        route = entry.route
        info: Dict[str, Any] = {
            "name": entry.name,
            "segment": route.segment if route is not None else None,
            "path": entry.path() if route is None or route.bound else None,
            "methods": list(route.methods) if route is not None else [],
            "builder": entry.builder,
            "metadata": entry.metadata,
        }
        extra = self._describe_entry_extra(entry, info)
        if extra:
            info.update(extra)
        return info

    def _get_plugin_info(self) -> Dict[str, Any]:
        info_source = getattr(self, "_plugin_info", {}) or {}
        return {
            pname: {
                key: {
                    "config": dict(slot.get("config", {})),
                    "locals": dict(slot.get("locals", {})),
                }
                for key, slot in pdata.items()
            }
            for pname, pdata in info_source.items()
        }

    # ------------------------------------------------------------------
    # Plugin hooks (no-op for BaseRouter)
    # ------------------------------------------------------------------
    def iter_plugins(self) -> List[Any]:  # pragma: no cover - base router has no plugins
        return []

    def _on_attached_to_parent(
        self, parent: "BaseRouter"
    ) -> None:  # pragma: no cover - hook for subclasses
        return None

    def _after_entry_registered(
        self, entry: RouteEntry
    ) -> None:  # pragma: no cover - hook for subclasses
        return None

    def _describe_entry_extra(
        self, entry: RouteEntry, base_description: Dict[str, Any]
    ) -> Dict[str, Any]:  # pragma: no cover - overridden when plugins present
        return {}
