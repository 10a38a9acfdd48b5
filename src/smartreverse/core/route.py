"""Route node and mount-tree walk.

A :class:`Route` is a node in the mount tree. It is created by
``Router.define`` (or directly, for a standalone root route), receives its
path segment exactly once through one of the path-declaration calls, and
publishes ``full_path`` into the registry as a deferred provider.

Path declaration
----------------
``get/post/put/patch/delete/head/options/connect/trace(path="/", *handlers)``
and ``all(...)`` bind the segment and record the HTTP method (``"*"`` for
``all``) plus the handlers. A non-string first argument is treated as a
handler and the path defaults to ``"/"``. Nothing is dispatched: methods and
handlers are only recorded for introspection.

``use(path, *targets)`` binds the segment and mounts every Router target
below this route (other targets are recorded as handlers). ``bind(path)``
binds the segment without recording anything else.

Binding twice raises :class:`AlreadyBoundError`.

Mount-tree walk
---------------
``context_path()`` returns the segments root-first: the parent router's
context path (the context path of the route that router is mounted on, or
``[]`` for a root router) followed by this route's own segment. The parent
is held through a weak reference: a route never owns its scope. A route
whose scope was collected cannot be placed in the tree any more, and the walk
reports it like an unbound segment anywhere in the chain, with
:class:`UnboundPathError`.
"""

from __future__ import annotations

import weakref
from typing import TYPE_CHECKING, Any, List, Optional, Tuple

from smartseeds.typeutils import safe_is_instance

from smartreverse.core.paths import join_segments
from smartreverse.exceptions import AlreadyBoundError, MissingArgumentError, UnboundPathError

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from .base_router import BaseRouter

__all__ = ["Route"]

_ROUTER_CLASS = "smartreverse.core.base_router.BaseRouter"


class Route:
    """A named (or anonymous) node of the mount tree."""

    __slots__ = ("name", "segment", "methods", "handlers", "_router", "__weakref__")

    def __init__(self, router: Optional["BaseRouter"] = None, name: Optional[str] = None):
        self.name = name
        self.segment: Optional[str] = None
        self.methods: Tuple[str, ...] = ()
        self.handlers: Tuple[Any, ...] = ()
        self._router = weakref.ref(router) if router is not None else None

    def __repr__(self) -> str:
        label = self.name if self.name is not None else "<anonymous>"
        return f"<Route {label} segment={self.segment!r}>"

    @property
    def router(self) -> Optional["BaseRouter"]:
        """Router scope that declared this route (``None`` for standalone routes)."""
        if self._router is None:
            return None
        router = self._router()
        if router is None:
            raise ReferenceError(f"Router owning route {self._label()} no longer exists")
        return router

    @property
    def bound(self) -> bool:
        return self.segment is not None

    def _label(self) -> str:
        return f'"{self.name}"' if self.name is not None else "<anonymous>"

    # ------------------------------------------------------------------
    # Mount-tree walk
    # ------------------------------------------------------------------
    def context_path(self) -> List[str]:
        if self.segment is None:
            raise UnboundPathError(f"No path registered with route {self._label()}")
        if self._router is None:
            return [self.segment]
        router = self._router()
        if router is None:
            raise UnboundPathError(f"Router owning route {self._label()} no longer exists")
        return router.context_path() + [self.segment]

    def full_path(self) -> str:
        """Composed template of this route, without leading slash."""
        return join_segments(self.context_path())

    # ------------------------------------------------------------------
    # Path declaration
    # ------------------------------------------------------------------
    def bind(self, path: str) -> "Route":
        if path is None:
            raise MissingArgumentError('Required parameter "path" missing')
        if not isinstance(path, str):
            raise TypeError('Required parameter "path" must be of type string')
        if self.segment is not None:
            raise AlreadyBoundError(f"Already a path registered with route {self._label()}")
        self.segment = path
        return self

    def _declare(self, method: str, args: Tuple[Any, ...]) -> "Route":
        if args and isinstance(args[0], str):
            path, handlers = args[0], args[1:]
        elif args and args[0] is None:
            path, handlers = None, args[1:]
        else:
            path, handlers = "/", args
        self.bind(path)  # type: ignore[arg-type]
        self.methods = self.methods + (method,)
        self.handlers = self.handlers + tuple(handlers)
        return self

    def connect(self, *args: Any) -> "Route":
        """Bind the path and record a CONNECT handler."""
        return self._declare("CONNECT", args)

    def delete(self, *args: Any) -> "Route":
        """Bind the path and record a DELETE handler."""
        return self._declare("DELETE", args)

    def get(self, *args: Any) -> "Route":
        """Bind the path and record a GET handler."""
        return self._declare("GET", args)

    def head(self, *args: Any) -> "Route":
        """Bind the path and record a HEAD handler."""
        return self._declare("HEAD", args)

    def options(self, *args: Any) -> "Route":
        """Bind the path and record an OPTIONS handler."""
        return self._declare("OPTIONS", args)

    def patch(self, *args: Any) -> "Route":
        """Bind the path and record a PATCH handler."""
        return self._declare("PATCH", args)

    def post(self, *args: Any) -> "Route":
        """Bind the path and record a POST handler."""
        return self._declare("POST", args)

    def put(self, *args: Any) -> "Route":
        """Bind the path and record a PUT handler."""
        return self._declare("PUT", args)

    def trace(self, *args: Any) -> "Route":
        """Bind the path and record a TRACE handler."""
        return self._declare("TRACE", args)

    def all(self, *args: Any) -> "Route":
        """Bind the path and record a handler for any method."""
        return self._declare("*", args)

    def use(self, *args: Any) -> "Route":
        """Bind the path and mount Router targets below this route."""
        has_path = bool(args) and (args[0] is None or isinstance(args[0], str))
        path_args, targets = (args[:1], args[1:]) if has_path else ((), args)
        routers = [target for target in targets if safe_is_instance(target, _ROUTER_CLASS)]
        handlers = tuple(target for target in targets if target not in routers)
        if routers:
            owner = self.router
            segment = path_args[0] if path_args else "/"
            for router in routers:
                router._check_attachable(owner, segment)
        self._declare("USE", path_args + handlers)
        for router in routers:
            router._attach_to(self)
        return self
