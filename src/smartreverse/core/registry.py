"""Named-route registry.

The registry maps route names to :class:`RouteEntry` records. It is written
during application start-up (route declaration) and read-only afterwards.

Registration
------------
``register(name, path, builder=None, *, route=None, router=None, metadata=None)``

- ``name`` and ``path`` are required (``MissingArgumentError`` when ``None``).
- ``name`` must be a string; ``path`` is either a zero-argument provider or
  a plain string (wrapped into a constant provider).
- names are unique for the registry lifetime: a second registration raises
  ``DuplicateNameError`` whatever its path. Nothing is ever overwritten.
- ``builder`` defaults to the identity function.

Two-phase lifecycle
-------------------
Providers are deferred because ancestors may still be under construction
when a route is declared. ``finalize()`` closes the declaration phase: it
evaluates every provider once, keeps the composed templates in an immutable
snapshot and rejects further registrations (``RegistryFrozenError``). An
unbound segment therefore fails at finalize time instead of at the first
``resolve``. ``finalize`` is idempotent; when a provider fails the registry
stays open.

Introspection
-------------
``list_all()`` returns ``[{"name", "path"}]`` in registration order. Paths are
evaluated eagerly and the first failing provider aborts the listing.
``format_routes()`` renders the same data as a column-aligned table.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Union

from smartreverse.exceptions import (
    DuplicateNameError,
    MissingArgumentError,
    RegistryFrozenError,
    UnknownRouteError,
)
from smartreverse.plugins._base_plugin import RouteEntry, identity_builder

__all__ = ["ReverseRegistry", "default_registry"]


def _constant_path(path: str) -> Callable[[], str]:
    def provider() -> str:
        return path

    return provider


class ReverseRegistry:
    """Process-wide map from route name to :class:`RouteEntry`."""

    __slots__ = ("_entries", "_snapshot")

    def __init__(self) -> None:
        self._entries: Dict[str, RouteEntry] = {}
        self._snapshot: Optional[Mapping[str, str]] = None

    def __repr__(self) -> str:
        state = "finalized" if self.finalized else "open"
        return f"<ReverseRegistry {len(self._entries)} routes, {state}>"

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    def register(
        self,
        name: str,
        path: Union[str, Callable[[], str]],
        builder: Optional[Callable] = None,
        *,
        route: Any = None,
        router: Any = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> RouteEntry:
        """Publish a named route.

        Raises:
            MissingArgumentError: ``name`` or ``path`` is ``None``.
            TypeError: ``name`` is not a string or ``path`` is neither a
                string nor callable.
            DuplicateNameError: ``name`` is already registered.
            RegistryFrozenError: the registry has been finalized.
        """
        if name is None:
            raise MissingArgumentError('Required parameter "name" missing')
        if path is None:
            raise MissingArgumentError('Required parameter "path" missing')
        if not isinstance(name, str):
            raise TypeError(f"Route name must be a string, got {type(name).__name__}")
        if self._snapshot is not None:
            raise RegistryFrozenError(f'Cannot register route "{name}": registry is finalized')
        if name in self._entries:
            raise DuplicateNameError(f'Route with name "{name}" already defined')
        if isinstance(path, str):
            path = _constant_path(path)
        elif not callable(path):
            raise TypeError(f"Route path must be a string or callable, got {type(path).__name__}")
        entry = RouteEntry(
            name=name,
            path=path,
            builder=builder or identity_builder,
            route=route,
            router=router,
            metadata=dict(metadata or {}),
        )
        self._entries[name] = entry
        return entry

    def lookup(self, name: str) -> RouteEntry:
        entry = self._entries.get(name)
        if entry is None:
            raise UnknownRouteError(name)
        return entry

    __getitem__ = lookup

    def path_of(self, name: str) -> str:
        """Return the composed path template registered under ``name``."""
        if self._snapshot is not None and name in self._snapshot:
            return self._snapshot[name]
        return self.lookup(name).path()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    @property
    def finalized(self) -> bool:
        return self._snapshot is not None

    def finalize(self) -> None:
        """Compute every composed path once and freeze the registry.

        Idempotent - safe to call multiple times.
        """
        if self._snapshot is not None:
            return
        paths = {name: entry.path() for name, entry in self._entries.items()}
        self._snapshot = MappingProxyType(paths)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def list_all(self) -> List[Dict[str, str]]:
        return [{"name": name, "path": self.path_of(name)} for name in list(self._entries)]

    def format_routes(self) -> str:
        """Format registered routes as a column-aligned table.

            users.list     api/v1/users
            users.detail   api/v1/users/:id
        """
        routes = self.list_all()
        if not routes:
            return ""
        name_w = max(len(route["name"]) for route in routes)
        return "\n".join(f"{route['name']:<{name_w}}   {route['path']}" for route in routes)


default_registry = ReverseRegistry()
