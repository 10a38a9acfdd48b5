"""SmartReverse public API surface.

Named routes are declared on a tree of mounted router scopes and resolved
back into URLs by name:

    api = Router("api")
    users = api.mount("/api").mount("/v1/")
    users.define("users.detail").get("/users/:id")
    Resolver(base_url="http://host/").resolve("users.detail", {"id": 42})
    # -> "http://host/api/v1/users/42"

Rules
-----
- Public exports: ``Router``, ``BaseRouter``, ``Route``, ``ReverseRegistry``,
  ``default_registry``, ``Resolver``, ``compile_template``, the module-level
  ``resolve``/``finalize`` helpers bound to ``default_registry`` and the error
  classes from ``smartreverse.exceptions``.
- Plugin registration: built-in plugins (``logging``, ``pydantic``) are
  imported for their side effect of calling ``Router.register_plugin``.
  Imports are done lazily via ``import_module`` to avoid cycles.

Constraints
-----------
- Import must stay lightweight: no route declaration or heavy work beyond
  plugin registration.
- Version string lives here as ``__version__`` and must remain available for
  packaging tools.
"""

from importlib import import_module
from typing import Any, Optional

__version__ = "0.1.0"

from .core import (
    BaseRouter,
    CompiledTemplate,
    Resolver,
    ReverseRegistry,
    Route,
    Router,
    compile_template,
    default_registry,
    join_segments,
)
from .exceptions import (
    AlreadyBoundError,
    DuplicateNameError,
    InvalidParameterError,
    MissingArgumentError,
    MissingParameterError,
    RegistryFrozenError,
    ReverseError,
    TemplateError,
    TemplateSyntaxError,
    UnboundPathError,
    UnknownRouteError,
)

# Import plugins to trigger auto-registration (lazy to avoid cycles)
for _plugin in ("logging", "pydantic"):
    import_module(f"{__name__}.plugins.{_plugin}")
del _plugin


def resolve(name: str, params: Optional[Any] = None, *, request: Any = None, **options: Any) -> str:
    """Resolve ``name`` against ``default_registry``."""
    return Resolver(default_registry).resolve(name, params, request=request, **options)


def finalize() -> None:
    """Close the declaration phase of ``default_registry``."""
    default_registry.finalize()


__all__ = [
    "Router",
    "BaseRouter",
    "Route",
    "ReverseRegistry",
    "default_registry",
    "Resolver",
    "compile_template",
    "CompiledTemplate",
    "join_segments",
    "resolve",
    "finalize",
    "ReverseError",
    "MissingArgumentError",
    "DuplicateNameError",
    "UnknownRouteError",
    "UnboundPathError",
    "AlreadyBoundError",
    "RegistryFrozenError",
    "TemplateError",
    "TemplateSyntaxError",
    "MissingParameterError",
    "InvalidParameterError",
]
