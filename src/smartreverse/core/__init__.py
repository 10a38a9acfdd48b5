"""Core runtime aggregator.

Exposes the runtime building blocks from a single module. No extra logic
beyond imports/exports.

Guarantees
----------
- Importing this module performs only imports; it does not register plugins,
  declare routes or instantiate routers (``default_registry`` is created
  empty by ``registry``).
- Public API mirrors underlying modules 1:1:
  * ``template`` → ``compile_template``, ``CompiledTemplate``, ``Token``
  * ``paths`` → ``join_segments``, ``normalize_segment``, ``combine_url``
  * ``route`` → ``Route``
  * ``registry`` → ``ReverseRegistry``, ``default_registry``
  * ``resolver`` → ``Resolver``
  * ``base_router`` → ``BaseRouter`` (plugin-free scope)
  * ``router`` → ``Router`` (plugin-enabled)
"""

from .base_router import BaseRouter
from .paths import combine_url, join_segments, normalize_segment
from .registry import ReverseRegistry, default_registry
from .resolver import Resolver
from .route import Route
from .router import Router
from .template import CompiledTemplate, Token, compile_template

__all__ = [
    "BaseRouter",
    "Router",
    "Route",
    "ReverseRegistry",
    "default_registry",
    "Resolver",
    "compile_template",
    "CompiledTemplate",
    "Token",
    "join_segments",
    "normalize_segment",
    "combine_url",
]
