"""Reverse resolver: route name + parameters -> URL.

``Resolver(registry=None, *, base_url="/", strict=True, **options)``

``resolve(name, params=None, *, request=None, **options)`` runs a pure,
synchronous pipeline:

1. ``registry.lookup(name)`` (``UnknownRouteError``);
2. the entry's parameter builder turns ``params`` into template parameters;
3. ``registry.path_of(name)`` composes the template (``UnboundPathError``);
4. the template is compiled and filled (``MissingParameterError``,
   ``TemplateSyntaxError``, ``InvalidParameterError``);
5. ``base_url`` is called with ``request`` when callable, used as-is
   otherwise; it is evaluated on every call so it can vary per request;
6. the path is resolved against the base URL (``combine_url``), anchored
   below it so parameter values cannot replace its host or path.

Per-call ``options`` override the constructor defaults (merged through
``SmartOptions``). ``strict=False`` skips pattern validation of parameter
values. Errors propagate untouched.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional, Union

from smartseeds import SmartOptions

from smartreverse.core.paths import combine_url
from smartreverse.core.registry import ReverseRegistry, default_registry
from smartreverse.core.template import compile_template

__all__ = ["Resolver"]

BaseUrl = Union[str, Callable[[Any], str]]


class Resolver:
    """Resolve route names registered in a :class:`ReverseRegistry`."""

    __slots__ = ("registry", "_defaults")

    def __init__(
        self,
        registry: Optional[ReverseRegistry] = None,
        *,
        base_url: BaseUrl = "/",
        strict: bool = True,
        **options: Any,
    ) -> None:
        self.registry = registry if registry is not None else default_registry
        defaults: Dict[str, Any] = dict(options)
        defaults["base_url"] = base_url
        defaults["strict"] = strict
        self._defaults = defaults

    def _options(self, options: Dict[str, Any]) -> SmartOptions:
        return SmartOptions(options, defaults=self._defaults, ignore_none=True)

    def resolve(
        self,
        name: str,
        params: Optional[Any] = None,
        *,
        request: Any = None,
        **options: Any,
    ) -> str:
        """Return the URL of route ``name`` filled with ``params``."""
        opts = self._options(options)
        entry = self.registry.lookup(name)
        template_params = entry.build_params({} if params is None else params)
        template = self.registry.path_of(name)
        path = compile_template(template).build(
            template_params, validate=bool(opts.strict)
        )
        base = opts.base_url
        if callable(base):
            base = base(request)
        return combine_url(base, path)

    __call__ = resolve

    def build(
        self, template: str, params: Optional[Mapping[Any, Any]] = None, *, strict: Optional[bool] = None
    ) -> str:
        """Fill ``template`` with ``params`` without registry lookup or base URL."""
        opts = self._options({"strict": strict})
        return compile_template(template).build(
            params, validate=bool(opts.strict)
        )
