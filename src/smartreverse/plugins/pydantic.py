"""Pydantic validation plugin.

Checks both ends of a route's parameter builder during ``resolve``.

Input
-----
At declaration time (``on_decore``) the builder's annotated arguments are
collected into a Pydantic model. Raw ``resolve`` parameters are validated
(and coerced) against it before the builder runs, so a builder declared as
``def params(user: UserRef) -> dict`` receives a ``UserRef`` even when
``resolve`` is given a plain dict. Unannotated arguments pass through.

Output
------
When the builder's return annotation is a ``BaseModel`` subclass, the value it
returns is validated against that model and dumped to the flat mapping the
path template needs (``model_dump(exclude_none=True)``, so ``None`` fields
behave as absent optional parameters).

Failures raise ``pydantic.ValidationError`` titled ``"Validation error in
<route name>"`` (input) or ``"Invalid template params for <route name>"``
(output).

Configuration
-------------
``disabled`` (router-wide or per route, ``pydantic_disabled=True``) skips both
checks; it is read on every call. Builders without usable hints are not
wrapped. ``get_model(entry)`` returns ``("pydantic_model", model)`` for the
input model.
"""

from __future__ import annotations

import inspect
from typing import Any, Callable, Dict, NoReturn, Optional, Tuple, get_type_hints

from pydantic import BaseModel, ValidationError, create_model

from smartreverse.core.router import Router
from smartreverse.plugins._base_plugin import BasePlugin, RouteEntry


def _reraise(exc: ValidationError, title: str) -> NoReturn:
    raise ValidationError.from_exception_data(title=title, line_errors=exc.errors()) from exc


class PydanticPlugin(BasePlugin):
    """Validate raw resolve parameters and built template parameters."""

    plugin_code = "pydantic"
    plugin_description = "Validates resolve parameters using Pydantic type hints"

    def configure(self, disabled: bool = False):
        """Storage is handled by the wrapper added in ``__init_subclass__``."""
        pass

    def on_decore(self, router: Any, builder: Callable, entry: RouteEntry) -> None:
        entry.metadata.pop("pydantic", None)
        try:
            hints = get_type_hints(builder)
        except Exception:
            return
        output = hints.pop("return", None)
        if not (isinstance(output, type) and issubclass(output, BaseModel)):
            output = None

        signature = inspect.signature(builder)
        fields: Dict[str, Tuple[Any, Any]] = {}
        for arg_name, hint in hints.items():
            param = signature.parameters.get(arg_name)
            if param is None:
                raise ValueError(
                    f"Builder of route '{entry.name}' has type hint for '{arg_name}' "
                    f"which is not in the function signature"
                )
            default = ... if param.default is inspect.Parameter.empty else param.default
            fields[arg_name] = (hint, default)

        if not fields and output is None:
            return
        model_name = getattr(builder, "__name__", "builder").replace("<lambda>", "lambda")
        entry.metadata["pydantic"] = {
            "model": create_model(f"{model_name}_Params", **fields) if fields else None,  # type: ignore
            "hints": hints,
            "output": output,
            "signature": signature,
        }

    def wrap_handler(self, router: Any, entry: RouteEntry, call_next: Callable):
        meta = entry.metadata.get("pydantic")
        if not meta:
            return call_next
        model = meta["model"]
        output = meta["output"]
        signature = meta["signature"]
        name = entry.name

        def validated(*args: Any, **kwargs: Any):
            if self.configuration(name).get("disabled"):
                return call_next(*args, **kwargs)
            if model is not None:
                bound = signature.bind(*args, **kwargs)
                bound.apply_defaults()
                checked = {k: v for k, v in bound.arguments.items() if k in model.model_fields}
                try:
                    instance = model(**checked)
                except ValidationError as exc:
                    _reraise(exc, f"Validation error in {name}")
                kwargs = {**bound.arguments, **dict(instance)}
                args = ()
            built = call_next(*args, **kwargs)
            if output is None:
                return built
            try:
                return output.model_validate(built).model_dump(exclude_none=True)
            except ValidationError as exc:
                _reraise(exc, f"Invalid template params for {name}")

        return validated

    def get_model(self, entry: RouteEntry) -> Optional[Tuple[str, Any]]:
        """Return the input model for this route unless disabled."""
        if self.configuration(entry.name).get("disabled"):
            return None
        model = entry.metadata.get("pydantic", {}).get("model")
        if model is None:
            return None
        return ("pydantic_model", model)

    def entry_metadata(self, router: Any, entry: RouteEntry) -> Dict[str, Any]:
        meta = entry.metadata.get("pydantic", {})
        if not meta:
            return {}
        return {"model": meta["model"], "hints": meta["hints"], "output": meta["output"]}


Router.register_plugin(PydanticPlugin)
