"""Logging plugin.

Traces the parameter-building stage of ``resolve`` for every named route of
the router it is plugged into (and of the scopes mounted below it).

Messages
--------
- ``before`` (default True): ``"<name> params in: <raw params repr>"``
- ``after`` (default True): ``"<name> params out: <template params repr>
  (<ms> ms)"``, elapsed time formatted with ``{elapsed:.2f}``.
- a builder failure is always reported as ``"<name> params failed: <exc
  repr>"`` at ``WARNING`` level, then re-raised untouched.

Sinks
-----
- ``print`` true -> ``print(message)``;
- else ``log`` true -> the logger (``logging.getLogger("smartreverse")`` unless
  one is passed to ``plug``) when it reports handlers, ``print`` otherwise;
- else -> no output.

``enabled`` gates the plugin entirely.

Configuration
-------------
Keys ``enabled``, ``before``, ``after``, ``log``, ``print`` can be set
router-wide (``router.plug("logging", before=False)``,
``router.logging.configure(...)``) or per route through ``define`` options
(``logging_after=False``, ``logging_flags="before:off"``).
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Optional

from smartreverse.core.router import Router
from smartreverse.plugins._base_plugin import BasePlugin, RouteEntry

_DEFAULTS: Dict[str, bool] = {
    "enabled": True,
    "before": True,
    "after": True,
    "log": True,
    "print": False,
}


class LoggingPlugin(BasePlugin):
    """Trace raw and built template parameters of named routes."""

    plugin_code = "logging"
    plugin_description = "Logs resolve parameter building with timing"

    __slots__ = ("_logger",)

    def __init__(self, router, *, logger: Optional[logging.Logger] = None, **cfg):
        self._logger = logger or logging.getLogger("smartreverse")
        super().__init__(router, **cfg)

    def configure(
        self,
        enabled: bool = True,
        before: bool = True,
        after: bool = True,
        log: bool = True,
        print: bool = False,  # noqa: A002 - shadowing builtin intentionally
    ):
        """Storage is handled by the wrapper added in ``__init_subclass__``."""
        pass

    def wrap_handler(self, router, entry: RouteEntry, call_next: Callable):
        name = entry.name

        def traced(*args: Any, **kwargs: Any):
            cfg = self._route_config(name)
            if not cfg["enabled"]:
                return call_next(*args, **kwargs)
            if cfg["before"]:
                raw = args[0] if len(args) == 1 and not kwargs else (args, kwargs)
                self._emit(cfg, f"{name} params in: {raw!r}")
            started = time.perf_counter()
            try:
                built = call_next(*args, **kwargs)
            except Exception as exc:
                self._emit(cfg, f"{name} params failed: {exc!r}", level=logging.WARNING)
                raise
            if cfg["after"]:
                elapsed = (time.perf_counter() - started) * 1000
                self._emit(cfg, f"{name} params out: {built!r} ({elapsed:.2f} ms)")
            return built

        return traced

    def _route_config(self, route_name: str) -> Dict[str, bool]:
        merged: Dict[str, Any] = dict(_DEFAULTS)
        merged.update(self.configuration(route_name))
        flags = merged.pop("flags", None)
        if isinstance(flags, str):
            merged.update(self._parse_flags(flags))
        return {
            key: default if merged.get(key) is None else bool(merged[key])
            for key, default in _DEFAULTS.items()
        }

    def _emit(self, cfg: Dict[str, bool], message: str, *, level: int = logging.INFO) -> None:
        if cfg["print"]:
            print(message)
            return
        if not cfg["log"]:
            return
        logger = self._logger
        has_handlers = getattr(logger, "hasHandlers", None) or getattr(
            logger, "has_handlers", None
        )
        if callable(has_handlers) and has_handlers():
            logger.log(level, message)
        else:
            print(message)


Router.register_plugin(LoggingPlugin)
