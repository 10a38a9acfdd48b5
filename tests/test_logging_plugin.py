"""Tests for the logging plugin."""

import logging

import pytest

from smartreverse import Resolver, ReverseRegistry, Router


class DummyLogger:
    def __init__(self):
        self.records = []
        self.levels = []

    def has_handlers(self):
        return True

    # Compatibility alias
    hasHandlers = has_handlers  # noqa: N815

    def log(self, level, message):
        self.levels.append(level)
        self.records.append(message)


def logged_router(**config):
    registry = ReverseRegistry()
    api = Router("api", registry=registry).plug("logging", **config)
    logger = DummyLogger()
    api.logging._logger = logger  # type: ignore[attr-defined]
    return registry, api, logger


def test_logging_plugin_traces_raw_and_built_params():
    registry, api, logger = logged_router()
    api.define("hello", builder=lambda who: {"who": who.lower()}).get("/hello/:who")

    assert Resolver(registry).resolve("hello", "BOB") == "/hello/bob"
    assert logger.records[0] == "hello params in: 'BOB'"
    assert logger.records[1].startswith("hello params out: {'who': 'bob'} (")
    assert logger.records[1].endswith(" ms)")
    assert logger.levels == [logging.INFO, logging.INFO]


def test_logging_plugin_reports_builder_failures():
    registry, api, logger = logged_router()
    api.define("user", builder=lambda params: {"id": params["user_id"]}).get("/users/:id")

    with pytest.raises(KeyError):
        Resolver(registry).resolve("user", {"pk": 1})
    assert logger.records[-1] == "user params failed: KeyError('user_id')"
    assert logger.levels[-1] == logging.WARNING


def test_logging_plugin_respects_route_flags():
    registry, api, logger = logged_router()
    api.define("quiet", logging_flags="enabled:off").get("/quiet")
    api.define("tail", logging_before=False).get("/tail")

    resolver = Resolver(registry)
    resolver.resolve("quiet")
    assert logger.records == []
    resolver.resolve("tail")
    assert len(logger.records) == 1
    assert logger.records[0].startswith("tail params out: {}")


def test_logging_plugin_runtime_configure():
    registry, api, logger = logged_router()
    api.define("ping").get("/ping")

    api.logging.configure(flags="before:off,after:on")
    Resolver(registry).resolve("ping")
    assert len(logger.records) == 1
    assert logger.records[0].startswith("ping params out")


def test_logging_plugin_can_be_disabled_per_route():
    registry, api, logger = logged_router()
    api.define("ping").get("/ping")
    api.set_plugin_enabled("ping", "logging", False)
    assert api.is_plugin_enabled("ping", "logging") is False

    Resolver(registry).resolve("ping")
    assert logger.records == []


def test_logging_plugin_print_sink_overrides_logger(capsys):
    registry, api, logger = logged_router()
    api.define("hello", logging_log=False, logging_print=True).get("/hello")

    Resolver(registry).resolve("hello")
    captured = capsys.readouterr()
    assert logger.records == []
    assert "hello params in: {}" in captured.out
    assert "hello params out: {}" in captured.out


def test_logging_plugin_uses_package_logger(caplog):
    registry = ReverseRegistry()
    api = Router("api", registry=registry).plug("logging")
    api.define("hello").get("/hello/:id")

    with caplog.at_level(logging.INFO, logger="smartreverse"):
        Resolver(registry).resolve("hello", {"id": 3})
    assert "hello params in: {'id': 3}" in caplog.messages
    assert all(record.name == "smartreverse" for record in caplog.records)


def test_mounted_router_inherits_logging():
    registry, api, logger = logged_router()
    child = api.mount("/child")
    child.define("kid").get("/kid")

    assert Resolver(registry).resolve("kid") == "/child/kid"
    assert logger.records[0] == "kid params in: {}"
    assert child.logging is api.logging
