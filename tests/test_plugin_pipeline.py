import pytest
from pydantic import ValidationError

from smartreverse import Resolver, ReverseRegistry, Router
from smartreverse.plugins._base_plugin import BasePlugin, RouteEntry  # Not public API
from smartreverse.plugins.logging import LoggingPlugin
from smartreverse.plugins.pydantic import PydanticPlugin


class SimplePlugin(BasePlugin):
    plugin_code = "simple"
    plugin_description = "Simple test plugin"

    def configure(self, **config):
        """Accept any configuration - storage is handled by wrapper."""
        pass  # Storage is handled by the wrapper

    def wrap_handler(self, router, entry, call_next):
        return call_next


class UpperPlugin(BasePlugin):
    plugin_code = "upper"
    plugin_description = "Upper-cases string parameters"

    def on_decore(self, router, builder, entry):
        entry.metadata["upper_seen"] = True

    def wrap_handler(self, router, entry, call_next):
        def wrapper(params):
            result = call_next(params)
            return {key: str(value).upper() for key, value in result.items()}

        return wrapper


def ensure_plugin(plugin_cls: type) -> None:
    if plugin_cls.plugin_code not in Router.available_plugins():
        Router.register_plugin(plugin_cls)


ensure_plugin(SimplePlugin)
ensure_plugin(UpperPlugin)


def make_router(*plugins, **plug_config):
    router = Router("api", registry=ReverseRegistry())
    for plugin in plugins:
        router.plug(plugin, **plug_config)
    return router


def test_builtin_plugins_are_registered():
    available = Router.available_plugins()
    assert available["logging"] is LoggingPlugin
    assert available["pydantic"] is PydanticPlugin


def test_register_plugin_validation():
    with pytest.raises(TypeError):
        Router.register_plugin(object)  # type: ignore[arg-type]

    class NoCode(BasePlugin):
        pass

    with pytest.raises(ValueError):
        Router.register_plugin(NoCode)

    class OtherSimple(BasePlugin):
        plugin_code = "simple"

    with pytest.raises(ValueError):
        Router.register_plugin(OtherSimple)

    Router.register_plugin(OtherSimple, name="simple_alias")
    assert Router.available_plugins()["simple_alias"] is OtherSimple


def test_plug_requires_known_plugin_name():
    router = make_router()
    with pytest.raises(TypeError):
        router.plug(SimplePlugin)  # type: ignore[arg-type]
    with pytest.raises(ValueError, match="Unknown plugin"):
        router.plug("ghost")
    with pytest.raises(AttributeError):
        router.ghost  # noqa: B018


def test_plugin_configure_and_configuration():
    router = make_router("simple")
    plugin = router.simple

    plugin.configure(flags="enabled,,beta")
    assert router.get_config("simple")["enabled"] is True
    assert router.get_config("simple")["beta"] is True
    plugin.configure(threshold=5)
    assert plugin.configuration()["threshold"] == 5

    plugin.configure(_target="foo", flags="enabled:off")
    assert router.get_config("simple", "foo")["enabled"] is False
    plugin.configure(_target="foo,bar", mode="strict")
    assert router.get_config("simple", "foo")["mode"] == "strict"
    assert router.get_config("simple", "bar")["mode"] == "strict"
    assert router.get_config("simple", "baz").get("mode") is None

    with pytest.raises(AttributeError):
        router.get_config("ghost")


def test_plugin_constructor_flags():
    router = make_router("simple", flags="beta:on,alpha:off")
    assert router.get_config("simple")["beta"] is True
    assert router.get_config("simple")["alpha"] is False


def test_plugin_configure_is_validated():
    router = make_router("logging")
    with pytest.raises(ValidationError):
        router.logging.configure(before="not-a-bool")
    with pytest.raises(ValidationError):
        router.logging.configure(unknown=True)


def test_define_plugin_options_apply_to_entry():
    router = make_router("simple")
    router.define("run", simple_flag=True, simple_mode="x", core_meta="keep").get("/run")

    entry = router.registry.lookup("run")
    plugin_cfg = entry.metadata.get("plugin_config", {})
    assert plugin_cfg["simple"] == {"flag": True, "mode": "x"}
    assert entry.metadata["core_meta"] == "keep"
    assert router._plugin_info["simple"]["run"]["config"]["flag"] is True
    assert router.get_config("simple", "run")["mode"] == "x"


def test_wrapping_pipeline_transforms_parameters():
    router = make_router("upper")
    router.define("shout").get("/say/:word")
    entry = router.registry.lookup("shout")
    assert isinstance(entry, RouteEntry)
    assert entry.plugins == ["upper"]
    assert entry.metadata["upper_seen"] is True

    resolver = Resolver(router.registry)
    assert resolver.resolve("shout", {"word": "hi"}) == "/say/HI"

    router.set_plugin_enabled("shout", "upper", False)
    assert resolver.resolve("shout", {"word": "hi"}) == "/say/hi"


def test_plug_after_define_applies_to_existing_entries():
    router = make_router()
    router.define("late").get("/late/:word")
    router.plug("upper")
    assert router.registry.lookup("late").metadata["upper_seen"] is True
    assert Resolver(router.registry).resolve("late", {"word": "ok"}) == "/late/OK"


def test_runtime_data_and_bucket_guards():
    router = make_router("simple")
    router.set_runtime_data("run", "simple", "hits", 3)
    assert router.get_runtime_data("run", "simple", "hits") == 3
    assert router.get_runtime_data("run", "simple", "missing", "d") == "d"
    with pytest.raises(AttributeError):
        router.set_plugin_enabled("foo", "ghost", True)
    with pytest.raises(AttributeError):
        router.get_runtime_data("foo", "ghost", "k")
    with pytest.raises(AttributeError):
        router.set_runtime_data("foo", "ghost", "k", 1)
    with pytest.raises(AttributeError):
        router.is_plugin_enabled("foo", "ghost")
    # If base key is removed, accessing will recreate it
    router._plugin_info["simple"].pop("--base--", None)
    assert router.is_plugin_enabled("demo", "simple") is True


def test_plugin_configuration_missing_bucket():
    router = make_router("simple")
    plugin = router.simple
    router._plugin_info.pop(plugin.name, None)
    assert plugin.configuration() == {}


def test_iter_plugins_order():
    router = make_router("simple", "upper")
    assert [plugin.name for plugin in router.iter_plugins()] == ["simple", "upper"]


def test_members_report_plugin_config():
    router = make_router("simple")
    router.define("run", simple_mode="x").get("/run")
    info = router.members()
    assert info["routes"]["run"]["plugins"]["simple"]["config"]["mode"] == "x"
    assert info["plugin_info"]["simple"]["run"]["config"] == {"mode": "x"}
