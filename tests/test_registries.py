import pytest

from menu_engine.registries import (
    CONTEXT_SCOPES,
    InventoryHandlerRegistry,
    LookupResult,
    ScopedHandlerRegistry,
    SlotClickRegistry,
)


def handler_named(name):
    def handler(*args):
        return name
    return handler


def test_actor_beats_menu_beats_global():
    registry = ScopedHandlerRegistry()
    registry.register("sell", handler_named("global"))
    registry.register("sell", handler_named("menu"), "menu", "shop")
    registry.register("sell", handler_named("actor"), "actor", "uuid-1")

    keys = {"actor": "uuid-1", "menu": "shop"}
    assert registry.lookup("SELL", keys).handler() == "actor"
    assert registry.lookup("SELL", {"actor": "uuid-2", "menu": "shop"}).handler() == "menu"
    assert registry.lookup("SELL", {"actor": "uuid-2", "menu": "other"}).handler() == "global"


def test_lookup_reports_scope_and_result():
    registry = ScopedHandlerRegistry(CONTEXT_SCOPES)
    registry.register("buy", handler_named("menu"), "menu", "Shop")
    found = registry.lookup("Buy", {"menu": "SHOP"})
    assert found.result is LookupResult.HANDLED
    assert found.found
    assert found.scope == "menu"


def test_missing_handler_is_not_found():
    lookup = ScopedHandlerRegistry().lookup("NOPE", {"menu": "shop"})
    assert lookup.result is LookupResult.NOT_FOUND
    assert lookup.handler is None


def test_scope_not_consulted_by_registry_is_rejected():
    registry = ScopedHandlerRegistry(CONTEXT_SCOPES)
    with pytest.raises(ValueError):
        registry.register("sell", handler_named("x"), "actor", "uuid-1")


def test_unknown_scope_list_is_rejected():
    with pytest.raises(ValueError):
        ScopedHandlerRegistry(["world"])


def test_non_callable_handler_is_rejected():
    with pytest.raises(TypeError):
        ScopedHandlerRegistry().register("sell", None)


def test_configurable_scope_order():
    registry = ScopedHandlerRegistry(["global", "menu"])
    registry.register("sell", handler_named("global"))
    registry.register("sell", handler_named("menu"), "menu", "shop")
    assert registry.lookup("sell", {"menu": "shop"}).handler() == "global"


def test_clear_scope_drops_only_that_bucket():
    registry = ScopedHandlerRegistry()
    registry.register("sell", handler_named("actor"), "actor", "uuid-1")
    registry.register("sell", handler_named("global"))
    registry.clear_scope("actor", "uuid-1")
    assert registry.lookup("sell", {"actor": "uuid-1"}).handler() == "global"
    assert registry.snapshot() == {"global": ["SELL"]}


def test_slot_click_registry():
    registry = SlotClickRegistry()
    callback = handler_named("slot")
    registry.register("Shop", 4, callback)
    assert registry.get("shop", 4) is callback
    assert registry.get("shop", 5) is None
    registry.clear_menu("SHOP")
    assert registry.get("shop", 4) is None


def test_inventory_handler_registry():
    registry = InventoryHandlerRegistry()
    registry.register("Shop", handler_named("inv"))
    assert registry.has_handler("shop")
    assert len(registry) == 1
    registry.unregister("SHOP")
    assert not registry.has_handler("shop")
