from dataclasses import dataclass

from menu_engine import Actor, MenuEngine, RefreshPolicy
from menu_engine.data_models import ItemEntry, ItemTemplate, MenuDefinition


@dataclass
class SellChest:
    gold: int
    owner: str


def context_tokens(placeholders):
    return {key: value for key, value in placeholders.items() if key.startswith("{context.")}


def test_open_sell_close_round_trip(engine, actor):
    calls = []
    engine.register_scoped_handler("shop", "SELL", lambda ctx: calls.append(ctx.slot))

    assert engine.open(actor, "shop", context={"gold": 100})
    assert engine.build_placeholders(actor)["{context.gold}"] == "100"

    engine.click(actor, 13)
    assert calls == [13]

    assert engine.close(actor)
    assert engine.get_session(actor.id) is None
    assert engine.get_context(actor.id) is None

    assert engine.open(actor, "shop")
    assert context_tokens(engine.build_placeholders(actor)) == {}


def test_render_uses_context_and_static_placeholders(engine, actor):
    engine.open(actor, "shop", context=SellChest(gold=42, owner="Alex"))
    surface = engine.renderer.surface_for(actor.id)
    assert surface.title == "Shop - Alex"
    assert surface.items[13].name == "Gold: 42"
    assert surface.items[13].lore == ["Price 10"]


def test_visible_if_with_context(engine, actor):
    engine.open(actor, "shop", context={"vip": True})
    assert engine.rendered_item(actor, 15).name == "VIP"
    engine.open(actor, "shop", context={"vip": False})
    assert engine.rendered_item(actor, 15) is None


def test_unknown_menu_returns_false(engine, actor):
    assert engine.open(actor, "nowhere") is False
    assert engine.get_session(actor.id) is None


def test_menu_lookup_by_file_name_and_case(engine):
    assert engine.get_menu("shop.yml") is engine.get_menu("shop")
    assert engine.get_menu("SHOP") is engine.get_menu("shop")


def test_preserve_context_across_menus(engine, actor):
    engine.open(actor, "shop", context={"gold": 5})
    engine.open(actor, "catalog", preserve_context=True)
    assert engine.get_context(actor.id, dict) == {"gold": 5}
    engine.open(actor, "shop")
    assert engine.get_context(actor.id) is None


def test_get_context_checks_type(engine, actor):
    engine.open(actor, "shop", context=SellChest(1, "x"))
    assert engine.get_context(actor.id, SellChest).gold == 1
    assert engine.get_context(actor.id, dict) is None


def test_update_context_from_handler_refreshes(engine, actor):
    def sell(ctx):
        chest = ctx.require_context(SellChest)
        ctx.update_context(SellChest(chest.gold + 10, chest.owner))

    engine.register_scoped_handler("shop", "SELL", sell)
    engine.open(actor, "shop", context=SellChest(0, "Alex"))
    engine.click(actor, 13)
    engine.click(actor, 13)
    assert engine.rendered_item(actor, 13).name == "Gold: 20"


def test_set_page_bounds_and_title(engine, actor):
    engine.open(actor, "catalog")
    assert engine.renderer.surface_for(actor.id).title == "Catalog 1/2"
    assert engine.set_page(actor, 1)
    assert engine.renderer.surface_for(actor.id).title == "Catalog 2/2"
    assert not engine.set_page(actor, 2)
    assert not engine.set_page(actor, -1)
    assert engine.get_session(actor.id).page == 1


def test_set_page_on_unpaginated_menu(engine, actor):
    engine.open(actor, "shop")
    assert engine.set_page(actor, 0) is False


def test_sessions_are_per_actor(engine, actor, other_actor):
    engine.open(actor, "shop", context={"gold": 1})
    engine.open(other_actor, "shop", context={"gold": 2})
    assert engine.rendered_item(actor, 13).name == "Gold: 1"
    assert engine.rendered_item(other_actor, 13).name == "Gold: 2"
    assert engine.open_menus() == {actor.id: "shop", other_actor.id: "shop"}


def test_unregister_menu_closes_its_sessions(engine, actor):
    engine.open(actor, "shop")
    engine.unregister_menu("shop.yml")
    assert engine.get_menu("shop") is None
    assert engine.get_session(actor.id) is None


def test_stop_closes_everything(engine, actor, other_actor):
    engine.open(actor, "shop")
    engine.open(other_actor, "catalog")
    engine.stop()
    assert engine.open_menus() == {}
    assert engine.renderer.surface_for(actor.id) is None


def test_programmatic_menu_with_predicate_and_dynamic_placeholder():
    engine = MenuEngine()
    veteran = Actor(id="v", name="Vet", level=50)
    rookie = Actor(id="r", name="Rook", level=1)
    engine.register_menu(MenuDefinition(menu_id="ranks", size=9, items={
        "badge": ItemEntry(
            ItemTemplate("NETHER_STAR", "{rank}"),
            slots=[4],
            dynamic_placeholders={"rank": lambda who: "Veteran" if who.level >= 10 else "Rookie"},
            visibility_predicate=lambda who, session: who.level >= 10,
        ),
    }))
    engine.open(veteran, "ranks")
    engine.open(rookie, "ranks")
    assert engine.rendered_item(veteran, 4).name == "Veteran"
    assert engine.rendered_item(rookie, 4) is None


def test_menu_scoped_placeholder(engine, actor):
    engine.register_placeholder("{context.gold}", lambda who: "from resolver", scope="menu", scope_key="shop.yml")
    engine.open(actor, "shop")
    # No context is open, so nothing overrides the menu-scoped resolver
    assert engine.rendered_item(actor, 13).name == "Gold: from resolver"


def test_reload_menus(tmp_path, actor):
    (tmp_path / "a.yml").write_text("title: First\nsize: 9\nitems:\n  x: {material: STONE, slot: 0}\n")
    (tmp_path / "b.yml").write_text("title: Other\nsize: 9\n")
    engine = MenuEngine()
    engine.load_menus(tmp_path)
    other = Actor(id="o", name="Other")
    engine.open(actor, "a")
    engine.open(other, "b")

    (tmp_path / "a.yml").write_text("title: Second\nsize: 9\nitems:\n  x: {material: DIRT, slot: 0}\n")
    (tmp_path / "b.yml").unlink()
    engine.reload_menus()

    surface = engine.renderer.surface_for(actor.id)
    assert surface.title == "Second"
    assert surface.items[0].material == "DIRT"
    assert engine.get_session(other.id) is None


def test_refresh_policy_registration_by_file_name(engine, actor):
    engine.register_refresh_policy("catalog.yml", RefreshPolicy.all_slots(2))
    engine.open(actor, "catalog")
    engine.scheduler.tick()
    engine.scheduler.tick()
    assert engine.scheduler.last_refresh_tick(actor.id) == 2


def test_session_records_tick_it_was_opened_on(engine, actor):
    engine.open(actor, "shop")
    assert engine.get_session(actor.id).opened_tick == 0
    engine.scheduler.tick()
    engine.scheduler.tick()
    engine.open(actor, "catalog")
    assert engine.get_session(actor.id).opened_tick == 2
