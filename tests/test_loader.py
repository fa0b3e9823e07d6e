import json
import logging

import pytest
import yaml

from menu_engine.actions import Conditional, NamedTrigger, Sound
from menu_engine.loader import (
    load_menu,
    load_menu_directory,
    load_menu_file,
    menu_id_for,
    normalize_size,
    parse_slots,
)


@pytest.mark.parametrize("raw, expected", [
    (4, [4]),
    ("1,3", [1, 3]),
    ("3-1", [1, 2, 3]),
    ("0-2, 7", [0, 1, 2, 7]),
    ([1, "4-5"], [1, 4, 5]),
    ("x, 2, a-b", [2]),
    (None, []),
])
def test_parse_slots(raw, expected):
    assert parse_slots(raw) == expected


@pytest.mark.parametrize("raw, expected", [
    (27, 27), (9, 9), (54, 54), (10, 54), (0, 54), (63, 54), ("18", 18), ("big", 54),
])
def test_normalize_size(raw, expected):
    assert normalize_size(raw) == expected


def test_invalid_size_falls_back_to_configured_default():
    assert normalize_size(10, 27) == 27
    assert normalize_size("big", 18) == 18
    assert load_menu({"size": 40}, "odd", default_size=27).size == 27
    assert load_menu({}, "unset", default_size=36).size == 36
    assert load_menu({"size": "x"}, "bad", default_size=13).size == 54


def test_menu_id_for():
    assert menu_id_for("shop.yml") == "shop"
    assert menu_id_for("main.json") == "main"
    assert menu_id_for("shop") == "shop"


def test_load_menu_document():
    menu = load_menu({
        "title": "Shop",
        "size": 27,
        "placeable-slots": "10-11",
        "context-aware": True,
        "items": {
            "sell": {
                "material": "gold_ingot",
                "name": "Sell",
                "lore": "one line",
                "slot": "13",
                "priority": 2,
                "metadata": {"price": 10},
                "actions": ["[ACTION] sell", "[SOUND] UI_BUTTON_CLICK", "[BROKEN"],
            },
            "no_material": {"slot": 1},
            "no_slot": {"material": "STONE"},
        },
        "auto-refresh": {"enabled": True, "slots": [13]},
        "player-inventory": {"enabled": True, "handler": "deposit"},
    }, "shop")

    assert menu.title == "Shop"
    assert menu.size == 27
    assert menu.placeable_slots == {10, 11}
    assert menu.context_aware is True
    assert list(menu.items) == ["sell"]

    sell = menu.items["sell"]
    assert sell.template.material == "GOLD_INGOT"
    assert sell.template.lore == ["one line"]
    assert sell.slots == [13]
    assert sell.priority == 2
    assert sell.placeholders == {"{price}": "10"}
    assert sell.actions == [NamedTrigger("SELL"), Sound("UI_BUTTON_CLICK")]

    assert menu.refresh.enabled
    assert menu.refresh.interval_ticks == 20
    assert menu.refresh.slots == (13,)
    assert menu.player_inventory_enabled
    assert menu.player_inventory_handler == "deposit"


def test_defaults():
    menu = load_menu({}, "empty")
    assert menu.title == "Menu"
    assert menu.size == 54
    assert not menu.paginated
    assert not menu.refresh.enabled
    assert not menu.player_inventory_enabled


def test_pagination_section():
    menu = load_menu({
        "pagination": {
            "enabled": True,
            "slots": "0-1",
            "items": [{"material": "APPLE"}, {"material": "BREAD"}, {"name": "no material"}],
        },
    }, "catalog")
    assert menu.pagination.slots == [0, 1]
    assert len(menu.pagination.items) == 2
    assert menu.total_pages == 1


def test_fixed_page_count():
    menu = load_menu({"pagination": {"enabled": True, "pages": 3, "slots": "0-8"}}, "p")
    assert menu.total_pages == 3


def test_overlapping_slots_warn_and_first_wins(caplog):
    with caplog.at_level(logging.WARNING):
        menu = load_menu({"items": {
            "a": {"material": "DIRT", "slot": 4},
            "b": {"material": "STONE", "slot": "3-5"},
        }}, "overlap")
    assert "slot 4 claimed by 'a' and 'b'" in caplog.text
    assert menu.item_at_slot(4)[0] == "a"
    assert menu.item_at_slot(5)[0] == "b"


def test_conditional_actions_are_loaded():
    menu = load_menu({"items": {"back": {
        "material": "ARROW",
        "slot": 0,
        "actions": ["[IF] {page} == 0 [THEN] [OPEN] main.yml [ELSE] [PAGE] -1"],
    }}}, "m")
    assert isinstance(menu.items["back"].actions[0], Conditional)


def test_load_files_and_directory(tmp_path):
    (tmp_path / "shop.yml").write_text(yaml.safe_dump({"title": "Shop", "size": 9}))
    (tmp_path / "main.json").write_text(json.dumps({"title": "Main"}))
    (tmp_path / "broken.yml").write_text("title: [unclosed")
    (tmp_path / "notes.txt").write_text("ignored")

    assert load_menu_file(tmp_path / "shop.yml").size == 9
    assert load_menu_file(tmp_path / "broken.yml") is None

    menus = load_menu_directory(tmp_path)
    assert sorted(menus) == ["main", "shop"]
    assert menus["main"].title == "Main"


def test_missing_directory_loads_nothing(tmp_path):
    assert load_menu_directory(tmp_path / "missing") == {}


def test_default_size_is_used_when_size_missing(tmp_path):
    (tmp_path / "small.yml").write_text("title: Small\n")
    assert load_menu_directory(tmp_path, default_size=18)["small"].size == 18


def test_bundled_menus_load(pytestconfig):
    menus = load_menu_directory(pytestconfig.rootpath / "menus")
    assert {"shop", "main", "catalog"} <= set(menus)
    assert menus["catalog"].total_pages == 2
