from __future__ import annotations

import pytest

from menu_engine import Actor, EngineConfig, MenuEngine, load_menu

SHOP_DOCUMENT = {
    "title": "Shop - {player}",
    "size": 27,
    "context-aware": True,
    "items": {
        "border": {
            "material": "GRAY_STAINED_GLASS_PANE",
            "name": " ",
            "slot": "0-8",
            "clickable": False,
        },
        "sell": {
            "material": "GOLD_INGOT",
            "name": "Gold: {context.gold}",
            "lore": ["Price {price}"],
            "slot": 13,
            "metadata": {"price": "10"},
            "actions": ["[ACTION] SELL"],
        },
        "vip": {
            "material": "DIAMOND",
            "name": "VIP",
            "slot": 15,
            "visible-if": "{context.vip} == true",
        },
        "close": {
            "material": "BARRIER",
            "name": "Close",
            "slot": 22,
            "actions": ["[MESSAGE] Bye {player}", "[CLOSE]"],
        },
    },
    "player-inventory": {"enabled": True, "handler": "deposit"},
}

CATALOG_DOCUMENT = {
    "title": "Catalog {page}/{total_pages}",
    "size": 27,
    "pagination": {
        "enabled": True,
        "slots": "10-11",
        "items": [
            {"material": "APPLE", "name": "Apple"},
            {"material": "BREAD", "name": "Bread"},
            {"material": "CAKE", "name": "Cake"},
        ],
    },
    "items": {
        "previous": {
            "material": "ARROW",
            "name": "Previous",
            "slot": 18,
            "actions": ["[IF] {page} == 0 [THEN] [OPEN] shop.yml [ELSE] [PAGE] -1"],
        },
        "next": {"material": "ARROW", "name": "Next", "slot": 26, "actions": ["[PAGE] +1"]},
    },
}


@pytest.fixture
def engine():
    eng = MenuEngine(EngineConfig(tick_seconds=0.01))
    eng.register_menu(load_menu(SHOP_DOCUMENT, "shop"))
    eng.register_menu(load_menu(CATALOG_DOCUMENT, "catalog"))
    yield eng
    eng.stop()


@pytest.fixture
def actor():
    return Actor(id="uuid-a", name="Alex", health=18.5, level=12, permissions={"shop.vip"})


@pytest.fixture
def other_actor():
    return Actor(id="uuid-b", name="Blake", health=20.0, level=1)
