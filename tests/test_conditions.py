import pytest

from menu_engine.conditions import parse_condition
from menu_engine.data_models import Actor, Session


@pytest.fixture
def steve():
    return Actor(id="u1", name="Steve", health=15.5, level=10, permissions={"shop.vip"})


def session_on_page(actor, page):
    return Session(actor=actor, menu_id="catalog", page=page)


@pytest.mark.parametrize("text, expected", [
    ("{level} >= 10", True),
    ("{level} > 10", False),
    ("{level} == 10", True),
    ("{level} equals 10", True),
    ("{level} != 10", False),
    ("{level} < 11", True),
    ("{level} <= 9", False),
    ("{health} > 15.4", True),
    ("{health} < 15", False),
])
def test_numeric_subjects(steve, text, expected):
    assert parse_condition(text).evaluate(steve, None) is expected


def test_page_compares_zero_based_session_page(steve):
    condition = parse_condition("{page} == 0")
    assert condition.evaluate(steve, session_on_page(steve, 0)) is True
    assert condition.evaluate(steve, session_on_page(steve, 1)) is False


def test_page_without_session_is_false(steve):
    assert parse_condition("{page} == 0").evaluate(steve, None) is False


def test_permission(steve):
    assert parse_condition("{permission} has shop.vip").evaluate(steve, None) is True
    assert parse_condition("{permission} has shop.admin").evaluate(steve, None) is False


def test_name_is_case_insensitive(steve):
    assert parse_condition("{name} equals steve").evaluate(steve, None) is True
    assert parse_condition("{name} equals Alex").evaluate(steve, None) is False


def test_first_subject_in_fixed_order_wins(steve):
    # {permission} is checked before {name}
    condition = parse_condition("{permission} has {name}")
    assert condition.subject == "permission"
    assert condition.operand == "{name}"


def test_unknown_subject_is_none():
    assert parse_condition("{mana} > 3") is None


def test_missing_operand_is_always_false(steve):
    condition = parse_condition("{level} >=")
    assert condition is not None
    assert condition.evaluate(steve, None) is False


def test_bad_numeric_operand_is_none():
    assert parse_condition("{level} > ten") is None
    assert parse_condition("{level} > 1.5") is None


def test_unknown_operator_is_false(steve):
    condition = parse_condition("{level} ~= 10")
    assert condition.evaluate(steve, None) is False


def test_condition_is_reusable(steve):
    condition = parse_condition("{health} >= 10")
    assert condition(steve, None) is True
    steve.health = 5
    assert condition(steve, None) is False
