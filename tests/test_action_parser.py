import pytest

from menu_engine.action_parser import parse_action, parse_actions
from menu_engine.actions import (
    Broadcast,
    ChangePage,
    Close,
    Conditional,
    ConsoleCommand,
    Message,
    NamedTrigger,
    OpenMenu,
    PlayerCommand,
    Refresh,
    Sound,
    TriggerStyle,
)


@pytest.mark.parametrize("line, expected_type, tag", [
    ("[CONSOLE] give {player} diamond 1", ConsoleCommand, "CONSOLE"),
    ("[COMMAND] say hi", ConsoleCommand, "COMMAND"),
    ("[PLAYER] spawn", PlayerCommand, "PLAYER"),
    ("[SOUND] UI_BUTTON_CLICK", Sound, "SOUND"),
    ("[MESSAGE] Hello {player}", Message, "MESSAGE"),
    ("[CLOSE]", Close, "CLOSE"),
    ("[OPEN] shop.yml", OpenMenu, "OPEN"),
    ("[BROADCAST] Sale!", Broadcast, "BROADCAST"),
    ("[PAGE] +1", ChangePage, "PAGE"),
    ("[ACTION] sell", NamedTrigger, "ACTION"),
    ("[REFRESH]", Refresh, "REFRESH"),
])
def test_each_tag_parses_and_serializes_its_tag(line, expected_type, tag):
    action = parse_action(line)
    assert isinstance(action, expected_type)
    assert action.serialize().startswith(f"[{tag}]")


def test_serialize_keeps_value():
    assert parse_action("[MESSAGE] Hello there").serialize() == "[MESSAGE] Hello there"
    assert parse_action("[CLOSE]").serialize() == "[CLOSE]"


def test_command_alias_keeps_its_tag():
    action = parse_action("[COMMAND] give {player} diamond 1")
    assert action.serialize() == "[COMMAND] give {player} diamond 1"
    assert action == ConsoleCommand("give {player} diamond 1")
    assert parse_action(action.serialize()).serialize() == action.serialize()


@pytest.mark.parametrize("line", [
    "[MESSAGE hello",
    "MESSAGE] hello",
    "just text",
    "",
    "[UNKNOWN] thing",
    "[OPEN]",
    "[PAGE] next",
    "[ACTION]",
])
def test_malformed_lines_yield_nothing(line):
    assert parse_action(line) is None


def test_tags_are_case_insensitive():
    assert parse_action("[message] hi") == Message("hi")


def test_sound_with_volume_and_pitch():
    assert parse_action("[SOUND] ENTITY_PLAYER_LEVELUP 0.5 2") == Sound("ENTITY_PLAYER_LEVELUP", 0.5, 2.0)


def test_sound_with_unparsable_numbers_falls_back_to_defaults():
    sound = parse_action("[SOUND] ENTITY_PLAYER_LEVELUP loud high")
    assert sound == Sound("ENTITY_PLAYER_LEVELUP", 1.0, 1.0)


@pytest.mark.parametrize("change, relative", [("+1", True), ("-2", True), ("3", False)])
def test_page_changes(change, relative):
    action = parse_action(f"[PAGE] {change}")
    assert action.change == change
    assert action.relative is relative


def test_page_targets():
    assert ChangePage("+1").target_page(2) == 3
    assert ChangePage("-1").target_page(2) == 1
    assert ChangePage("0").target_page(2) == 0


def test_action_names_are_upper_cased():
    trigger = parse_action("[ACTION] sell_all")
    assert trigger.action_name == "SELL_ALL"
    assert trigger.style is TriggerStyle.CONTEXT


def test_conditional_with_both_branches():
    action = parse_action("[IF] {level} >= 10 [THEN] [MESSAGE] hi [SOUND] UI_BUTTON_CLICK [ELSE] [CLOSE]")
    assert isinstance(action, Conditional)
    assert action.condition.subject == "level"
    assert action.then_actions == (Message("hi"), Sound("UI_BUTTON_CLICK"))
    assert action.else_actions == (Close(),)
    assert action.serialize() == "[IF] {level} >= 10 [THEN] [MESSAGE] hi [SOUND] UI_BUTTON_CLICK [ELSE] [CLOSE]"


def test_conditional_without_else():
    action = parse_action("[IF] {page} == 0 [THEN] [OPEN] main.yml")
    assert action.then_actions == (OpenMenu("main.yml"),)
    assert action.else_actions == ()


def test_conditional_markers_are_case_insensitive():
    action = parse_action("[if] {level} > 1 [then] [close] [else] [refresh]")
    assert action.then_actions == (Close(),)
    assert action.else_actions == (Refresh(),)


def test_conditional_without_then_fails():
    assert parse_action("[IF] {level} > 1 [CLOSE]") is None


@pytest.mark.parametrize("condition", ["{level} >= lots", "{unknown} == 1", "no tokens here"])
def test_conditional_with_unusable_condition_fails(condition):
    assert parse_action(f"[IF] {condition} [THEN] [CLOSE]") is None


def test_nested_conditionals_are_not_parsed():
    action = parse_action("[IF] {level} > 1 [THEN] [IF] {page} == 0 [THEN] [CLOSE]")
    assert action.then_actions == (Close(),)


def test_parse_actions_drops_failures():
    actions = parse_actions(["[CLOSE]", "[BOGUS] x", "nonsense", "[MESSAGE] ok"])
    assert actions == [Close(), Message("ok")]
