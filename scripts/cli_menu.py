import sys
import os
from pathlib import Path
import argparse
import logging


# Allow running from repository root
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from menu_engine import Actor, EngineConfig, MenuEngine, configure_logging
from menu_engine.renderer import format_surface

logger = logging.getLogger(__name__)

HELP = (
    "Commands:\n"
    "  open <menu>          open a menu (id or file name)\n"
    "  click <slot> [type]  click a slot; type is LEFT, RIGHT, SHIFT_LEFT, SHIFT_RIGHT or MIDDLE\n"
    "  page <n>             jump to a 0-based page\n"
    "  set <key>=<value>    put a value into the menu context and refresh\n"
    "  tick [n]             advance the refresh scheduler n ticks (default 1)\n"
    "  show                 print the open menu and its placeholders\n"
    "  reload               reload every menu file\n"
    "  close | quit"
)


def show(engine: MenuEngine, actor: Actor, with_placeholders: bool = False) -> None:
    surface = engine.renderer.surface_for(actor.id)
    if surface is None:
        print("(no menu open)")
        return
    print(format_surface(surface))
    if with_placeholders:
        session = engine.get_session(actor.id)
        if session is not None:
            print(f"  (open since tick {session.opened_tick}, now {engine.scheduler.current_tick})")
        for key, value in sorted(engine.build_placeholders(actor).items()):
            print(f"  {key} = {value}")


def _coerce(raw: str):
    try:
        return int(raw)
    except ValueError:
        pass
    if raw.lower() in ("true", "false"):
        return raw.lower() == "true"
    return raw


def run_command(engine: MenuEngine, actor: Actor, line: str) -> bool:
    """Handle one command line; False means the loop should stop."""
    parts = line.split()
    if not parts:
        return True
    cmd, args = parts[0].lower(), parts[1:]

    if cmd in ("quit", "exit"):
        return False
    if cmd == "help":
        print(HELP)
    elif cmd == "open" and args:
        if engine.open(actor, args[0], preserve_context=True):
            show(engine, actor)
        else:
            print(f"Unknown menu '{args[0]}'")
    elif cmd == "click" and args:
        try:
            slot = int(args[0])
        except ValueError:
            print("Slot must be a number.")
            return True
        outcome = engine.click(actor, slot, args[1] if len(args) > 1 else "LEFT")
        print(f"[Click] item={outcome.item_key} cancelled={outcome.cancelled} actions={outcome.executed}")
        show(engine, actor)
    elif cmd == "page" and args:
        if not engine.set_page(actor, int(args[0])):
            print("No such page.")
        show(engine, actor)
    elif cmd == "set" and args and "=" in args[0]:
        key, value = args[0].split("=", 1)
        context = dict(engine.get_context(actor.id, dict) or {})
        context[key] = _coerce(value)
        engine.update_context(actor, context)
        engine.refresh(actor)
        show(engine, actor)
    elif cmd == "tick":
        count = int(args[0]) if args else 1
        for _ in range(count):
            engine.scheduler.tick()
        print(f"[Scheduler] tick={engine.scheduler.current_tick} last_refresh={engine.scheduler.last_refresh_tick(actor.id)}")
    elif cmd == "show":
        show(engine, actor, with_placeholders=True)
    elif cmd == "reload":
        engine.reload_menus()
        show(engine, actor)
    elif cmd == "close":
        engine.close(actor)
        print("(menu closed)")
    else:
        print(HELP)
    return True


def main():
    parser = argparse.ArgumentParser(description="Drive menus from the terminal.")
    parser.add_argument("--config", type=Path, default=Path("config/engine.json"))
    parser.add_argument("--menus", type=Path, default=None, help="menu directory (overrides the config)")
    parser.add_argument("--menu", default="main", help="menu to open first")
    parser.add_argument("--name", default="Steve")
    parser.add_argument("--level", type=int, default=5)
    parser.add_argument("--health", type=float, default=20.0)
    parser.add_argument("--perm", action="append", default=[], help="grant a permission (repeatable)")
    args = parser.parse_args()

    config = EngineConfig.load(args.config)
    configure_logging(config.log_level)
    engine = MenuEngine(config)
    engine.load_menus(args.menus or Path(config.menus_dir))

    actor = Actor(
        id=f"cli-{args.name.lower()}",
        name=args.name,
        health=args.health,
        level=args.level,
        permissions=set(args.perm),
    )
    # The scheduler is driven by the 'tick' command rather than start()
    if not engine.open(actor, args.menu):
        print(f"Menu '{args.menu}' not found in {engine.config.menus_dir}")
        return
    show(engine, actor)
    print("Type 'help' for commands.")

    while True:
        try:
            line = input("-> ").strip()
        except (EOFError, KeyboardInterrupt):
            break
        if not run_command(engine, actor, line):
            break
    engine.stop()


if __name__ == "__main__":
    main()
