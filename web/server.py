import os
import sys
from pathlib import Path
from flask import Flask, jsonify, request
from flask_socketio import SocketIO, emit
import logging
from typing import Dict, Optional, Any, Iterable

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from menu_engine import Actor, EngineConfig, InventoryClickResult, MenuEngine, configure_logging
from menu_engine.data_models import RenderedItem, Session
from menu_engine.renderer import GridRenderer, LoggingHost

logger = logging.getLogger(__name__)

SELL_PRICE = 10


# --- WebRenderer: extend GridRenderer to also push surfaces over Socket.IO ---
class WebRenderer(GridRenderer):
    def __init__(self, socketio: SocketIO):
        super().__init__()
        self._socketio = socketio

    def render(self, session: Session, title: str, items: Dict[int, RenderedItem], slots: Optional[Iterable[int]] = None) -> None:
        super().render(session, title, items, slots)
        surface = self.surface_for(session.actor_id)
        if surface is None:
            return
        try:
            self._socketio.emit("menu_render", surface.to_dict())
        except Exception as e:
            # Socket emission should never break rendering
            logger.debug("[WebRenderer] emit failed: %s", e)


class WebHost(LoggingHost):
    def __init__(self, socketio: SocketIO):
        super().__init__()
        self._socketio = socketio

    def _record(self, effect) -> None:
        super()._record(effect)
        try:
            self._socketio.emit("menu_effect", {"kind": effect[0], "args": list(effect[1:])})
        except Exception as e:
            logger.debug("[WebHost] emit failed: %s", e)


app = Flask(__name__)
app.config['SECRET_KEY'] = 'your-secret-key-change-this'
socketio = SocketIO(app, cors_allowed_origins="*")

engine: Optional[MenuEngine] = None
actors: Dict[str, Actor] = {}


def _sell(ctx) -> None:
    account = ctx.get_context(dict)
    if account is None:
        ctx.send_message("Nothing to sell here.")
        return
    updated = dict(account)
    updated["gold"] = int(account.get("gold", 0)) + SELL_PRICE
    ctx.update_context(updated)
    ctx.send_message(f"Sold one item for {SELL_PRICE} gold.")


def _shop_deposit(ctx) -> InventoryClickResult:
    if ctx.is_shift_click:
        ctx.send_message("Shift-clicking items into the shop is disabled.")
        return InventoryClickResult.CANCEL
    return InventoryClickResult.ALLOW


def initialize_engine(menus_dir: Optional[Path] = None, config_path: Optional[Path] = None) -> MenuEngine:
    """Create the engine, load menus and register the demo handlers"""
    global engine

    if engine is not None:
        engine.stop()
    actors.clear()

    config = EngineConfig.load(config_path or Path("config/engine.json"))
    configure_logging(config.log_level)
    engine = MenuEngine(config, renderer=WebRenderer(socketio), host=WebHost(socketio))
    engine.load_menus(menus_dir or Path(config.menus_dir))

    engine.register_scoped_handler("shop", "SELL", _sell)
    engine.register_inventory_handler("shop", _shop_deposit)
    engine.register_placeholder("online", lambda actor: str(len(engine.open_menus())))
    engine.start()
    return engine


def _actor_from(data: Dict[str, Any]) -> Optional[Actor]:
    actor_id = data.get("actor_id") or (data.get("actor") or {}).get("id")
    if not actor_id:
        return None
    profile = data.get("actor") or {}
    actor = actors.get(actor_id)
    if actor is None:
        actor = Actor(id=actor_id, name=profile.get("name", actor_id))
        actors[actor_id] = actor
    if "name" in profile:
        actor.name = profile["name"]
    if "health" in profile:
        actor.health = float(profile["health"])
    if "level" in profile:
        actor.level = int(profile["level"])
    if "permissions" in profile:
        actor.permissions = set(profile["permissions"])
    return actor


def _surface_json(actor_id: str) -> Optional[Dict[str, Any]]:
    surface = engine.renderer.surface_for(actor_id)
    return surface.to_dict() if surface else None


def _emit_sessions():
    try:
        socketio.emit('sessions', engine.open_menus())
    except Exception as e:
        logger.debug("[Server] emit failed: %s", e)


# Initialize engine on startup
initialize_engine()


@app.route('/')
def index():
    """Short service description"""
    return jsonify({"service": "menu-engine", "menus": sorted(engine.menus)})


@app.route('/api/menus', methods=['GET'])
def list_menus():
    menus = [
        {
            "id": menu.menu_id,
            "title": menu.title,
            "size": menu.size,
            "pages": menu.total_pages,
            "items": sorted(menu.items),
        }
        for menu in engine.menus.values()
    ]
    return jsonify(sorted(menus, key=lambda m: m["id"]))


@app.route('/api/sessions', methods=['GET'])
def list_sessions():
    return jsonify(engine.open_menus())


@app.route('/api/open', methods=['POST'])
def open_menu():
    data = request.json or {}
    actor = _actor_from(data)
    if actor is None:
        return jsonify({"error": "actor_id is required"}), 400
    menu_id = data.get("menu")
    if not menu_id:
        return jsonify({"error": "menu is required"}), 400

    opened = engine.open(
        actor,
        menu_id,
        context=data.get("context"),
        preserve_context=bool(data.get("preserve_context", False)),
    )
    if not opened:
        return jsonify({"error": f"Unknown menu '{menu_id}'"}), 404
    _emit_sessions()
    return jsonify({"success": True, "surface": _surface_json(actor.id)})


@app.route('/api/click', methods=['POST'])
def click():
    data = request.json or {}
    actor = actors.get(data.get("actor_id", ""))
    if actor is None or engine.get_session(actor.id) is None:
        return jsonify({"error": "No open menu for actor"}), 404
    try:
        slot = int(data.get("slot"))
    except (TypeError, ValueError):
        return jsonify({"error": "slot must be an integer"}), 400

    outcome = engine.click(actor, slot, data.get("click_type", "LEFT"))
    _emit_sessions()
    return jsonify({
        "cancelled": outcome.cancelled,
        "silent": outcome.silent,
        "item_key": outcome.item_key,
        "executed": outcome.executed,
        "surface": _surface_json(actor.id),
    })


@app.route('/api/page', methods=['POST'])
def change_page():
    data = request.json or {}
    actor = actors.get(data.get("actor_id", ""))
    if actor is None:
        return jsonify({"error": "Unknown actor"}), 404
    try:
        page = int(data.get("page"))
    except (TypeError, ValueError):
        return jsonify({"error": "page must be an integer"}), 400
    changed = engine.set_page(actor, page)
    return jsonify({"success": changed, "surface": _surface_json(actor.id)})


@app.route('/api/close', methods=['POST'])
def close_menu():
    data = request.json or {}
    actor = actors.get(data.get("actor_id", ""))
    if actor is None:
        return jsonify({"error": "Unknown actor"}), 404
    closed = engine.close(actor)
    _emit_sessions()
    return jsonify({"success": closed})


@app.route('/api/surface/<actor_id>', methods=['GET'])
def get_surface(actor_id: str):
    surface = _surface_json(actor_id)
    if surface is None:
        return jsonify({"error": "No open menu for actor"}), 404
    actor = actors.get(actor_id)
    placeholders = engine.build_placeholders(actor) if actor else {}
    session = engine.get_session(actor_id)
    return jsonify({
        "surface": surface,
        "placeholders": placeholders,
        "opened_tick": session.opened_tick if session else None,
        "ticks_open": engine.scheduler.current_tick - session.opened_tick if session else None,
    })


@app.route('/api/reload', methods=['POST'])
def reload_menus():
    try:
        loaded = engine.reload_menus()
    except Exception as e:
        return jsonify({"error": str(e)}), 500
    _emit_sessions()
    return jsonify({"success": True, "menus": sorted(loaded)})


@socketio.on('connect')
def handle_connect():
    """Handle client connection"""
    emit('sessions', engine.open_menus())


@socketio.on('click')
def handle_click(data):
    actor = actors.get((data or {}).get("actor_id", ""))
    if actor is None:
        return
    try:
        slot = int(data.get("slot"))
    except (TypeError, ValueError):
        return
    engine.click(actor, slot, data.get("click_type", "LEFT"))


if __name__ == '__main__':
    socketio.run(app, debug=True, host='0.0.0.0', port=5000)
