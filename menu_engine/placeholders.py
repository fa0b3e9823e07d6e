"""
Placeholder sources and the merge pipeline that feeds rendering.

Tokens are brace-delimited (`{balance}`). Maps built here always use the
braced form as keys; registration accepts either form.

Merge order for one render, later entries overriding earlier ones:
  1. menu static placeholders
  2. dynamic resolvers: global, then menu-scoped, then actor-scoped
  3. context: {player}/{player_uuid}, discovered {context.<field>} values,
     then resolvers registered for the context's type
  4. {page}/{total_pages} on paginated menus (1-based page)
and, per item,
  5. item static placeholders
  6. item dynamic placeholders
"""
from __future__ import annotations

import dataclasses
import inspect
import logging
import threading
from collections.abc import Collection, Mapping
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple, Type, runtime_checkable
from uuid import UUID

from .data_models import Actor, ItemEntry, MenuDefinition, Session

logger = logging.getLogger(__name__)

GLOBAL = "global"
MENU = "menu"
ACTOR = "actor"
SCOPES = (GLOBAL, MENU, ACTOR)

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ActorResolver = Callable[[Actor], Any]
ContextResolver = Callable[[Actor, Any], Any]


def token(name: str) -> str:
    name = name.strip()
    if name.startswith("{") and name.endswith("}"):
        return name
    return "{" + name + "}"


def apply_placeholders(text: str, placeholders: Mapping[str, str]) -> str:
    """Literal replacement of every known token; unknown tokens stay as written."""
    if not text:
        return text
    for key, value in placeholders.items():
        if key in text:
            text = text.replace(key, value)
    return text


def to_placeholder_value(value: Any) -> Optional[str]:
    """String form of a context value, or None when it should not become a token."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.strftime(DATE_FORMAT)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return None
    if isinstance(value, (Mapping, Collection)):
        return None
    return str(value)


def _safe_call(resolver: Callable[..., Any], *args: Any) -> Optional[str]:
    try:
        value = resolver(*args)
    except Exception as e:
        logger.warning("[Placeholders] Resolver %r failed: %s", resolver, e)
        return None
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


class PlaceholderRegistry:
    """Dynamic placeholders computed per actor, scoped global / per menu / per actor."""

    def __init__(self):
        self._lock = threading.RLock()
        self._global: Dict[str, ActorResolver] = {}
        self._menu: Dict[str, Dict[str, ActorResolver]] = {}
        self._actor: Dict[str, Dict[str, ActorResolver]] = {}

    def register(self, name: str, resolver: ActorResolver, scope: str = GLOBAL, scope_key: Optional[str] = None) -> None:
        if not callable(resolver):
            raise TypeError(f"Placeholder resolver for {name!r} is not callable")
        key = token(name)
        with self._lock:
            if scope == GLOBAL:
                self._global[key] = resolver
            elif scope == MENU:
                self._menu.setdefault(self._menu_key(scope_key), {})[key] = resolver
            elif scope == ACTOR:
                if scope_key is None:
                    raise ValueError("Actor-scoped placeholders need the actor id as scope_key")
                self._actor.setdefault(scope_key, {})[key] = resolver
            else:
                raise ValueError(f"Unknown placeholder scope {scope!r}; expected one of {SCOPES}")

    @staticmethod
    def _menu_key(menu_id: Optional[str]) -> str:
        if not menu_id:
            raise ValueError("Menu-scoped placeholders need the menu id as scope_key")
        return menu_id.lower()

    def resolve_all(self, actor: Actor, menu_id: str) -> Dict[str, str]:
        with self._lock:
            layers = [
                dict(self._global),
                dict(self._menu.get(menu_id.lower(), {})),
                dict(self._actor.get(actor.id, {})),
            ]
        resolved: Dict[str, str] = {}
        for layer in layers:
            for key, resolver in layer.items():
                value = _safe_call(resolver, actor)
                if value is not None:
                    resolved[key] = value
        return resolved

    def resolve(self, actor: Actor, menu_id: str, name: str) -> Optional[str]:
        key = token(name)
        with self._lock:
            for layer in (self._actor.get(actor.id, {}), self._menu.get(menu_id.lower(), {}), self._global):
                if key in layer:
                    resolver = layer[key]
                    break
            else:
                return None
        return _safe_call(resolver, actor)

    def clear_actor(self, actor_id: str) -> None:
        with self._lock:
            self._actor.pop(actor_id, None)

    def clear_menu(self, menu_id: str) -> None:
        with self._lock:
            self._menu.pop(menu_id.lower(), None)

    def clear(self) -> None:
        with self._lock:
            self._global.clear()
            self._menu.clear()
            self._actor.clear()


class ContextPlaceholderRegistry:
    """Resolvers keyed by context type; they apply to instances of that type and its subclasses."""

    def __init__(self):
        self._lock = threading.RLock()
        self._by_type: Dict[type, Dict[str, ContextResolver]] = {}

    def register(self, context_type: Type[Any], name: str, resolver: ContextResolver) -> None:
        if not callable(resolver):
            raise TypeError(f"Context resolver for {name!r} is not callable")
        with self._lock:
            self._by_type.setdefault(context_type, {})[token(name)] = resolver

    def register_with_prefix(self, context_type: Type[Any], prefix: str, resolvers: Mapping[str, ContextResolver]) -> None:
        for key, resolver in resolvers.items():
            self.register(context_type, f"{prefix}.{key}", resolver)

    def unregister(self, context_type: Type[Any]) -> None:
        with self._lock:
            self._by_type.pop(context_type, None)

    def resolve_all(self, actor: Actor, context: Any) -> Dict[str, str]:
        resolved: Dict[str, str] = {}
        if context is None:
            return resolved
        with self._lock:
            matching = [
                dict(resolvers)
                for context_type, resolvers in self._by_type.items()
                if isinstance(context, context_type)
            ]
        for resolvers in matching:
            for key, resolver in resolvers.items():
                value = _safe_call(resolver, actor, context)
                if value is not None:
                    resolved[key] = value
        return resolved

    def clear(self) -> None:
        with self._lock:
            self._by_type.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_type)


@runtime_checkable
class DescribesFields(Protocol):
    def describe_fields(self) -> Mapping[str, Any]:
        ...


def _accessor_name(method_name: str) -> Optional[str]:
    for prefix in ("get_", "is_"):
        if method_name.startswith(prefix) and len(method_name) > len(prefix):
            return method_name[len(prefix):]
    # getGold / isOpen
    for prefix in ("get", "is"):
        rest = method_name[len(prefix):]
        if method_name.startswith(prefix) and rest[:1].isupper():
            return rest[0].lower() + rest[1:]
    return None


def _takes_no_arguments(function: Callable[..., Any]) -> bool:
    try:
        parameters = list(inspect.signature(function).parameters.values())
    except (TypeError, ValueError):
        return False
    required = [
        p for p in parameters[1:]
        if p.default is inspect.Parameter.empty
        and p.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    ]
    return bool(parameters) and not required


class ContextFieldDiscovery:
    """
    Finds the readable fields of a context object.

    Objects providing `describe_fields()` are asked directly and mappings
    expose their keys. Anything else is introspected: dataclass fields,
    `__slots__`, properties, zero-argument get_x/is_x methods and public
    instance attributes. The class-level part of that scan is cached per
    concrete type.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._cache: Dict[type, List[Tuple[str, str]]] = {}

    def fields(self, context: Any) -> Dict[str, Any]:
        if context is None:
            return {}
        if isinstance(context, DescribesFields):
            return dict(context.describe_fields())
        if isinstance(context, Mapping):
            return {str(key): value for key, value in context.items()}

        values: Dict[str, Any] = {}
        instance_vars = getattr(context, "__dict__", None)
        if isinstance(instance_vars, dict):
            for name, value in instance_vars.items():
                if not name.startswith("_") and not callable(value):
                    values[name] = value

        for name, attribute in self._accessors_for(type(context)):
            try:
                value = getattr(context, attribute)
                if callable(value) and attribute != name:
                    value = value()
            except Exception as e:
                logger.debug("[ContextFields] Could not read %s.%s: %s", type(context).__name__, attribute, e)
                continue
            values[name] = value
        return values

    def placeholders(self, context: Any) -> Dict[str, str]:
        resolved: Dict[str, str] = {}
        for name, value in self.fields(context).items():
            text = to_placeholder_value(value)
            if text is not None:
                resolved["{context." + name + "}"] = text
        return resolved

    def _accessors_for(self, cls: type) -> List[Tuple[str, str]]:
        with self._lock:
            cached = self._cache.get(cls)
            if cached is None:
                cached = self._discover(cls)
                self._cache[cls] = cached
            return cached

    @staticmethod
    def _discover(cls: type) -> List[Tuple[str, str]]:
        # (placeholder field name, attribute to read); name != attribute marks a getter method
        accessors: Dict[str, str] = {}
        if dataclasses.is_dataclass(cls):
            for f in dataclasses.fields(cls):
                if not f.name.startswith("_"):
                    accessors[f.name] = f.name
        for klass in cls.__mro__:
            slots = klass.__dict__.get("__slots__", ())
            if isinstance(slots, str):
                slots = (slots,)
            for slot in slots:
                if not slot.startswith("_"):
                    accessors.setdefault(slot, slot)
        for name, member in inspect.getmembers(cls):
            if name.startswith("_"):
                continue
            if isinstance(member, property):
                accessors.setdefault(name, name)
            elif inspect.isfunction(member) and _takes_no_arguments(member):
                field_name = _accessor_name(name)
                if field_name:
                    accessors.setdefault(field_name, name)
        return sorted(accessors.items())

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()

    def cache_size(self) -> int:
        with self._lock:
            return len(self._cache)


class PlaceholderPipeline:
    def __init__(
        self,
        registry: Optional[PlaceholderRegistry] = None,
        context_registry: Optional[ContextPlaceholderRegistry] = None,
        discovery: Optional[ContextFieldDiscovery] = None,
    ):
        self.registry = registry or PlaceholderRegistry()
        self.context_registry = context_registry or ContextPlaceholderRegistry()
        self.discovery = discovery or ContextFieldDiscovery()

    def context_placeholders(self, actor: Actor, context: Any) -> Dict[str, str]:
        resolved = {"{player}": actor.name, "{player_uuid}": actor.id}
        if context is not None:
            resolved.update(self.discovery.placeholders(context))
            resolved.update(self.context_registry.resolve_all(actor, context))
        return resolved

    def build(self, actor: Actor, menu: MenuDefinition, session: Optional[Session] = None) -> Dict[str, str]:
        placeholders: Dict[str, str] = {token(key): value for key, value in menu.placeholders.items()}
        placeholders.update(self.registry.resolve_all(actor, menu.menu_id))
        placeholders.update(self.context_placeholders(actor, session.context if session else None))
        if menu.paginated:
            page = session.page if session else 0
            placeholders["{page}"] = str(page + 1)
            placeholders["{total_pages}"] = str(menu.total_pages)
        return placeholders

    @staticmethod
    def item_placeholders(base: Mapping[str, str], entry: ItemEntry, actor: Actor) -> Dict[str, str]:
        placeholders = dict(base)
        placeholders.update({token(key): value for key, value in entry.placeholders.items()})
        for key, resolver in entry.dynamic_placeholders.items():
            value = _safe_call(resolver, actor)
            if value is not None:
                placeholders[token(key)] = value
        return placeholders
