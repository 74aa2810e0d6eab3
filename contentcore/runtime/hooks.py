"""
Lifecycle hooks for content, languages and content groups.

Hooks are trusted extension points. Handlers run in registration order and
a handler that raises aborts the surrounding operation.

Usage:
    hooks = HookDispatcher()
    hooks.register(HookEvent.BEFORE_SAVE, Content, lambda model: ...)

    await hooks.dispatch(HookEvent.BEFORE_SAVE, model)

Handlers are matched with isinstance, so a handler registered for Content
also runs for DynamicContent. Handlers may be plain functions or coroutine
functions.
"""

import inspect
from enum import Enum
from typing import Any, Callable, Dict, List, Tuple

from .registry import RegistryError


class HookEvent(str, Enum):
    BEFORE_SAVE = "before_save"
    AFTER_SAVE = "after_save"
    BEFORE_DELETE = "before_delete"
    AFTER_DELETE = "after_delete"
    LOAD = "load"


Handler = Callable[[Any], Any]


class HookDispatcher:
    """Registry and dispatcher of lifecycle handlers."""

    def __init__(self):
        self._handlers: Dict[HookEvent, List[Tuple[type, Handler]]] = {event: [] for event in HookEvent}
        self._frozen = False

    def freeze(self) -> None:
        self._frozen = True

    def register(self, event: HookEvent, model_type: type, handler: Handler) -> None:
        if self._frozen:
            raise RegistryError(f"Cannot register {event.value} hook, dispatcher is frozen")
        self._handlers[event].append((model_type, handler))

    def register_on_before_save(self, model_type: type, handler: Handler) -> None:
        self.register(HookEvent.BEFORE_SAVE, model_type, handler)

    def register_on_after_save(self, model_type: type, handler: Handler) -> None:
        self.register(HookEvent.AFTER_SAVE, model_type, handler)

    def register_on_before_delete(self, model_type: type, handler: Handler) -> None:
        self.register(HookEvent.BEFORE_DELETE, model_type, handler)

    def register_on_after_delete(self, model_type: type, handler: Handler) -> None:
        self.register(HookEvent.AFTER_DELETE, model_type, handler)

    def register_on_load(self, model_type: type, handler: Handler) -> None:
        self.register(HookEvent.LOAD, model_type, handler)

    async def dispatch(self, event: HookEvent, model: Any) -> None:
        for model_type, handler in self._handlers[event]:
            if not isinstance(model, model_type):
                continue
            result = handler(model)
            if inspect.isawaitable(result):
                await result

    async def on_before_save(self, model: Any) -> None:
        await self.dispatch(HookEvent.BEFORE_SAVE, model)

    async def on_after_save(self, model: Any) -> None:
        await self.dispatch(HookEvent.AFTER_SAVE, model)

    async def on_before_delete(self, model: Any) -> None:
        await self.dispatch(HookEvent.BEFORE_DELETE, model)

    async def on_after_delete(self, model: Any) -> None:
        await self.dispatch(HookEvent.AFTER_DELETE, model)

    async def on_load(self, model: Any) -> None:
        await self.dispatch(HookEvent.LOAD, model)
