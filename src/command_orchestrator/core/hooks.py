"""Named-event hook bus.

Handlers for a hook fire strictly in registration order, one at a time, each
fully awaited before the next. A raising handler stops the call (fail-fast)
and the exception propagates to whoever called :meth:`HookBus.call_hook`.

The engine never reaches for a hidden global: components take an explicit
``hooks=`` bus and only fall back to :func:`get_default_hooks`, which callers
can swap with :func:`set_default_hooks`.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterator, Mapping
from enum import Enum
from typing import Any

from command_orchestrator.core.asyncutils import resolve

logger = logging.getLogger(__name__)

DEBUG_ENV_VAR = "COMMAND_ORCHESTRATOR_DEBUG"

Handler = Callable[[Any], Any]
Observer = Callable[[str, Any], Any]
Unhook = Callable[[], None]


class HookName(str, Enum):
    CLI_BOOT = "cli:boot"
    CONFIG_LOAD = "config:load"
    CTX_READY = "ctx:ready"
    ARGS_PARSED = "args:parsed"
    COMMAND_RESOLVED = "command:resolved"
    WORKFLOW_COMPILE = "workflow:compile"
    TASK_WILL_CALL = "task:will:call"
    TASK_DID_CALL = "task:did:call"
    OUTPUT_WILL_EMIT = "output:will:emit"
    OUTPUT_DID_EMIT = "output:did:emit"
    PERSIST_WILL = "persist:will"
    PERSIST_DID = "persist:did"
    REPORT_WILL = "report:will"
    REPORT_DID = "report:did"
    CLI_DONE = "cli:done"


def _key(name: str) -> str:
    return name.value if isinstance(name, HookName) else str(name)


class _Registration:
    """One registration; identity distinguishes repeated registrations of a handler."""

    __slots__ = ("handler",)

    def __init__(self, handler: Handler) -> None:
        self.handler = handler


def _remove(entries: list[Any], entry: Any) -> bool:
    for index, candidate in enumerate(entries):
        if candidate is entry:
            del entries[index]
            return True
    return False


class HookBus:
    """A registry of ordered handlers keyed by hook name."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[_Registration]] = {}
        self._before: list[_Registration] = []
        self._after: list[_Registration] = []

    def hook(self, name: str, handler: Handler) -> Unhook:
        """Register ``handler`` for ``name``.

        Returns a callable that removes exactly this registration. Calling it
        more than once is harmless.
        """

        key = _key(name)
        entry = _Registration(handler)
        self._handlers.setdefault(key, []).append(entry)

        def unhook() -> None:
            entries = self._handlers.get(key)
            if entries is not None and _remove(entries, entry) and not entries:
                del self._handlers[key]

        return unhook

    def hook_once(self, name: str, handler: Handler) -> Unhook:
        unhook: Unhook

        def once(payload: Any) -> Any:
            unhook()
            return handler(payload)

        unhook = self.hook(name, once)
        return unhook

    def remove_hook(self, name: str, handler: Handler) -> bool:
        """Remove the earliest registration of ``handler`` for ``name``."""

        key = _key(name)
        entries = self._handlers.get(key, [])
        for entry in entries:
            if entry.handler is handler:
                _remove(entries, entry)
                if not entries:
                    del self._handlers[key]
                return True
        return False

    def remove_all_hooks(self) -> None:
        self._handlers.clear()
        self._before.clear()
        self._after.clear()

    def before_each(self, observer: Observer) -> Unhook:
        """Observe every ``call_hook`` before its handlers run."""

        return self._observe(self._before, observer)

    def after_each(self, observer: Observer) -> Unhook:
        """Observe every ``call_hook`` after all its handlers completed."""

        return self._observe(self._after, observer)

    @staticmethod
    def _observe(observers: list[_Registration], observer: Observer) -> Unhook:
        entry = _Registration(observer)
        observers.append(entry)

        def unhook() -> None:
            _remove(observers, entry)

        return unhook

    def handlers(self, name: str) -> list[Handler]:
        return [entry.handler for entry in self._handlers.get(_key(name), [])]

    def names(self) -> Iterator[str]:
        return iter(list(self._handlers))

    async def call_hook(self, name: str, payload: Any = None) -> None:
        key = _key(name)
        # Snapshot: (de)registrations made while handlers run apply to the next call.
        entries = list(self._handlers.get(key, ()))
        for observer in list(self._before):
            await resolve(observer.handler(key, payload))
        for entry in entries:
            await resolve(entry.handler(payload))
        for observer in list(self._after):
            await resolve(observer.handler(key, payload))


_default_hooks = HookBus()


def get_default_hooks() -> HookBus:
    return _default_hooks


def set_default_hooks(bus: HookBus) -> HookBus:
    """Replace the fallback bus and return the previous one."""

    global _default_hooks
    previous = _default_hooks
    _default_hooks = bus
    return previous


def _debug_env() -> bool:
    return os.environ.get(DEBUG_ENV_VAR, "").lower() in {"1", "true", "yes"}


def register_core_hooks(bus: HookBus, *, debug: bool = False) -> Unhook:
    """Install hook tracing and ``--debug`` detection on ``bus``.

    Tracing is logged at DEBUG once debug mode is on, either via ``debug``,
    the ``COMMAND_ORCHESTRATOR_DEBUG`` environment variable, or a ``--debug``
    entry in the ``cli:boot`` argv. A ``--debug`` seen on ``bus`` enables
    tracing for this registration only; the environment is never written.
    """

    state = {"debug": debug}

    def enabled() -> bool:
        return state["debug"] or _debug_env()

    def trace_before(name: str, _payload: Any) -> None:
        if enabled():
            logger.debug(f"[HOOK] Before: {name}", extra={"hook": name})

    def trace_after(name: str, _payload: Any) -> None:
        if enabled():
            logger.debug(f"[HOOK] After: {name}", extra={"hook": name})

    def detect_debug(payload: Any) -> None:
        argv = payload.get("argv") if isinstance(payload, Mapping) else None
        if argv and "--debug" in argv:
            state["debug"] = True

    unhooks = [
        bus.before_each(trace_before),
        bus.after_each(trace_after),
        bus.hook(HookName.CLI_BOOT, detect_debug),
    ]

    def unregister() -> None:
        for unhook in unhooks:
            unhook()

    return unregister
