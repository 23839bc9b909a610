"""Plugin registry.

A plugin is a callable ``(hooks, ctx)`` that typically registers hook
handlers or fills context capabilities before a command runs.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from command_orchestrator.core.asyncutils import resolve
from command_orchestrator.core.context import RunContext
from command_orchestrator.core.hooks import HookBus

logger = logging.getLogger(__name__)

Plugin = Callable[[HookBus, RunContext], Any]


class PluginRegistry:
    """Named plugins applied in registration order."""

    def __init__(self) -> None:
        self._plugins: dict[str, Plugin] = {}

    def register(self, name: str, plugin: Plugin) -> None:
        if name in self._plugins:
            logger.warning(f'Plugin "{name}" is already registered and will be replaced')
        self._plugins[name] = plugin

    def unregister(self, name: str) -> bool:
        return self._plugins.pop(name, None) is not None

    def has(self, name: str) -> bool:
        return name in self._plugins

    def names(self) -> list[str]:
        return list(self._plugins)

    async def apply(self, hooks: HookBus, ctx: RunContext) -> list[str]:
        """Apply every plugin; a failing plugin is logged and skipped.

        Returns:
            Names of the plugins that applied successfully.
        """

        applied: list[str] = []
        for name, plugin in list(self._plugins.items()):
            try:
                await resolve(plugin(hooks, ctx))
            except Exception:
                logger.exception(f'Failed to apply plugin "{name}"', extra={"plugin": name})
                continue
            ctx.plugins.add(name)
            applied.append(name)
        return applied
