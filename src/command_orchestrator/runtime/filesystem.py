"""Filesystem capability over the local disk."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class LocalFileSystem:
    """Async text file access; relative paths resolve against ``root``.

    Blocking I/O runs in a worker thread. OS errors propagate unchanged.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def resolve(self, path: str | Path) -> Path:
        candidate = Path(path)
        return candidate if candidate.is_absolute() else self.root / candidate

    async def read(self, path: str | Path) -> str:
        target = self.resolve(path)
        return await asyncio.to_thread(target.read_text, encoding="utf-8")

    async def write(self, path: str | Path, content: str) -> None:
        target = self.resolve(path)

        def _write() -> None:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")

        await asyncio.to_thread(_write)
        logger.debug("File written", extra={"path": str(target), "chars": len(content)})

    async def exists(self, path: str | Path) -> bool:
        return await asyncio.to_thread(self.resolve(path).exists)
