from __future__ import annotations

import asyncio
import json
import tempfile
from pathlib import Path
from typing import Any

import aiofiles
from loguru import logger


async def atomic_write(path: Path, content: str | bytes, suffix: str | None = None) -> None:
    """Write content to file atomically using temp file + rename pattern."""
    path.parent.mkdir(parents=True, exist_ok=True)

    # Temp file in the target directory so the rename stays on one filesystem
    fd, temp_path_str = tempfile.mkstemp(
        dir=str(path.parent),
        prefix=".tmp_",
        suffix=suffix or path.suffix,
    )
    temp_path = Path(temp_path_str)

    try:
        if isinstance(content, bytes):
            async with aiofiles.open(fd, mode="wb", closefd=True) as f:
                await f.write(content)
        else:
            async with aiofiles.open(fd, mode="w", encoding="utf-8", closefd=True) as f:
                await f.write(content)
        await asyncio.to_thread(temp_path.replace, path)
        logger.debug("Atomic write completed: {}", path)
    except Exception:
        if temp_path.exists():
            temp_path.unlink()
        raise


async def read_json(path: Path) -> dict[str, Any] | None:
    """Read JSON file, return None if not exists."""
    if not path.exists():
        return None
    async with aiofiles.open(path, encoding="utf-8") as f:
        content = await f.read()
    return json.loads(content)  # type: ignore[no-any-return]
