"""Internal process lifecycle helpers shared by SafeCmd execution."""

from __future__ import annotations

import asyncio
import os
import typing as typ


def _merge_env(extra: typ.Mapping[str, str] | None) -> dict[str, str] | None:
    """Overlay extra environment variables when provided."""
    if extra is None:
        return None
    merged = os.environ.copy()
    merged |= extra
    return merged


async def _terminate_process(
    process: asyncio.subprocess.Process,
    grace_period: float,
) -> None:
    """Terminate a running process, escalating to kill after the grace period."""
    grace_period = max(0.0, grace_period)
    if process.returncode is not None:
        return
    try:
        process.terminate()
    except (ProcessLookupError, OSError):
        return
    try:
        await asyncio.wait_for(process.wait(), grace_period)
    except TimeoutError:
        try:
            process.kill()
        except (ProcessLookupError, OSError):
            return
        await process.wait()
