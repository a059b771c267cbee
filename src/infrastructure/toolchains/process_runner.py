import asyncio
import os
import signal
import time
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from loguru import logger


@dataclass
class ProcessResult:
    argv: list[str]
    exit_code: int
    stdout: str
    stderr: str
    duration_ms: int
    timed_out: bool = False

    @property
    def output(self) -> str:
        """Combined raw output, stdout first."""
        if self.stdout and self.stderr:
            return f"{self.stdout.rstrip()}\n{self.stderr}"
        return self.stdout or self.stderr


def _kill_group(proc: asyncio.subprocess.Process) -> None:
    try:
        os.killpg(os.getpgid(proc.pid), signal.SIGKILL)
    except (ProcessLookupError, OSError):
        if proc.returncode is None:
            proc.kill()


async def run_process(
    argv: list[str],
    cwd: Path,
    env: Mapping[str, str] | None = None,
    timeout_s: int = 1800,
) -> ProcessResult:
    """Run an external tool and capture its output.

    On timeout or cancellation the whole process group is killed. Spawn
    errors (missing executable, bad cwd) propagate as OSError.
    """
    full_env = dict(os.environ)
    if env:
        full_env.update(env)

    start = time.monotonic()
    proc = await asyncio.create_subprocess_exec(
        *argv,
        cwd=str(cwd),
        env=full_env,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        start_new_session=True,  # own process group so timeouts kill children too
    )

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout_s)
    except asyncio.CancelledError:
        _kill_group(proc)
        await asyncio.shield(proc.wait())
        logger.warning("'{}' cancelled, process group killed", argv[0])
        raise
    except TimeoutError:
        _kill_group(proc)
        await proc.wait()
        logger.warning("'{}' timed out after {}s", argv[0], timeout_s)
        return ProcessResult(
            argv=argv,
            exit_code=-1,
            stdout="",
            stderr=f"Timeout after {timeout_s}s",
            duration_ms=int((time.monotonic() - start) * 1000),
            timed_out=True,
        )

    return ProcessResult(
        argv=argv,
        exit_code=proc.returncode if proc.returncode is not None else -1,
        stdout=stdout.decode(errors="replace"),
        stderr=stderr.decode(errors="replace"),
        duration_ms=int((time.monotonic() - start) * 1000),
    )
