"""Package manager process invocation.

Every command is a list of discrete argument tokens handed to
``asyncio.create_subprocess_exec``; no shell is ever involved.
"""

import asyncio
from dataclasses import dataclass
from pathlib import Path

from .config import Settings
from .ecosystems import EcosystemDescriptor, render_args
from .errors import PackageManagerError
from .log import logger

# Characters of stderr carried into error messages
_STDERR_TAIL = 500


@dataclass
class CommandResult:
    """Captured output of a finished process."""

    args: list[str]
    returncode: int
    stdout: str
    stderr: str


def _tail(text: str) -> str:
    text = text.strip()
    return text[-_STDERR_TAIL:] if len(text) > _STDERR_TAIL else text


async def run_command(
    args: list[str],
    cwd: str | Path | None = None,
    timeout: float = 60.0,
    finish_on_cancel: bool = False,
) -> CommandResult:
    """Run ``args`` and wait for it to exit.

    Args:
        args: Executable followed by its arguments
        cwd: Working directory
        timeout: Seconds before the process is killed
        finish_on_cancel: When the awaiting task is cancelled, let the child
            run to completion instead of killing it. Used for installs so a
            manifest is never left half-written.

    Returns:
        The captured result of a zero exit

    Raises:
        PackageManagerError: If the executable is missing, times out or
            exits non-zero.
    """
    logger.debug("Running {} (cwd={})", args, cwd)
    try:
        process = await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(cwd) if cwd else None,
        )
    except FileNotFoundError as exc:
        raise PackageManagerError(args, f"{args[0]} not found") from exc
    except OSError as exc:
        raise PackageManagerError(args, str(exc)) from exc

    communicate = asyncio.ensure_future(process.communicate())
    try:
        stdout_data, stderr_data = await asyncio.wait_for(asyncio.shield(communicate), timeout=timeout)
    except asyncio.TimeoutError as exc:
        process.kill()
        await communicate
        raise PackageManagerError(args, f"timed out after {timeout}s") from exc
    except asyncio.CancelledError:
        if finish_on_cancel:
            logger.warning("Interrupted; waiting for {} to finish", args[0])
            await communicate
        else:
            process.kill()
            await communicate
        raise

    stdout = stdout_data.decode("utf-8", errors="replace")
    stderr = stderr_data.decode("utf-8", errors="replace")
    if process.returncode != 0:
        reason = _tail(stderr) or _tail(stdout) or "no output"
        raise PackageManagerError(args, f"exit code {process.returncode}: {reason}", process.returncode)

    return CommandResult(args=list(args), returncode=process.returncode, stdout=stdout, stderr=stderr)


async def lookup_latest_via_cli(
    ecosystem: EcosystemDescriptor,
    package: str,
    settings: Settings,
    cwd: str | Path | None = None,
) -> str | None:
    """Ask the ecosystem's package manager CLI for the latest version.

    Returns None when the ecosystem has no lookup command or the command
    fails; failures are logged, never raised.
    """
    if ecosystem.latest_lookup is None or ecosystem.parse_latest is None:
        return None

    args = render_args(ecosystem.latest_lookup, package)
    try:
        result = await run_command(args, cwd=cwd, timeout=settings.command_timeout)
    except PackageManagerError as exc:
        logger.debug("CLI lookup for {} failed: {}", package, exc.reason)
        return None

    version = ecosystem.parse_latest(result.stdout, package)
    if version:
        logger.debug("CLI lookup resolved {} to {}", package, version)
    return version or None
