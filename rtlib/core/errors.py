# SPDX-License-Identifier: MIT
"""Custom exceptions for rtlib.

All rtlib exceptions inherit from RtlibError. Errors raised by job actions
are wrapped by the scheduler in a JobError that names the failing job; the
original error stays available as ``__cause__``.
"""

from __future__ import annotations

from pathlib import Path


class RtlibError(Exception):
    """Base class for all rtlib exceptions.

    Attributes:
        message: The error message.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigureError(RtlibError):
    """Error in the build configuration.

    Raised when required settings are missing or invalid.
    """


class ToolNotFoundError(ConfigureError):
    """Required tool was not found.

    Attributes:
        tool: The name of the tool that was not found.
    """

    def __init__(self, tool: str) -> None:
        self.tool = tool
        super().__init__(f"tool not found: {tool}")


class ToolError(RtlibError):
    """An external tool (compiler, archiver) exited unsuccessfully.

    Attributes:
        command: The argument list that was run.
        returncode: Exit status, or None if the tool could not be started.
        output: Captured stdout/stderr of the tool.
    """

    def __init__(
        self,
        command: list[str],
        returncode: int | None,
        output: str = "",
    ) -> None:
        self.command = command
        self.returncode = returncode
        self.output = output
        if returncode is None:
            message = f"could not run {command[0]}"
        else:
            message = f"{command[0]} exited with status {returncode}"
        if output.strip():
            message = f"{message}\n{output.rstrip()}"
        super().__init__(message)


class CommandError(RtlibError):
    """A build step failed for a specific file.

    Formatted as "<message> <path>: <cause>", e.g.
    "failed to build lib/foo.c: clang exited with status 1".

    Attributes:
        reason: What failed, e.g. "failed to build".
        path: The file being processed.
        cause: The underlying error.
    """

    def __init__(self, reason: str, path: Path | str, cause: BaseException) -> None:
        self.reason = reason
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"{reason} {path}: {cause}")


class JobError(RtlibError):
    """A job in the build graph failed.

    Attributes:
        description: Description of the failed job.
        cause: The error raised by the job's action.
    """

    def __init__(self, description: str, cause: BaseException) -> None:
        self.description = description
        self.cause = cause
        super().__init__(f"{description}: {cause}")


class CacheError(RtlibError):
    """Invalid use of the artifact cache.

    This signals a programming error (e.g. storing an artifact with no
    source files to validate it against), not a recoverable condition.
    """


class DependencyCycleError(RtlibError):
    """Circular dependency detected in the job graph.

    Attributes:
        cycle: Descriptions of the jobs forming the cycle.
    """

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = cycle
        cycle_str = " -> ".join(cycle)
        super().__init__(f"dependency cycle: {cycle_str}")
