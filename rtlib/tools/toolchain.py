# SPDX-License-Identifier: MIT
"""Tool protocols and base implementation.

rtlib does not compile or archive anything itself. It drives a compiler and
an archiver through the small Compiler and Archiver protocols below, so any
object with matching methods (a real toolchain, or a test double) can be
used. A Toolchain bundles one of each.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from rtlib.core.errors import ToolError, ToolNotFoundError

if TYPE_CHECKING:
    from rtlib.configure.config import Configure

logger = logging.getLogger(__name__)


@runtime_checkable
class Compiler(Protocol):
    """Protocol for C compilers."""

    def compile(self, args: Sequence[str]) -> None:
        """Run the compiler with the given arguments.

        The arguments contain flags, "-o <object>" and the source file.

        Raises:
            ToolError: If the compiler fails.
        """
        ...


@runtime_checkable
class Archiver(Protocol):
    """Protocol for static library archivers."""

    def archive(self, output: Path, objects: Sequence[Path]) -> None:
        """Create a static archive from object files, in the given order.

        Raises:
            ToolError: If the archiver fails.
        """
        ...


class BaseTool:
    """A tool run as an external process.

    Attributes:
        name: Tool name (e.g. 'cc', 'ar').
        cmd: Command to run, a program name or a path.
        candidates: Program names tried in order by configure().
    """

    candidates: tuple[str, ...] = ()

    def __init__(self, name: str, cmd: str | Path | None = None) -> None:
        self.name = name
        if cmd is None:
            cmd = self.candidates[0] if self.candidates else name
        self.cmd = str(cmd)
        self.version: str | None = None

    def run(self, args: Sequence[str]) -> str:
        """Run the tool and return its combined output.

        Raises:
            ToolError: If the tool could not be started or exited with a
                non-zero status.
        """
        command = [self.cmd, *args]
        logger.debug("Running: %s", " ".join(command))
        try:
            result = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            )
        except OSError as e:
            raise ToolError(command, None, str(e)) from e
        if result.returncode != 0:
            raise ToolError(command, result.returncode, result.stdout)
        return result.stdout

    def configure(self, config: Configure) -> bool:
        """Locate the tool with config.find_program().

        Returns:
            True if one of the candidate programs was found.
        """
        for candidate in self.candidates:
            program = config.find_program(candidate)
            if program is not None:
                self.cmd = str(program.path)
                self.version = program.version
                return True
        return False

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.cmd!r})"


class Toolchain:
    """A compiler and an archiver used together."""

    def __init__(self, name: str, compiler: Compiler, archiver: Archiver) -> None:
        self.name = name
        self.compiler = compiler
        self.archiver = archiver

    def configure(self, config: Configure) -> None:
        """Locate every external tool of the toolchain.

        Tools that are not BaseTool instances are used as they are.

        Raises:
            ToolNotFoundError: If a tool cannot be found.
        """
        for tool in (self.compiler, self.archiver):
            if isinstance(tool, BaseTool) and not tool.configure(config):
                raise ToolNotFoundError(" or ".join(tool.candidates) or tool.name)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r})"
