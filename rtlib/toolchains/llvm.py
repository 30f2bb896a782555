# SPDX-License-Identifier: MIT
"""LLVM/Clang toolchain implementation.

Provides the tools used to build libraries for any target:
- Clang C compiler (clang), which accepts --target for cross compilation
- LLVM archiver (llvm-ar, or the system ar as a fallback)
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from rtlib.tools.toolchain import BaseTool, Toolchain

if TYPE_CHECKING:
    from rtlib.configure.config import Configure


class ClangCompiler(BaseTool):
    """Clang C compiler tool."""

    candidates = ("clang",)

    def __init__(self, cmd: str | Path | None = None) -> None:
        super().__init__("cc", cmd)

    def compile(self, args: Sequence[str]) -> None:
        self.run(args)


class LlvmArchiver(BaseTool):
    """LLVM archiver tool for creating static libraries.

    Archives are created in deterministic mode ('D'), so member timestamps,
    owners and modes do not depend on the build machine.

    Variables:
        flags: Archiver operation and modifiers (default: 'rcsD')
    """

    candidates = ("llvm-ar", "ar")

    def __init__(self, cmd: str | Path | None = None, flags: str = "rcsD") -> None:
        super().__init__("ar", cmd)
        self.flags = flags

    def archive(self, output: Path, objects: Sequence[Path]) -> None:
        # 'r' adds to an existing archive; start from scratch.
        output.unlink(missing_ok=True)
        self.run([self.flags, str(output), *(str(o) for o in objects)])


class LlvmToolchain(Toolchain):
    """Clang and llvm-ar."""

    def __init__(
        self,
        compiler: ClangCompiler | None = None,
        archiver: LlvmArchiver | None = None,
    ) -> None:
        super().__init__(
            "llvm", compiler or ClangCompiler(), archiver or LlvmArchiver()
        )

    @classmethod
    def find(cls, config: Configure) -> LlvmToolchain:
        """Locate clang and an archiver on this system.

        Raises:
            ToolNotFoundError: If either tool is missing.
        """
        toolchain = cls()
        toolchain.configure(config)
        return toolchain
