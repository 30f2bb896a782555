# SPDX-License-Identifier: MIT
"""Library descriptors shipped with rtlib."""

from __future__ import annotations

from pathlib import Path

from rtlib.core.library import Library
from rtlib.libraries.compiler_rt import CompilerRT
from rtlib.libraries.picolibc import Picolibc


def default_libraries(root: Path | str) -> dict[str, Library]:
    """Create the standard libraries for a source tree.

    Args:
        root: Directory containing lib/compiler-rt-builtins and
            lib/picolibc/newlib.

    Returns:
        A fresh name to library mapping, owned by the caller.
    """
    root = Path(root)
    libraries: list[Library] = [
        CompilerRT(root / "lib" / "compiler-rt-builtins"),
        Picolibc(root / "lib" / "picolibc" / "newlib"),
    ]
    return {lib.name: lib for lib in libraries}


__all__ = [
    "CompilerRT",
    "Picolibc",
    "default_libraries",
]
