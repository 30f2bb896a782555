# SPDX-License-Identifier: MIT
"""Toolchain definitions."""

from rtlib.toolchains.llvm import (
    ClangCompiler,
    LlvmArchiver,
    LlvmToolchain,
)

__all__ = [
    "ClangCompiler",
    "LlvmArchiver",
    "LlvmToolchain",
]
