# SPDX-License-Identifier: MIT
"""
rtlib: builds and caches native support libraries for cross compilation.

rtlib compiles libraries such as compiler builtins or a C library into a
static archive for a given target triple and CPU, runs the compile jobs in
parallel and keeps the result in a cache so later builds can reuse it.
"""

from __future__ import annotations

from rtlib.builders.library import LibraryBuilder
from rtlib.configure.config import BuildConfig, Configure
from rtlib.core.cache import ArtifactCache
from rtlib.core.errors import (
    CacheError,
    CommandError,
    ConfigureError,
    JobError,
    RtlibError,
    ToolError,
    ToolNotFoundError,
)
from rtlib.core.library import Library, StaticLibrary
from rtlib.core.node import JobNode
from rtlib.core.scheduler import Scheduler
from rtlib.libraries import default_libraries
from rtlib.toolchains import LlvmToolchain

__version__ = "0.1.0"


__all__ = [
    # Version
    "__version__",
    # Core classes
    "ArtifactCache",
    "BuildConfig",
    "Configure",
    "JobNode",
    "Library",
    "LibraryBuilder",
    "Scheduler",
    "StaticLibrary",
    # Libraries and toolchains
    "LlvmToolchain",
    "default_libraries",
    # Errors
    "CacheError",
    "CommandError",
    "ConfigureError",
    "JobError",
    "RtlibError",
    "ToolError",
    "ToolNotFoundError",
]
