# SPDX-License-Identifier: MIT
"""Build configuration for rtlib.

BuildConfig describes what to build for: the target triple, the CPU, where
the artifact cache lives and where precompiled libraries can be found.

Configure discovers the external tools (compiler, archiver) and remembers
what it found in a small JSON file, so later runs skip the search.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from rtlib.core.errors import ConfigureError

logger = logging.getLogger(__name__)


def default_cache_dir() -> Path:
    """Return the cache directory to use when none is configured.

    Precedence (highest to lowest):
        1. RTLIB_CACHE environment variable
        2. $XDG_CACHE_HOME/rtlib
        3. ~/.cache/rtlib
    """
    cache = os.environ.get("RTLIB_CACHE")
    if cache:
        return Path(cache)
    xdg = os.environ.get("XDG_CACHE_HOME")
    if xdg:
        return Path(xdg) / "rtlib"
    return Path.home() / ".cache" / "rtlib"


@dataclass(frozen=True)
class BuildConfig:
    """What and where to build.

    Attributes:
        triple: Target triple, e.g. "thumbv7em-unknown-unknown-eabi".
        cpu: Target CPU, or "" for the default CPU of the triple.
        cache_dir: Directory holding cached library builds.
        precompiled: Library name to path of a precompiled library.
        precompiled_dir: Directory searched for precompiled libraries, laid
            out as <precompiled_dir>/<triple>[-<cpu>]/<name>.
    """

    triple: str
    cpu: str = ""
    cache_dir: Path = field(default_factory=default_cache_dir)
    precompiled: Mapping[str, Path] = field(default_factory=dict)
    precompiled_dir: Path | None = None

    def __post_init__(self) -> None:
        if not self.triple:
            raise ConfigureError("no target triple configured")
        object.__setattr__(self, "cache_dir", Path(self.cache_dir))
        object.__setattr__(
            self,
            "precompiled",
            {name: Path(path) for name, path in self.precompiled.items()},
        )
        if self.precompiled_dir is not None:
            object.__setattr__(self, "precompiled_dir", Path(self.precompiled_dir))

    @property
    def target_name(self) -> str:
        """Triple and CPU combined, as used in directory names."""
        if self.cpu:
            return f"{self.triple}-{self.cpu}"
        return self.triple

    def output_name(self, name: str) -> str:
        """Name of a library's cache entry for this target."""
        return f"{name}-{self.target_name}"

    def precompiled_path(self, name: str) -> Path | None:
        """Return the precompiled version of a library, if there is one."""
        if name in self.precompiled:
            return self.precompiled[name]
        if self.precompiled_dir is not None:
            path = self.precompiled_dir / self.target_name / name
            if path.exists():
                return path
        return None

    def library_path(self, name: str) -> tuple[Path, bool]:
        """Locate a library for this target.

        Returns:
            (path, True) for a precompiled library, otherwise the location
            the library occupies in the cache and False.
        """
        path = self.precompiled_path(name)
        if path is not None:
            return path, True
        return self.cache_dir / self.output_name(name), False

    @classmethod
    def from_env(
        cls, triple: str | None = None, cpu: str | None = None
    ) -> BuildConfig:
        """Create a configuration from environment variables.

        Variables:
            RTLIB_TARGET: target triple (unless passed explicitly)
            RTLIB_CPU: target CPU (unless passed explicitly)
            RTLIB_CACHE: cache directory (see default_cache_dir())
            RTLIB_PRECOMPILED: directory of precompiled libraries

        Raises:
            ConfigureError: If no target triple is available.
        """
        triple = triple or os.environ.get("RTLIB_TARGET", "")
        if cpu is None:
            cpu = os.environ.get("RTLIB_CPU", "")
        precompiled_dir = os.environ.get("RTLIB_PRECOMPILED")
        return cls(
            triple=triple,
            cpu=cpu,
            cache_dir=default_cache_dir(),
            precompiled_dir=Path(precompiled_dir) if precompiled_dir else None,
        )


@dataclass
class ProgramInfo:
    """Information about a found program.

    Attributes:
        path: Path to the program executable.
        version: Version string if detected.
    """

    path: Path
    version: str | None = None


class Configure:
    """Tool discovery with a persistent cache.

    Example:
        config = Configure(build_dir=default_cache_dir())
        clang = config.find_program("clang")
        if clang:
            print(f"Found clang at {clang.path}")
        config.save()

    Attributes:
        build_dir: Directory holding the cache file.
    """

    def __init__(
        self,
        *,
        build_dir: Path | str,
        cache_file: str = "rtlib_config.json",
    ) -> None:
        self.build_dir = Path(build_dir)
        self._cache_file = cache_file
        self._cache: dict[str, Any] = {}

        self._load_cache()

    def _cache_path(self) -> Path:
        return self.build_dir / self._cache_file

    def _load_cache(self) -> None:
        """Load previously found programs if the cache file exists."""
        cache_path = self._cache_path()
        if cache_path.exists():
            try:
                with open(cache_path) as f:
                    self._cache = json.load(f)
            except (json.JSONDecodeError, OSError) as e:
                logger.warning("Ignoring unreadable %s: %s", cache_path, e)
                self._cache = {}

    def save(self, path: Path | None = None) -> None:
        """Write found programs to the cache file."""
        cache_path = path or self._cache_path()
        cache_path.parent.mkdir(parents=True, exist_ok=True)

        with open(cache_path, "w") as f:
            json.dump(self._cache, f, indent=2, default=str)
            f.write("\n")

    def find_program(
        self,
        name: str,
        *,
        hints: list[Path | str] | None = None,
        version_flag: str = "--version",
        required: bool = False,
    ) -> ProgramInfo | None:
        """Find a program on the system.

        Searches hint paths (files or directories) first, then PATH.

        Args:
            name: Program name (e.g., 'clang', 'llvm-ar').
            hints: Additional paths to search.
            version_flag: Flag to get version (for version detection).
            required: If True, raise an error if not found.

        Returns:
            ProgramInfo if found, None otherwise.

        Raises:
            ConfigureError: If required and not found.
        """
        cache_key = f"program:{name}"
        if cache_key in self._cache:
            cached = self._cache[cache_key]
            path = Path(cached["path"])
            if path.exists():
                return ProgramInfo(path=path, version=cached.get("version"))

        found_path: Path | None = None

        if hints:
            for hint in hints:
                hint_path = Path(hint)
                if hint_path.is_file() and os.access(hint_path, os.X_OK):
                    found_path = hint_path
                    break
                candidate = hint_path / name
                if candidate.is_file() and os.access(candidate, os.X_OK):
                    found_path = candidate
                    break

        if found_path is None:
            result = shutil.which(name)
            if result:
                found_path = Path(result)

        if found_path is None:
            if required:
                raise ConfigureError(f"required program not found: {name}")
            logger.debug("Program not found: %s", name)
            return None

        version = self._get_program_version(found_path, version_flag)
        logger.info("Found %s: %s", name, found_path)

        self._cache[cache_key] = {
            "path": str(found_path),
            "version": version,
        }

        return ProgramInfo(path=found_path, version=version)

    def _get_program_version(self, path: Path, version_flag: str) -> str | None:
        """Return the first line printed by the program's version flag."""
        try:
            result = subprocess.run(
                [str(path), version_flag],
                capture_output=True,
                text=True,
                timeout=5,
            )
        except (subprocess.TimeoutExpired, OSError):
            return None
        if result.returncode != 0:
            return None
        for line in result.stdout.split("\n"):
            line = line.strip()
            if line:
                return line
        return None

    def __repr__(self) -> str:
        return f"Configure(build_dir={self.build_dir})"
