# SPDX-License-Identifier: MIT
"""Library descriptors.

A Library describes a native support library (compiler builtins, a C
library, a startup object) that is compiled from source for each target:
where its sources live, which of them to build for a target, which extra
compiler flags it needs and whether it must generate headers first.

Descriptors are immutable and hold no build state. Subclasses implement
sources() and usually cflags().
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path


class Library(ABC):
    """Abstract base class for library descriptors.

    Attributes:
        name: Library name, e.g. "compiler-rt" or "picolibc".
        source_dir: Directory all source paths are relative to.
        crt1_source: Source of the startup object, relative to source_dir,
            or None if the library has none.
    """

    def __init__(
        self,
        name: str,
        source_dir: Path | str,
        *,
        crt1_source: str | None = None,
    ) -> None:
        self._name = name
        self._source_dir = Path(source_dir)
        self._crt1_source = crt1_source

    @property
    def name(self) -> str:
        return self._name

    @property
    def source_dir(self) -> Path:
        return self._source_dir

    @property
    def crt1_source(self) -> str | None:
        return self._crt1_source

    @abstractmethod
    def sources(self, target: str) -> list[str]:
        """Library sources to compile for a target, relative to source_dir."""
        ...

    def cflags(self, target: str, out_dir: Path) -> list[str]:
        """Extra compiler flags for this library.

        Args:
            target: Target triple.
            out_dir: Temporary output directory of the build. Generated
                headers are placed in out_dir / "include".
        """
        return []

    @property
    def has_headers(self) -> bool:
        """Whether make_headers() must run before compiling."""
        return False

    def make_headers(self, target: str, include_dir: Path) -> None:
        """Create generated headers in include_dir, which already exists."""
        raise NotImplementedError(f"{self.name} does not generate headers")

    def source_paths(self, target: str) -> list[Path]:
        """Full paths of every file the library is built from.

        Includes the startup object source first, if any. These are the
        files the cached archive is validated against.
        """
        sources = self.sources(target)
        if self._crt1_source is not None:
            sources = [self._crt1_source, *sources]
        return [self._source_dir / name for name in sources]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r}, {str(self.source_dir)!r})"


class StaticLibrary(Library):
    """A library with a fixed list of sources and flags.

    Example:
        lib = StaticLibrary(
            "libm",
            "/src/libm",
            sources=["sqrt.c", "floor.c"],
            flags=["-ffreestanding"],
        )
    """

    def __init__(
        self,
        name: str,
        source_dir: Path | str,
        *,
        sources: list[str],
        flags: list[str] | None = None,
        crt1_source: str | None = None,
    ) -> None:
        super().__init__(name, source_dir, crt1_source=crt1_source)
        self._sources = tuple(sources)
        self._flags = tuple(flags or [])

    def sources(self, target: str) -> list[str]:
        return list(self._sources)

    def cflags(self, target: str, out_dir: Path) -> list[str]:
        return list(self._flags)
