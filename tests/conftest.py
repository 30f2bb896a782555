# SPDX-License-Identifier: MIT
"""Shared fixtures for rtlib tests.

FakeCompiler and FakeArchiver stand in for clang and llvm-ar. The fake
compiler writes the source contents plus the (remapped) object directory
into each object file, the way debug info would record it, so tests can
check both which flags were used and whether output is reproducible.
"""

from __future__ import annotations

import os
import threading
import time
from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from rtlib.configure.config import BuildConfig
from rtlib.core.errors import ToolError

# Far enough in the past that anything written during a test is newer.
OLD_MTIME_NS = time.time_ns() - 3600 * 10**9


class FakeCompiler:
    """Records compile commands and writes deterministic object files."""

    def __init__(self) -> None:
        self.commands: list[list[str]] = []
        self.fail_on: set[str] = set()
        self.before_compile: Callable[[Path], None] | None = None
        self._lock = threading.Lock()

    def compile(self, args: Sequence[str]) -> None:
        args = list(args)
        with self._lock:
            self.commands.append(args)
        source = Path(args[-1])
        obj = Path(args[args.index("-o") + 1])
        if self.before_compile is not None:
            self.before_compile(source)
        if source.name in self.fail_on:
            raise ToolError(["clang", *args], 1, f"{source}: error: expected ';'")

        comp_dir = str(obj.parent)
        for arg in args:
            if arg.startswith("-fdebug-prefix-map="):
                old, new = arg.removeprefix("-fdebug-prefix-map=").split("=", 1)
                if comp_dir.startswith(old):
                    comp_dir = new + comp_dir[len(old) :]
        flags = [a for a in args[:-3] if not a.startswith("-fdebug-prefix-map=")]
        obj.write_text(
            f"source={source.read_text()}\ndir={comp_dir}\nflags={' '.join(flags)}\n"
        )

    @property
    def sources(self) -> list[str]:
        return [Path(c[-1]).name for c in self.commands]


class FakeArchiver:
    """Concatenates object files into a simple archive format."""

    def __init__(self) -> None:
        self.calls: list[tuple[Path, list[Path]]] = []
        self.fail = False

    def archive(self, output: Path, objects: Sequence[Path]) -> None:
        self.calls.append((output, list(objects)))
        if self.fail:
            raise ToolError(["llvm-ar", "rcsD", str(output)], 1, "bad object")
        with open(output, "wb") as out:
            out.write(b"!<arch>\n")
            for obj in objects:
                out.write(obj.name.encode() + b"\n")
                out.write(obj.read_bytes())


def make_sources(root: Path, names: Sequence[str]) -> list[Path]:
    """Create source files with an old modification time."""
    paths = []
    for name in names:
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"int {path.stem.replace('-', '_')}(void) {{ return 0; }}\n")
        os.utime(path, ns=(OLD_MTIME_NS, OLD_MTIME_NS))
        paths.append(path)
    return paths


@pytest.fixture
def compiler() -> FakeCompiler:
    return FakeCompiler()


@pytest.fixture
def archiver() -> FakeArchiver:
    return FakeArchiver()


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    """A library source tree with three C files."""
    root = tmp_path / "src"
    make_sources(root, ["a.c", "b.c", "c.c"])
    return root


@pytest.fixture
def scratch(tmp_path: Path) -> Path:
    """Per-request scratch directory, removed by the test framework."""
    path = tmp_path / "scratch"
    path.mkdir()
    return path


@pytest.fixture
def arm_config(tmp_path: Path) -> BuildConfig:
    return BuildConfig(triple="arm--none-eabi", cache_dir=tmp_path / "cache")


@pytest.fixture
def sources_factory() -> Callable[[Path, Sequence[str]], list[Path]]:
    return make_sources
