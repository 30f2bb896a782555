# SPDX-License-Identifier: MIT
"""Tests for rtlib.core.library."""

from pathlib import Path

import pytest

from rtlib.core.library import Library, StaticLibrary


class TestLibrary:
    def test_abstract(self):
        with pytest.raises(TypeError):
            Library("lib", "/src")  # type: ignore[abstract]

    def test_defaults(self):
        class Minimal(Library):
            def sources(self, target):
                return ["a.c"]

        lib = Minimal("minimal", "/src")
        assert lib.name == "minimal"
        assert lib.source_dir == Path("/src")
        assert lib.crt1_source is None
        assert lib.cflags("arm--none-eabi", Path("/out")) == []
        assert not lib.has_headers
        with pytest.raises(NotImplementedError):
            lib.make_headers("arm--none-eabi", Path("/out/include"))


class TestStaticLibrary:
    def test_sources_and_flags(self):
        lib = StaticLibrary(
            "libm", "/src/libm", sources=["sqrt.c", "floor.c"], flags=["-DX"]
        )
        assert lib.sources("arm--none-eabi") == ["sqrt.c", "floor.c"]
        assert lib.cflags("arm--none-eabi", Path("/out")) == ["-DX"]

    def test_source_paths(self):
        lib = StaticLibrary("libm", "/src/libm", sources=["sqrt.c", "sub/floor.c"])
        assert lib.source_paths("arm--none-eabi") == [
            Path("/src/libm/sqrt.c"),
            Path("/src/libm/sub/floor.c"),
        ]

    def test_source_paths_crt1_first(self):
        lib = StaticLibrary(
            "wasi", "/src/wasi", sources=["a.c"], crt1_source="crt/crt1.c"
        )
        assert lib.crt1_source == "crt/crt1.c"
        assert lib.source_paths("wasm32-unknown-wasi") == [
            Path("/src/wasi/crt/crt1.c"),
            Path("/src/wasi/a.c"),
        ]

    def test_results_are_copies(self):
        lib = StaticLibrary("lib", "/src", sources=["a.c"])
        lib.sources("x").append("b.c")
        assert lib.sources("x") == ["a.c"]

    def test_repr(self):
        assert repr(StaticLibrary("lib", "/src", sources=[])) == (
            "StaticLibrary('lib', '/src')"
        )
