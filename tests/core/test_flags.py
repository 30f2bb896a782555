# SPDX-License-Identifier: MIT
"""Tests for rtlib.core.flags."""

from pathlib import Path

import pytest

from rtlib.core.flags import (
    BASE_CFLAGS,
    library_flags,
    remap_flag,
    target_flags,
)

ARM_FLAGS = ["-fshort-enums", "-fomit-frame-pointer", "-mfloat-abi=soft"]


class TestTargetFlags:
    @pytest.mark.parametrize(
        "triple",
        ["arm--none-eabi", "armv7m-none-eabi", "thumbv7em-unknown-unknown-eabi"],
    )
    def test_arm(self, triple):
        assert target_flags(triple) == ARM_FLAGS

    def test_riscv32(self):
        assert target_flags("riscv32-unknown-none") == [
            "-march=rv32imac",
            "-mabi=ilp32",
            "-fforce-enable-int128",
        ]

    def test_riscv64(self):
        assert target_flags("riscv64-unknown-elf") == ["-march=rv64gc", "-mabi=lp64"]

    def test_riscv_prefix_needs_dash(self):
        assert target_flags("riscv32e-unknown-none") == []

    @pytest.mark.parametrize(
        "triple", ["x86_64-unknown-linux", "wasm32-unknown-wasi", "aarch64-none-elf"]
    )
    def test_unknown(self, triple):
        assert target_flags(triple) == []


class TestLibraryFlags:
    def test_arm(self):
        flags = library_flags(
            ["-Wall"], "arm--none-eabi", build_dir="/tmp/b", name="lib"
        )
        assert flags == [
            "-Wall",
            *BASE_CFLAGS,
            "--target=arm--none-eabi",
            "-fdebug-prefix-map=/tmp/b=/rtlib/lib",
            *ARM_FLAGS,
        ]
        assert not any(f.startswith("-mcpu") for f in flags)

    def test_cpu(self):
        flags = library_flags(
            [], "riscv64-unknown-elf", cpu="sifive-u74", build_dir="/b", name="lib"
        )
        assert "-mcpu=sifive-u74" in flags
        assert flags.index("-mcpu=sifive-u74") < flags.index("-march=rv64gc")

    def test_library_flags_unchanged(self):
        library = ["-I", "/x/inc1", "-I", "/x/inc2", "-D", "A=1", "-D", "B=2", "-g"]
        flags = library_flags(
            library, "x86_64-unknown-linux", build_dir=Path("/b"), name="lib"
        )
        assert flags[: len(library)] == library
        assert flags[len(library) :] == [
            *BASE_CFLAGS,
            "--target=x86_64-unknown-linux",
            "-fdebug-prefix-map=/b=/rtlib/lib",
        ]

    def test_remap_flag(self):
        assert (
            remap_flag(Path("/tmp/x/build-lib-picolibc"), "picolibc")
            == "-fdebug-prefix-map=/tmp/x/build-lib-picolibc=/rtlib/picolibc"
        )
