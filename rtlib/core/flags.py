# SPDX-License-Identifier: MIT
"""Compiler flag synthesis for library builds.

Every library is compiled with the same base flags, a path remapping flag
that keeps temporary directory names out of the debug info, an optional
-mcpu flag, and ABI flags picked from a small table keyed by target triple
prefix. Library specific flags come first and are passed through as given:
flags like -I or -D may take their argument as a separate token, so the
list is never rewritten.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

# Flags passed to every compile job.
BASE_CFLAGS: tuple[str, ...] = (
    "-c",
    "-Oz",
    "-g",
    "-ffunction-sections",
    "-fdata-sections",
    "-Wno-macro-redefined",
)

# ABI/ISA flags by target triple prefix. The first matching entry wins;
# triples matching no entry get no extra flags.
ABI_FLAGS: tuple[tuple[tuple[str, ...], tuple[str, ...]], ...] = (
    (("arm", "thumb"), ("-fshort-enums", "-fomit-frame-pointer", "-mfloat-abi=soft")),
    (("riscv32-",), ("-march=rv32imac", "-mabi=ilp32", "-fforce-enable-int128")),
    (("riscv64-",), ("-march=rv64gc", "-mabi=lp64")),
)

# Directory the build directory is mapped to in debug info.
REMAP_ROOT = "/rtlib"


def target_flags(triple: str) -> list[str]:
    """Return the ABI/ISA flags for a target triple.

    Examples:
        >>> target_flags("thumbv7em-unknown-unknown-eabi")
        ['-fshort-enums', '-fomit-frame-pointer', '-mfloat-abi=soft']
        >>> target_flags("x86_64-unknown-linux")
        []
    """
    for prefixes, flags in ABI_FLAGS:
        if triple.startswith(prefixes):
            return list(flags)
    return []


def remap_flag(build_dir: Path | str, name: str) -> str:
    """Flag mapping a real build directory to a stable name in debug info.

    Without it the temporary directory name ends up in the archive, which
    then differs on every build.
    """
    return f"-fdebug-prefix-map={build_dir}={REMAP_ROOT}/{name}"


def library_flags(
    library_cflags: Sequence[str],
    triple: str,
    *,
    cpu: str = "",
    build_dir: Path | str,
    name: str,
) -> list[str]:
    """Assemble the full flag list for compiling a library's sources.

    Args:
        library_cflags: Flags returned by the library itself, kept
            unchanged and in order.
        triple: Target triple.
        cpu: Target CPU, or "" for the triple's default.
        build_dir: Directory object files are written to.
        name: Library name, used for the remapped directory.

    Returns:
        The flags, without output and input file arguments.

    Examples:
        >>> library_flags(["-I", "inc", "-I", "gen"], "riscv64-unknown-elf",
        ...               build_dir="/b", name="m")[:5]
        ['-I', 'inc', '-I', 'gen', '-c']
    """
    flags = list(library_cflags)
    flags.extend(BASE_CFLAGS)
    flags.append(f"--target={triple}")
    flags.append(remap_flag(build_dir, name))
    if cpu:
        flags.append(f"-mcpu={cpu}")
    flags.extend(target_flags(triple))
    return flags
