# SPDX-License-Identifier: MIT
"""Picolibc, a C library for small embedded systems.

Picolibc is compiled from its newlib tree. Its sources include a
configuration header, picolibc.h, which is normally produced by its own
build system; here it is generated into the build's include directory
before anything is compiled.
"""

from __future__ import annotations

from pathlib import Path

from rtlib.core.library import Library

# Settings written to the generated picolibc.h.
HEADER_DEFINES: tuple[tuple[str, str], ...] = (
    ("_ATEXIT_DYNAMIC_ALLOC", "0"),
    ("_HAVE_ALIAS_ATTRIBUTE", "1"),
    ("_IEEE_LIBM", "1"),
    ("_PICO_EXIT", "1"),
    ("TINY_STDIO", "1"),
    ("__OBSOLETE_MATH_DOUBLE", "0"),
    ("__OBSOLETE_MATH_FLOAT", "1"),
)

LIBC_SOURCES: tuple[str, ...] = (
    "libc/string/bcmp.c",
    "libc/string/bcopy.c",
    "libc/string/bzero.c",
    "libc/string/explicit_bzero.c",
    "libc/string/ffsl.c",
    "libc/string/ffsll.c",
    "libc/string/fls.c",
    "libc/string/flsl.c",
    "libc/string/flsll.c",
    "libc/string/gnu_basename.c",
    "libc/string/index.c",
    "libc/string/memccpy.c",
    "libc/string/memchr.c",
    "libc/string/memcmp.c",
    "libc/string/memcpy.c",
    "libc/string/memmem.c",
    "libc/string/memmove.c",
    "libc/string/mempcpy.c",
    "libc/string/memrchr.c",
    "libc/string/memset.c",
    "libc/string/rawmemchr.c",
    "libc/string/rindex.c",
    "libc/string/stpcpy.c",
    "libc/string/stpncpy.c",
    "libc/string/strcasecmp.c",
    "libc/string/strcasestr.c",
    "libc/string/strcat.c",
    "libc/string/strchr.c",
    "libc/string/strchrnul.c",
    "libc/string/strcmp.c",
    "libc/string/strcoll.c",
    "libc/string/strcpy.c",
    "libc/string/strcspn.c",
    "libc/string/strdup.c",
    "libc/string/strerror.c",
    "libc/string/strlcat.c",
    "libc/string/strlcpy.c",
    "libc/string/strlen.c",
    "libc/string/strncasecmp.c",
    "libc/string/strncat.c",
    "libc/string/strncmp.c",
    "libc/string/strncpy.c",
    "libc/string/strndup.c",
    "libc/string/strnlen.c",
    "libc/string/strnstr.c",
    "libc/string/strpbrk.c",
    "libc/string/strrchr.c",
    "libc/string/strsep.c",
    "libc/string/strsignal.c",
    "libc/string/strspn.c",
    "libc/string/strstr.c",
    "libc/string/strtok.c",
    "libc/string/strtok_r.c",
    "libc/string/strverscmp.c",
    "libc/string/strxfrm.c",
    "libc/string/swab.c",
    "libc/string/timingsafe_bcmp.c",
    "libc/string/timingsafe_memcmp.c",
    "libc/tinystdio/fprintf.c",
    "libc/tinystdio/fputc.c",
    "libc/tinystdio/fputs.c",
    "libc/tinystdio/printf.c",
    "libc/tinystdio/putchar.c",
    "libc/tinystdio/puts.c",
    "libc/tinystdio/snprintf.c",
    "libc/tinystdio/sprintf.c",
    "libc/tinystdio/vfprintf.c",
    "libc/tinystdio/vprintf.c",
    "libc/tinystdio/vsnprintf.c",
    "libc/tinystdio/vsprintf.c",
)

LIBM_SOURCES: tuple[str, ...] = (
    "libm/common/s_fpclassify.c",
    "libm/common/s_isinf.c",
    "libm/common/s_isnan.c",
    "libm/common/sf_isinf.c",
    "libm/common/sf_isnan.c",
    "libm/math/s_ceil.c",
    "libm/math/s_fabs.c",
    "libm/math/s_floor.c",
    "libm/math/sf_ceil.c",
    "libm/math/sf_fabs.c",
    "libm/math/sf_floor.c",
)


class Picolibc(Library):
    """The picolibc C library."""

    def __init__(self, source_dir: Path | str) -> None:
        super().__init__("picolibc", source_dir)

    def sources(self, target: str) -> list[str]:
        return [*LIBC_SOURCES, *LIBM_SOURCES]

    def cflags(self, target: str, out_dir: Path) -> list[str]:
        newlib = self.source_dir
        return [
            "-Werror",
            "-Wall",
            "-std=gnu11",
            "-D_COMPILING_NEWLIB",
            "-DHAVE_ALIAS_ATTRIBUTE",
            "-DTINY_STDIO",
            "-nostdlibinc",
            "-isystem",
            str(newlib / "libc" / "include"),
            f"-I{newlib / 'libc' / 'tinystdio'}",
            f"-I{newlib / 'libm' / 'common'}",
            f"-I{out_dir / 'include'}",
        ]

    @property
    def has_headers(self) -> bool:
        return True

    def make_headers(self, target: str, include_dir: Path) -> None:
        lines = ["/* Generated by rtlib. */", "#pragma once", ""]
        lines.extend(f"#define {name} {value}" for name, value in HEADER_DEFINES)
        (include_dir / "picolibc.h").write_text("\n".join(lines) + "\n")
