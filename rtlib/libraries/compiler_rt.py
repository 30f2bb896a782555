# SPDX-License-Identifier: MIT
"""Compiler builtins from LLVM compiler-rt.

These provide the helper routines the compiler emits calls to (integer
division on cores without a divider, soft float, 128-bit arithmetic and
so on). The portable C implementations are built for every target;
ARM and RISC-V get their assembly implementations on top.
"""

from __future__ import annotations

from pathlib import Path

from rtlib.core.library import Library

GENERIC_BUILTINS: tuple[str, ...] = (
    "absvdi2.c",
    "absvsi2.c",
    "absvti2.c",
    "adddf3.c",
    "addsf3.c",
    "addtf3.c",
    "addvdi3.c",
    "addvsi3.c",
    "addvti3.c",
    "ashldi3.c",
    "ashlti3.c",
    "ashrdi3.c",
    "ashrti3.c",
    "bswapdi2.c",
    "bswapsi2.c",
    "clzdi2.c",
    "clzsi2.c",
    "clzti2.c",
    "cmpdi2.c",
    "cmpti2.c",
    "comparedf2.c",
    "comparesf2.c",
    "ctzdi2.c",
    "ctzsi2.c",
    "ctzti2.c",
    "divdc3.c",
    "divdf3.c",
    "divdi3.c",
    "divmoddi4.c",
    "divmodsi4.c",
    "divmodti4.c",
    "divsc3.c",
    "divsf3.c",
    "divsi3.c",
    "divtf3.c",
    "divti3.c",
    "extendhfsf2.c",
    "extendsfdf2.c",
    "ffsdi2.c",
    "ffssi2.c",
    "ffsti2.c",
    "fixdfdi.c",
    "fixdfsi.c",
    "fixdfti.c",
    "fixsfdi.c",
    "fixsfsi.c",
    "fixsfti.c",
    "fixunsdfdi.c",
    "fixunsdfsi.c",
    "fixunsdfti.c",
    "fixunssfdi.c",
    "fixunssfsi.c",
    "fixunssfti.c",
    "floatdidf.c",
    "floatdisf.c",
    "floatsidf.c",
    "floatsisf.c",
    "floattidf.c",
    "floattisf.c",
    "floatundidf.c",
    "floatundisf.c",
    "floatunsidf.c",
    "floatunsisf.c",
    "floatuntidf.c",
    "floatuntisf.c",
    "lshrdi3.c",
    "lshrti3.c",
    "moddi3.c",
    "modsi3.c",
    "modti3.c",
    "muldc3.c",
    "muldf3.c",
    "muldi3.c",
    "mulodi4.c",
    "mulosi4.c",
    "muloti4.c",
    "mulsc3.c",
    "mulsf3.c",
    "multf3.c",
    "multi3.c",
    "mulvdi3.c",
    "mulvsi3.c",
    "mulvti3.c",
    "negdf2.c",
    "negdi2.c",
    "negsf2.c",
    "negti2.c",
    "negvdi2.c",
    "negvsi2.c",
    "negvti2.c",
    "paritydi2.c",
    "paritysi2.c",
    "parityti2.c",
    "popcountdi2.c",
    "popcountsi2.c",
    "popcountti2.c",
    "powidf2.c",
    "powisf2.c",
    "subdf3.c",
    "subsf3.c",
    "subtf3.c",
    "subvdi3.c",
    "subvsi3.c",
    "subvti3.c",
    "truncdfhf2.c",
    "truncdfsf2.c",
    "truncsfhf2.c",
    "ucmpdi2.c",
    "ucmpti2.c",
    "udivdi3.c",
    "udivmoddi4.c",
    "udivmodsi4.c",
    "udivmodti4.c",
    "udivsi3.c",
    "udivti3.c",
    "umoddi3.c",
    "umodsi3.c",
    "umodti3.c",
)

# ARM EABI helpers (__aeabi_*), used by both ARM and Thumb targets.
AEABI_BUILTINS: tuple[str, ...] = (
    "arm/aeabi_cdcmp.S",
    "arm/aeabi_cdcmpeq_check_nan.c",
    "arm/aeabi_cfcmp.S",
    "arm/aeabi_cfcmpeq_check_nan.c",
    "arm/aeabi_dcmp.S",
    "arm/aeabi_div0.c",
    "arm/aeabi_drsub.c",
    "arm/aeabi_fcmp.S",
    "arm/aeabi_frsub.c",
    "arm/aeabi_idivmod.S",
    "arm/aeabi_ldivmod.S",
    "arm/aeabi_memcmp.S",
    "arm/aeabi_memcpy.S",
    "arm/aeabi_memmove.S",
    "arm/aeabi_memset.S",
    "arm/aeabi_uidivmod.S",
    "arm/aeabi_uldivmod.S",
    "arm/udivmodsi4.S",
    "arm/udivsi3.S",
    "arm/umodsi3.S",
)

# Multiplication for RISC-V cores without the M extension.
RISCV32_BUILTINS: tuple[str, ...] = ("riscv/mulsi3.S",)
RISCV64_BUILTINS: tuple[str, ...] = ("riscv/muldi3.S",)


class CompilerRT(Library):
    """The compiler-rt builtins library."""

    def __init__(self, source_dir: Path | str) -> None:
        super().__init__("compiler-rt", source_dir)

    def sources(self, target: str) -> list[str]:
        builtins = list(GENERIC_BUILTINS)
        if target.startswith(("arm", "thumb")):
            builtins.extend(AEABI_BUILTINS)
        elif target.startswith("riscv32-"):
            builtins.extend(RISCV32_BUILTINS)
        elif target.startswith("riscv64-"):
            builtins.extend(RISCV64_BUILTINS)
        return builtins

    def cflags(self, target: str, out_dir: Path) -> list[str]:
        return ["-Werror", "-Wall", "-std=c11", "-nostdlibinc"]
