# SPDX-License-Identifier: MIT
"""Build configuration and tool discovery."""

from rtlib.configure.config import BuildConfig, Configure, ProgramInfo

__all__ = ["BuildConfig", "Configure", "ProgramInfo"]
