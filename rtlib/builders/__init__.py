# SPDX-License-Identifier: MIT
"""Builders turning library descriptors into archives."""

from rtlib.builders.library import LibraryBuilder

__all__ = ["LibraryBuilder"]
