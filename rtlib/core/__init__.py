# SPDX-License-Identifier: MIT
"""Core build machinery: job graphs, scheduling, caching and descriptors."""
