# SPDX-License-Identifier: MIT
"""Tool protocols and the external process runner."""
