# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit parser package for the clean code assistant."""

from cca.analyzers.typescript import TreeSitterParser

__all__ = ["TreeSitterParser"]
