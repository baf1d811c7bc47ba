# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Analyzer interfaces and unit DTOs for source extraction."""

from dataclasses import dataclass
from enum import Enum
from typing import Literal, Protocol


UnitKind = Literal["class", "function"]

ANONYMOUS_NAME = "anonymous"


class LanguageHint(str, Enum):
    """Languages accepted by unit parsers."""

    TS = "typescript"
    JS = "javascript"
    TSX = "typescriptreact"
    JSX = "javascriptreact"


@dataclass(frozen=True)
class MethodNode:
    """Represent one method declared by a class unit.

    Attributes:
        name: Method name as written in source.
        start_offset: Start character offset in the document.
        end_offset: End character offset in the document.
        source_text: Exact method source text.
        branch_count: Number of ``if``/``for``/``while`` nodes in the body.
    """

    name: str | None
    start_offset: int
    end_offset: int
    source_text: str
    branch_count: int


@dataclass(frozen=True)
class ClassUnit:
    """Represent one class declaration under analysis.

    Attributes:
        name: Declared class name; ``None`` for anonymous classes.
        source_text: Exact document substring for the declaration.
        start_offset: Start character offset in the document.
        end_offset: End character offset in the document.
        methods: Declared methods in source order.
        kind: Variant tag.
    """

    name: str | None
    source_text: str
    start_offset: int
    end_offset: int
    methods: tuple[MethodNode, ...] = ()
    kind: Literal["class"] = "class"

    @property
    def display_name(self) -> str:
        return self.name or ANONYMOUS_NAME


@dataclass(frozen=True)
class FunctionUnit:
    """Represent one top-level function declaration under analysis.

    Attributes:
        name: Declared function name; ``None`` for anonymous functions.
        source_text: Exact document substring for the declaration.
        start_offset: Start character offset in the document.
        end_offset: End character offset in the document.
        branch_count: Number of ``if``/``for``/``while`` nodes in the body.
        kind: Variant tag.
    """

    name: str | None
    source_text: str
    start_offset: int
    end_offset: int
    branch_count: int = 0
    kind: Literal["function"] = "function"

    @property
    def display_name(self) -> str:
        return self.name or ANONYMOUS_NAME


Unit = ClassUnit | FunctionUnit


@dataclass(frozen=True)
class AnalyzerError:
    """Represent an analyzer error for one document."""

    file_path: str
    message: str


class ParseError(RuntimeError):
    """Represent a failure to build a syntax tree for a document."""


class UnitParser(Protocol):
    """Language-agnostic unit extraction contract."""

    def parse(self, text: str, language: LanguageHint) -> list[Unit]:
        """Parse document text and return its units in document order.

        Implementations never raise; a document that cannot be parsed
        yields an empty list.
        """

    def parse_with_errors(
        self, text: str, language: LanguageHint, file_path: str = "<document>"
    ) -> tuple[list[Unit], list[AnalyzerError]]:
        """Parse document text and return units with recoverable errors."""
