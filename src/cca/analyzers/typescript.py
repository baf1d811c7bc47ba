# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""TypeScript and JavaScript unit parser built on tree-sitter."""

import logging

import tree_sitter
import tree_sitter_javascript
import tree_sitter_typescript

from cca.analyzer import (
    AnalyzerError,
    ClassUnit,
    FunctionUnit,
    LanguageHint,
    MethodNode,
    ParseError,
    Unit,
)

logger = logging.getLogger(__name__)

CLASS_NODE_TYPES: frozenset[str] = frozenset(
    {"class_declaration", "abstract_class_declaration"}
)
FUNCTION_NODE_TYPES: frozenset[str] = frozenset(
    {"function_declaration", "generator_function_declaration"}
)
DEFAULT_EXPORT_CLASS_TYPES: frozenset[str] = frozenset({"class"})
DEFAULT_EXPORT_FUNCTION_TYPES: frozenset[str] = frozenset(
    {"function", "function_expression", "generator_function"}
)
AMBIENT_FUNCTION_TYPES: frozenset[str] = frozenset({"function_signature"})
BRANCH_NODE_TYPES: frozenset[str] = frozenset(
    {"if_statement", "for_statement", "while_statement"}
)
ACCESSOR_TOKENS: frozenset[str] = frozenset({"get", "set"})
CONSTRUCTOR_NAME = "constructor"


class _OffsetMap:
    """Translate UTF-8 byte offsets reported by tree-sitter to text offsets."""

    def __init__(self, text: str, data: bytes) -> None:
        self._char_at_byte: list[int] | None = None
        if len(text) == len(data):
            return
        char_at_byte: list[int] = []
        for index, char in enumerate(text):
            char_at_byte.extend([index] * len(char.encode("utf-8")))
        char_at_byte.append(len(text))
        self._char_at_byte = char_at_byte

    def to_char(self, byte_offset: int) -> int:
        if self._char_at_byte is None:
            return byte_offset
        return self._char_at_byte[byte_offset]


class TreeSitterParser:
    """Extract top-level classes and functions from TS/JS documents."""

    def __init__(self) -> None:
        """Initialize parser with an empty grammar cache."""
        self._languages: dict[LanguageHint, tree_sitter.Language] = {}

    def parse(self, text: str, language: LanguageHint) -> list[Unit]:
        """Parse document text and return units in document order.

        Args:
            text: Document source text.
            language: Language hint selecting the grammar.

        Returns:
            Extracted units; empty when the document cannot be parsed.
        """
        units, _ = self.parse_with_errors(text=text, language=language)
        return units

    def parse_with_errors(
        self, text: str, language: LanguageHint, file_path: str = "<document>"
    ) -> tuple[list[Unit], list[AnalyzerError]]:
        """Parse document text and report recoverable failures.

        Args:
            text: Document source text.
            language: Language hint selecting the grammar.
            file_path: Document label used in error records.

        Returns:
            A tuple of extracted units and analyzer errors.
        """
        try:
            data = text.encode("utf-8")
            tree = tree_sitter.Parser(self._language(language)).parse(data)
        except (ParseError, ValueError) as exc:
            logger.warning(
                f"Skipping document due to parse failure (file_path={file_path} "
                f"language={language} error={exc})"
            )
            return [], [AnalyzerError(file_path=file_path, message=str(exc))]

        root = tree.root_node
        if root.has_error:
            logger.debug(
                f"Syntax errors recovered while parsing (file_path={file_path})"
            )
        offsets = _OffsetMap(text, data)
        units: list[Unit] = []
        for node in root.named_children:
            unit = self._extract_unit(node=node, text=text, offsets=offsets)
            if unit is not None:
                units.append(unit)
        return units, []

    def _language(self, hint: LanguageHint) -> tree_sitter.Language:
        """Load and cache the grammar for a language hint.

        Raises:
            ParseError: If the hint is unknown or the grammar cannot load.
        """
        if hint in self._languages:
            return self._languages[hint]
        try:
            hint = LanguageHint(hint)
            if hint is LanguageHint.TS:
                capsule = tree_sitter_typescript.language_typescript()
            elif hint is LanguageHint.TSX:
                capsule = tree_sitter_typescript.language_tsx()
            else:
                capsule = tree_sitter_javascript.language()
            language = tree_sitter.Language(capsule)
        except (TypeError, ValueError, OSError) as exc:
            raise ParseError(f"Grammar unavailable for {hint}: {exc}") from exc
        self._languages[hint] = language
        return language

    def _extract_unit(
        self, node: tree_sitter.Node, text: str, offsets: _OffsetMap
    ) -> Unit | None:
        declaration: tree_sitter.Node | None = node
        if declaration.type == "export_statement":
            declaration = self._exported_declaration(declaration)
        ambient = False
        if declaration is not None and declaration.type == "ambient_declaration":
            ambient = True
            declaration = self._ambient_declaration(declaration)
        if declaration is None:
            return None
        start = offsets.to_char(node.start_byte)
        end = offsets.to_char(node.end_byte)
        name = self._field_text(declaration, "name", text, offsets)

        if declaration.type in CLASS_NODE_TYPES | DEFAULT_EXPORT_CLASS_TYPES:
            body = declaration.child_by_field_name("body")
            methods = (
                self._extract_methods(body, text, offsets, ambient)
                if body is not None
                else ()
            )
            return ClassUnit(
                name=name,
                source_text=text[start:end],
                start_offset=start,
                end_offset=end,
                methods=methods,
            )
        function_types = FUNCTION_NODE_TYPES | DEFAULT_EXPORT_FUNCTION_TYPES
        if ambient:
            function_types = function_types | AMBIENT_FUNCTION_TYPES
        if declaration.type in function_types:
            return FunctionUnit(
                name=name,
                source_text=text[start:end],
                start_offset=start,
                end_offset=end,
                branch_count=_count_branches(declaration.child_by_field_name("body")),
            )
        return None

    def _exported_declaration(
        self, node: tree_sitter.Node
    ) -> tree_sitter.Node | None:
        declaration = node.child_by_field_name("declaration")
        if declaration is not None:
            return declaration
        is_default = any(child.type == "default" for child in node.children)
        value = node.child_by_field_name("value")
        if is_default and value is not None:
            return value
        return None

    def _ambient_declaration(
        self, node: tree_sitter.Node
    ) -> tree_sitter.Node | None:
        for child in node.named_children:
            if child.type in CLASS_NODE_TYPES | AMBIENT_FUNCTION_TYPES:
                return child
        return None

    def _extract_methods(
        self,
        body: tree_sitter.Node,
        text: str,
        offsets: _OffsetMap,
        ambient: bool = False,
    ) -> tuple[MethodNode, ...]:
        methods: list[MethodNode] = []
        for member in body.named_children:
            if member.type == "method_definition" or (
                ambient and member.type == "method_signature"
            ):
                if any(child.type in ACCESSOR_TOKENS for child in member.children):
                    continue
                name = self._field_text(member, "name", text, offsets)
                if name == CONSTRUCTOR_NAME:
                    continue
                branch_count = _count_branches(member.child_by_field_name("body"))
            elif member.type == "abstract_method_signature":
                name = self._field_text(member, "name", text, offsets)
                branch_count = 0
            else:
                continue
            start = offsets.to_char(member.start_byte)
            end = offsets.to_char(member.end_byte)
            methods.append(
                MethodNode(
                    name=name,
                    start_offset=start,
                    end_offset=end,
                    source_text=text[start:end],
                    branch_count=branch_count,
                )
            )
        return tuple(methods)

    def _field_text(
        self, node: tree_sitter.Node, field: str, text: str, offsets: _OffsetMap
    ) -> str | None:
        child = node.child_by_field_name(field)
        if child is None:
            return None
        return text[offsets.to_char(child.start_byte) : offsets.to_char(child.end_byte)]


def _count_branches(body: tree_sitter.Node | None) -> int:
    """Count ``if``/``for``/``while`` descendants of a body node."""
    if body is None:
        return 0
    count = 0
    stack = list(body.children)
    while stack:
        current = stack.pop()
        if current.type in BRANCH_NODE_TYPES:
            count += 1
        stack.extend(current.children)
    return count
