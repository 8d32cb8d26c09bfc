"""
Token-Safe Rewriter - Applies a RenameTable to a SourceBuffer.

For each entry, in table order, one left-to-right scan finds every
occurrence of the original name bounded on both sides by a delimiter, a
bracket or a buffer edge. An occurrence is skipped when:
- it lies in a string literal, a comment, or a preprocessor keyword region
- it is shaped like a numeric literal
- (OCaml) it follows ``Module.`` and ``Module.name`` is a standard
  library reference

Categories are taken from the buffer as it was before the first
replacement. Replacing an identifier by another identifier does not
change the category of any other region, so the answers stay valid while
the buffer is being rewritten.
"""

import re
from typing import Dict, List, Optional, Tuple, Union

from code_anonymizer.core.buffer import SourceBuffer
from code_anonymizer.core.classifier import (
    PROTECTED_CATEGORIES,
    ClassifierAdapter,
    create_classifier,
)
from code_anonymizer.core.mapper import RenameTable
from code_anonymizer.core.reserved import ReservedNameSet
from code_anonymizer.exceptions import MalformedRenameTableError
from code_anonymizer.languages.base import Language, LanguageRules, get_rules
from code_anonymizer.logging_config import get_logger

logger = get_logger("rewriter")

Span = Tuple[int, int]


def boundary_pattern(name: str, rules: LanguageRules) -> "re.Pattern[str]":
    """
    Regex matching name only where it forms a whole token.

    A match must be preceded and followed by a delimiter, a bracket or a
    buffer edge, so ``foo`` never matches inside ``foo2``.
    """
    word_char = "[^" + rules.delimiter_class(include_brackets=True)[1:]
    return re.compile(f"(?<!{word_char}){re.escape(name)}(?!{word_char})")


class TokenSafeRewriter:
    """
    Rewrites identifiers without touching strings, comments or literals.

    Usage:
        rewriter = TokenSafeRewriter(Language.C)
        rewriter.rewrite(buffer, table)
    """

    def __init__(
        self,
        language: Union[str, Language],
        classifier: Optional[ClassifierAdapter] = None,
        reserved: Optional[ReservedNameSet] = None,
    ):
        """
        Initialize the rewriter.

        Args:
            language: Language of the buffers to rewrite
            classifier: Classifier to use; one is created when omitted
            reserved: Reserved set, consulted for OCaml qualified references
        """
        self.rules = get_rules(language)
        self.classifier = classifier or create_classifier(self.rules.language)
        self.reserved = reserved

    def rewrite(self, buffer: SourceBuffer, table: RenameTable) -> SourceBuffer:
        """
        Replace every valid occurrence of every table entry.

        Args:
            buffer: The buffer to mutate
            table: Rename table, applied in its insertion order

        Returns:
            The same buffer, mutated

        Raises:
            MalformedRenameTableError: If an entry maps to an empty name or
                to itself
        """
        self.validate_table(table)
        original = buffer.text
        # (original start, original end, replacement length), sorted by start
        applied: List[Tuple[int, int, int]] = []

        for entry in table:
            spans = self.find_occurrences(original, entry.original_name)
            table.record_occurrences(entry.original_name, len(spans))
            if not spans:
                continue
            buffer.replace_spans(
                self._current_spans(spans, applied),
                entry.anonymized_name,
            )
            replacement_length = len(entry.anonymized_name)
            applied = sorted(
                applied + [(start, end, replacement_length) for start, end in spans]
            )

        logger.debug(
            "Rewrote %d identifiers, %d occurrences",
            len(table), sum(e.occurrence_count for e in table),
        )
        return buffer

    @staticmethod
    def validate_table(table: RenameTable) -> None:
        for entry in table:
            if not entry.anonymized_name:
                raise MalformedRenameTableError(
                    entry.original_name, entry.anonymized_name, "empty replacement"
                )
            if entry.anonymized_name == entry.original_name:
                raise MalformedRenameTableError(
                    entry.original_name, entry.anonymized_name, "replacement equals original"
                )

    def find_occurrences(self, text: str, name: str) -> List[Span]:
        """
        Find the rewritable occurrences of a name.

        Args:
            text: Buffer contents
            name: Identifier to look for

        Returns:
            Sorted [start, end) spans
        """
        if self.rules.is_numeric_literal(name):
            return []
        spans = []
        for match in boundary_pattern(name, self.rules).finditer(text):
            start, end = match.span()
            if self.classifier.classify(text, start) in PROTECTED_CATEGORIES:
                continue
            if self._is_reserved_qualified(text, start, name):
                continue
            spans.append((start, end))
        return spans

    def _is_reserved_qualified(self, text: str, start: int, name: str) -> bool:
        marker = self.rules.qualification_marker
        if not marker or self.reserved is None:
            return False
        if start < len(marker) or not text.startswith(marker, start - len(marker)):
            return False
        module_end = start - len(marker)
        module_start = module_end
        while module_start > 0 and not self.rules.is_delimiter(text[module_start - 1], True):
            module_start -= 1
        module = text[module_start:module_end]
        return bool(module) and self.reserved.is_reserved_qualified(module, name)

    @staticmethod
    def _current_spans(spans: List[Span], applied: List[Tuple[int, int, int]]) -> List[Span]:
        # shift original offsets by the length changes of earlier replacements
        shifted = []
        delta = 0
        index = 0
        for start, end in spans:
            while index < len(applied) and applied[index][0] < start:
                a_start, a_end, a_length = applied[index]
                delta += a_length - (a_end - a_start)
                index += 1
            shifted.append((start + delta, end + delta))
        return shifted


def rewrite_text(
    text: str,
    mapping: Union[RenameTable, Dict[str, str]],
    language: Union[str, Language],
    reserved: Optional[ReservedNameSet] = None,
) -> str:
    """Apply a rename table (or a plain dict) to a string."""
    table = mapping if isinstance(mapping, RenameTable) else RenameTable.from_mapping(mapping, language)
    buffer = SourceBuffer(text)
    TokenSafeRewriter(language, reserved=reserved).rewrite(buffer, table)
    return buffer.text
