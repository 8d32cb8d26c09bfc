"""
Identifier Extractor - Finds the renamable identifiers of a buffer.

C: every word run whose category at its start is an identifier category
or has no classification at all (recall is preferred over precision).
OCaml: only runs classified as identifiers, plus record field names of
``type t = { ... }`` declarations and ``module M = ...`` names.

In both languages a run is rejected when it looks like a numeric literal,
is not identifier shaped, or is reserved. Runs already shaped like a
replacement (``_3``, ``a3``) are rejected as well, so anonymizing an
anonymized buffer changes nothing.
"""

import re
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Union

from code_anonymizer.core.buffer import SourceBuffer
from code_anonymizer.core.classifier import (
    IDENTIFIER_CATEGORIES,
    ClassifierAdapter,
    LexicalCategory,
    create_classifier,
)
from code_anonymizer.core.reserved import ReservedNameSet
from code_anonymizer.core.tokenizer import iter_tokens
from code_anonymizer.core.utils import LineIndex
from code_anonymizer.languages.base import Language, LanguageRules, get_rules
from code_anonymizer.logging_config import get_logger
from code_anonymizer.warnings_log import WarningsLog

logger = get_logger("extractor")

EMPTY_SET_WARNING = "No renamable identifiers found; buffer left unchanged"

# type [params] NAME = [private] { fields }   (also "and NAME = { ... }")
OCAML_RECORD_TYPE = re.compile(
    r"\b(?:type|and)\s+(?:nonrec\s+)?"
    r"(?:'[A-Za-z_][\w']*\s+|\([^)]*\)\s*)?"
    r"([a-z_][\w']*)\s*=\s*(?:private\s+)?\{([^{}]*)\}"
)

OCAML_RECORD_FIELD = re.compile(r"(?:^|;)\s*(?:mutable\s+)?([a-z_][\w']*)\s*:")

OCAML_MODULE_DECL = re.compile(r"\bmodule\s+(?:type\s+|rec\s+)?([A-Z][\w']*)")


@dataclass(frozen=True)
class ExtractedIdentifier:
    """
    First occurrence of a renamable identifier.

    Attributes:
        name: The identifier text
        category: Category reported at the first occurrence
        line_number: Line of the first occurrence
        offset: Buffer offset of the first occurrence
        source: How it was found (token, record_field, module)
    """
    name: str
    category: LexicalCategory
    line_number: int = 0
    offset: int = 0
    source: str = "token"


class IdentifierSet:
    """Insertion-ordered, deduplicated set of extracted identifiers."""

    def __init__(self) -> None:
        self._entries: Dict[str, ExtractedIdentifier] = {}

    def add(self, identifier: ExtractedIdentifier) -> bool:
        """Add an identifier; returns False if the name was already present."""
        if identifier.name in self._entries:
            return False
        self._entries[identifier.name] = identifier
        return True

    def get(self, name: str) -> Optional[ExtractedIdentifier]:
        return self._entries.get(name)

    def names(self) -> List[str]:
        return list(self._entries)

    def entries(self) -> List[ExtractedIdentifier]:
        return list(self._entries.values())

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"IdentifierSet({self.names()!r})"


class IdentifierExtractor:
    """
    Extracts the IdentifierSet of one buffer.

    Usage:
        extractor = IdentifierExtractor()
        identifiers = extractor.extract(text, Language.C, reserved)
    """

    def __init__(
        self,
        classifier: Optional[ClassifierAdapter] = None,
        warnings: Optional[WarningsLog] = None,
    ):
        self.classifier = classifier
        self.warnings = warnings if warnings is not None else WarningsLog()

    def extract(
        self,
        buffer: Union[str, SourceBuffer],
        language: Union[str, Language],
        reserved: ReservedNameSet,
    ) -> IdentifierSet:
        """
        Collect the renamable identifiers of a buffer.

        Args:
            buffer: The source text or buffer
            language: Language of the buffer
            reserved: Names that must never be renamed

        Returns:
            IdentifierSet in first-occurrence order (empty set records a warning)

        Raises:
            UnsupportedLanguageError: If the language is not registered
        """
        rules = get_rules(language)
        text = buffer.text if isinstance(buffer, SourceBuffer) else buffer
        classifier = self.classifier or create_classifier(rules.language)
        lines = LineIndex(text)
        identifiers = IdentifierSet()

        for token in iter_tokens(text, rules):
            category = classifier.classify(text, token.start)
            if not self._category_accepted(category, rules):
                continue
            if self._rejected(token.value, rules, reserved):
                continue
            identifiers.add(ExtractedIdentifier(
                name=token.value,
                category=category,
                line_number=lines.line_of(token.start),
                offset=token.start,
            ))

        if rules.language is Language.OCAML:
            for identifier in self._ocaml_declarations(text, classifier, lines):
                if not self._rejected(identifier.name, rules, reserved):
                    identifiers.add(identifier)

        if not identifiers:
            self.warnings.add(EMPTY_SET_WARNING)
        else:
            logger.debug("Extracted %d identifiers", len(identifiers))
        return identifiers

    @staticmethod
    def _category_accepted(category: LexicalCategory, rules: LanguageRules) -> bool:
        if category in IDENTIFIER_CATEGORIES:
            return True
        return category is LexicalCategory.NONE and rules.rename_unclassified

    @staticmethod
    def _rejected(name: str, rules: LanguageRules, reserved: ReservedNameSet) -> bool:
        return (
            rules.is_numeric_literal(name)
            or not rules.is_identifier(name)
            or rules.is_reserved_word(name)
            or rules.is_generated_name(name)
            or name in reserved
        )

    @staticmethod
    def _ocaml_declarations(
        text: str, classifier: ClassifierAdapter, lines: LineIndex
    ) -> Iterator[ExtractedIdentifier]:
        for match in OCAML_RECORD_TYPE.finditer(text):
            if classifier.classify(text, match.start(1)) is not LexicalCategory.IDENTIFIER_TYPE:
                continue
            body_start = match.start(2)
            for field in OCAML_RECORD_FIELD.finditer(match.group(2)):
                offset = body_start + field.start(1)
                yield ExtractedIdentifier(
                    name=field.group(1),
                    category=LexicalCategory.IDENTIFIER_VARIABLE,
                    line_number=lines.line_of(offset),
                    offset=offset,
                    source="record_field",
                )

        for match in OCAML_MODULE_DECL.finditer(text):
            if classifier.classify(text, match.start(1)) is not LexicalCategory.IDENTIFIER_TYPE:
                continue
            yield ExtractedIdentifier(
                name=match.group(1),
                category=LexicalCategory.IDENTIFIER_TYPE,
                line_number=lines.line_of(match.start(1)),
                offset=match.start(1),
                source="module",
            )
