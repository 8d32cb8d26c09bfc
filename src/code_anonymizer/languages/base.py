"""
Language Registry - Per-language lexical rules.

Each supported language registers a LanguageRules entry describing:
- Which characters delimit words (the approximate, language-agnostic
  tokenizer only needs this to find candidate runs)
- The shape of a valid identifier
- Numeric-literal shapes (kept as editable regex lists)
- The module-qualification marker, if the language has one
- The replacement-name template
"""

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, FrozenSet, Optional, Tuple, Union

from code_anonymizer.exceptions import UnsupportedLanguageError
from code_anonymizer.languages.c_keywords import C_IMPLEMENTATION_RESERVED, c_reserved_words
from code_anonymizer.languages.ocaml_keywords import ocaml_reserved_words


class Language(str, Enum):
    """Languages with a registered ruleset."""
    C = "c"
    OCAML = "ocaml"

    @classmethod
    def from_name(cls, name: Union[str, "Language"]) -> "Language":
        """
        Look up a language by name (case-insensitive).

        Raises:
            UnsupportedLanguageError: If no language has that name
        """
        if isinstance(name, Language):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            raise UnsupportedLanguageError(str(name)) from None

    @classmethod
    def from_path(cls, path: Path) -> "Language":
        """
        Detect the language of a file from its extension.

        Raises:
            UnsupportedLanguageError: If the extension is not registered
        """
        suffix = Path(path).suffix.lower()
        for language, rules in _RULES_REGISTRY.items():
            if suffix in rules.extensions:
                return language
        raise UnsupportedLanguageError(f"{path} (extension '{suffix}')")


@dataclass(frozen=True)
class LanguageRules:
    """
    Lexical rules for one language.

    Attributes:
        language: The language these rules apply to
        delimiters: Non-word characters (whitespace is always a delimiter)
        brackets: Characters that split word runs into sub-tokens
        identifier_pattern: Full-match regex for a renamable identifier
        numeric_patterns: Full-match regexes for numeric-literal fragments
        qualification_marker: Module path separator, None if not relevant
        extensions: File extensions mapped to this language
        replacement_prefix: Prefix of generated names
        capitalized_prefix: Prefix used for capitalized originals, if the
            language gives capitalization a meaning (OCaml modules)
        rename_unclassified: Whether tokens without category information
            are renamable
        reserved_words: Keywords and builtins that are never renamed
        reserved_pattern: Full-match regex for names reserved by shape
    """
    language: Language
    delimiters: str
    brackets: str
    identifier_pattern: str
    numeric_patterns: Tuple[str, ...]
    qualification_marker: Optional[str]
    extensions: Tuple[str, ...]
    replacement_prefix: str
    capitalized_prefix: Optional[str]
    rename_unclassified: bool
    reserved_words: FrozenSet[str]
    reserved_pattern: Optional[str] = None

    def delimiter_class(self, include_brackets: bool = False) -> str:
        """Regex character class matching one delimiter character."""
        chars = self.delimiters + (self.brackets if include_brackets else "")
        return "[\\s" + "".join(re.escape(c) for c in chars) + "]"

    def is_delimiter(self, char: str, include_brackets: bool = False) -> bool:
        """Check if a single character ends a word run."""
        if char.isspace() or char in self.delimiters:
            return True
        return include_brackets and char in self.brackets

    def is_identifier(self, token: str) -> bool:
        """Check if a token has the shape of an identifier."""
        return _compiled(self.identifier_pattern).fullmatch(token) is not None

    def is_numeric_literal(self, token: str) -> bool:
        """Check if a token is shaped like a numeric literal (or a fragment of one)."""
        return any(
            _compiled(pattern).fullmatch(token) is not None
            for pattern in self.numeric_patterns
        )

    def is_reserved_word(self, name: str) -> bool:
        """Check if a name is reserved by the language itself."""
        if name in self.reserved_words:
            return True
        if self.reserved_pattern is None:
            return False
        return _compiled(self.reserved_pattern).fullmatch(name) is not None

    def is_generated_name(self, name: str) -> bool:
        """Check if a name has the shape of a replacement (``_3``, ``a3``, ``A3``)."""
        prefixes = [self.replacement_prefix]
        if self.capitalized_prefix:
            prefixes.append(self.capitalized_prefix)
        pattern = "(?:" + "|".join(re.escape(p) for p in prefixes) + r")\d+"
        return _compiled(pattern).fullmatch(name) is not None


_PATTERN_CACHE: Dict[str, "re.Pattern[str]"] = {}


def _compiled(pattern: str) -> "re.Pattern[str]":
    compiled = _PATTERN_CACHE.get(pattern)
    if compiled is None:
        compiled = _PATTERN_CACHE[pattern] = re.compile(pattern)
    return compiled


# '.', '+' and '-' are delimiters, so a literal such as 1.5e+10 reaches the
# numeric check as fragments ("1", "5e", "10"); the patterns accept those.
C_NUMERIC_PATTERNS: Tuple[str, ...] = (
    r"0[xX][0-9A-Fa-f]*(?:\.[0-9A-Fa-f]*)?(?:[pP][+-]?\d*)?[uUlLfF]*",
    r"0[bB][01]+[uUlL]*",
    r"\d+(?:\.\d*)?(?:[eE][+-]?\d*)?[uUlLfFdD]*",
    r"\.\d+(?:[eE][+-]?\d*)?[fFlL]?",
)

OCAML_NUMERIC_PATTERNS: Tuple[str, ...] = (
    r"0[xX][0-9A-Fa-f][0-9A-Fa-f_]*(?:\.[0-9A-Fa-f_]*)?(?:[pP][+-]?[\d_]*)?[lLn]?",
    r"0[oO][0-7][0-7_]*[lLn]?",
    r"0[bB][01][01_]*[lLn]?",
    r"\d[\d_]*(?:\.[\d_]*)?(?:[eE][+-]?[\d_]*)?[lLn]?",
)

C_RULES = LanguageRules(
    language=Language.C,
    delimiters="+-*/%=<>!&|^~?:;,.(){}\"'#\\@`",
    brackets="[]",
    identifier_pattern=r"[A-Za-z_][A-Za-z0-9_]*",
    numeric_patterns=C_NUMERIC_PATTERNS,
    qualification_marker=None,
    extensions=(".c", ".h"),
    replacement_prefix="_",
    capitalized_prefix=None,
    rename_unclassified=True,
    reserved_words=c_reserved_words(),
    reserved_pattern=C_IMPLEMENTATION_RESERVED,
)

OCAML_RULES = LanguageRules(
    language=Language.OCAML,
    delimiters="+-*/%=<>!&|^~?:;,.(){}\"'#\\@$`",
    brackets="[]",
    identifier_pattern=r"[A-Za-z_][A-Za-z0-9_]*",
    numeric_patterns=OCAML_NUMERIC_PATTERNS,
    qualification_marker=".",
    extensions=(".ml", ".mli"),
    replacement_prefix="a",
    capitalized_prefix="A",
    rename_unclassified=False,
    reserved_words=ocaml_reserved_words(),
)

# Rules registry
_RULES_REGISTRY: Dict[Language, LanguageRules] = {
    Language.C: C_RULES,
    Language.OCAML: OCAML_RULES,
}


def get_rules(language: Union[str, Language]) -> LanguageRules:
    """
    Get the registered rules for a language.

    Raises:
        UnsupportedLanguageError: If the language has no registered ruleset
    """
    lang = Language.from_name(language)
    if lang not in _RULES_REGISTRY:
        raise UnsupportedLanguageError(lang.value)
    return _RULES_REGISTRY[lang]


def supported_languages() -> list[str]:
    """Names of all registered languages."""
    return [language.value for language in _RULES_REGISTRY]
