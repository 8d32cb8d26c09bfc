"""
Token Classifier - Reports the lexical category at a buffer offset.

This module provides the classification capability the engine relies on
to tell a renamable identifier apart from a string fragment, a comment,
a keyword or a number:
- COMMENT / STRING_LITERAL / NUMERIC_LITERAL: literal regions
- KEYWORD: language keywords and preprocessor directive names
- IDENTIFIER_VARIABLE / IDENTIFIER_FUNCTION / IDENTIFIER_TYPE: names at
  their binding or declaration sites
- NONE: no information for this offset

The engine only depends on the ClassifierAdapter interface. The regex
classifiers below lex the whole buffer once per distinct content and
answer point queries by bisection over the resulting spans.
"""

import bisect
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, FrozenSet, List, NamedTuple, Optional, Set, Union

from code_anonymizer.languages.base import Language
from code_anonymizer.languages.c_keywords import (
    C_KEYWORDS,
    C_TYPE_KEYWORDS,
    PREPROCESSOR_OPERATORS,
)
from code_anonymizer.languages.ocaml_keywords import OCAML_KEYWORDS


class LexicalCategory(Enum):
    """Lexical categories a classifier can report."""
    COMMENT = auto()
    STRING_LITERAL = auto()
    IDENTIFIER_VARIABLE = auto()
    IDENTIFIER_FUNCTION = auto()
    IDENTIFIER_TYPE = auto()
    NUMERIC_LITERAL = auto()
    KEYWORD = auto()
    NONE = auto()


IDENTIFIER_CATEGORIES: FrozenSet[LexicalCategory] = frozenset({
    LexicalCategory.IDENTIFIER_VARIABLE,
    LexicalCategory.IDENTIFIER_FUNCTION,
    LexicalCategory.IDENTIFIER_TYPE,
})

# Regions whose text must never be rewritten
PROTECTED_CATEGORIES: FrozenSet[LexicalCategory] = frozenset({
    LexicalCategory.COMMENT,
    LexicalCategory.STRING_LITERAL,
    LexicalCategory.KEYWORD,
})


@dataclass(frozen=True)
class Span:
    """A classified region [start, end) of the buffer."""
    start: int
    end: int
    category: LexicalCategory


class ClassifierAdapter(ABC):
    """Answers "which lexical category does this offset belong to"."""

    @abstractmethod
    def classify(self, text: str, offset: int) -> LexicalCategory:
        """
        Classify the character at an offset.

        Args:
            text: The current buffer contents
            offset: Character offset into text

        Returns:
            The category, LexicalCategory.NONE when there is no information
        """


class _Lexeme(NamedTuple):
    kind: str
    value: str
    start: int
    end: int


class RegexClassifier(ClassifierAdapter):
    """
    Classifier backed by a regex lexer.

    The last lexed buffer is cached, so repeated queries against the same
    text cost one bisection each.
    """

    def __init__(self) -> None:
        self._text: Optional[str] = None
        self._spans: List[Span] = []
        self._starts: List[int] = []

    def spans(self, text: str) -> List[Span]:
        """Get the sorted, non-overlapping spans for a buffer."""
        if self._text is None or (text is not self._text and text != self._text):
            self._spans = self._classify_spans(text)
            self._starts = [span.start for span in self._spans]
            self._text = text
        return self._spans

    def classify(self, text: str, offset: int) -> LexicalCategory:
        spans = self.spans(text)
        index = bisect.bisect_right(self._starts, offset) - 1
        if index >= 0:
            span = spans[index]
            if span.start <= offset < span.end:
                return span.category
        return LexicalCategory.NONE

    def _classify_spans(self, text: str) -> List[Span]:
        lexemes = self._lex(text)
        significant = [lx for lx in lexemes if lx.kind not in ("space", "comment")]
        categories = self._categorize(significant, text)

        spans = []
        index_of = {id(lx): i for i, lx in enumerate(significant)}
        for lx in lexemes:
            category = _LITERAL_KINDS.get(lx.kind)
            if category is None and lx.kind == "word":
                category = categories.get(index_of[id(lx)])
            if category is not None and category is not LexicalCategory.NONE:
                spans.append(Span(lx.start, lx.end, category))
        return spans

    @abstractmethod
    def _lex(self, text: str) -> List[_Lexeme]:
        """Split the buffer into lexemes covering every character."""

    @abstractmethod
    def _categorize(
        self, lexemes: List[_Lexeme], text: str
    ) -> Dict[int, LexicalCategory]:
        """Assign categories to word lexemes, keyed by index into lexemes."""


_LITERAL_KINDS: Dict[str, LexicalCategory] = {
    "comment": LexicalCategory.COMMENT,
    "string": LexicalCategory.STRING_LITERAL,
    "char": LexicalCategory.STRING_LITERAL,
    "header": LexicalCategory.STRING_LITERAL,
    "number": LexicalCategory.NUMERIC_LITERAL,
}


def _is_punct(lexeme: Optional[_Lexeme], value: str) -> bool:
    return lexeme is not None and lexeme.kind in ("punct", "op") and lexeme.value == value


def _is_word(lexeme: Optional[_Lexeme], value: Optional[str] = None) -> bool:
    if lexeme is None or lexeme.kind != "word":
        return False
    return value is None or lexeme.value == value


# =============================================================================
# C
# =============================================================================

_C_TOKEN = re.compile(
    r"""
      (?P<comment>/\*.*?(?:\*/|\Z)|//(?:[^\n\\]|\\.)*)
    | (?P<string>(?:u8|[uUL])?"(?:[^"\\\n]|\\.)*(?:"|$))
    | (?P<char>(?:u8|[uUL])?'(?:[^'\\\n]|\\.)*(?:'|$))
    | (?P<number>\.?\d(?:[eEpP][+-]|[\w.'])*)
    | (?P<word>[A-Za-z_$][\w$]*)
    | (?P<space>\s+)
    | (?P<op>[-+*/%=<>!&|^~?:.]+)
    | (?P<punct>.)
    """,
    re.VERBOSE | re.DOTALL | re.MULTILINE,
)

_C_HEADER_NAME = re.compile(r"[ \t]*(<[^>\n]*>)")

# Directives whose remaining words are not code
_C_TEXT_DIRECTIVES = frozenset({
    "include", "include_next", "import", "pragma", "error", "warning",
    "line", "embed",
})

_C_TAG_KEYWORDS = frozenset({"struct", "union", "enum"})
_C_QUALIFIERS = frozenset({"const", "volatile", "restrict", "__restrict"})


class CClassifier(RegexClassifier):
    """Heuristic classifier for C sources."""

    def _lex(self, text: str) -> List[_Lexeme]:
        lexemes = []
        pos = 0
        directive = None
        while pos < len(text):
            match = _C_TOKEN.match(text, pos)
            kind = match.lastgroup
            lexeme = _Lexeme(kind, match.group(), pos, match.end())
            lexemes.append(lexeme)
            pos = match.end()

            if kind == "word" and directive is None and self._starts_directive(lexemes):
                directive = lexeme.value
                if directive in ("include", "include_next", "import"):
                    header = _C_HEADER_NAME.match(text, pos)
                    if header:
                        lexemes.append(
                            _Lexeme("header", header.group(1), header.start(1), header.end(1))
                        )
                        pos = header.end()
            elif kind in ("space", "comment") and "\n" in lexeme.value:
                if not lexeme.value.rstrip(" \t\n").endswith("\\"):
                    directive = None
        return lexemes

    @staticmethod
    def _starts_directive(lexemes: List[_Lexeme]) -> bool:
        # word preceded by '#' which is the first token on its line
        i = len(lexemes) - 2
        while i >= 0 and lexemes[i].kind == "space" and "\n" not in lexemes[i].value:
            i -= 1
        if i < 0 or not _is_punct(lexemes[i], "#"):
            return False
        i -= 1
        while i >= 0 and lexemes[i].kind == "space" and "\n" not in lexemes[i].value:
            i -= 1
        return i < 0 or (lexemes[i].kind == "space" and "\n" in lexemes[i].value)

    def _categorize(
        self, lexemes: List[_Lexeme], text: str
    ) -> Dict[int, LexicalCategory]:
        categories: Dict[int, LexicalCategory] = {}
        brace_depth = 0
        paren_depth = 0
        typedef_depth: Optional[int] = None
        typedef_last: Optional[int] = None
        typedef_pointer: Optional[int] = None
        type_names: Set[str] = set()
        text_directive_end = -1

        for i, lx in enumerate(lexemes):
            prev = lexemes[i - 1] if i > 0 else None
            nxt = lexemes[i + 1] if i + 1 < len(lexemes) else None

            if lx.kind in ("punct", "op"):
                if lx.value == "{":
                    brace_depth += 1
                elif lx.value == "}":
                    brace_depth -= 1
                elif lx.value == "(":
                    paren_depth += 1
                elif lx.value == ")":
                    paren_depth = max(paren_depth - 1, 0)
                elif (
                    lx.value in (",", ";")
                    and typedef_depth is not None
                    and brace_depth == typedef_depth
                    and paren_depth == 0
                ):
                    chosen = typedef_pointer if typedef_pointer is not None else typedef_last
                    if chosen is not None:
                        categories[chosen] = LexicalCategory.IDENTIFIER_TYPE
                        type_names.add(lexemes[chosen].value)
                    typedef_last = typedef_pointer = None
                    if lx.value == ";":
                        typedef_depth = None
                continue

            if lx.kind != "word":
                continue
            word = lx.value

            if lx.start < text_directive_end:
                categories[i] = LexicalCategory.KEYWORD
                continue

            if _is_punct(prev, "#") and self._line_prefix_blank(text, prev.start):
                categories[i] = LexicalCategory.KEYWORD
                if word in _C_TEXT_DIRECTIVES:
                    line_end = text.find("\n", lx.end)
                    text_directive_end = len(text) if line_end < 0 else line_end
                continue

            if word in C_KEYWORDS or word in PREPROCESSOR_OPERATORS:
                categories[i] = LexicalCategory.KEYWORD
                if word == "typedef" and typedef_depth is None:
                    typedef_depth = brace_depth
                continue

            if prev is not None and prev.value in _C_TAG_KEYWORDS:
                category = LexicalCategory.IDENTIFIER_TYPE
            elif word in type_names:
                category = LexicalCategory.IDENTIFIER_TYPE
            elif _is_word(prev, "define") and categories.get(i - 1) is LexicalCategory.KEYWORD:
                # function-like macro only when '(' follows without whitespace
                if text.startswith("(", lx.end):
                    category = LexicalCategory.IDENTIFIER_FUNCTION
                else:
                    category = LexicalCategory.IDENTIFIER_VARIABLE
            elif _is_punct(nxt, "("):
                category = LexicalCategory.IDENTIFIER_FUNCTION
            elif self._follows_type(lexemes, i, categories):
                category = LexicalCategory.IDENTIFIER_VARIABLE
            else:
                category = LexicalCategory.NONE
            categories[i] = category

            if typedef_depth is not None and brace_depth == typedef_depth:
                if paren_depth == 0:
                    typedef_last = i
                elif (
                    prev is not None
                    and prev.kind == "op"
                    and set(prev.value) == {"*"}
                    and i >= 2
                    and _is_punct(lexemes[i - 2], "(")
                ):
                    typedef_pointer = i

        return categories

    @staticmethod
    def _line_prefix_blank(text: str, offset: int) -> bool:
        line_start = text.rfind("\n", 0, offset) + 1
        return text[line_start:offset].strip() == ""

    @staticmethod
    def _follows_type(
        lexemes: List[_Lexeme], index: int, categories: Dict[int, LexicalCategory]
    ) -> bool:
        j = index - 1
        while j >= 0:
            lx = lexemes[j]
            if lx.kind == "op" and set(lx.value) == {"*"}:
                j -= 1
            elif lx.kind == "word" and lx.value in _C_QUALIFIERS:
                j -= 1
            else:
                break
        if j < 0 or lexemes[j].kind != "word":
            return False
        word = lexemes[j].value
        return (
            word in C_TYPE_KEYWORDS
            or categories.get(j) is LexicalCategory.IDENTIFIER_TYPE
        )


# =============================================================================
# OCaml
# =============================================================================

_OCAML_TOKEN = re.compile(
    r"""
      (?P<string>"(?:[^"\\]|\\.)*(?:"|\Z))
    | (?P<qstring>\{(?P<qid>[a-z_]*)\|.*?(?:\|(?P=qid)\}|\Z))
    | (?P<char>'(?:[^'\\\n]|\\(?:[\\'"ntbr\ ]|\d{3}|x[0-9A-Fa-f]{2}|o[0-3][0-7]{2}))')
    | (?P<tyvar>'[A-Za-z_][\w']*)
    | (?P<number>\d(?:[eEpP][+-]|[\w.])*)
    | (?P<word>[A-Za-z_][\w']*)
    | (?P<space>\s+)
    | (?P<op>[-+*/%=<>!&|^~?:.@$\#]+)
    | (?P<punct>.)
    """,
    re.VERBOSE | re.DOTALL,
)

_OCAML_STRING = re.compile(r'"(?:[^"\\]|\\.)*(?:"|\Z)', re.DOTALL)

# Keywords that may legitimately appear inside a match-arm pattern
_OCAML_PATTERN_KEYWORDS = frozenset({"as", "exception", "lazy", "module", "_", "true", "false"})

# Keywords that end a let-binding head or a fun parameter list
_OCAML_HEAD_STOPS = frozenset({"in", "let", "type", "module", "val", "external", "open", "match", "if"})

_MAX_PATTERN_LEXEMES = 120


def _is_lower_name(word: str) -> bool:
    return (
        (word[0].islower() or word[0] == "_")
        and word != "_"
        and word not in OCAML_KEYWORDS
    )


class OCamlClassifier(RegexClassifier):
    """Heuristic classifier for OCaml sources."""

    def _lex(self, text: str) -> List[_Lexeme]:
        lexemes = []
        pos = 0
        while pos < len(text):
            if text.startswith("(*", pos):
                end = self._comment_end(text, pos)
                lexemes.append(_Lexeme("comment", text[pos:end], pos, end))
                pos = end
                continue
            match = _OCAML_TOKEN.match(text, pos)
            kind = match.lastgroup
            if kind in ("qstring", "qid"):
                kind = "string"
            lexemes.append(_Lexeme(kind, match.group(), pos, match.end()))
            pos = match.end()
        return lexemes

    @staticmethod
    def _comment_end(text: str, start: int) -> int:
        depth = 0
        pos = start
        while pos < len(text):
            if text.startswith("(*", pos):
                depth += 1
                pos += 2
            elif text.startswith("*)", pos):
                depth -= 1
                pos += 2
                if depth == 0:
                    return pos
            elif text[pos] == '"':
                pos = _OCAML_STRING.match(text, pos).end()
            else:
                pos += 1
        return len(text)

    def _categorize(
        self, lexemes: List[_Lexeme], text: str
    ) -> Dict[int, LexicalCategory]:
        categories: Dict[int, LexicalCategory] = {}
        last_binder: Optional[str] = None

        for i, lx in enumerate(lexemes):
            prev = lexemes[i - 1] if i > 0 else None
            if _is_punct(lx, "|"):
                self._classify_pattern(lexemes, i + 1, categories)
                continue
            if lx.kind != "word" or lx.value not in OCAML_KEYWORDS:
                continue

            word = lx.value
            categories[i] = LexicalCategory.KEYWORD
            binder = word
            if word == "and":
                binder = last_binder
            elif word in ("let", "type", "module", "class"):
                last_binder = word

            if binder == "let":
                self._classify_let(lexemes, i + 1, categories)
            elif binder == "type" and not _is_word(prev, "module") and not _is_word(prev, "with"):
                self._classify_type_name(lexemes, i + 1, categories)
            elif binder == "module":
                self._classify_module_name(lexemes, i + 1, categories)
            elif word == "fun":
                self._classify_fun(lexemes, i + 1, categories)
            elif word in ("function", "with"):
                self._classify_pattern(lexemes, i + 1, categories)
            elif word in ("external", "val"):
                nxt = lexemes[i + 1] if i + 1 < len(lexemes) else None
                if _is_word(nxt) and _is_lower_name(nxt.value):
                    categories[i + 1] = LexicalCategory.IDENTIFIER_FUNCTION

        return categories

    def _classify_let(
        self, lexemes: List[_Lexeme], start: int, categories: Dict[int, LexicalCategory]
    ) -> None:
        j = start
        while j < len(lexemes) and _is_word(lexemes[j]) and lexemes[j].value in ("rec", "nonrec"):
            j += 1
        if j >= len(lexemes):
            return
        head = lexemes[j]
        if _is_word(head) and head.value in ("open", "exception", "module"):
            return

        params_start = j
        if _is_word(head) and _is_lower_name(head.value):
            nxt = lexemes[j + 1] if j + 1 < len(lexemes) else None
            if nxt is None or _is_punct(nxt, "=") or _is_punct(nxt, ":"):
                categories[j] = LexicalCategory.IDENTIFIER_VARIABLE
            else:
                categories[j] = LexicalCategory.IDENTIFIER_FUNCTION
            params_start = j + 1

        depth = 0
        for k in range(params_start, min(len(lexemes), params_start + _MAX_PATTERN_LEXEMES)):
            lx = lexemes[k]
            if lx.value in ("(", "[", "{"):
                depth += 1
            elif lx.value in (")", "]", "}"):
                depth -= 1
                if depth < 0:
                    return
            elif depth == 0 and lx.kind in ("op", "punct"):
                if lx.value == "=" or lx.value in (";", ";;"):
                    return
                if lx.value == ":" and not self._is_label(lexemes, k):
                    return
            elif _is_word(lx) and lx.value in _OCAML_HEAD_STOPS:
                return
            if _is_word(lx) and _is_lower_name(lx.value) and not self._is_annotation(lexemes, k):
                categories.setdefault(k, LexicalCategory.IDENTIFIER_VARIABLE)

    def _classify_fun(
        self, lexemes: List[_Lexeme], start: int, categories: Dict[int, LexicalCategory]
    ) -> None:
        found = []
        depth = 0
        for k in range(start, min(len(lexemes), start + _MAX_PATTERN_LEXEMES)):
            lx = lexemes[k]
            if lx.value in ("(", "[", "{"):
                depth += 1
            elif lx.value in (")", "]", "}"):
                depth -= 1
                if depth < 0:
                    return
            elif depth == 0 and lx.value == "->":
                break
            elif _is_word(lx) and lx.value in _OCAML_HEAD_STOPS:
                return
            if _is_word(lx) and _is_lower_name(lx.value) and not self._is_annotation(lexemes, k):
                found.append(k)
        else:
            return
        for k in found:
            categories.setdefault(k, LexicalCategory.IDENTIFIER_VARIABLE)

    def _classify_pattern(
        self, lexemes: List[_Lexeme], start: int, categories: Dict[int, LexicalCategory]
    ) -> None:
        found = []
        depth = 0
        braces = 0
        for k in range(start, min(len(lexemes), start + _MAX_PATTERN_LEXEMES)):
            lx = lexemes[k]
            if lx.value in ("(", "["):
                depth += 1
            elif lx.value == "{":
                depth += 1
                braces += 1
            elif lx.value in (")", "]", "}"):
                depth -= 1
                if lx.value == "}":
                    braces -= 1
                if depth < 0:
                    return
            elif depth == 0 and lx.value == "->":
                break
            elif lx.kind in ("op", "punct"):
                if lx.value == "=" and braces <= 0:
                    return
                if lx.value in (";", ";;", "||"):
                    return
            elif _is_word(lx, "when"):
                break
            elif _is_word(lx) and lx.value in OCAML_KEYWORDS and lx.value not in _OCAML_PATTERN_KEYWORDS:
                return
            if _is_word(lx) and _is_lower_name(lx.value):
                # record pattern labels ({ label = var }) are fields, not bindings
                nxt = lexemes[k + 1] if k + 1 < len(lexemes) else None
                if braces > 0 and _is_punct(nxt, "="):
                    continue
                found.append(k)
        else:
            return
        for k in found:
            categories.setdefault(k, LexicalCategory.IDENTIFIER_VARIABLE)

    @staticmethod
    def _classify_type_name(
        lexemes: List[_Lexeme], start: int, categories: Dict[int, LexicalCategory]
    ) -> None:
        j = start
        if j < len(lexemes) and _is_word(lexemes[j], "nonrec"):
            j += 1
        if j < len(lexemes) and lexemes[j].kind == "tyvar":
            j += 1
        elif j < len(lexemes) and _is_punct(lexemes[j], "("):
            while j < len(lexemes) and not _is_punct(lexemes[j], ")"):
                j += 1
            j += 1
        if j < len(lexemes) and _is_word(lexemes[j]) and _is_lower_name(lexemes[j].value):
            categories[j] = LexicalCategory.IDENTIFIER_TYPE

    @staticmethod
    def _classify_module_name(
        lexemes: List[_Lexeme], start: int, categories: Dict[int, LexicalCategory]
    ) -> None:
        j = start
        while j < len(lexemes) and _is_word(lexemes[j]) and lexemes[j].value in ("type", "rec"):
            j += 1
        if j < len(lexemes) and _is_word(lexemes[j]) and lexemes[j].value[0].isupper():
            categories[j] = LexicalCategory.IDENTIFIER_TYPE

    @staticmethod
    def _is_label(lexemes: List[_Lexeme], colon_index: int) -> bool:
        # ~label: and ?label: introduce a pattern, not a return type
        return colon_index >= 2 and lexemes[colon_index - 2].value in ("~", "?")

    @staticmethod
    def _is_annotation(lexemes: List[_Lexeme], index: int) -> bool:
        # the type part of (x : t)
        j = index - 1
        while j >= 0 and (
            lexemes[j].kind == "tyvar"
            or (_is_word(lexemes[j]) and lexemes[j].value not in OCAML_KEYWORDS)
        ):
            j -= 1
        return j >= 0 and _is_punct(lexemes[j], ":") and not OCamlClassifier._is_label(lexemes, j)


# Classifier registry
_CLASSIFIER_REGISTRY = {
    Language.C: CClassifier,
    Language.OCAML: OCamlClassifier,
}


def create_classifier(language: Union[str, Language]) -> ClassifierAdapter:
    """
    Create the classifier registered for a language.

    Raises:
        UnsupportedLanguageError: If the language is not registered
    """
    return _CLASSIFIER_REGISTRY[Language.from_name(language)]()
