"""
Output Formatter - Re-indents anonymized sources.

C sources are re-indented from their brace structure:
- one indent level per open ``{`` (a line starting with ``}`` closes first)
- one extra level while a ``(`` opened on an earlier line is still open
- preprocessor lines go to column 0
- lines that start inside a string, a comment or a backslash continuation
  are left exactly as they are

OCaml has no brace structure to follow, so only trailing whitespace is
removed (never inside string literals).
"""

from typing import List, Optional, Union

from code_anonymizer.core.classifier import (
    ClassifierAdapter,
    LexicalCategory,
    create_classifier,
)
from code_anonymizer.languages.base import Language

DEFAULT_INDENT_WIDTH = 4

_LITERAL_CATEGORIES = (LexicalCategory.STRING_LITERAL, LexicalCategory.COMMENT)


def reindent_c(
    text: str,
    indent_width: int = DEFAULT_INDENT_WIDTH,
    classifier: Optional[ClassifierAdapter] = None,
) -> str:
    """
    Re-indent C source from its braces.

    Args:
        text: C source text
        indent_width: Spaces per level
        classifier: Optional classifier to reuse

    Returns:
        The re-indented text
    """
    classifier = classifier or create_classifier(Language.C)
    out: List[str] = []
    depth = 0
    parens = 0
    continued = False
    offset = 0

    for line in text.splitlines(keepends=True):
        body = line.rstrip("\r\n")
        ending = line[len(body):]
        line_start = offset
        offset += len(line)

        stripped = body.lstrip()
        first = line_start + (len(body) - len(stripped))
        in_literal = (
            bool(stripped)
            and classifier.classify(text, first) in _LITERAL_CATEGORIES
            and first > 0
            and classifier.classify(text, first - 1) in _LITERAL_CATEGORIES
            and not (stripped.startswith("/*") or stripped.startswith("//"))
        )

        if continued or in_literal:
            out.append(line)
        elif not stripped:
            out.append(ending)
        elif stripped.startswith("#"):
            out.append(stripped.rstrip() + ending)
        else:
            level = depth - (1 if stripped.startswith("}") else 0) + (1 if parens > 0 else 0)
            out.append(" " * (indent_width * max(level, 0)) + stripped.rstrip() + ending)

        for pos in range(first, line_start + len(body)):
            char = text[pos]
            if char not in "{}()":
                continue
            if classifier.classify(text, pos) in _LITERAL_CATEGORIES:
                continue
            if char == "{":
                depth += 1
            elif char == "}":
                depth = max(depth - 1, 0)
            elif char == "(":
                parens += 1
            else:
                parens = max(parens - 1, 0)
        continued = body.endswith("\\")

    return "".join(out)


def strip_trailing_whitespace(
    text: str,
    language: Union[str, Language],
    classifier: Optional[ClassifierAdapter] = None,
) -> str:
    """Remove trailing whitespace from every line not ending inside a string."""
    classifier = classifier or create_classifier(language)
    out = []
    offset = 0
    for line in text.splitlines(keepends=True):
        body = line.rstrip("\r\n")
        end_offset = offset + len(body)
        offset += len(line)
        if end_offset < len(text) and classifier.classify(text, end_offset) is LexicalCategory.STRING_LITERAL:
            out.append(line)
        else:
            out.append(body.rstrip() + line[len(body):])
    return "".join(out)


def format_source(
    text: str,
    language: Union[str, Language],
    indent_width: int = DEFAULT_INDENT_WIDTH,
) -> str:
    """
    Apply the language's output formatting.

    Args:
        text: Anonymized source
        language: Language of the source
        indent_width: Spaces per indent level (C only)

    Returns:
        Formatted text ending with a newline (unless empty)
    """
    if Language.from_name(language) is Language.C:
        formatted = reindent_c(text, indent_width)
    else:
        formatted = strip_trailing_whitespace(text, language)
    if formatted and not formatted.endswith("\n"):
        formatted += "\n"
    return formatted
