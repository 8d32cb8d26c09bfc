"""
Comment Stripper - Removes comments and blank lines.

Comment regions come from the classifier, so comment markers inside
string literals are left alone. A block comment sitting between two
tokens is replaced by a single space to keep the tokens apart.
"""

from typing import Optional, Union

from code_anonymizer.core.classifier import (
    ClassifierAdapter,
    LexicalCategory,
    RegexClassifier,
    create_classifier,
)
from code_anonymizer.languages.base import Language


def strip_comments(
    text: str,
    language: Union[str, Language],
    classifier: Optional[RegexClassifier] = None,
) -> str:
    """
    Remove every comment from a buffer.

    Args:
        text: The source text
        language: Language of the source
        classifier: Optional classifier to reuse

    Returns:
        Text without comments
    """
    classifier = classifier or create_classifier(language)
    pieces = []
    last_end = 0
    for span in classifier.spans(text):
        if span.category is not LexicalCategory.COMMENT:
            continue
        pieces.append(text[last_end:span.start])
        before = text[span.start - 1] if span.start > 0 else "\n"
        after = text[span.end] if span.end < len(text) else "\n"
        if not before.isspace() and not after.isspace():
            pieces.append(" ")
        last_end = span.end
    pieces.append(text[last_end:])
    return "".join(pieces)


def strip_blank_lines(
    text: str,
    language: Union[str, Language],
    classifier: Optional[ClassifierAdapter] = None,
) -> str:
    """
    Drop whitespace-only lines and trailing whitespace.

    Lines that start or end inside a string literal are kept verbatim.
    """
    classifier = classifier or create_classifier(language)
    kept = []
    offset = 0
    for line in text.splitlines(keepends=True):
        body = line.rstrip("\r\n")
        ending = line[len(body):]
        starts_in_string = (
            offset > 0
            and classifier.classify(text, offset - 1) is LexicalCategory.STRING_LITERAL
            and classifier.classify(text, offset) is LexicalCategory.STRING_LITERAL
        )
        end_offset = offset + len(body)
        ends_in_string = (
            end_offset < len(text)
            and classifier.classify(text, end_offset) is LexicalCategory.STRING_LITERAL
        )
        offset += len(line)

        if starts_in_string:
            kept.append(line)
            continue
        if not body.strip():
            continue
        kept.append(line if ends_in_string else body.rstrip() + ending)
    return "".join(kept)


def strip_comments_and_blank_lines(text: str, language: Union[str, Language]) -> str:
    """Remove comments, then the blank lines they leave behind."""
    classifier = create_classifier(language)
    return strip_blank_lines(strip_comments(text, language, classifier), language, classifier)
