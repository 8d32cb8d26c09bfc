"""
Delimiter Tokenizer - Splits a source buffer into candidate word runs.

The tokenizer only answers "where are the words". It knows nothing about
strings, comments or declarations; that is the classifier's job. A word
run is a maximal sequence of characters that are not delimiters for the
active language. Runs that contain bracket characters are split further
so that array expressions such as ``buf[idx]`` yield ``buf`` and ``idx``.
"""

from dataclasses import dataclass
from typing import Iterator, List, Set

from code_anonymizer.languages.base import LanguageRules


@dataclass(frozen=True)
class WordRun:
    """
    A candidate word in the buffer.

    Attributes:
        value: The text of the run
        start: Offset of the first character
        end: Offset one past the last character
    """
    value: str
    start: int
    end: int

    @property
    def length(self) -> int:
        """Length of the run."""
        return self.end - self.start


def iter_word_runs(text: str, rules: LanguageRules) -> Iterator[WordRun]:
    """
    Yield maximal runs of non-delimiter characters.

    Brackets are not delimiters here; use split_brackets on the result.

    Args:
        text: The buffer contents
        rules: Rules of the active language

    Yields:
        WordRun for each run, in buffer order
    """
    start = None
    for pos, char in enumerate(text):
        if rules.is_delimiter(char):
            if start is not None:
                yield WordRun(text[start:pos], start, pos)
                start = None
        elif start is None:
            start = pos
    if start is not None:
        yield WordRun(text[start:], start, len(text))


def split_brackets(run: WordRun, rules: LanguageRules) -> List[WordRun]:
    """
    Split a run on bracket characters.

    Args:
        run: The run to split
        rules: Rules of the active language

    Returns:
        Non-empty sub-runs with offsets relative to the buffer
    """
    if not any(b in run.value for b in rules.brackets):
        return [run]

    parts = []
    part_start = None
    for i, char in enumerate(run.value):
        if char in rules.brackets:
            if part_start is not None:
                parts.append(WordRun(
                    run.value[part_start:i],
                    run.start + part_start,
                    run.start + i,
                ))
                part_start = None
        elif part_start is None:
            part_start = i
    if part_start is not None:
        parts.append(WordRun(
            run.value[part_start:],
            run.start + part_start,
            run.end,
        ))
    return parts


def iter_tokens(text: str, rules: LanguageRules) -> Iterator[WordRun]:
    """Yield word runs already split on brackets."""
    for run in iter_word_runs(text, rules):
        yield from split_brackets(run, rules)


def word_set(text: str, rules: LanguageRules) -> Set[str]:
    """
    Collect every distinct word in the buffer.

    Used to make sure generated names never collide with text that is
    already present, including text inside strings and comments.
    """
    return {token.value for token in iter_tokens(text, rules)}
