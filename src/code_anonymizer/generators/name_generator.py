"""
Name Generator - Generates replacement identifier names.

Replacement names follow a per-language template, ``<prefix><n>``:
- C: ``_1``, ``_2``, ...
- OCaml: ``a1``, ``a2``, ...; capitalized originals (modules, constructors)
  get ``A1``, ``A2``, ... so the output stays well-formed

A single counter is shared by both OCaml prefixes, so indices never
repeat within a run. Candidates that are already taken (a word present
in the buffer, a reserved name) are skipped by advancing the counter.
"""

from dataclasses import dataclass, field
from typing import AbstractSet, Optional, Set, Union

from code_anonymizer.languages.base import Language, LanguageRules, get_rules

MAX_ATTEMPTS = 1_000_000


def format_name(prefix: str, index: int) -> str:
    """Apply the replacement template."""
    return f"{prefix}{index}"


def prefix_for(rules: LanguageRules, original_name: str) -> str:
    """Pick the replacement prefix for an original name."""
    if rules.capitalized_prefix and original_name[:1].isupper():
        return rules.capitalized_prefix
    return rules.replacement_prefix


@dataclass
class NameGenerator:
    """
    Generates unique replacement names for one run.

    Usage:
        generator = NameGenerator(Language.C, taken={"_1"})
        generator.generate("counter")  # -> "_2"
    """

    language: Union[str, Language] = Language.C
    taken: AbstractSet[str] = frozenset()
    start: int = 1
    _counter: int = field(default=0, init=False)
    _generated_names: Set[str] = field(default_factory=set, init=False)
    _rules: Optional[LanguageRules] = field(default=None, init=False)

    def __post_init__(self):
        self._rules = get_rules(self.language)
        self._counter = self.start - 1

    def generate(self, original_name: str) -> str:
        """
        Generate the next replacement name.

        Args:
            original_name: The identifier being renamed (selects the prefix)

        Returns:
            A name that is neither taken nor generated before
        """
        prefix = prefix_for(self._rules, original_name)
        for _attempt in range(MAX_ATTEMPTS):
            self._counter += 1
            name = format_name(prefix, self._counter)
            if self._is_valid_name(name):
                self._generated_names.add(name)
                return name
        raise RuntimeError(f"Could not generate a free name after {MAX_ATTEMPTS} attempts")

    def _is_valid_name(self, name: str) -> bool:
        return (
            name not in self.taken
            and name not in self._generated_names
            and not self._rules.is_reserved_word(name)
        )

    @property
    def counter(self) -> int:
        """Last index used."""
        return self._counter

    def reset(self) -> None:
        """Reset the counter and generated names."""
        self._counter = self.start - 1
        self._generated_names.clear()
