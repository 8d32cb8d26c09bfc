"""
Rename Mapper - Builds the original to replacement name table.

This module provides:
- RenameTable: insertion-ordered, one-to-one mapping whose pairs are
  fixed once frozen
- RenameMapper: assigns sequential replacement names to an IdentifierSet
- Persistence via JSON and CSV export, and JSON import
"""

import csv
import json
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

from code_anonymizer.core.classifier import LexicalCategory
from code_anonymizer.core.extractor import IdentifierSet
from code_anonymizer.exceptions import DuplicateAssignmentError, MappingError
from code_anonymizer.generators.name_generator import NameGenerator
from code_anonymizer.languages.base import Language, get_rules


@dataclass
class RenameEntry:
    """
    A single mapping from original to replacement name.

    Attributes:
        original_name: The identifier as written in the source
        anonymized_name: Its replacement
        category: Category at the first occurrence
        index: Sequence number used to build the replacement
        first_seen_line: Line of the first occurrence
        occurrence_count: Occurrences replaced by the rewriter
    """

    original_name: str
    anonymized_name: str
    category: LexicalCategory = LexicalCategory.NONE
    index: int = 0
    first_seen_line: Optional[int] = None
    occurrence_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "original_name": self.original_name,
            "anonymized_name": self.anonymized_name,
            "category": self.category.name,
            "index": self.index,
            "first_seen_line": self.first_seen_line,
            "occurrence_count": self.occurrence_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RenameEntry":
        """Create from dictionary."""
        return cls(
            original_name=data["original_name"],
            anonymized_name=data["anonymized_name"],
            category=LexicalCategory[data.get("category", "NONE")],
            index=data.get("index", 0),
            first_seen_line=data.get("first_seen_line"),
            occurrence_count=data.get("occurrence_count", 0),
        )


class RenameTable:
    """
    One-to-one mapping from original identifiers to replacements.

    Entries keep insertion order, which is the order the rewriter applies
    them in. After freeze() no entry can be added; only the occurrence
    counts the rewriter reports are still recorded.

    Usage:
        table = RenameTable(Language.C)
        table.add(RenameEntry("counter", "_1"))
        table.freeze()
    """

    def __init__(self, language: Union[str, Language] = Language.C, source_file: Optional[str] = None):
        self.language = get_rules(language).language
        self.source_file = source_file
        self._entries: Dict[str, RenameEntry] = {}
        self._replacements: Dict[str, str] = {}
        self._frozen = False

    def add(self, entry: RenameEntry) -> None:
        """
        Add an entry.

        Raises:
            DuplicateAssignmentError: If the original or the replacement is
                already in the table
            MappingError: If the table is frozen
        """
        if self._frozen:
            raise MappingError("Rename table is read-only")
        if entry.original_name in self._entries:
            raise DuplicateAssignmentError(entry.original_name)
        if entry.anonymized_name in self._replacements:
            raise DuplicateAssignmentError(entry.anonymized_name)
        self._entries[entry.original_name] = entry
        self._replacements[entry.anonymized_name] = entry.original_name

    def freeze(self) -> "RenameTable":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get_mapping(self, original_name: str) -> Optional[RenameEntry]:
        """Get the entry for an original name, or None."""
        return self._entries.get(original_name)

    def get_anonymized_name(self, original_name: str) -> Optional[str]:
        entry = self._entries.get(original_name)
        return entry.anonymized_name if entry else None

    def get_original_name(self, anonymized_name: str) -> Optional[str]:
        """Reverse lookup: get original name from replacement."""
        return self._replacements.get(anonymized_name)

    def record_occurrences(self, original_name: str, count: int) -> None:
        """
        Store how many occurrences the rewriter replaced.

        Allowed on a frozen table: the count is a statistic of the rewrite,
        the original to replacement pairs stay fixed.
        """
        self._entries[original_name].occurrence_count = count

    def get_all_mappings(self) -> List[RenameEntry]:
        """Get all entries in application order."""
        return list(self._entries.values())

    def get_mappings_by_category(self, category: LexicalCategory) -> List[RenameEntry]:
        return [e for e in self._entries.values() if e.category == category]

    def as_dict(self) -> Dict[str, str]:
        """Plain original -> replacement mapping."""
        return {e.original_name: e.anonymized_name for e in self._entries.values()}

    def __contains__(self, original_name: object) -> bool:
        return original_name in self._entries

    def __iter__(self) -> Iterator[RenameEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def get_statistics(self) -> Dict[str, Any]:
        """Get mapping statistics."""
        stats: Dict[str, Any] = {
            "total_mappings": len(self._entries),
            "total_occurrences": sum(e.occurrence_count for e in self._entries.values()),
            "by_category": {},
        }
        for category in LexicalCategory:
            count = len(self.get_mappings_by_category(category))
            if count > 0:
                stats["by_category"][category.name] = count
        return stats

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "generated_at": datetime.now().isoformat(),
            "language": self.language.value,
            "source_file": self.source_file,
            "mappings": [e.to_dict() for e in self._entries.values()],
        }

    def save_to_file(self, path: Path) -> None:
        """
        Save rename table to JSON file.

        Args:
            path: Path to save the JSON file
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

    def save_to_csv(self, path: Path) -> None:
        """
        Save rename table to CSV file.

        The CSV contains one row per entry with columns:
        original_name, anonymized_name, category, index, first_seen_line,
        occurrence_count, language, source_file, generated_at
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().isoformat()

        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(
                [
                    "original_name",
                    "anonymized_name",
                    "category",
                    "index",
                    "first_seen_line",
                    "occurrence_count",
                    "language",
                    "source_file",
                    "generated_at",
                ]
            )
            for entry in self._entries.values():
                writer.writerow(
                    [
                        entry.original_name,
                        entry.anonymized_name,
                        entry.category.name,
                        entry.index,
                        entry.first_seen_line if entry.first_seen_line is not None else "",
                        entry.occurrence_count,
                        self.language.value,
                        self.source_file or "",
                        timestamp,
                    ]
                )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RenameTable":
        table = cls(data.get("language", "c"), data.get("source_file"))
        for entry_data in data.get("mappings", []):
            table.add(RenameEntry.from_dict(entry_data))
        return table.freeze()

    @classmethod
    def from_mapping(
        cls, mapping: Dict[str, str], language: Union[str, Language] = Language.C
    ) -> "RenameTable":
        """Build a frozen table from a plain original -> replacement dict."""
        table = cls(language)
        for index, (original, replacement) in enumerate(mapping.items(), 1):
            table.add(RenameEntry(original, replacement, index=index))
        return table.freeze()

    @classmethod
    def load_from_file(cls, path: Path) -> "RenameTable":
        """
        Load rename table from JSON file.

        Args:
            path: Path to the JSON file

        Returns:
            Frozen RenameTable
        """
        with open(path, encoding="utf-8") as f:
            return cls.from_dict(json.load(f))


class RenameMapper:
    """
    Assigns every extracted identifier a sequential replacement.

    Usage:
        mapper = RenameMapper()
        table = mapper.assign(identifiers, Language.C, taken=words_in_buffer)
    """

    def assign(
        self,
        identifiers: Union[IdentifierSet, Iterable[str]],
        language: Union[str, Language],
        taken: Iterable[str] = (),
        source_file: Optional[str] = None,
    ) -> RenameTable:
        """
        Build the rename table.

        Args:
            identifiers: Identifiers in assignment order
            language: Language selecting the replacement template
            taken: Names replacements must avoid (words already in the
                buffer, reserved names)
            source_file: File name stored on the table

        Returns:
            Frozen RenameTable with one entry per identifier

        Raises:
            UnsupportedLanguageError: If the language is not registered
            DuplicateAssignmentError: If an identifier is listed twice
        """
        table = RenameTable(language, source_file)
        generator = NameGenerator(table.language, taken=frozenset(taken))

        for name in identifiers:
            extracted = identifiers.get(name) if isinstance(identifiers, IdentifierSet) else None
            replacement = generator.generate(name)
            table.add(RenameEntry(
                original_name=name,
                anonymized_name=replacement,
                category=extracted.category if extracted else LexicalCategory.NONE,
                index=generator.counter,
                first_seen_line=extracted.line_number if extracted else None,
            ))
        return table.freeze()


def create_mapping_report(table: RenameTable) -> str:
    """
    Create a human-readable mapping report.

    Args:
        table: The rename table

    Returns:
        Formatted report string
    """
    title = f"Rename Report: {table.source_file}" if table.source_file else "Rename Report"
    lines = ["=" * 70, title, "=" * 70, ""]

    stats = table.get_statistics()
    lines.extend(
        [
            "Statistics:",
            f"  Language: {table.language.value}",
            f"  Total mappings: {stats['total_mappings']}",
            f"  Total occurrences: {stats['total_occurrences']}",
            "",
            "Mappings by category:",
        ]
    )
    for category_name, count in stats["by_category"].items():
        lines.append(f"  {category_name}: {count}")

    lines.extend(["", "=" * 70, ""])

    for category in LexicalCategory:
        mappings = table.get_mappings_by_category(category)
        if not mappings:
            continue
        lines.extend([f"{category.name}:", "-" * 40])
        for entry in mappings:
            lines.append(f"  {entry.original_name:30} -> {entry.anonymized_name}")
        lines.append("")

    return "\n".join(lines)
