"""
Output Validator - Checks anonymized sources against their rename tables.

This module handles:
- Verifying that no original identifier survives as a rewritable token
- Verifying that no replacement is also a reserved name
- Flagging entries whose original was never found in the source
- Checking bracket balance in C output
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from code_anonymizer.core.classifier import LexicalCategory, create_classifier
from code_anonymizer.core.mapper import RenameTable
from code_anonymizer.core.reserved import ReservedNameSet
from code_anonymizer.core.rewriter import TokenSafeRewriter
from code_anonymizer.core.utils import line_number_at
from code_anonymizer.languages.base import Language


class ValidationSeverity(Enum):
    """Severity levels for validation issues."""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass
class ValidationIssue:
    """A single validation issue."""
    severity: ValidationSeverity
    message: str
    file_path: Optional[Path] = None
    line_number: Optional[int] = None
    identifier: Optional[str] = None

    def __str__(self):
        parts = [f"[{self.severity.value.upper()}]"]
        if self.file_path:
            parts.append(f"{self.file_path.name}")
        if self.line_number:
            parts.append(f"line {self.line_number}")
        parts.append(self.message)
        return " ".join(parts)


@dataclass
class ValidationResult:
    """Result of validation."""
    issues: List[ValidationIssue] = field(default_factory=list)
    files_validated: int = 0

    @property
    def is_valid(self) -> bool:
        """Check if validation passed (no errors)."""
        return not any(
            issue.severity == ValidationSeverity.ERROR for issue in self.issues
        )

    @property
    def errors(self) -> List[ValidationIssue]:
        """Get all error issues."""
        return [i for i in self.issues if i.severity == ValidationSeverity.ERROR]

    @property
    def warnings(self) -> List[ValidationIssue]:
        """Get all warning issues."""
        return [i for i in self.issues if i.severity == ValidationSeverity.WARNING]

    def add_error(self, message: str, **kwargs) -> None:
        """Add an error issue."""
        self.issues.append(ValidationIssue(ValidationSeverity.ERROR, message, **kwargs))

    def add_warning(self, message: str, **kwargs) -> None:
        """Add a warning issue."""
        self.issues.append(ValidationIssue(ValidationSeverity.WARNING, message, **kwargs))

    def merge(self, other: "ValidationResult") -> None:
        self.issues.extend(other.issues)
        self.files_validated += other.files_validated


class OutputValidator:
    """
    Validates anonymized output.

    Usage:
        validator = OutputValidator(Language.C)
        result = validator.validate_text(output, table, reserved)
    """

    def __init__(self, language: Language, check_brackets: bool = True):
        self.language = Language.from_name(language)
        self.check_brackets = check_brackets

    def validate_text(
        self,
        text: str,
        table: RenameTable,
        reserved: Optional[ReservedNameSet] = None,
        file_path: Optional[Path] = None,
    ) -> ValidationResult:
        """
        Validate one anonymized buffer.

        Args:
            text: Anonymized text
            table: Rename table that produced it
            reserved: Reserved set of the file, if known
            file_path: File name used in issue messages

        Returns:
            ValidationResult
        """
        result = ValidationResult(files_validated=1)
        rewriter = TokenSafeRewriter(self.language, reserved=reserved)

        for entry in table:
            leftovers = rewriter.find_occurrences(text, entry.original_name)
            if leftovers:
                result.add_error(
                    f"Identifier '{entry.original_name}' still present "
                    f"({len(leftovers)} occurrences)",
                    file_path=file_path,
                    line_number=line_number_at(text, leftovers[0][0]),
                    identifier=entry.original_name,
                )
            if reserved is not None and entry.anonymized_name in reserved:
                result.add_error(
                    f"Replacement '{entry.anonymized_name}' is a reserved name",
                    file_path=file_path,
                    identifier=entry.anonymized_name,
                )
            if entry.occurrence_count == 0:
                result.add_warning(
                    f"Identifier '{entry.original_name}' was never rewritten",
                    file_path=file_path,
                    identifier=entry.original_name,
                )

        if self.check_brackets and self.language is Language.C:
            self._validate_brackets(text, result, file_path)
        return result

    def validate_file(
        self,
        file_path: Path,
        table: RenameTable,
        reserved: Optional[ReservedNameSet] = None,
        encoding: str = "utf-8",
    ) -> ValidationResult:
        """Validate an anonymized file on disk."""
        try:
            with open(file_path, encoding=encoding, errors="replace", newline="") as f:
                text = f.read()
        except OSError as e:
            result = ValidationResult(files_validated=1)
            result.add_error(f"Cannot read output: {e}", file_path=Path(file_path))
            return result
        return self.validate_text(text, table, reserved, Path(file_path))

    def _validate_brackets(
        self, text: str, result: ValidationResult, file_path: Optional[Path]
    ) -> None:
        classifier = create_classifier(self.language)
        pairs = {")": "(", "]": "[", "}": "{"}
        stack = []
        for pos, char in enumerate(text):
            if char not in "()[]{}":
                continue
            if classifier.classify(text, pos) in (
                LexicalCategory.STRING_LITERAL, LexicalCategory.COMMENT
            ):
                continue
            if char in "([{":
                stack.append((char, pos))
            elif not stack or stack.pop()[0] != pairs[char]:
                result.add_warning(
                    f"Unbalanced '{char}'",
                    file_path=file_path,
                    line_number=line_number_at(text, pos),
                )
                return
        if stack:
            char, pos = stack[-1]
            result.add_warning(
                f"Unclosed '{char}'",
                file_path=file_path,
                line_number=line_number_at(text, pos),
            )


def validate_rename_table(table: RenameTable) -> ValidationResult:
    """
    Check a rename table for internal consistency.

    Args:
        table: The table to check

    Returns:
        ValidationResult with an error per duplicate or malformed entry
    """
    result = ValidationResult()
    seen = {}
    for entry in table:
        if not entry.anonymized_name:
            result.add_error(f"Empty replacement for '{entry.original_name}'")
        elif entry.anonymized_name == entry.original_name:
            result.add_error(f"'{entry.original_name}' maps to itself")
        if entry.anonymized_name in seen:
            result.add_error(
                f"'{entry.original_name}' and '{seen[entry.anonymized_name]}' "
                f"share replacement '{entry.anonymized_name}'"
            )
        seen[entry.anonymized_name] = entry.original_name
    return result
