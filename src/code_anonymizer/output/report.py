"""
Report Generator - Generates run reports and statistics.

This module handles:
- Generating JSON run reports
- Per-file statistics (identifiers, occurrences, warnings, output path)
- Identifier counts by category across the run
- A readable text rendering of the same data
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from code_anonymizer.core.anonymizer import TransformResult
from code_anonymizer.core.classifier import LexicalCategory


@dataclass
class FileStatistics:
    """Statistics for a single file."""

    filename: str
    output_filename: str
    language: str
    total_lines: int
    identifiers_renamed: int
    occurrences_replaced: int
    reserved_names: int = 0
    warnings: list[str] = field(default_factory=list)
    by_category: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "filename": self.filename,
            "output_filename": self.output_filename,
            "language": self.language,
            "total_lines": self.total_lines,
            "identifiers_renamed": self.identifiers_renamed,
            "occurrences_replaced": self.occurrences_replaced,
            "reserved_names": self.reserved_names,
            "by_category": self.by_category,
            "warnings": self.warnings,
        }


@dataclass
class AnonymizationReport:
    """Complete anonymization report."""

    generated_at: str = field(default_factory=lambda: datetime.now().isoformat())
    tool_version: str = "1.0.0"
    input_path: str = ""
    output_directory: str = ""
    file_statistics: list[FileStatistics] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    total_files: int = 0
    total_lines: int = 0
    total_identifiers: int = 0
    total_occurrences: int = 0
    processing_time_seconds: float = 0.0

    @property
    def total_warnings(self) -> int:
        return sum(len(fs.warnings) for fs in self.file_statistics)

    def identifiers_by_category(self) -> dict[str, int]:
        totals: dict[str, int] = {}
        for fs in self.file_statistics:
            for name, count in fs.by_category.items():
                totals[name] = totals.get(name, 0) + count
        return totals

    def to_dict(self) -> dict[str, Any]:
        """Convert report to dictionary."""
        return {
            "metadata": {
                "generated_at": self.generated_at,
                "tool_version": self.tool_version,
                "input_path": self.input_path,
                "output_directory": self.output_directory,
                "processing_time_seconds": self.processing_time_seconds,
            },
            "summary": {
                "total_files": self.total_files,
                "total_lines": self.total_lines,
                "total_identifiers": self.total_identifiers,
                "total_occurrences": self.total_occurrences,
                "total_warnings": self.total_warnings,
                "identifiers_by_category": self.identifiers_by_category(),
            },
            "errors": self.errors,
            "file_statistics": [fs.to_dict() for fs in self.file_statistics],
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert report to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    def save_json(self, path: Path) -> None:
        """Save report as JSON file."""
        Path(path).write_text(self.to_json())

    def save_text(self, path: Path) -> None:
        """Save report as text file."""
        Path(path).write_text(self.to_text())

    def to_text(self) -> str:
        """Convert report to readable text format."""
        lines = [
            "=" * 70,
            "SOURCE ANONYMIZATION REPORT",
            "=" * 70,
            "",
            f"Generated: {self.generated_at}",
            f"Tool Version: {self.tool_version}",
            f"Input: {self.input_path}",
            f"Output: {self.output_directory or '(beside input)'}",
            f"Processing Time: {self.processing_time_seconds:.2f} seconds",
            "",
            "-" * 70,
            "SUMMARY",
            "-" * 70,
            f"Total Files: {self.total_files}",
            f"Total Lines: {self.total_lines}",
            f"Total Identifiers: {self.total_identifiers}",
            f"Total Occurrences: {self.total_occurrences}",
            f"Warnings: {self.total_warnings}",
            "",
        ]

        by_category = self.identifiers_by_category()
        if by_category:
            lines.append("-" * 70)
            lines.append("IDENTIFIERS BY CATEGORY")
            lines.append("-" * 70)
            for name, count in by_category.items():
                lines.append(f"  {name}: {count}")
            lines.append("")

        lines.append("-" * 70)
        lines.append("FILE STATISTICS")
        lines.append("-" * 70)
        for fs in self.file_statistics:
            lines.append(f"  {fs.filename} -> {fs.output_filename}")
            lines.append(f"    Lines: {fs.total_lines}, Language: {fs.language}")
            lines.append(
                f"    Identifiers: {fs.identifiers_renamed}, "
                f"Occurrences: {fs.occurrences_replaced}"
            )
            for warning in fs.warnings:
                lines.append(f"    Warning: {warning}")
            lines.append("")

        if self.errors:
            lines.append("-" * 70)
            lines.append("ERRORS")
            lines.append("-" * 70)
            for error in self.errors:
                lines.append(f"  {error}")
            lines.append("")

        lines.append("=" * 70)
        lines.append("END OF REPORT")
        lines.append("=" * 70)

        return "\n".join(lines)


class ReportGenerator:
    """
    Generates anonymization reports.

    Usage:
        generator = ReportGenerator(input_path, output_directory)
        report = generator.generate_report(results)
    """

    def __init__(
        self,
        input_path: Optional[Path] = None,
        output_directory: Optional[Path] = None,
        tool_version: str = "1.0.0",
    ):
        self.input_path = input_path
        self.output_directory = output_directory
        self.tool_version = tool_version

    def generate_report(
        self,
        file_results: list[TransformResult],
        output_paths: Optional[dict[Path, Path]] = None,
        errors: Optional[list[str]] = None,
        processing_time: float = 0.0,
    ) -> AnonymizationReport:
        """
        Generate a report from transformation results.

        Args:
            file_results: Per-file results
            output_paths: Source path -> output path
            errors: Per-file failure messages
            processing_time: Total processing time in seconds

        Returns:
            AnonymizationReport with all statistics
        """
        output_paths = output_paths or {}
        report = AnonymizationReport(
            tool_version=self.tool_version,
            input_path=str(self.input_path or ""),
            output_directory=str(self.output_directory or ""),
            errors=list(errors or []),
            processing_time_seconds=processing_time,
        )

        for result in file_results:
            filename = str(result.source_path) if result.source_path else "<buffer>"
            output = output_paths.get(result.source_path) if result.source_path else None
            by_category: dict[str, int] = {}
            for category in LexicalCategory:
                count = len(result.table.get_mappings_by_category(category))
                if count:
                    by_category[category.name] = count

            fs = FileStatistics(
                filename=filename,
                output_filename=str(output) if output else "",
                language=result.language.value,
                total_lines=len(result.original_text.splitlines()),
                identifiers_renamed=result.identifiers_renamed,
                occurrences_replaced=result.occurrences_replaced,
                reserved_names=result.reserved_count,
                warnings=list(result.warnings),
                by_category=by_category,
            )
            report.file_statistics.append(fs)
            report.total_files += 1
            report.total_lines += fs.total_lines
            report.total_identifiers += fs.identifiers_renamed
            report.total_occurrences += fs.occurrences_replaced

        return report


def create_summary_report(file_results: list[TransformResult]) -> str:
    """
    Create a summary report.

    Args:
        file_results: List of transformation results

    Returns:
        Summary report text
    """
    lines = [
        "ANONYMIZATION SUMMARY",
        "=" * 40,
        f"Files processed: {len(file_results)}",
        f"Total lines: {sum(len(r.original_text.splitlines()) for r in file_results)}",
        f"Identifiers renamed: {sum(r.identifiers_renamed for r in file_results)}",
        f"Occurrences replaced: {sum(r.occurrences_replaced for r in file_results)}",
        f"Warnings: {sum(len(r.warnings) for r in file_results)}",
        "=" * 40,
    ]
    return "\n".join(lines)
