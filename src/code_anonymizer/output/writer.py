"""
Output Writer - Writes anonymized source files.

This module handles:
- Computing output paths (mirrored under an output directory, or
  ``<stem>_anon<suffix>`` beside the input)
- Preserving the input's line ending style
- Refusing to overwrite existing files unless asked to
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from code_anonymizer.core.utils import DEFAULT_ENCODING, anonymized_path


@dataclass
class WriteResult:
    """Result of writing a file."""
    source_path: Path
    output_path: Path
    total_lines: int
    encoding: str
    line_ending: str
    success: bool = True
    error_message: Optional[str] = None


@dataclass
class WriterConfig:
    """Configuration for output writer."""
    output_directory: Optional[Path] = None
    base_directory: Optional[Path] = None
    encoding: str = DEFAULT_ENCODING
    preserve_line_ending: bool = True
    default_line_ending: str = "\n"
    create_directories: bool = True
    overwrite_existing: bool = False


def detect_line_ending(file_path: Path) -> str:
    """
    Detect line ending style in a file.

    Args:
        file_path: Path to the file

    Returns:
        Line ending string ("\\n", "\\r\\n", or "\\r")
    """
    try:
        with open(file_path, "rb") as f:
            content = f.read(8192)  # Read first 8KB
    except OSError:
        return "\n"

    if b"\r\n" in content:
        return "\r\n"  # Windows
    elif b"\r" in content:
        return "\r"  # Old Mac
    return "\n"


def split_lines(text: str) -> List[str]:
    """Split on \\n, \\r\\n and \\r only (form feeds stay inside their line)."""
    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


class OutputWriter:
    """
    Writes anonymized files.

    Usage:
        writer = OutputWriter(WriterConfig(output_directory=Path("out")))
        result = writer.write_file(Path("src/main.c"), text)
    """

    def __init__(self, config: Optional[WriterConfig] = None):
        """
        Initialize the output writer.

        Args:
            config: Writer configuration (uses defaults if not provided)
        """
        self.config = config or WriterConfig()
        self._write_results: List[WriteResult] = []

    def output_path_for(self, source_path: Path) -> Path:
        """Where the anonymized copy of source_path is written."""
        return anonymized_path(
            source_path, self.config.output_directory, self.config.base_directory
        )

    def write_file(
        self,
        source_path: Path,
        text: str,
        output_path: Optional[Path] = None,
    ) -> WriteResult:
        """
        Write anonymized content to a file.

        Args:
            source_path: Original source file path
            text: Anonymized text
            output_path: Explicit destination (computed when omitted)

        Returns:
            WriteResult with details of the operation
        """
        source_path = Path(source_path)
        line_ending = (
            detect_line_ending(source_path)
            if self.config.preserve_line_ending and source_path.exists()
            else self.config.default_line_ending
        )
        output_path = Path(output_path) if output_path else self.output_path_for(source_path)
        lines = split_lines(text)

        result = WriteResult(
            source_path=source_path,
            output_path=output_path,
            total_lines=len(lines),
            encoding=self.config.encoding,
            line_ending=line_ending,
        )
        self._write_results.append(result)

        if output_path.exists() and not self.config.overwrite_existing:
            result.success = False
            result.error_message = f"Output file already exists: {output_path}"
            return result

        try:
            if self.config.create_directories:
                output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, "w", encoding=self.config.encoding, newline="") as f:
                for line in lines:
                    f.write(line + line_ending)
        except OSError as e:
            result.success = False
            result.error_message = f"IO error: {e}"
        return result

    def get_results(self) -> List[WriteResult]:
        """Get all write results."""
        return list(self._write_results)

    def get_statistics(self) -> Dict[str, int]:
        """Get writing statistics."""
        successful = [r for r in self._write_results if r.success]
        failed = [r for r in self._write_results if not r.success]

        return {
            "total_files": len(self._write_results),
            "successful": len(successful),
            "failed": len(failed),
            "total_lines": sum(r.total_lines for r in successful),
        }
