"""
Utility functions for the Code Anonymizer.

This module provides helper functions for:
- Reading source and auxiliary files
- Offset to line-number conversion
- Output path naming
"""

import bisect
from pathlib import Path
from typing import List, Optional, Union

from code_anonymizer.exceptions import SourceFileError

DEFAULT_ENCODING = "utf-8"

ANON_SUFFIX = "_anon"


def read_source_file(
    path: Union[str, Path],
    encoding: str = DEFAULT_ENCODING,
    errors: str = "replace",
) -> str:
    """Read a text file, releasing the handle before returning.

    Args:
        path: File to read
        encoding: Text encoding
        errors: Decoding error policy (undecodable bytes are replaced by default)

    Returns:
        The file contents

    Raises:
        SourceFileError: If the file cannot be opened or read
    """
    try:
        with open(path, "r", encoding=encoding, errors=errors, newline="") as f:
            return f.read()
    except (OSError, LookupError) as e:
        raise SourceFileError(str(path), str(e)) from e


class LineIndex:
    """Maps buffer offsets to 1-based line numbers."""

    def __init__(self, text: str):
        self._starts: List[int] = [0]
        pos = text.find("\n")
        while pos >= 0:
            self._starts.append(pos + 1)
            pos = text.find("\n", pos + 1)

    def line_of(self, offset: int) -> int:
        return bisect.bisect_right(self._starts, offset)

    def __len__(self) -> int:
        return len(self._starts)


def line_number_at(text: str, offset: int) -> int:
    """1-based line number of an offset."""
    return text.count("\n", 0, offset) + 1


def anonymized_path(
    source: Path,
    output_dir: Optional[Path] = None,
    base_dir: Optional[Path] = None,
) -> Path:
    """
    Compute where the anonymized copy of a file goes.

    With an output directory the file keeps its path relative to base_dir.
    Without one it is written beside the input as <stem>_anon<suffix>.
    """
    source = Path(source)
    if output_dir is None:
        return source.with_name(f"{source.stem}{ANON_SUFFIX}{source.suffix}")
    if base_dir is not None:
        try:
            return Path(output_dir) / source.relative_to(base_dir)
        except ValueError:
            pass
    return Path(output_dir) / source.name
