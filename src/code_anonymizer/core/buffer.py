"""
Source Buffer - Mutable text of one file for the duration of a run.
"""

from pathlib import Path
from typing import Optional, Sequence, Tuple


class SourceBuffer:
    """
    Holds one file's text and applies in-place span replacements.

    Attributes:
        path: The file the text came from, if any
        version: Incremented on every mutation
    """

    def __init__(self, text: str, path: Optional[Path] = None):
        self._text = text
        self.path = Path(path) if path is not None else None
        self.version = 0

    @property
    def text(self) -> str:
        return self._text

    def replace_spans(self, spans: Sequence[Tuple[int, int]], replacement: str) -> int:
        """
        Replace every [start, end) span with the same replacement text.

        Args:
            spans: Sorted, non-overlapping spans in current buffer offsets
            replacement: Text substituted for each span

        Returns:
            Number of spans replaced
        """
        if not spans:
            return 0
        pieces = []
        last_end = 0
        for start, end in spans:
            if start < last_end:
                raise ValueError(f"Overlapping or unsorted span at offset {start}")
            pieces.append(self._text[last_end:start])
            pieces.append(replacement)
            last_end = end
        pieces.append(self._text[last_end:])
        self._text = "".join(pieces)
        self.version += 1
        return len(spans)

    def __len__(self) -> int:
        return len(self._text)

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        where = f" {self.path}" if self.path else ""
        return f"<SourceBuffer{where} len={len(self._text)} version={self.version}>"
