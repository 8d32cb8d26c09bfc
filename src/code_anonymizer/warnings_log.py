"""Warning collection and logging utility.

Recoverable conditions (unresolved includes, a missing standard library,
an empty identifier set) never abort a run. They are collected here,
logged at WARNING level, and reported alongside the output.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from code_anonymizer.logging_config import get_logger


class WarningsLog:
    """Collect and log warnings for one anonymization run.

    Attributes:
        source: Name of the file being processed, used as message prefix
    """

    def __init__(self, source: str | None = None, logger_name: str = "warnings") -> None:
        """Initialize the warnings log.

        Args:
            source: Optional file name prepended to every message
            logger_name: Child logger used to emit the warnings
        """
        self.source = source
        self._warnings: list[str] = []
        self._logger = get_logger(logger_name)

    def add(self, message: str, line_number: int = 0) -> None:
        """Add a warning message.

        Args:
            message: The warning message
            line_number: Optional line number for context
        """
        if line_number:
            message = f"line {line_number}: {message}"
        if self.source:
            message = f"{self.source}: {message}"

        self._warnings.append(message)
        self._logger.warning(message)

    def extend(self, messages: Iterable[str]) -> None:
        """Record already-formatted messages without logging them again."""
        self._warnings.extend(messages)

    @property
    def warnings(self) -> list[str]:
        """Get a copy of all warnings."""
        return list(self._warnings)

    def has_warnings(self) -> bool:
        """Check if any warnings have been collected."""
        return len(self._warnings) > 0

    def clear(self) -> None:
        """Clear all collected warnings."""
        self._warnings.clear()

    def __len__(self) -> int:
        return len(self._warnings)

    def __iter__(self) -> Iterator[str]:
        return iter(self._warnings)

    def __repr__(self) -> str:
        return f"WarningsLog({len(self._warnings)} warnings)"
