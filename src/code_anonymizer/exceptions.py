"""
Exception classes for the Code Anonymizer.

This module defines all custom exceptions used throughout the anonymizer,
organized in a hierarchy for easy handling.
"""

from typing import Optional


class AnonymizerError(Exception):
    """Base exception for all anonymizer errors."""

    pass


class UnsupportedLanguageError(AnonymizerError):
    """No ruleset is registered for the requested language.

    Attributes:
        language: The language name or path that could not be matched
    """

    def __init__(self, language: str):
        self.language = language
        super().__init__(f"Unsupported language: {language}")


class SourceFileError(AnonymizerError):
    """The primary input file could not be read.

    Attributes:
        file: The file that failed
        reason: Description of the failure
    """

    def __init__(self, file: str, reason: str):
        self.file = file
        self.reason = reason
        super().__init__(f"{file}: {reason}")


class MissingAuxiliaryFileError(AnonymizerError):
    """A header or library file needed for reserved-name resolution is missing.

    Only raised in strict mode; by default the condition is recorded as a
    warning and resolution continues with a reduced reserved set.

    Attributes:
        path: The file or directory that could not be found
    """

    def __init__(self, path: str, message: Optional[str] = None):
        self.path = path
        super().__init__(message or f"Auxiliary file not found: {path}")


class IncludeNotFoundError(MissingAuxiliaryFileError):
    """Referenced header not found.

    Raised when an #include directive names a header that cannot be
    located in any search directory.

    Attributes:
        header: The header name from the directive
        file: The file containing the directive
        line: The line number of the directive
    """

    def __init__(self, header: str, file: str, line: int):
        self.header = header
        self.file = file
        self.line = line
        super().__init__(header, f"{file}:{line}: Header '{header}' not found")


class MappingError(AnonymizerError):
    """Error in rename table generation or application."""

    pass


class DuplicateAssignmentError(MappingError):
    """An identifier or a replacement name was assigned twice.

    Attributes:
        name: The name that was assigned more than once
    """

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Duplicate rename assignment for '{name}'")


class MalformedRenameTableError(MappingError):
    """A rename table entry cannot be applied.

    Attributes:
        original: The original identifier of the offending entry
        replacement: Its replacement text
        reason: Why it is malformed
    """

    def __init__(self, original: str, replacement: str, reason: str):
        self.original = original
        self.replacement = replacement
        self.reason = reason
        super().__init__(
            f"Malformed rename entry '{original}' -> '{replacement}': {reason}"
        )


class ConfigError(AnonymizerError):
    """Configuration error.

    Raised when there's an issue with the configuration,
    such as missing required options or invalid values.
    """

    pass
