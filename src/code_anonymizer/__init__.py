"""
Code Anonymizer - Anonymize C and OCaml source code while preserving logic.

This package rewrites every user-defined identifier of a source file with a
sequential, meaningless name, while keywords, library symbols, string
contents and numeric literals stay untouched. Comments are stripped and the
output is re-indented.

Basic Usage:
    from code_anonymizer import anonymize_text, anonymize_directory

    # A single buffer
    print(anonymize_text('int count = 0; printf("%d", count);', "c"))

    # A whole tree
    result = anonymize_directory(
        input_dir=Path("src/"),
        output_dir=Path("anonymized/"),
        include_paths=[Path("include/")],
    )

    # With configuration
    config = Config(
        input_path=Path("lib/"),
        output_dir=Path("anonymized/"),
        language="ocaml",
    )
    pipeline = AnonymizationPipeline(config)
    result = pipeline.run()

Command-Line Usage:
    code-anonymize src/ -o anonymized/
    code-anonymize main.c -I include/ --verbose
    code-anonymize lib/ -l ocaml --dry-run
"""

__version__ = "1.0.0"
__author__ = "Code Anonymizer Team"

from code_anonymizer.exceptions import (
    AnonymizerError,
    UnsupportedLanguageError,
    SourceFileError,
    MissingAuxiliaryFileError,
    IncludeNotFoundError,
    MappingError,
    DuplicateAssignmentError,
    MalformedRenameTableError,
    ConfigError,
)

from code_anonymizer.config import Config, create_default_config
from code_anonymizer.languages.base import Language
from code_anonymizer.core.anonymizer import Anonymizer, TransformResult, anonymize_text
from code_anonymizer.core.mapper import RenameTable
from code_anonymizer.core.classifier import LexicalCategory
from code_anonymizer.main import (
    AnonymizationPipeline,
    AnonymizationResult,
    anonymize_file,
    anonymize_directory,
)

__all__ = [
    # Version
    "__version__",
    # Main API
    "anonymize_text",
    "anonymize_file",
    "anonymize_directory",
    "AnonymizationPipeline",
    "AnonymizationResult",
    "Anonymizer",
    "TransformResult",
    # Configuration
    "Config",
    "create_default_config",
    # Data Types
    "Language",
    "LexicalCategory",
    "RenameTable",
    # Exceptions
    "AnonymizerError",
    "UnsupportedLanguageError",
    "SourceFileError",
    "MissingAuxiliaryFileError",
    "IncludeNotFoundError",
    "MappingError",
    "DuplicateAssignmentError",
    "MalformedRenameTableError",
    "ConfigError",
]
