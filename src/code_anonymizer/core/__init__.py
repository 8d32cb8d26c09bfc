"""
Core modules for the Code Anonymizer.

This package contains the core processing logic:
- tokenizer: Delimiter-based word runs
- classifier: Lexical category lookup
- reserved: Reserved symbol resolution
- extractor: Identifier discovery
- mapper: Rename table construction
- rewriter: Token-safe rewriting
- comments: Comment and blank-line stripping
- anonymizer: Per-buffer anonymization engine
- utils: Utility functions
"""

from code_anonymizer.core.utils import (
    anonymized_path,
    line_number_at,
    read_source_file,
)

__all__ = [
    "read_source_file",
    "line_number_at",
    "anonymized_path",
]
