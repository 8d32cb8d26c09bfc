"""
Code Anonymizer - Core anonymization engine.

This module provides the per-buffer anonymization functionality:
- Resolves the reserved names of the buffer
- Extracts the renamable identifiers
- Builds the rename table
- Rewrites the buffer
- Optionally strips comments first and re-indents afterwards
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Union

from code_anonymizer.core.buffer import SourceBuffer
from code_anonymizer.core.classifier import create_classifier
from code_anonymizer.core.comments import strip_comments_and_blank_lines
from code_anonymizer.core.extractor import IdentifierExtractor, IdentifierSet
from code_anonymizer.core.mapper import RenameMapper, RenameTable
from code_anonymizer.core.reserved import ReservedNameSet, ReservedSymbolResolver
from code_anonymizer.core.rewriter import TokenSafeRewriter
from code_anonymizer.core.tokenizer import word_set
from code_anonymizer.core.utils import DEFAULT_ENCODING, read_source_file
from code_anonymizer.languages.base import Language, get_rules
from code_anonymizer.logging_config import get_logger
from code_anonymizer.output.formatter import DEFAULT_INDENT_WIDTH, format_source
from code_anonymizer.warnings_log import WarningsLog

logger = get_logger("anonymizer")


@dataclass
class TransformResult:
    """Result of anonymizing one buffer."""
    language: Language
    original_text: str
    transformed_text: str
    table: RenameTable
    identifiers: IdentifierSet = field(default_factory=IdentifierSet)
    reserved: Optional[ReservedNameSet] = None
    source_path: Optional[Path] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.transformed_text != self.original_text

    @property
    def reserved_count(self) -> int:
        return len(self.reserved) if self.reserved is not None else 0

    @property
    def identifiers_renamed(self) -> int:
        return len(self.table)

    @property
    def occurrences_replaced(self) -> int:
        return sum(entry.occurrence_count for entry in self.table)


class Anonymizer:
    """
    Anonymizes source buffers of one language.

    A fresh resolver, extractor, mapper and rewriter is used for every
    buffer; only the standard-library caches are shared between calls.

    Usage:
        anonymizer = Anonymizer(Language.C, include_paths=[Path("include")])
        result = anonymizer.transform(text, source_path=Path("main.c"))
        print(result.transformed_text)
    """

    def __init__(
        self,
        language: Union[str, Language],
        include_paths: Optional[Sequence[Path]] = None,
        system_include_paths: Optional[Sequence[Path]] = None,
        ocaml_stdlib_dir: Optional[Path] = None,
        encoding: str = DEFAULT_ENCODING,
        require_includes: bool = False,
        strip_comments: bool = True,
        reindent: bool = True,
        indent_width: int = DEFAULT_INDENT_WIDTH,
    ):
        """
        Initialize the anonymizer.

        Args:
            language: Language of the buffers
            include_paths: User include directories (C)
            system_include_paths: System include directories (C); None to detect
            ocaml_stdlib_dir: OCaml standard library directory; None to detect
            encoding: Encoding of source and auxiliary files
            require_includes: If True, missing auxiliary files raise
            strip_comments: Remove comments and blank lines in transform()
            reindent: Re-indent the output in transform()
            indent_width: Spaces per indent level
        """
        self.language = get_rules(language).language
        self.include_paths = list(include_paths or [])
        self.system_include_paths = (
            list(system_include_paths) if system_include_paths is not None else None
        )
        self.ocaml_stdlib_dir = ocaml_stdlib_dir
        self.encoding = encoding
        self.require_includes = require_includes
        self.strip_comments = strip_comments
        self.reindent = reindent
        self.indent_width = indent_width

    @classmethod
    def from_config(cls, config, language: Union[str, Language, None] = None) -> "Anonymizer":
        """Create an anonymizer from a Config."""
        return cls(
            language or config.language,
            include_paths=config.include_paths,
            system_include_paths=config.system_include_paths,
            ocaml_stdlib_dir=config.ocaml_stdlib_dir,
            encoding=config.encoding,
            require_includes=config.require_includes,
            strip_comments=config.strip_comments,
            reindent=config.reindent,
            indent_width=config.indent_width,
        )

    def resolve_reserved(
        self,
        text: str,
        source_path: Optional[Path] = None,
        warnings: Optional[WarningsLog] = None,
    ) -> ReservedNameSet:
        """Build the reserved set of a buffer."""
        resolver = ReservedSymbolResolver(
            include_paths=self.include_paths,
            system_include_paths=self.system_include_paths,
            ocaml_stdlib_dir=self.ocaml_stdlib_dir,
            encoding=self.encoding,
            require_includes=self.require_includes,
            warnings=warnings,
        )
        return resolver.resolve(source_path, self.language, source_text=text)

    def anonymize(self, text: str, source_path: Optional[Path] = None) -> TransformResult:
        """
        Rename the identifiers of a buffer.

        Comments and layout are left as they are; see transform() for the
        full treatment.

        Args:
            text: The source text
            source_path: File the text came from (quoted includes resolve
                relative to it)

        Returns:
            TransformResult with the rewritten text and the rename table

        Raises:
            IncludeNotFoundError: If a header is missing and require_includes is set
        """
        source_path = Path(source_path) if source_path is not None else None
        warnings = WarningsLog(source=source_path.name if source_path else None)
        rules = get_rules(self.language)

        reserved = self.resolve_reserved(text, source_path, warnings)
        classifier = create_classifier(self.language)
        identifiers = IdentifierExtractor(classifier, warnings).extract(
            text, self.language, reserved
        )
        source_file = str(source_path) if source_path else None

        buffer = SourceBuffer(text, source_path)
        if identifiers:
            taken = word_set(text, rules) | reserved.names | reserved.pervasives
            table = RenameMapper().assign(identifiers, self.language, taken, source_file)
            TokenSafeRewriter(self.language, classifier, reserved).rewrite(buffer, table)
        else:
            table = RenameTable(self.language, source_file).freeze()

        logger.debug(
            "%s: %d identifiers renamed, %d reserved names",
            source_file or "<buffer>", len(table), len(reserved),
        )
        return TransformResult(
            language=self.language,
            original_text=text,
            transformed_text=buffer.text,
            table=table,
            identifiers=identifiers,
            reserved=reserved,
            source_path=source_path,
            warnings=warnings.warnings,
        )

    def transform(self, text: str, source_path: Optional[Path] = None) -> TransformResult:
        """
        Strip comments, rename identifiers and re-indent, as configured.

        The result's original_text is the text as given.
        """
        prepared = text
        if self.strip_comments:
            prepared = strip_comments_and_blank_lines(text, self.language)
        result = self.anonymize(prepared, source_path)
        if self.reindent:
            result.transformed_text = format_source(
                result.transformed_text, self.language, self.indent_width
            )
        result.original_text = text
        return result

    def anonymize_file(self, file_path: Path) -> TransformResult:
        """
        Read and transform a file.

        Raises:
            SourceFileError: If the file cannot be read
        """
        text = read_source_file(file_path, self.encoding)
        return self.transform(text, Path(file_path))


def anonymize_text(
    source: str,
    language: Union[str, Language],
    **options,
) -> str:
    """
    Anonymize a source string.

    Args:
        source: The source text
        language: Its language
        **options: Anonymizer options (include_paths, strip_comments, ...),
            plus source_path

    Returns:
        The anonymized text
    """
    source_path = options.pop("source_path", None)
    return Anonymizer(language, **options).transform(source, source_path).transformed_text
