"""
Main entry point for Code Anonymizer.

This module orchestrates the full anonymization pipeline and provides
a programmatic API for the anonymization process.
"""

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from code_anonymizer import __version__
from code_anonymizer.config import Config, create_default_config
from code_anonymizer.core.anonymizer import Anonymizer, TransformResult
from code_anonymizer.core.mapper import RenameTable
from code_anonymizer.core.utils import ANON_SUFFIX
from code_anonymizer.exceptions import AnonymizerError
from code_anonymizer.languages.base import Language
from code_anonymizer.logging_config import get_logger
from code_anonymizer.output.report import AnonymizationReport, ReportGenerator
from code_anonymizer.output.validator import OutputValidator, ValidationResult
from code_anonymizer.output.writer import OutputWriter, WriterConfig

logger = get_logger("main")

# Type aliases for callbacks
OnFileStartCallback = Callable[[Path, int, int], None]  # (file_path, index, total)
OnFileCompleteCallback = Callable[[Path, Optional[TransformResult]], None]
OnFilesDiscoveredCallback = Callable[[List[Path]], None]

REPORT_FILENAME = "anonymization_report.json"


@dataclass
class AnonymizationResult:
    """Result of running the full anonymization pipeline."""
    success: bool
    file_results: List[TransformResult] = field(default_factory=list)
    tables: Dict[Path, RenameTable] = field(default_factory=dict)
    output_paths: Dict[Path, Path] = field(default_factory=dict)
    mapping_files: List[Path] = field(default_factory=list)
    report: Optional[AnonymizationReport] = None
    validation_result: Optional[ValidationResult] = None
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    processing_time: float = 0.0


class AnonymizationPipeline:
    """
    Orchestrates the anonymization of a file or a directory tree.

    Every file is processed on its own: a new Anonymizer (and with it a
    new resolver, extractor, mapper and rewriter) is built per file, and
    the rename tables of different files are unrelated.

    Usage:
        pipeline = AnonymizationPipeline(config)
        result = pipeline.run()
    """

    def __init__(self, config: Optional[Config] = None):
        """
        Initialize the pipeline.

        Args:
            config: Configuration object (uses defaults if not provided)
        """
        self.config = config or create_default_config()
        self.writer: Optional[OutputWriter] = None

    @property
    def base_directory(self) -> Path:
        """Directory that relative output paths are computed from."""
        if self.config.input_path.is_dir():
            return self.config.input_path
        return self.config.input_path.parent

    def setup(self) -> None:
        """Set up pipeline components."""
        writer_config = WriterConfig(
            output_directory=self.config.output_dir,
            base_directory=self.base_directory,
            encoding=self.config.encoding,
            overwrite_existing=self.config.overwrite,
        )
        self.writer = OutputWriter(writer_config)

    def discover_files(self) -> List[Path]:
        """
        Find the source files to process.

        A single input file is always processed. In a directory, files
        are matched by extension; previous ``_anon`` outputs and anything
        under the output directory are skipped.

        Returns:
            Sorted list of file paths
        """
        input_path = self.config.input_path
        if input_path.is_file():
            return [input_path]

        extensions = set(self.config.get_extensions())
        output_dir = self.config.output_dir.resolve() if self.config.output_dir else None
        files = []
        for path in input_path.rglob("*"):
            if not path.is_file() or path.suffix.lower() not in extensions:
                continue
            if output_dir is not None and output_dir in path.resolve().parents:
                continue
            if output_dir is None and path.stem.endswith(ANON_SUFFIX):
                continue
            files.append(path)
        return sorted(files)

    def language_for(self, file_path: Path) -> Language:
        """Language of a file: the configured one, else by extension."""
        if self.config.language is not None:
            return self.config.language
        return Language.from_path(file_path)

    def run(
        self,
        on_file_start: Optional[OnFileStartCallback] = None,
        on_file_complete: Optional[OnFileCompleteCallback] = None,
        on_files_discovered: Optional[OnFilesDiscoveredCallback] = None,
    ) -> AnonymizationResult:
        """
        Run the full anonymization pipeline.

        Args:
            on_file_start: Callback before processing each file (file_path, index, total)
            on_file_complete: Callback after processing each file (file_path, result)
            on_files_discovered: Callback after file discovery (list of files)

        Returns:
            AnonymizationResult with all details
        """
        start_time = time.time()
        result = AnonymizationResult(success=True)

        config_errors = self.config.validate()
        if config_errors:
            result.success = False
            result.errors.extend(config_errors)
            return result

        self.setup()
        files = self.discover_files()
        logger.info("Found %d files to process", len(files))
        if on_files_discovered:
            on_files_discovered(files)

        validation = ValidationResult()
        for i, file_path in enumerate(files, 1):
            if on_file_start:
                on_file_start(file_path, i, len(files))

            file_result = None
            try:
                file_result = self._process_file(file_path, result, validation)
            except (AnonymizerError, OSError) as e:
                message = f"Error processing {file_path}: {e}"
                logger.error(message)
                result.errors.append(message)

            if on_file_complete:
                on_file_complete(file_path, file_result)

        result.validation_result = validation
        result.warnings.extend(str(issue) for issue in validation.issues)
        if not validation.is_valid:
            result.errors.extend(str(issue) for issue in validation.errors)

        result.processing_time = time.time() - start_time
        report_generator = ReportGenerator(
            input_path=self.config.input_path,
            output_directory=self.config.output_dir,
            tool_version=__version__,
        )
        result.report = report_generator.generate_report(
            result.file_results,
            output_paths=result.output_paths,
            errors=result.errors,
            processing_time=result.processing_time,
        )
        if self.config.output_dir is not None and not self.config.dry_run:
            self.config.output_dir.mkdir(parents=True, exist_ok=True)
            result.report.save_json(self.config.output_dir / REPORT_FILENAME)

        result.success = not result.errors
        return result

    def _process_file(
        self,
        file_path: Path,
        result: AnonymizationResult,
        validation: ValidationResult,
    ) -> TransformResult:
        """Anonymize, write, save the table of and validate one file."""
        language = self.language_for(file_path)
        anonymizer = Anonymizer.from_config(self.config, language)
        file_result = anonymizer.anonymize_file(file_path)

        result.file_results.append(file_result)
        result.tables[file_path] = file_result.table
        result.warnings.extend(file_result.warnings)

        validation.merge(
            OutputValidator(language).validate_text(
                file_result.transformed_text,
                file_result.table,
                file_result.reserved,
                file_path,
            )
        )

        if self.config.dry_run:
            return file_result

        write_result = self.writer.write_file(file_path, file_result.transformed_text)
        if not write_result.success:
            raise AnonymizerError(write_result.error_message)
        result.output_paths[file_path] = write_result.output_path

        if self.config.save_mappings:
            result.mapping_files.extend(
                self._save_table(file_path, write_result.output_path, file_result.table)
            )
        return file_result

    def _save_table(self, file_path: Path, output_path: Path, table: RenameTable) -> List[Path]:
        """Save a file's rename table as JSON and CSV."""
        mapping_dir = self.config.get_mapping_dir()
        if mapping_dir is None:
            stem = output_path
        else:
            try:
                relative = file_path.relative_to(self.base_directory)
            except ValueError:
                relative = Path(file_path.name)
            stem = mapping_dir / relative
        stem.parent.mkdir(parents=True, exist_ok=True)

        json_path = stem.with_name(stem.name + ".map.json")
        csv_path = stem.with_name(stem.name + ".map.csv")
        table.save_to_file(json_path)
        table.save_to_csv(csv_path)
        logger.debug("Saved rename table of %s to %s", file_path, json_path)
        return [json_path, csv_path]


def anonymize_file(
    path: Path,
    output_path: Optional[Path] = None,
    config: Optional[Config] = None,
) -> TransformResult:
    """
    Anonymize one file and write the result.

    Args:
        path: Source file
        output_path: Destination (default: ``<stem>_anon<suffix>`` beside
            the input, or under config.output_dir)
        config: Options; input_path is ignored

    Returns:
        TransformResult of the file
    """
    config = config or create_default_config()
    path = Path(path)
    anonymizer = Anonymizer.from_config(config, config.language or Language.from_path(path))
    file_result = anonymizer.anonymize_file(path)
    if config.dry_run:
        return file_result

    writer = OutputWriter(
        WriterConfig(
            output_directory=config.output_dir,
            base_directory=path.parent,
            encoding=config.encoding,
            overwrite_existing=config.overwrite,
        )
    )
    write_result = writer.write_file(path, file_result.transformed_text, output_path)
    if not write_result.success:
        raise AnonymizerError(write_result.error_message)
    return file_result


def anonymize_directory(
    input_dir: Path,
    output_dir: Optional[Path],
    **kwargs,
) -> AnonymizationResult:
    """
    Convenience function to anonymize a directory.

    Args:
        input_dir: Input directory with source files
        output_dir: Output directory for anonymized files
        **kwargs: Additional configuration options

    Returns:
        AnonymizationResult with details
    """
    config = Config(
        input_path=Path(input_dir),
        output_dir=Path(output_dir) if output_dir is not None else None,
        **kwargs,
    )
    pipeline = AnonymizationPipeline(config)
    return pipeline.run()
