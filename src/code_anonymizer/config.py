"""
Configuration - Handles anonymization configuration.

This module handles:
- Configuration dataclass with all options
- JSON configuration file support
- Command-line overrides
- Configuration validation
"""

import json
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from code_anonymizer.exceptions import ConfigError
from code_anonymizer.languages.base import Language, get_rules, supported_languages

_PATH_FIELDS = ("input_path", "output_dir", "ocaml_stdlib_dir", "mapping_dir", "log_file")
_PATH_LIST_FIELDS = ("include_paths", "system_include_paths")


@dataclass
class Config:
    """
    Configuration for source anonymization.

    Attributes:
        input_path: Source file or directory
        output_dir: Directory for anonymized output (None: write beside input)
        language: Language of the sources (None: detect from extension)
        extensions: File extensions to process (None: the language's own)
        encoding: File encoding (default: utf-8)
        include_paths: User include directories, searched first
        system_include_paths: System include directories (None: detect)
        ocaml_stdlib_dir: OCaml standard library directory (None: detect)
        mapping_dir: Directory for rename tables (None: output_dir/mappings)
        save_mappings: Write a JSON and a CSV rename table per file
        strip_comments: Remove comments and blank lines before renaming
        reindent: Re-indent the output
        indent_width: Spaces per indent level
        require_includes: Fail instead of warning on missing headers
        dry_run: Don't write output files
        overwrite: Overwrite existing output files
        verbose: Enable verbose output
        quiet: Suppress normal output
        log_level: Logging level
        log_file: Optional log file
    """

    input_path: Path = field(default_factory=lambda: Path("."))
    output_dir: Optional[Path] = None
    language: Optional[Language] = None
    extensions: Optional[list[str]] = None
    encoding: str = "utf-8"
    include_paths: list[Path] = field(default_factory=list)
    system_include_paths: Optional[list[Path]] = None
    ocaml_stdlib_dir: Optional[Path] = None
    mapping_dir: Optional[Path] = None
    save_mappings: bool = True

    # Transformation options
    strip_comments: bool = True
    reindent: bool = True
    indent_width: int = 4
    require_includes: bool = False

    # Run modes
    dry_run: bool = False
    overwrite: bool = False

    # Output options
    verbose: bool = False
    quiet: bool = False
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    def __post_init__(self):
        if self.language is not None and not isinstance(self.language, Language):
            self.language = Language.from_name(self.language)

    def get_extensions(self) -> list[str]:
        """File extensions to discover, in lower case."""
        if self.extensions:
            return [e.lower() if e.startswith(".") else f".{e.lower()}" for e in self.extensions]
        if self.language is not None:
            return list(get_rules(self.language).extensions)
        exts: list[str] = []
        for name in supported_languages():
            exts.extend(get_rules(name).extensions)
        return exts

    def get_mapping_dir(self) -> Optional[Path]:
        """Directory receiving rename tables."""
        if self.mapping_dir is not None:
            return self.mapping_dir
        if self.output_dir is not None:
            return self.output_dir / "mappings"
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        data = {}
        for key, value in asdict(self).items():
            if isinstance(value, Path):
                data[key] = str(value)
            elif isinstance(value, list) and value and isinstance(value[0], Path):
                data[key] = [str(p) for p in value]
            elif isinstance(value, Enum):
                data[key] = value.value
            else:
                data[key] = value
        return data

    def save_to_file(self, path: Path) -> None:
        """Save configuration to JSON file."""
        Path(path).write_text(json.dumps(self.to_dict(), indent=2))

    @classmethod
    def load_from_file(cls, path: Path) -> "Config":
        """
        Load configuration from JSON file.

        Raises:
            ConfigError: If the file cannot be read or parsed
        """
        try:
            data = json.loads(Path(path).read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot load configuration {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration {path} must contain a JSON object")
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Create config from dictionary."""
        data = dict(data)
        # Convert path strings to Path objects
        for key in _PATH_FIELDS:
            if data.get(key):
                data[key] = Path(data[key])
        for key in _PATH_LIST_FIELDS:
            if data.get(key) is not None:
                data[key] = [Path(p) for p in data[key]]

        if data.get("language"):
            data["language"] = Language.from_name(data["language"])

        # Filter only known fields
        known_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered_data = {k: v for k, v in data.items() if k in known_fields}

        return cls(**filtered_data)

    def validate(self) -> list[str]:
        """
        Validate configuration.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        if not self.input_path.exists():
            errors.append(f"Input path does not exist: {self.input_path}")

        if not self.dry_run and self.output_dir is not None:
            if self.output_dir.exists() and not self.output_dir.is_dir():
                errors.append(f"Output path is not a directory: {self.output_dir}")

        for include_path in self.include_paths:
            if not include_path.is_dir():
                errors.append(f"Include path does not exist: {include_path}")

        if self.ocaml_stdlib_dir is not None and not self.ocaml_stdlib_dir.is_dir():
            errors.append(f"OCaml standard library directory does not exist: {self.ocaml_stdlib_dir}")

        if self.indent_width < 0:
            errors.append(f"Invalid indent width: {self.indent_width}")

        if self.encoding:
            try:
                "".encode(self.encoding)
            except LookupError:
                errors.append(f"Unknown encoding: {self.encoding}")

        valid_log_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if self.log_level.upper() not in valid_log_levels:
            errors.append(f"Invalid log level: {self.log_level}")

        return errors

    def is_valid(self) -> bool:
        """Check if configuration is valid."""
        return len(self.validate()) == 0


def create_default_config() -> Config:
    """Create a configuration with default values."""
    return Config()


def merge_configs(base: Config, override: Config) -> Config:
    """
    Merge two configurations, with override taking precedence.

    Args:
        base: Base configuration
        override: Override configuration

    Returns:
        Merged configuration
    """
    base_dict = base.to_dict()
    override_dict = override.to_dict()

    # Only override non-default values from override
    merged = {}
    default = create_default_config().to_dict()

    for key in base_dict:
        if override_dict.get(key) != default.get(key):
            merged[key] = override_dict[key]
        else:
            merged[key] = base_dict[key]

    return Config.from_dict(merged)
