"""
Reserved Symbol Resolver - Builds the set of names that must never change.

For C the set is the fixed keyword/builtin table, the symbols of the
standard headers, and every name declared by a header the file reaches
through its #include graph. For OCaml it is the keyword table plus the
top-level names and module names of the standard library.

The two standard-library scans do not depend on the file being
processed, so they are cached for the whole process, keyed on their
search paths. clear_standard_caches() drops them.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import FrozenSet, Iterator, List, Optional, Sequence, Tuple, Union

from code_anonymizer.core.utils import DEFAULT_ENCODING
from code_anonymizer.exceptions import MissingAuxiliaryFileError
from code_anonymizer.languages.base import Language, get_rules
from code_anonymizer.languages.c_keywords import STANDARD_HEADERS
from code_anonymizer.languages.header_symbols import scan_header_text
from code_anonymizer.languages.include_resolver import (
    IncludeResolver,
    default_system_include_dirs,
)
from code_anonymizer.languages.ocaml_stdlib import (
    OCamlStdlibSymbols,
    find_stdlib_dir,
    scan_stdlib_dir,
)
from code_anonymizer.logging_config import get_logger
from code_anonymizer.warnings_log import WarningsLog

logger = get_logger("reserved")


@dataclass(frozen=True)
class ReservedNameSet:
    """
    Names that are never renamed.

    Attributes:
        names: Keywords, builtins and externally declared symbols
        pervasives: Names visible without qualification (OCaml Stdlib externals)
        qualified: (module, name) references known to the standard library
    """
    names: FrozenSet[str]
    pervasives: FrozenSet[str] = frozenset()
    qualified: FrozenSet[Tuple[str, str]] = frozenset()

    def __contains__(self, name: object) -> bool:
        return name in self.names or name in self.pervasives

    def __len__(self) -> int:
        return len(self.names | self.pervasives)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names | self.pervasives)

    def is_reserved_qualified(self, module: str, name: str) -> bool:
        """Check if Module.name refers to a standard library definition."""
        return (module, name) in self.qualified


@dataclass(frozen=True)
class StandardSymbols:
    """Result of a cached standard-library scan."""
    names: FrozenSet[str]
    warnings: Tuple[str, ...] = ()


@lru_cache(maxsize=None)
def standard_c_symbols(
    search_paths: Tuple[Path, ...],
    encoding: str = DEFAULT_ENCODING,
) -> StandardSymbols:
    """
    Collect the C builtins plus everything the standard headers declare.

    Each standard header is resolved against search_paths and followed
    through its own includes. Missing headers are recorded as warnings.

    Args:
        search_paths: System include directories, in search order
        encoding: Encoding used to read headers

    Returns:
        StandardSymbols with the names and any warnings
    """
    log = WarningsLog(logger_name="reserved")
    resolver = IncludeResolver(search_paths, encoding=encoding, warnings=log)
    names = set(get_rules(Language.C).reserved_words)
    scanned = set()

    for header in STANDARD_HEADERS:
        path = resolver.find_header(header, angled=True)
        if path is None:
            log.add(f"Standard header <{header}> not found")
            continue
        for reached in [path] + resolver.walk(path):
            if reached in scanned:
                continue
            scanned.add(reached)
            names |= scan_header_text(resolver.read(reached)).all_names()

    logger.debug("Standard C symbols: %d names from %d headers", len(names), len(scanned))
    return StandardSymbols(frozenset(names), tuple(log.warnings))


@lru_cache(maxsize=None)
def ocaml_stdlib_symbols(
    directory: Path,
    encoding: str = DEFAULT_ENCODING,
) -> OCamlStdlibSymbols:
    """Scan an OCaml standard library directory once per process."""
    return scan_stdlib_dir(directory, encoding)


def clear_standard_caches() -> None:
    """Forget the cached standard-library scans."""
    standard_c_symbols.cache_clear()
    ocaml_stdlib_symbols.cache_clear()


class ReservedSymbolResolver:
    """
    Computes the ReservedNameSet of one file.

    Usage:
        resolver = ReservedSymbolResolver(include_paths=[Path("include")])
        reserved = resolver.resolve(Path("main.c"), Language.C)
    """

    def __init__(
        self,
        include_paths: Optional[Sequence[Path]] = None,
        system_include_paths: Optional[Sequence[Path]] = None,
        ocaml_stdlib_dir: Optional[Path] = None,
        encoding: str = DEFAULT_ENCODING,
        require_includes: bool = False,
        warnings: Optional[WarningsLog] = None,
    ):
        """
        Initialize the resolver.

        Args:
            include_paths: User include directories (-I), searched first
            system_include_paths: System include directories; None to detect
            ocaml_stdlib_dir: OCaml stdlib directory; None to detect
            encoding: Encoding of auxiliary files
            require_includes: If True, missing auxiliary files raise
            warnings: Log receiving recoverable conditions
        """
        self.include_paths = [Path(p) for p in (include_paths or [])]
        if system_include_paths is None:
            system_include_paths = default_system_include_dirs()
        self.system_include_paths = [Path(p) for p in system_include_paths]
        self.ocaml_stdlib_dir = Path(ocaml_stdlib_dir) if ocaml_stdlib_dir else None
        self.encoding = encoding
        self.require_includes = require_includes
        self.warnings = warnings if warnings is not None else WarningsLog()
        self.include_resolver: Optional[IncludeResolver] = None

    def resolve(
        self,
        file: Optional[Path],
        language: Union[str, Language],
        source_text: Optional[str] = None,
    ) -> ReservedNameSet:
        """
        Build the reserved set for a file.

        Args:
            file: The primary file (may be None when source_text is given)
            language: Language of the file
            source_text: Contents of the file, if already loaded

        Returns:
            ReservedNameSet for the file

        Raises:
            UnsupportedLanguageError: If the language is not registered
            IncludeNotFoundError: If a header is missing and require_includes is set
            MissingAuxiliaryFileError: If the OCaml stdlib is missing in strict mode
        """
        rules = get_rules(language)
        if rules.language is Language.C:
            return self._resolve_c(file, source_text)
        return self._resolve_ocaml()

    def _resolve_c(self, file: Optional[Path], source_text: Optional[str]) -> ReservedNameSet:
        standard = standard_c_symbols(tuple(self.system_include_paths), self.encoding)
        self.warnings.extend(standard.warnings)
        names = set(standard.names)

        self.include_resolver = IncludeResolver(
            self.include_paths + self.system_include_paths,
            encoding=self.encoding,
            require_includes=self.require_includes,
            warnings=self.warnings,
        )
        headers: List[Path] = self.include_resolver.walk(file, source_text)
        for header in headers:
            names |= scan_header_text(self.include_resolver.read(header)).all_names()

        logger.debug("Reserved C names: %d (%d headers reached)", len(names), len(headers))
        return ReservedNameSet(frozenset(names))

    def _resolve_ocaml(self) -> ReservedNameSet:
        names = set(get_rules(Language.OCAML).reserved_words)
        directory = find_stdlib_dir(self.ocaml_stdlib_dir)
        if directory is None:
            missing = self.ocaml_stdlib_dir or "OCaml standard library"
            if self.require_includes:
                raise MissingAuxiliaryFileError(
                    str(missing), f"OCaml standard library directory not found: {missing}"
                )
            self.warnings.add(f"{missing} not found; only keywords are reserved")
            return ReservedNameSet(frozenset(names))

        stdlib = ocaml_stdlib_symbols(directory.resolve(), self.encoding)
        if stdlib.files_scanned == 0:
            self.warnings.add(f"No OCaml sources found in {directory}")
        names |= stdlib.names | stdlib.modules
        logger.debug("Reserved OCaml names: %d", len(names))
        return ReservedNameSet(
            frozenset(names),
            pervasives=stdlib.pervasives,
            qualified=stdlib.qualified,
        )
