"""
C Include Resolver - Handles #include directives and the header graph.

This module handles:
- Parsing #include / #include_next / #import directives
- Locating headers (quoted names relative to the including file first,
  then the search directories; angled names in the search directories)
- Depth-first traversal of the include graph with cycle breaking
- Recording unresolved headers as warnings (or raising in strict mode)
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from code_anonymizer.core.classifier import CClassifier, LexicalCategory
from code_anonymizer.core.utils import DEFAULT_ENCODING, line_number_at, read_source_file
from code_anonymizer.exceptions import IncludeNotFoundError, SourceFileError
from code_anonymizer.logging_config import get_logger
from code_anonymizer.warnings_log import WarningsLog

logger = get_logger(__name__.rsplit(".", 1)[-1])


@dataclass
class IncludeDirective:
    """
    Represents a parsed #include directive.

    Attributes:
        header: The header name between the delimiters
        angled: True for <header>, False for "header"
        directive: include, include_next or import
        line_number: Line where the directive appears
        source_file: File containing the directive
        raw_text: The directive text as written
    """
    header: str
    angled: bool
    directive: str = "include"
    line_number: int = 0
    source_file: Optional[str] = None
    raw_text: str = ""

    @property
    def is_next(self) -> bool:
        """Check if this is a GNU #include_next."""
        return self.directive == "include_next"


# Handles: #include <name>, #include "name", #include_next, #import
INCLUDE_PATTERN = re.compile(
    r"^[ \t]*#[ \t]*(include_next|include|import)"  # Directive
    r"[ \t]*(?:<([^>\n]+)>|\"([^\"\n]+)\")",  # Angled or quoted name
    re.MULTILINE,
)

# Directory of the primary buffer when it has no file on disk
BUFFER_KEY = Path("<buffer>")


def find_include_directives(
    text: str,
    filename: Optional[str] = None,
) -> List[IncludeDirective]:
    """
    Find all #include directives in a buffer.

    Directives inside comments are ignored.

    Args:
        text: The source text
        filename: Name of the source file

    Returns:
        List of IncludeDirective objects in source order
    """
    directives = []
    classifier = None
    for match in INCLUDE_PATTERN.finditer(text):
        if "/*" in text or "//" in text:
            classifier = classifier or CClassifier()
            if classifier.classify(text, match.start(1)) is LexicalCategory.COMMENT:
                continue
        angled = match.group(2) is not None
        directives.append(
            IncludeDirective(
                header=(match.group(2) if angled else match.group(3)).strip(),
                angled=angled,
                directive=match.group(1),
                line_number=line_number_at(text, match.start()),
                source_file=filename,
                raw_text=match.group(0).strip(),
            )
        )
    return directives


def default_system_include_dirs() -> List[Path]:
    """
    Locate the system include directories of this machine.

    Order follows the compiler: GCC builtin headers, /usr/local/include,
    multiarch directories, /usr/include. Only existing directories are
    returned.
    """
    candidates: List[Path] = []
    gcc_root = Path("/usr/lib/gcc")
    if gcc_root.is_dir():
        candidates.extend(sorted(gcc_root.glob("*/*/include"), reverse=True))
    candidates.append(Path("/usr/local/include"))
    usr_include = Path("/usr/include")
    if usr_include.is_dir():
        candidates.extend(sorted(usr_include.glob("*-linux-gnu*")))
    candidates.append(usr_include)
    return [path for path in candidates if path.is_dir()]


class IncludeResolver:
    """
    Resolves #include directives and walks the include graph.

    Each file is read and parsed at most once per resolver instance; the
    direct includes of every parsed file are kept in ``graph``.

    Usage:
        resolver = IncludeResolver(search_paths=[Path("include/")])
        headers = resolver.walk(Path("main.c"))
    """

    def __init__(
        self,
        search_paths: Optional[Sequence[Path]] = None,
        encoding: str = DEFAULT_ENCODING,
        require_includes: bool = False,
        warnings: Optional[WarningsLog] = None,
    ):
        """
        Initialize the include resolver.

        Args:
            search_paths: Directories searched for headers, in order
            encoding: Encoding used to read headers
            require_includes: If True, raise for unresolved headers
            warnings: Log receiving unresolved-header warnings
        """
        self.search_paths: List[Path] = [Path(p) for p in (search_paths or [])]
        self.encoding = encoding
        self.require_includes = require_includes
        self.warnings = warnings if warnings is not None else WarningsLog()
        # file -> files it directly includes
        self.graph: Dict[Path, List[Path]] = {}
        self.parse_counts: Dict[Path, int] = {}
        self._texts: Dict[Path, str] = {}
        self._header_locations: Dict[Tuple[str, bool, Optional[Path], int], Optional[Path]] = {}

    def add_search_path(self, path: Path) -> None:
        """Add a directory to search for headers."""
        path = Path(path)
        if path not in self.search_paths:
            self.search_paths.append(path)

    def find_header(
        self,
        header: str,
        angled: bool = True,
        including_dir: Optional[Path] = None,
        start_index: int = 0,
    ) -> Optional[Path]:
        """
        Find a header file by name.

        Args:
            header: The header name from the directive
            angled: True for <header>
            including_dir: Directory of the including file, tried first for
                quoted names
            start_index: First search directory to consider (include_next)

        Returns:
            Path to the header, or None if not found
        """
        key = (header, angled, including_dir, start_index)
        if key in self._header_locations:
            return self._header_locations[key]

        candidates = []
        if not angled and including_dir is not None:
            candidates.append(including_dir / header)
        candidates.extend(d / header for d in self.search_paths[start_index:])

        found = None
        for candidate in candidates:
            if candidate.is_file():
                found = candidate.resolve()
                break
        self._header_locations[key] = found
        return found

    def read(self, path: Path) -> str:
        """Get the contents of a file reached by the resolver."""
        if path not in self._texts:
            self._texts[path] = read_source_file(path, self.encoding)
        return self._texts[path]

    def direct_includes(self, path: Path, text: Optional[str] = None) -> List[Path]:
        """
        Resolve the headers a file includes directly.

        Args:
            path: The including file (BUFFER_KEY for an in-memory buffer)
            text: Contents to use instead of reading path

        Returns:
            Resolved header paths, in directive order

        Raises:
            IncludeNotFoundError: If a header is missing and require_includes is set
        """
        if path in self.graph:
            return self.graph[path]

        if text is None:
            try:
                text = self.read(path)
            except SourceFileError as e:
                self.warnings.add(f"Cannot read header {path}: {e.reason}")
                self.graph[path] = []
                return []
        else:
            self._texts[path] = text
        self.parse_counts[path] = self.parse_counts.get(path, 0) + 1

        including_dir = None if path == BUFFER_KEY else path.parent
        resolved: List[Path] = []
        for directive in find_include_directives(text, str(path)):
            start_index = self._next_index(path) if directive.is_next else 0
            header_path = self.find_header(
                directive.header,
                directive.angled and not directive.is_next,
                None if directive.is_next else including_dir,
                start_index,
            )
            if header_path is not None:
                resolved.append(header_path)
                continue
            if self.require_includes:
                raise IncludeNotFoundError(directive.header, str(path), directive.line_number)
            self.warnings.add(
                f"Header '{directive.header}' not found (included from {path}:{directive.line_number})"
            )

        self.graph[path] = resolved
        return resolved

    def _next_index(self, path: Path) -> int:
        # include_next continues after the search directory holding path
        for index, directory in enumerate(self.search_paths):
            try:
                path.relative_to(directory.resolve())
            except ValueError:
                continue
            return index + 1
        return 0

    def walk(self, path: Optional[Path] = None, text: Optional[str] = None) -> List[Path]:
        """
        Collect every header reachable from a file.

        Traversal is depth-first; a header that is already on the current
        include stack is skipped, which terminates include cycles.

        Args:
            path: The primary file (None for an in-memory buffer)
            text: Contents of the primary file, if already loaded

        Returns:
            Reached headers in discovery order, the primary file excluded
        """
        root = Path(path).resolve() if path is not None else BUFFER_KEY
        reached: Dict[Path, None] = {}
        stack: List[Path] = []

        def visit(node: Path, node_text: Optional[str]) -> None:
            stack.append(node)
            for header in self.direct_includes(node, node_text):
                if header in stack:
                    logger.debug("Include cycle: %s -> %s", node, header)
                    continue
                if header in reached:
                    continue
                reached[header] = None
                visit(header, None)
            stack.pop()

        visit(root, text)
        reached.pop(root, None)
        return list(reached)
