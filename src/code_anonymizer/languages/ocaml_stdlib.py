"""
OCaml Standard Library Scanner - Collects names the stdlib defines.

The scan reads every ``*.ml`` file of the standard library directory:
- top-level ``let``, ``let rec``, ``and`` and ``external`` names are reserved
- each file contributes its module name (``stdlib__list.ml`` -> ``List``)
- ``Module.name`` pairs form the qualified set
- ``external`` names of the implicitly opened module (``stdlib.ml``, or
  ``pervasives.ml`` on old compilers) form the pervasives set

Installations that ship only interfaces are read from ``*.mli`` instead,
using ``val`` and ``external`` declarations.
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, List, Optional, Set, Tuple

from code_anonymizer.core.comments import strip_comments
from code_anonymizer.core.utils import DEFAULT_ENCODING, read_source_file
from code_anonymizer.exceptions import MissingAuxiliaryFileError
from code_anonymizer.languages.base import Language
from code_anonymizer.logging_config import get_logger

logger = get_logger("ocaml_stdlib")

# Top-level definitions start in column 0
TOPLEVEL_BINDING = re.compile(r"^(?:let(?:[ \t]+rec)?|and)[ \t]+([a-z_][\w']*)", re.MULTILINE)
TOPLEVEL_EXTERNAL = re.compile(r"^external[ \t]+([a-z_][\w']*)", re.MULTILINE)
TOPLEVEL_VAL = re.compile(r"^val[ \t]+([a-z_][\w']*)", re.MULTILINE)

PERVASIVE_MODULES = ("stdlib", "pervasives")

MODULE_PREFIX = "stdlib__"


@dataclass(frozen=True)
class OCamlStdlibSymbols:
    """
    Names defined by an OCaml standard library.

    Attributes:
        names: Top-level value names of every module
        modules: Module names
        pervasives: Externals of the implicitly opened module
        qualified: (module, name) pairs
        directory: The scanned directory, None when nothing was scanned
    """
    names: FrozenSet[str] = frozenset()
    modules: FrozenSet[str] = frozenset()
    pervasives: FrozenSet[str] = frozenset()
    qualified: FrozenSet[Tuple[str, str]] = frozenset()
    directory: Optional[Path] = None
    files_scanned: int = field(default=0, compare=False)

    @property
    def is_empty(self) -> bool:
        return not self.names and not self.modules


def module_name_from_path(path: Path) -> str:
    """
    Derive the OCaml module name of a source file.

    Examples:
        stdlib__list.ml -> List
        stdlib__Hashtbl.ml -> Hashtbl
        camlinternalFormat.ml -> CamlinternalFormat
    """
    stem = Path(path).stem
    if stem.startswith(MODULE_PREFIX):
        stem = stem[len(MODULE_PREFIX):]
    return stem[:1].upper() + stem[1:]


def scan_module_source(text: str, interface: bool = False) -> Tuple[Set[str], Set[str]]:
    """
    Extract top-level names from one module.

    Args:
        text: Module source (implementation or interface)
        interface: True for .mli text

    Returns:
        Tuple of (all top-level names, names declared external)
    """
    code = strip_comments(text, Language.OCAML)
    externals = set(TOPLEVEL_EXTERNAL.findall(code))
    pattern = TOPLEVEL_VAL if interface else TOPLEVEL_BINDING
    names = set(pattern.findall(code)) | externals
    return names, externals


def default_stdlib_dirs() -> List[Path]:
    """Candidate standard library directories, most specific first."""
    candidates = []
    ocamllib = os.environ.get("OCAMLLIB") or os.environ.get("CAMLLIB")
    if ocamllib:
        candidates.append(Path(ocamllib))
    candidates.extend([
        Path("/usr/lib/ocaml"),
        Path("/usr/local/lib/ocaml"),
        Path.home() / ".opam" / "default" / "lib" / "ocaml",
    ])
    return candidates


def find_stdlib_dir(configured: Optional[Path] = None) -> Optional[Path]:
    """
    Pick the standard library directory to scan.

    Args:
        configured: Explicit directory; when given, no other is tried

    Returns:
        The directory, or None if none exists
    """
    if configured is not None:
        return Path(configured) if Path(configured).is_dir() else None
    for candidate in default_stdlib_dirs():
        if candidate.is_dir():
            return candidate
    return None


def scan_stdlib_dir(directory: Path, encoding: str = DEFAULT_ENCODING) -> OCamlStdlibSymbols:
    """
    Scan a standard library directory.

    Args:
        directory: Directory holding the stdlib sources
        encoding: Encoding of the sources

    Returns:
        OCamlStdlibSymbols for the directory

    Raises:
        MissingAuxiliaryFileError: If the directory does not exist
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise MissingAuxiliaryFileError(
            str(directory), f"OCaml standard library directory not found: {directory}"
        )

    sources = sorted(directory.glob("*.ml"))
    interface = False
    if not sources:
        sources = sorted(directory.glob("*.mli"))
        interface = True

    names: Set[str] = set()
    modules: Set[str] = set()
    pervasives: Set[str] = set()
    qualified: Set[Tuple[str, str]] = set()

    for source in sources:
        module = module_name_from_path(source)
        module_names, externals = scan_module_source(
            read_source_file(source, encoding), interface
        )
        modules.add(module)
        names |= module_names
        qualified.update((module, name) for name in module_names)
        if source.stem.lower() in PERVASIVE_MODULES:
            pervasives |= externals

    logger.debug(
        "Scanned %d stdlib files in %s: %d names, %d modules",
        len(sources), directory, len(names), len(modules),
    )
    return OCamlStdlibSymbols(
        names=frozenset(names),
        modules=frozenset(modules),
        pervasives=frozenset(pervasives),
        qualified=frozenset(qualified),
        directory=directory,
        files_scanned=len(sources),
    )
