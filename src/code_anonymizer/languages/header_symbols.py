"""
C Header Symbol Scanner - Collects names declared by a header.

This module extracts the names a header makes visible to its includers:
- extern function and variable declarations (every declarator of a list)
- other top-level declarations: prototypes, inline function definitions
  and variables
- #define macro names
- typedef names (including typedef struct {...} Name; and function
  pointer typedefs), with pointer markers stripped
- struct, union and enum tag names, and enumeration constants

Declarations are read as top-level statements: preprocessor lines are
blanked, brace bodies are skipped, and ``extern "C" { ... }`` blocks are
transparent.
"""

import re
from dataclasses import dataclass, field
from typing import List, Set

from code_anonymizer.core.comments import strip_comments
from code_anonymizer.languages.base import Language
from code_anonymizer.languages.c_keywords import C_KEYWORDS


@dataclass
class HeaderSymbols:
    """
    Names declared by one header.

    Attributes:
        externs: Names from extern declarations
        declarations: Names from prototypes, function definitions and
            variables declared without extern
        macros: Names from #define directives
        typedefs: Names introduced by typedef
        tags: struct/union/enum tag names
        enumerators: Enumeration constants
    """
    externs: Set[str] = field(default_factory=set)
    macros: Set[str] = field(default_factory=set)
    typedefs: Set[str] = field(default_factory=set)
    tags: Set[str] = field(default_factory=set)
    declarations: Set[str] = field(default_factory=set)
    enumerators: Set[str] = field(default_factory=set)

    def all_names(self) -> Set[str]:
        """Union of every category."""
        return (
            self.externs | self.declarations | self.macros
            | self.typedefs | self.tags | self.enumerators
        )

    def __len__(self) -> int:
        return len(self.all_names())


DEFINE_PATTERN = re.compile(r"^[ \t]*#[ \t]*define[ \t]+([A-Za-z_]\w*)", re.MULTILINE)

# a directive line with its backslash continuations
PREPROCESSOR_LINE = re.compile(r"^[ \t]*#(?:[^\n]*\\\n)*[^\n]*", re.MULTILINE)

LINKAGE_SPEC = re.compile(r"\bextern\s*\"C(?:\+\+)?\"")

LINKAGE_BLOCK = re.compile(r"\bextern\s*\"C(?:\+\+)?\"\s*$")

EXTERN_KEYWORD = re.compile(r"\bextern\b")

TAG_PATTERN = re.compile(r"\b(?:struct|union|enum)\s+([A-Za-z_]\w*)")

TAG_ONLY = re.compile(r"(?:struct|union|enum)(?:\s+[A-Za-z_]\w*)?")

ENUM_BODY = re.compile(r"\benum\b\s*(?:[A-Za-z_]\w*\s*)?\{([^{}]*)\}")

ENUMERATOR_NAME = re.compile(r"\s*([A-Za-z_]\w*)")

TYPEDEF_PATTERN = re.compile(r"\btypedef\b")

FUNCTION_POINTER_NAME = re.compile(r"\(\s*\*+\s*(?:const\s+)?([A-Za-z_]\w*)\s*\)")

FUNCTION_NAME = re.compile(r"([A-Za-z_]\w*)\s*\(")

ATTRIBUTE_PREFIX = re.compile(r"\b(?:__attribute__|__asm__|__asm|asm|__declspec)\s*\(")

IDENTIFIER = re.compile(r"[A-Za-z_]\w*")

# glibc annotation macros that may trail a declarator
_TRAILING_ANNOTATIONS = re.compile(r"\b__(?:attribute__|asm__|THROW|nonnull|wur|attr_\w+)\b.*$", re.DOTALL)


def extract_defines(text: str) -> Set[str]:
    """Names of all macros defined in text."""
    return set(DEFINE_PATTERN.findall(text))


def extract_externs(text: str) -> Set[str]:
    """Names of all extern declarations in text, every declarator of a list included."""
    names = set()
    for statement in _top_level_statements(text):
        if _is_extern(statement) and not TYPEDEF_PATTERN.search(statement):
            names |= _statement_names(statement)
    return names


def extract_declarations(text: str) -> Set[str]:
    """
    Names declared at top level without extern.

    Covers function prototypes (``int helper(int x);``), function
    definitions (only the function name, never its parameters or body)
    and variable declarations. typedef statements are left to
    extract_typedefs.
    """
    names = set()
    for statement in _top_level_statements(text):
        if _is_extern(statement) or TYPEDEF_PATTERN.search(statement):
            continue
        names |= _statement_names(statement)
    return names


def extract_enumerators(text: str) -> Set[str]:
    """Enumeration constants of every enum body in text."""
    names = set()
    for match in ENUM_BODY.finditer(PREPROCESSOR_LINE.sub("", text)):
        for item in _split_declarators(match.group(1)):
            name = ENUMERATOR_NAME.match(item)
            if name:
                names.add(name.group(1))
    return names


def extract_tags(text: str) -> Set[str]:
    """struct/union/enum tag names in text."""
    return set(TAG_PATTERN.findall(text))


def extract_typedefs(text: str) -> Set[str]:
    """
    Names introduced by typedef declarations.

    Each typedef statement is read up to the ';' at its own brace depth,
    brace bodies are dropped, and the declarator list is split on
    top-level commas. Every declarator contributes its name: the one
    inside (*NAME) for function pointers, otherwise its last identifier.
    """
    names = set()
    for match in TYPEDEF_PATTERN.finditer(text):
        statement = _read_statement(text, match.end())
        if statement is None:
            continue
        for declarator in _split_declarators(_drop_brace_bodies(statement)):
            name = _declarator_name(declarator)
            if name:
                names.add(name)
    return names


def _read_statement(text: str, start: int):
    depth = 0
    for pos in range(start, len(text)):
        char = text[pos]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
        elif char == ";" and depth == 0:
            return text[start:pos]
    return None


def _drop_brace_bodies(statement: str) -> str:
    result = []
    depth = 0
    for char in statement:
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
        elif depth == 0:
            result.append(char)
    return "".join(result)


def _split_declarators(statement: str) -> List[str]:
    parts = []
    depth = 0
    current = []
    for char in statement:
        if char in "([":
            depth += 1
        elif char in ")]":
            depth -= 1
        if char == "," and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    parts.append("".join(current))
    return parts


def _declarator_name(declarator: str):
    pointer = FUNCTION_POINTER_NAME.search(declarator)
    if pointer:
        return pointer.group(1)
    declarator = _TRAILING_ANNOTATIONS.sub("", declarator)
    # drop array suffixes, then pointer markers
    declarator = re.sub(r"\[[^\]]*\]", "", declarator).strip().rstrip("*").strip()
    words = [w for w in IDENTIFIER.findall(declarator) if w not in C_KEYWORDS]
    return words[-1] if words else None


def _is_extern(statement: str) -> bool:
    return EXTERN_KEYWORD.search(LINKAGE_SPEC.sub(" ", statement)) is not None


def _top_level_statements(text: str) -> List[str]:
    """
    Split text into the statements found at brace depth 0.

    Brace bodies are dropped. A body following ``)`` ends a function
    definition, so its head is a statement on its own.
    """
    code = PREPROCESSOR_LINE.sub("", text)
    statements = []
    current: List[str] = []
    pos = 0
    while pos < len(code):
        char = code[pos]
        if char == ";":
            statements.append("".join(current))
            current = []
        elif char == "{":
            head = "".join(current)
            if LINKAGE_BLOCK.search(head):
                current = []
            else:
                pos = _matching_brace(code, pos)
                if head.rstrip().endswith(")"):
                    statements.append(head)
                    current = []
        elif char == "}":
            # end of an extern "C" block
            current = []
        else:
            current.append(char)
        pos += 1
    return [statement.strip() for statement in statements if statement.strip()]


def _matching_brace(code: str, start: int) -> int:
    depth = 0
    for pos in range(start, len(code)):
        if code[pos] == "{":
            depth += 1
        elif code[pos] == "}":
            depth -= 1
            if depth == 0:
                return pos
    return len(code)


def _drop_attributes(declarator: str) -> str:
    while True:
        match = ATTRIBUTE_PREFIX.search(declarator)
        if match is None:
            return declarator
        depth = 0
        end = len(declarator)
        for pos in range(match.end() - 1, len(declarator)):
            if declarator[pos] == "(":
                depth += 1
            elif declarator[pos] == ")":
                depth -= 1
                if depth == 0:
                    end = pos + 1
                    break
        declarator = declarator[:match.start()] + " " + declarator[end:]


def _cut_initializer(declarator: str) -> str:
    depth = 0
    for pos, char in enumerate(declarator):
        if char in "([":
            depth += 1
        elif char in ")]":
            depth -= 1
        elif char == "=" and depth == 0:
            return declarator[:pos]
    return declarator


def _statement_names(statement: str) -> Set[str]:
    names = set()
    statement = LINKAGE_SPEC.sub(" ", statement)
    for declarator in _split_declarators(statement):
        declarator = _drop_attributes(_cut_initializer(declarator)).strip()
        if not declarator or TAG_ONLY.fullmatch(declarator):
            continue
        name = _declared_name(declarator)
        if name:
            names.add(name)
    return names


def _declared_name(declarator: str):
    # the function name comes first; parameters may hold (*name) pointers
    bare = re.sub(r"\[[^\]]*\]", "", _TRAILING_ANNOTATIONS.sub("", declarator))
    for match in FUNCTION_NAME.finditer(bare):
        if match.group(1) not in C_KEYWORDS:
            return match.group(1)
    return _declarator_name(declarator)


def scan_header_text(text: str) -> HeaderSymbols:
    """
    Extract every declared name from header text.

    Args:
        text: Header contents (comments are stripped here)

    Returns:
        HeaderSymbols with each category filled in
    """
    code = strip_comments(text, Language.C)
    return HeaderSymbols(
        externs=extract_externs(code),
        macros=extract_defines(code),
        typedefs=extract_typedefs(code),
        tags=extract_tags(code),
        declarations=extract_declarations(code),
        enumerators=extract_enumerators(code),
    )
