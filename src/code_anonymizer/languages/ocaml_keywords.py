"""
OCaml Reserved Words - Keywords and predefined names.

Predefined types, constructors and exceptions live in the compiler's
initial environment, not in any .ml file of the standard library, so
they have to be listed here explicitly.
"""

from typing import FrozenSet


OCAML_KEYWORDS: FrozenSet[str] = frozenset({
    "and", "as", "assert", "asr", "begin", "class", "constraint", "do",
    "done", "downto", "else", "end", "exception", "external", "false",
    "for", "fun", "function", "functor", "if", "in", "include", "inherit",
    "initializer", "land", "lazy", "let", "lor", "lsl", "lsr", "lxor",
    "match", "method", "mod", "module", "mutable", "new", "nonrec",
    "object", "of", "open", "or", "private", "rec", "sig", "struct",
    "then", "to", "true", "try", "type", "val", "virtual", "when", "while",
    "with", "effect", "_",
})

# Predefined types, constructors and exceptions
OCAML_BUILTINS: FrozenSet[str] = frozenset({
    "int", "char", "string", "bytes", "float", "bool", "unit", "exn",
    "array", "list", "option", "result", "nativeint", "int32", "int64",
    "lazy_t", "format", "format4", "format6", "ref", "floatarray",
    "Some", "None", "Ok", "Error",
    "Match_failure", "Assert_failure", "Invalid_argument", "Failure",
    "Not_found", "Out_of_memory", "Stack_overflow", "Sys_error",
    "End_of_file", "Division_by_zero", "Sys_blocked_io",
    "Undefined_recursive_module", "Exit",
    "Stdlib", "Pervasives",
})


def ocaml_reserved_words() -> FrozenSet[str]:
    """All names reserved for OCaml regardless of the standard library scan."""
    return OCAML_KEYWORDS | OCAML_BUILTINS
