"""
C Reserved Words - Keywords and linker-visible builtin names.

This module provides:
- C89 through C23 keywords plus common compiler extensions
- Preprocessor directive names
- Builtin names that are always available without an explicit
  #include (program entry point, standard typedefs, macros)

Reserved words must never be anonymized.
"""

from typing import FrozenSet


C_KEYWORDS: FrozenSet[str] = frozenset({
    # C89
    "auto", "break", "case", "char", "const", "continue", "default", "do",
    "double", "else", "enum", "extern", "float", "for", "goto", "if", "int",
    "long", "register", "return", "short", "signed", "sizeof", "static",
    "struct", "switch", "typedef", "union", "unsigned", "void", "volatile",
    "while",
    # C99
    "inline", "restrict", "_Bool", "_Complex", "_Imaginary",
    # C11
    "_Alignas", "_Alignof", "_Atomic", "_Generic", "_Noreturn",
    "_Static_assert", "_Thread_local",
    # C23
    "alignas", "alignof", "bool", "constexpr", "false", "nullptr",
    "static_assert", "thread_local", "true", "typeof", "typeof_unqual",
    "_BitInt", "_Decimal32", "_Decimal64", "_Decimal128",
    # GNU extensions
    "asm", "__asm__", "__attribute__", "__extension__", "__inline__",
    "__restrict", "__restrict__", "__typeof__", "__volatile__", "__builtin_va_list",
})

# Words that follow '#' at the start of a preprocessor line
PREPROCESSOR_DIRECTIVES: FrozenSet[str] = frozenset({
    "define", "undef", "include", "include_next", "if", "ifdef", "ifndef",
    "elif", "elifdef", "elifndef", "else", "endif", "error", "warning",
    "line", "pragma", "embed",
})

# Operator-like words usable inside #if expressions
PREPROCESSOR_OPERATORS: FrozenSet[str] = frozenset({
    "defined", "__has_include", "__has_include_next", "__has_c_attribute",
})

# Identifiers starting with "__" or "_" plus an uppercase letter belong to
# the implementation (predefined macros, __builtin_* functions)
C_IMPLEMENTATION_RESERVED = r"__\w*|_[A-Z]\w*"

# Names a linker or compiler knows without any header
C_BUILTINS: FrozenSet[str] = frozenset({
    "main", "EXIT_SUCCESS", "EXIT_FAILURE", "NULL",
    # primitive and standard typedef names
    "size_t", "ssize_t", "ptrdiff_t", "wchar_t", "wint_t", "max_align_t",
    "intptr_t", "uintptr_t", "intmax_t", "uintmax_t", "off_t", "pid_t",
    "int8_t", "int16_t", "int32_t", "int64_t",
    "uint8_t", "uint16_t", "uint32_t", "uint64_t",
    "FILE", "fpos_t", "va_list", "errno",
    # standard streams
    "stdin", "stdout", "stderr",
    # variadic helpers and compile-time operators
    "va_start", "va_arg", "va_end", "va_copy", "offsetof",
    # predefined identifiers and macros
    "__func__", "__FILE__", "__LINE__", "__DATE__", "__TIME__",
    "__STDC__", "__STDC_VERSION__", "__VA_ARGS__", "__VA_OPT__",
    "__cplusplus", "__GNUC__",
})

# Headers whose declarations are reserved for every C file
STANDARD_HEADERS = ("stdlib.h", "stdio.h", "stddef.h", "string.h", "unistd.h")

# Built-in type keywords that start a declaration
C_TYPE_KEYWORDS: FrozenSet[str] = frozenset({
    "char", "short", "int", "long", "float", "double", "void", "signed",
    "unsigned", "_Bool", "bool", "_Complex", "const", "volatile", "static",
    "extern", "register", "auto", "inline", "restrict",
})


def c_reserved_words() -> FrozenSet[str]:
    """All names reserved for C regardless of includes."""
    return C_KEYWORDS | PREPROCESSOR_OPERATORS | C_BUILTINS
