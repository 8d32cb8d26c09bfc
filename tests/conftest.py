"""
Pytest configuration and fixtures for Code Anonymizer tests.
"""

import pytest
from pathlib import Path

from code_anonymizer.core.reserved import clear_standard_caches


STDIO_H = """#ifndef _STDIO_H
#define _STDIO_H
#include <stddef.h>
typedef struct _IO_FILE FILE;
extern int printf(const char *__restrict __format, ...);
extern int fprintf(FILE *__restrict __stream, const char *__restrict __format, ...);
extern int puts(const char *__s);
#define EOF (-1)
#endif
"""

STDLIB_H = """#ifndef _STDLIB_H
#define _STDLIB_H
#include <stddef.h>
extern void *malloc(size_t __size);
extern void free(void *__ptr);
extern void exit(int __status) __attribute__ ((__noreturn__));
#endif
"""

STDDEF_H = """#ifndef _STDDEF_H
#define _STDDEF_H
typedef unsigned long size_t;
typedef long ptrdiff_t;
#endif
"""

STRING_H = """#ifndef _STRING_H
#define _STRING_H
#include <stddef.h>
extern size_t strlen(const char *__s);
extern char *strcpy(char *__dest, const char *__src);
#endif
"""

UNISTD_H = """#ifndef _UNISTD_H
#define _UNISTD_H
extern int close(int __fd);
#endif
"""


@pytest.fixture(autouse=True)
def fresh_standard_caches():
    """Every test starts without cached standard-library scans."""
    clear_standard_caches()
    yield
    clear_standard_caches()


@pytest.fixture
def system_include_dir(tmp_path):
    """A minimal stand-in for /usr/include with the standard headers."""
    sys_dir = tmp_path / "sysinclude"
    sys_dir.mkdir()
    (sys_dir / "stdio.h").write_text(STDIO_H)
    (sys_dir / "stdlib.h").write_text(STDLIB_H)
    (sys_dir / "stddef.h").write_text(STDDEF_H)
    (sys_dir / "string.h").write_text(STRING_H)
    (sys_dir / "unistd.h").write_text(UNISTD_H)
    return sys_dir


@pytest.fixture
def include_dir(tmp_path):
    """A project include directory with a header declaring shared names."""
    inc_dir = tmp_path / "include"
    inc_dir.mkdir()
    (inc_dir / "shared.h").write_text(
        "#define BUFFER_SIZE 128\n"
        "extern int shared_counter;\n"
        "typedef struct { int x; int y; } point_t;\n"
    )
    return inc_dir


@pytest.fixture
def cyclic_include_tree(tmp_path):
    """main.c includes a.h; a.h and b.h include each other."""
    src_dir = tmp_path / "cycle"
    src_dir.mkdir()
    (src_dir / "a.h").write_text('#include "b.h"\nextern int alpha_value;\n')
    (src_dir / "b.h").write_text('#include "a.h"\nextern int beta_value;\n')
    main_c = src_dir / "main.c"
    main_c.write_text('#include "a.h"\nint local_value = 1;\n')
    return main_c


@pytest.fixture
def ocaml_stdlib_dir(tmp_path):
    """A tiny OCaml standard library directory."""
    lib_dir = tmp_path / "ocaml"
    lib_dir.mkdir()
    (lib_dir / "stdlib.ml").write_text(
        "(* The initially opened module *)\n"
        'external raise : exn -> \'a = "%raise"\n'
        'external ignore : \'a -> unit = "%ignore"\n'
        "let print_endline s = ()\n"
    )
    (lib_dir / "stdlib__list.ml").write_text(
        "let rec map f = function\n"
        "  | [] -> []\n"
        "  | a :: l -> let r = f a in r :: map f l\n"
        "\n"
        "let length l = 0\n"
    )
    (lib_dir / "stdlib__printf.ml").write_text("let printf fmt = ()\n")
    return lib_dir


@pytest.fixture
def c_source():
    """A small C program touching strings, the standard library and similar names."""
    return (
        "#include <stdio.h>\n"
        "int foo = 1;\n"
        "int foo2 = foo + 1;\n"
        "int main(void) {\n"
        '    printf("foo is %d", foo);\n'
        "    return foo2;\n"
        "}\n"
    )


@pytest.fixture
def c_source_dir(tmp_path, include_dir):
    """A source tree with two C files."""
    src_dir = tmp_path / "src"
    (src_dir / "util").mkdir(parents=True)
    (src_dir / "main.c").write_text(
        "/* entry point */\n"
        "#include <stdio.h>\n"
        '#include "shared.h"\n'
        "\n"
        "int main(void) {\n"
        "    int answer = shared_counter + BUFFER_SIZE;\n"
        '    printf("%d\\n", answer);\n'
        "    return 0;\n"
        "}\n"
    )
    (src_dir / "util" / "helpers.c").write_text(
        "// helpers\n"
        "static int twice(int value) { return value * 2; }\n"
    )
    return src_dir


@pytest.fixture
def output_dir(tmp_path):
    """Create a temporary output directory."""
    out_dir = tmp_path / "anonymized"
    out_dir.mkdir()
    return out_dir
