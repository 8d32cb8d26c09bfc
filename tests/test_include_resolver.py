"""
Tests for #include handling and the header graph.
"""

import pytest
from pathlib import Path

from code_anonymizer.exceptions import IncludeNotFoundError, MissingAuxiliaryFileError
from code_anonymizer.languages.include_resolver import (
    BUFFER_KEY,
    IncludeDirective,
    IncludeResolver,
    find_include_directives,
)
from code_anonymizer.warnings_log import WarningsLog


class TestFindIncludeDirectives:
    """Tests for parsing #include directives."""

    def test_angled(self):
        directives = find_include_directives("#include <stdio.h>\n")
        assert len(directives) == 1
        assert directives[0].header == "stdio.h"
        assert directives[0].angled is True
        assert directives[0].line_number == 1

    def test_quoted(self):
        directives = find_include_directives('int x;\n#include "util/list.h"\n')
        assert directives[0].header == "util/list.h"
        assert directives[0].angled is False
        assert directives[0].line_number == 2

    def test_spacing_variants(self):
        text = "  #  include   <a.h>\n#include<b.h>\n"
        assert [d.header for d in find_include_directives(text)] == ["a.h", "b.h"]

    def test_include_next_and_import(self):
        text = "#include_next <limits.h>\n#import <objc.h>\n"
        directives = find_include_directives(text)
        assert directives[0].directive == "include_next"
        assert directives[0].is_next is True
        assert directives[1].directive == "import"
        assert directives[1].is_next is False

    def test_directive_in_block_comment_ignored(self):
        text = '/*\n#include "ghost.h"\n*/\n#include "real.h"\n'
        assert [d.header for d in find_include_directives(text)] == ["real.h"]

    def test_source_file_recorded(self):
        directives = find_include_directives("#include <x.h>\n", "main.c")
        assert directives[0].source_file == "main.c"
        assert directives[0].raw_text == "#include <x.h>"

    def test_not_a_directive(self):
        assert find_include_directives('puts("#include <x.h>");\n') == []

    def test_dataclass_defaults(self):
        directive = IncludeDirective(header="x.h", angled=True)
        assert directive.directive == "include"
        assert directive.is_next is False


class TestFindHeader:
    """Tests for locating headers."""

    def test_quoted_relative_to_including_file(self, tmp_path):
        (tmp_path / "local.h").write_text("")
        resolver = IncludeResolver([])
        found = resolver.find_header("local.h", angled=False, including_dir=tmp_path)
        assert found == (tmp_path / "local.h").resolve()

    def test_angled_skips_including_dir(self, tmp_path):
        (tmp_path / "local.h").write_text("")
        resolver = IncludeResolver([])
        assert resolver.find_header("local.h", angled=True, including_dir=tmp_path) is None

    def test_search_path_order(self, tmp_path):
        first = tmp_path / "first"
        second = tmp_path / "second"
        first.mkdir()
        second.mkdir()
        (first / "cfg.h").write_text("")
        (second / "cfg.h").write_text("")
        resolver = IncludeResolver([first, second])
        assert resolver.find_header("cfg.h") == (first / "cfg.h").resolve()
        assert resolver.find_header("cfg.h", start_index=1) == (second / "cfg.h").resolve()

    def test_add_search_path(self, tmp_path):
        resolver = IncludeResolver([])
        resolver.add_search_path(tmp_path)
        resolver.add_search_path(tmp_path)
        assert resolver.search_paths == [tmp_path]

    def test_missing(self, tmp_path):
        assert IncludeResolver([tmp_path]).find_header("nope.h") is None


class TestWalk:
    """Tests for include graph traversal."""

    def test_transitive_headers(self, tmp_path):
        (tmp_path / "top.h").write_text('#include "mid.h"\n')
        (tmp_path / "mid.h").write_text('#include "leaf.h"\n')
        (tmp_path / "leaf.h").write_text("int leaf;\n")
        main_c = tmp_path / "main.c"
        main_c.write_text('#include "top.h"\n')

        headers = IncludeResolver([]).walk(main_c)
        assert [h.name for h in headers] == ["top.h", "mid.h", "leaf.h"]

    def test_cycle_terminates(self, cyclic_include_tree):
        """Mutually including headers are each parsed once."""
        resolver = IncludeResolver([])
        headers = resolver.walk(cyclic_include_tree)

        assert sorted(h.name for h in headers) == ["a.h", "b.h"]
        assert set(resolver.parse_counts.values()) == {1}
        assert len(resolver.parse_counts) == 3

    def test_shared_header_parsed_once(self, tmp_path):
        (tmp_path / "common.h").write_text("int shared;\n")
        (tmp_path / "a.h").write_text('#include "common.h"\n')
        (tmp_path / "b.h").write_text('#include "common.h"\n')
        main_c = tmp_path / "main.c"
        main_c.write_text('#include "a.h"\n#include "b.h"\n')

        resolver = IncludeResolver([])
        headers = resolver.walk(main_c)
        assert [h.name for h in headers] == ["a.h", "common.h", "b.h"]
        assert resolver.parse_counts[(tmp_path / "common.h").resolve()] == 1

    def test_graph_recorded(self, cyclic_include_tree):
        resolver = IncludeResolver([])
        resolver.walk(cyclic_include_tree)
        a_h = (cyclic_include_tree.parent / "a.h").resolve()
        b_h = (cyclic_include_tree.parent / "b.h").resolve()
        assert resolver.graph[a_h] == [b_h]
        assert resolver.graph[b_h] == [a_h]

    def test_in_memory_buffer(self, include_dir):
        resolver = IncludeResolver([include_dir])
        headers = resolver.walk(None, '#include "shared.h"\n')
        assert [h.name for h in headers] == ["shared.h"]
        assert BUFFER_KEY in resolver.graph

    def test_missing_header_warns(self, tmp_path):
        main_c = tmp_path / "main.c"
        main_c.write_text('#include "missing.h"\n')
        warnings = WarningsLog()

        headers = IncludeResolver([], warnings=warnings).walk(main_c)

        assert headers == []
        assert len(warnings) == 1
        assert "missing.h" in warnings.warnings[0]

    def test_missing_header_strict(self, tmp_path):
        main_c = tmp_path / "main.c"
        main_c.write_text("int x;\n#include <missing.h>\n")
        resolver = IncludeResolver([], require_includes=True)

        with pytest.raises(IncludeNotFoundError) as exc_info:
            resolver.walk(main_c)

        assert exc_info.value.header == "missing.h"
        assert exc_info.value.line == 2
        assert isinstance(exc_info.value, MissingAuxiliaryFileError)

    def test_include_next(self, tmp_path):
        first = tmp_path / "first"
        second = tmp_path / "second"
        first.mkdir()
        second.mkdir()
        (first / "limits.h").write_text("#include_next <limits.h>\n")
        (second / "limits.h").write_text("#define INT_MAX 1\n")
        main_c = tmp_path / "main.c"
        main_c.write_text("#include <limits.h>\n")

        headers = IncludeResolver([first, second]).walk(main_c)
        assert headers == [(first / "limits.h").resolve(), (second / "limits.h").resolve()]

    def test_read_caches_text(self, tmp_path):
        header = tmp_path / "x.h"
        header.write_text("int x;\n")
        resolver = IncludeResolver([])
        assert resolver.read(header) == "int x;\n"
        header.write_text("changed\n")
        assert resolver.read(header) == "int x;\n"
