"""
Tests for comment and blank-line stripping.
"""

from code_anonymizer.core.comments import (
    strip_blank_lines,
    strip_comments,
    strip_comments_and_blank_lines,
)


class TestStripComments:
    """Tests for strip_comments."""

    def test_c_block_comment(self):
        text = "int a; /* note */\n"
        assert strip_comments(text, "c") == "int a; \n"

    def test_c_line_comment(self):
        text = "int a; // note\nint b;\n"
        assert strip_comments(text, "c") == "int a; \nint b;\n"

    def test_comment_between_tokens_keeps_them_apart(self):
        """A comment glued to two tokens becomes a single space."""
        assert strip_comments("int/**/x;", "c") == "int x;"

    def test_comment_marker_in_string_kept(self):
        text = 'char *s = "/* not a comment */";\n'
        assert strip_comments(text, "c") == text

    def test_ocaml_nested_comment(self):
        text = "let x = 1 (* outer (* inner *) done *)\n"
        assert strip_comments(text, "ocaml") == "let x = 1 \n"

    def test_ocaml_string_kept(self):
        text = 'let s = "(* kept *)"\n'
        assert strip_comments(text, "ocaml") == text

    def test_no_comments(self):
        text = "int main(void) { return 0; }\n"
        assert strip_comments(text, "c") == text


class TestStripBlankLines:
    """Tests for strip_blank_lines."""

    def test_blank_lines_removed(self):
        text = "int a;\n\n   \nint b;\n"
        assert strip_blank_lines(text, "c") == "int a;\nint b;\n"

    def test_trailing_whitespace_removed(self):
        assert strip_blank_lines("int a;   \n", "c") == "int a;\n"

    def test_crlf_endings_preserved(self):
        assert strip_blank_lines("int a;\r\n\r\nint b;\r\n", "c") == "int a;\r\nint b;\r\n"

    def test_multiline_string_kept(self):
        """Blank lines inside an OCaml string are content."""
        text = 'let s = "first\n\nthird"\n'
        assert strip_blank_lines(text, "ocaml") == text


class TestStripCommentsAndBlankLines:
    """Tests for the combined pass."""

    def test_c_file(self):
        text = (
            "/* File header\n"
            " * spanning lines */\n"
            "\n"
            "#include <stdio.h>\n"
            "// comment line\n"
            "int main(void) {\n"
            "    return 0; /* done */\n"
            "}\n"
        )
        expected = (
            "#include <stdio.h>\n"
            "int main(void) {\n"
            "    return 0;\n"
            "}\n"
        )
        assert strip_comments_and_blank_lines(text, "c") == expected

    def test_ocaml_file(self):
        text = "(* module doc *)\n\nlet x = 1\n(* trailing *)\n"
        assert strip_comments_and_blank_lines(text, "ocaml") == "let x = 1\n"
