"""
Tests for the token classifiers.
"""

import pytest

from code_anonymizer.core.classifier import (
    IDENTIFIER_CATEGORIES,
    PROTECTED_CATEGORIES,
    CClassifier,
    LexicalCategory,
    OCamlClassifier,
    create_classifier,
)
from code_anonymizer.exceptions import UnsupportedLanguageError


def category_of(classifier, text, word, occurrence=0):
    """Classify the n-th occurrence of word in text."""
    offset = -1
    for _ in range(occurrence + 1):
        offset = text.index(word, offset + 1)
    return classifier.classify(text, offset)


class TestCreateClassifier:
    """Tests for the classifier registry."""

    def test_c(self):
        assert isinstance(create_classifier("c"), CClassifier)

    def test_ocaml(self):
        assert isinstance(create_classifier("ocaml"), OCamlClassifier)

    def test_unknown(self):
        with pytest.raises(UnsupportedLanguageError):
            create_classifier("fortran")

    def test_category_groups(self):
        """Identifier and protected categories do not overlap."""
        assert not IDENTIFIER_CATEGORIES & PROTECTED_CATEGORIES
        assert LexicalCategory.KEYWORD in PROTECTED_CATEGORIES


class TestCClassifier:
    """Tests for C classification."""

    @pytest.fixture
    def classifier(self):
        return CClassifier()

    def test_string_literal(self, classifier):
        text = 'printf("count is %d", count);'
        assert category_of(classifier, text, "count") is LexicalCategory.STRING_LITERAL
        assert category_of(classifier, text, "count", 1) is not LexicalCategory.STRING_LITERAL

    def test_char_literal(self, classifier):
        text = "char c = 'x';"
        assert category_of(classifier, text, "x") is LexicalCategory.STRING_LITERAL

    def test_block_comment(self, classifier):
        text = "int a; /* a comment about a */ int second;"
        assert category_of(classifier, text, "comment") is LexicalCategory.COMMENT
        assert category_of(classifier, text, "second") is LexicalCategory.IDENTIFIER_VARIABLE

    def test_line_comment(self, classifier):
        text = "int a; // trailing words\nint second;"
        assert category_of(classifier, text, "trailing") is LexicalCategory.COMMENT
        assert category_of(classifier, text, "second") is LexicalCategory.IDENTIFIER_VARIABLE

    def test_comment_markers_inside_string(self, classifier):
        """A // inside a string does not start a comment."""
        text = 'char *url = "http://host"; int port;'
        assert category_of(classifier, text, "port") is LexicalCategory.IDENTIFIER_VARIABLE

    def test_keyword(self, classifier):
        text = "while (running) { return; }"
        assert category_of(classifier, text, "while") is LexicalCategory.KEYWORD
        assert category_of(classifier, text, "return") is LexicalCategory.KEYWORD

    def test_numeric_literal(self, classifier):
        text = "x = 0x1F + 1.5e10;"
        assert category_of(classifier, text, "0x1F") is LexicalCategory.NUMERIC_LITERAL
        assert category_of(classifier, text, "1.5e10") is LexicalCategory.NUMERIC_LITERAL

    def test_function(self, classifier):
        text = "int compute(int value);"
        assert category_of(classifier, text, "compute") is LexicalCategory.IDENTIFIER_FUNCTION
        assert category_of(classifier, text, "value") is LexicalCategory.IDENTIFIER_VARIABLE

    def test_pointer_variable(self, classifier):
        text = "const char **names;"
        assert category_of(classifier, text, "names") is LexicalCategory.IDENTIFIER_VARIABLE

    def test_struct_tag(self, classifier):
        text = "struct node { int value; };"
        assert category_of(classifier, text, "node") is LexicalCategory.IDENTIFIER_TYPE

    def test_typedef_name(self, classifier):
        text = "typedef unsigned long counter_t;\ncounter_t total;"
        assert category_of(classifier, text, "counter_t") is LexicalCategory.IDENTIFIER_TYPE
        assert category_of(classifier, text, "total") is LexicalCategory.IDENTIFIER_VARIABLE

    def test_function_pointer_typedef(self, classifier):
        text = "typedef int (*handler_fn)(int code);"
        assert category_of(classifier, text, "handler_fn") is LexicalCategory.IDENTIFIER_TYPE

    def test_unclassified_use(self, classifier):
        """A bare use site carries no category."""
        text = "total = total + 1;"
        assert category_of(classifier, text, "total") is LexicalCategory.NONE

    def test_preprocessor_directive(self, classifier):
        text = "#ifdef DEBUG\n#define LIMIT 10\n#define SQUARE(x) ((x) * (x))\n#endif\n"
        assert category_of(classifier, text, "ifdef") is LexicalCategory.KEYWORD
        assert category_of(classifier, text, "define") is LexicalCategory.KEYWORD
        assert category_of(classifier, text, "LIMIT") is LexicalCategory.IDENTIFIER_VARIABLE
        assert category_of(classifier, text, "SQUARE") is LexicalCategory.IDENTIFIER_FUNCTION

    def test_include_header_name(self, classifier):
        """Header names are literal text."""
        text = '#include <sys/types.h>\n#include "local.h"\n'
        assert category_of(classifier, text, "types") is LexicalCategory.STRING_LITERAL
        assert category_of(classifier, text, "local") is LexicalCategory.STRING_LITERAL

    def test_pragma_text(self, classifier):
        text = "#pragma once\nint x;"
        assert category_of(classifier, text, "once") is LexicalCategory.KEYWORD
        assert category_of(classifier, text, "x") is LexicalCategory.IDENTIFIER_VARIABLE

    def test_hash_not_at_line_start(self, classifier):
        """Only a leading # starts a directive."""
        text = "#define STR(x) #x\n"
        assert category_of(classifier, text, "x", 1) is not LexicalCategory.KEYWORD

    def test_offset_outside_any_span(self, classifier):
        assert classifier.classify("a + b", 1) is LexicalCategory.NONE

    def test_spans_are_cached_per_text(self, classifier):
        text = "int a;"
        assert classifier.spans(text) is classifier.spans(text)


class TestOCamlClassifier:
    """Tests for OCaml classification."""

    @pytest.fixture
    def classifier(self):
        return OCamlClassifier()

    def test_nested_comment(self, classifier):
        text = "(* outer (* inner *) still comment *) let x = 1"
        assert category_of(classifier, text, "still") is LexicalCategory.COMMENT
        assert category_of(classifier, text, "x") is LexicalCategory.IDENTIFIER_VARIABLE

    def test_string_with_comment_marker(self, classifier):
        text = 'let s = "(* not a comment" let other = 2'
        assert category_of(classifier, text, "not") is LexicalCategory.STRING_LITERAL
        assert category_of(classifier, text, "other") is LexicalCategory.IDENTIFIER_VARIABLE

    def test_quoted_string(self, classifier):
        text = "let q = {|raw text|}"
        assert category_of(classifier, text, "raw") is LexicalCategory.STRING_LITERAL

    def test_let_function_and_parameters(self, classifier):
        text = "let add left right = left + right"
        assert category_of(classifier, text, "add") is LexicalCategory.IDENTIFIER_FUNCTION
        assert category_of(classifier, text, "left") is LexicalCategory.IDENTIFIER_VARIABLE
        assert category_of(classifier, text, "right") is LexicalCategory.IDENTIFIER_VARIABLE

    def test_let_rec(self, classifier):
        text = "let rec loop n = if n = 0 then () else loop (n - 1)"
        assert category_of(classifier, text, "loop") is LexicalCategory.IDENTIFIER_FUNCTION

    def test_use_site_unclassified(self, classifier):
        """Names away from their binding carry no category."""
        text = "let total = 1\nlet () = print_int total"
        assert category_of(classifier, text, "total", 1) is LexicalCategory.NONE
        assert category_of(classifier, text, "print_int") is LexicalCategory.NONE

    def test_type_name(self, classifier):
        text = "type shape = Circle of float | Square of float"
        assert category_of(classifier, text, "shape") is LexicalCategory.IDENTIFIER_TYPE

    def test_parameterized_type_name(self, classifier):
        text = "type 'a tree = Leaf | Node of 'a tree * 'a tree"
        assert category_of(classifier, text, "tree") is LexicalCategory.IDENTIFIER_TYPE

    def test_module_name(self, classifier):
        text = "module Stack = struct end"
        assert category_of(classifier, text, "Stack") is LexicalCategory.IDENTIFIER_TYPE

    def test_fun_parameters(self, classifier):
        text = "let f = List.map (fun item -> item + 1)"
        assert category_of(classifier, text, "item") is LexicalCategory.IDENTIFIER_VARIABLE

    def test_match_arm_bindings(self, classifier):
        text = "match opt with\n| Some value -> value\n| None -> 0"
        assert category_of(classifier, text, "value") is LexicalCategory.IDENTIFIER_VARIABLE

    def test_type_annotation_not_bound(self, classifier):
        """The type in (x : t) is not a binding."""
        text = "let show (count : int) = count"
        assert category_of(classifier, text, "count") is LexicalCategory.IDENTIFIER_VARIABLE
        assert category_of(classifier, text, "int") is LexicalCategory.NONE

    def test_keywords(self, classifier):
        text = "let x = if true then 1 else 2 in x"
        assert category_of(classifier, text, "if") is LexicalCategory.KEYWORD
        assert category_of(classifier, text, "else") is LexicalCategory.KEYWORD

    def test_external(self, classifier):
        text = 'external get_time : unit -> float = "caml_time"'
        assert category_of(classifier, text, "get_time") is LexicalCategory.IDENTIFIER_FUNCTION
