"""
Tests for the OCaml standard library scanner.
"""

import pytest
from pathlib import Path

from code_anonymizer.exceptions import MissingAuxiliaryFileError
from code_anonymizer.languages.ocaml_stdlib import (
    find_stdlib_dir,
    module_name_from_path,
    scan_module_source,
    scan_stdlib_dir,
)


class TestModuleName:
    """Tests for module name derivation."""

    @pytest.mark.parametrize(
        "filename,expected",
        [
            ("stdlib__list.ml", "List"),
            ("stdlib__Hashtbl.ml", "Hashtbl"),
            ("camlinternalFormat.ml", "CamlinternalFormat"),
            ("printf.mli", "Printf"),
        ],
    )
    def test_names(self, filename, expected):
        assert module_name_from_path(Path(filename)) == expected


class TestScanModuleSource:
    """Tests for top-level name extraction."""

    def test_implementation(self):
        text = (
            "let length l = 0\n"
            "let rec map f l = l\n"
            "and iter f l = ()\n"
            'external ignore : \'a -> unit = "%ignore"\n'
            "  let nested = 1\n"
        )
        names, externals = scan_module_source(text)
        assert names == {"length", "map", "iter", "ignore"}
        assert externals == {"ignore"}

    def test_comments_ignored(self):
        names, _ = scan_module_source("(*\nlet hidden = 1\n*)\nlet shown = 2\n")
        assert names == {"shown"}

    def test_interface(self):
        text = "val length : 'a list -> int\nval map : ('a -> 'b) -> 'a list -> 'b list\n"
        names, externals = scan_module_source(text, interface=True)
        assert names == {"length", "map"}
        assert externals == set()


class TestScanStdlibDir:
    """Tests for scanning a stdlib directory."""

    def test_scan(self, ocaml_stdlib_dir):
        symbols = scan_stdlib_dir(ocaml_stdlib_dir)
        assert symbols.files_scanned == 3
        assert symbols.modules == {"Stdlib", "List", "Printf"}
        assert {"map", "length", "printf", "print_endline", "raise", "ignore"} <= symbols.names
        assert symbols.pervasives == {"raise", "ignore"}
        assert ("List", "map") in symbols.qualified
        assert ("Printf", "printf") in symbols.qualified
        assert not symbols.is_empty

    def test_interface_fallback(self, tmp_path):
        (tmp_path / "stdlib__string.mli").write_text("val concat : string -> string list -> string\n")
        symbols = scan_stdlib_dir(tmp_path)
        assert symbols.names == {"concat"}
        assert symbols.modules == {"String"}

    def test_missing_directory(self, tmp_path):
        with pytest.raises(MissingAuxiliaryFileError):
            scan_stdlib_dir(tmp_path / "absent")

    def test_empty_directory(self, tmp_path):
        symbols = scan_stdlib_dir(tmp_path)
        assert symbols.is_empty
        assert symbols.files_scanned == 0


class TestFindStdlibDir:
    """Tests for locating the stdlib."""

    def test_configured(self, ocaml_stdlib_dir):
        assert find_stdlib_dir(ocaml_stdlib_dir) == ocaml_stdlib_dir

    def test_configured_missing(self, tmp_path):
        assert find_stdlib_dir(tmp_path / "absent") is None

    def test_environment(self, ocaml_stdlib_dir, monkeypatch):
        monkeypatch.setenv("OCAMLLIB", str(ocaml_stdlib_dir))
        assert find_stdlib_dir() == ocaml_stdlib_dir
