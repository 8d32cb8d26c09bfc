"""
Tests for the command-line interface.
"""

import json
from pathlib import Path

import pytest

from code_anonymizer import __version__
from code_anonymizer.cli import args_to_config, create_parser, main, parse_args
from code_anonymizer.languages.base import Language


@pytest.fixture
def config_file(tmp_path, system_include_dir):
    """A JSON config pointing at the stand-in system headers."""
    path = tmp_path / "anonymizer.json"
    path.write_text(json.dumps({"system_include_paths": [str(system_include_dir)]}))
    return path


class TestParseArgs:
    """Tests for argument parsing."""

    def test_defaults(self):
        args = parse_args(["src"])
        assert args.input == Path("src")
        assert args.output is None
        assert args.include_path == []
        assert args.indent_width == 4
        assert not args.dry_run

    def test_repeated_include_paths(self):
        args = parse_args(["main.c", "-I", "inc", "--include-path", "vendor"])
        assert args.include_path == [Path("inc"), Path("vendor")]

    def test_unknown_language(self):
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["src", "-l", "fortran"])
        assert exc_info.value.code == 2

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            create_parser().parse_args(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out


class TestArgsToConfig:
    """Tests for args_to_config."""

    def test_flags(self):
        config = args_to_config(parse_args([
            "src", "-o", "out", "-l", "ocaml", "--keep-comments", "--no-reindent",
            "--no-mappings", "--require-includes", "--overwrite", "-v",
        ]))
        assert config.input_path == Path("src")
        assert config.output_dir == Path("out")
        assert config.language is Language.OCAML
        assert not config.strip_comments
        assert not config.reindent
        assert not config.save_mappings
        assert config.require_includes
        assert config.overwrite
        assert config.log_level == "DEBUG"

    def test_quiet_log_level(self):
        assert args_to_config(parse_args(["src", "-q"])).log_level == "ERROR"

    def test_config_file(self, tmp_path, config_file, system_include_dir):
        config = args_to_config(parse_args([str(tmp_path), "-c", str(config_file), "--indent-width", "2"]))
        assert config.system_include_paths == [system_include_dir]
        assert config.indent_width == 2
        assert config.input_path == tmp_path


class TestMain:
    """Tests for the main entry point."""

    def test_directory(self, c_source_dir, include_dir, config_file, output_dir):
        code = main([
            str(c_source_dir), "-o", str(output_dir), "-I", str(include_dir),
            "-c", str(config_file), "-q",
        ])

        assert code == 0
        assert (output_dir / "main.c").exists()
        assert (output_dir / "util" / "helpers.c").exists()
        assert (output_dir / "mappings" / "main.c.map.json").exists()

    def test_missing_input(self, tmp_path, capsys):
        assert main([str(tmp_path / "absent"), "-q"]) == 1
        assert "Input path does not exist" in capsys.readouterr().err

    def test_bad_config_file(self, tmp_path, capsys):
        bad = tmp_path / "bad.json"
        bad.write_text("{")
        assert main([str(tmp_path), "-c", str(bad)]) == 1
        assert "Configuration error" in capsys.readouterr().err

    def test_failed_file(self, tmp_path, config_file, capsys):
        source = tmp_path / "main.c"
        source.write_text('#include "missing.h"\nint value;\n')

        code = main([str(source), "--require-includes", "--dry-run", "-c", str(config_file)])

        assert code == 1
        assert "missing.h" in capsys.readouterr().err

    def test_dry_run_writes_nothing(self, tmp_path, config_file):
        source = tmp_path / "main.c"
        source.write_text("int value;\n")

        assert main([str(source), "--dry-run", "-q", "-c", str(config_file)]) == 0
        assert not (tmp_path / "main_anon.c").exists()
