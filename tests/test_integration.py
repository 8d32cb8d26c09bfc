"""
Integration tests for the anonymization pipeline.
"""

import json

import pytest

from code_anonymizer.config import Config
from code_anonymizer.core.mapper import RenameTable
from code_anonymizer.exceptions import AnonymizerError
from code_anonymizer.main import (
    REPORT_FILENAME,
    AnonymizationPipeline,
    anonymize_directory,
    anonymize_file,
)


@pytest.fixture
def pipeline_config(c_source_dir, include_dir, system_include_dir, output_dir):
    return Config(
        input_path=c_source_dir,
        output_dir=output_dir,
        include_paths=[include_dir],
        system_include_paths=[system_include_dir],
    )


class TestPipeline:
    """Tests for AnonymizationPipeline.run."""

    def test_directory_to_output(self, pipeline_config, output_dir):
        result = AnonymizationPipeline(pipeline_config).run()

        assert result.success, result.errors
        assert len(result.file_results) == 2
        main_text = (output_dir / "main.c").read_text()
        assert "    int _1 = shared_counter + BUFFER_SIZE;\n" in main_text
        assert "entry point" not in main_text
        assert (output_dir / "util" / "helpers.c").read_text() == (
            "static int _1(int _2) { return _2 * 2; }\n"
        )

    def test_each_file_numbered_from_one(self, pipeline_config, c_source_dir):
        result = AnonymizationPipeline(pipeline_config).run()
        helpers = result.tables[c_source_dir / "util" / "helpers.c"]
        assert helpers.as_dict() == {"twice": "_1", "value": "_2"}
        assert result.tables[c_source_dir / "main.c"].as_dict() == {"answer": "_1"}

    def test_mappings_saved(self, pipeline_config, output_dir):
        result = AnonymizationPipeline(pipeline_config).run()

        json_path = output_dir / "mappings" / "main.c.map.json"
        assert json_path in result.mapping_files
        assert (output_dir / "mappings" / "util" / "helpers.c.map.csv").exists()
        table = RenameTable.load_from_file(json_path)
        assert table.get_original_name("_1") == "answer"

    def test_report_saved(self, pipeline_config, output_dir):
        AnonymizationPipeline(pipeline_config).run()

        data = json.loads((output_dir / REPORT_FILENAME).read_text())
        assert data["summary"]["total_files"] == 2
        assert data["summary"]["total_identifiers"] == 3
        assert data["errors"] == []

    def test_callbacks(self, pipeline_config):
        started, completed, discovered = [], [], []
        AnonymizationPipeline(pipeline_config).run(
            on_file_start=lambda path, i, total: started.append((path.name, i, total)),
            on_file_complete=lambda path, result: completed.append(result is not None),
            on_files_discovered=discovered.extend,
        )
        assert started == [("main.c", 1, 2), ("helpers.c", 2, 2)]
        assert completed == [True, True]
        assert len(discovered) == 2

    def test_dry_run(self, pipeline_config, output_dir):
        pipeline_config.dry_run = True
        result = AnonymizationPipeline(pipeline_config).run()

        assert result.success
        assert result.output_paths == {}
        assert list(output_dir.iterdir()) == []

    def test_beside_input(self, c_source_dir, include_dir, system_include_dir):
        config = Config(
            input_path=c_source_dir,
            include_paths=[include_dir],
            system_include_paths=[system_include_dir],
        )
        result = AnonymizationPipeline(config).run()

        assert result.success, result.errors
        assert (c_source_dir / "main_anon.c").exists()
        assert (c_source_dir / "main_anon.c.map.json").exists()
        assert (c_source_dir / "util" / "helpers_anon.c").exists()

        # outputs of the previous run are not picked up again
        assert AnonymizationPipeline(config).discover_files() == [
            c_source_dir / "main.c",
            c_source_dir / "util" / "helpers.c",
        ]

    def test_existing_output_is_an_error(self, pipeline_config, output_dir):
        (output_dir / "main.c").write_text("keep me\n")
        result = AnonymizationPipeline(pipeline_config).run()

        assert not result.success
        assert any("already exists" in e for e in result.errors)
        assert (output_dir / "main.c").read_text() == "keep me\n"
        assert (output_dir / "util" / "helpers.c").exists()

    def test_unsupported_extension(self, pipeline_config, c_source_dir):
        (c_source_dir / "notes.txt").write_text("hello\n")
        pipeline_config.extensions = [".c", ".txt"]

        result = AnonymizationPipeline(pipeline_config).run()

        assert not result.success
        assert any("notes.txt" in e for e in result.errors)
        assert len(result.file_results) == 2

    def test_strict_missing_header(self, pipeline_config, c_source_dir):
        (c_source_dir / "broken.c").write_text('#include "nowhere.h"\nint value;\n')
        pipeline_config.require_includes = True

        result = AnonymizationPipeline(pipeline_config).run()

        assert not result.success
        assert any("nowhere.h" in e for e in result.errors)

    def test_invalid_config(self, tmp_path):
        result = AnonymizationPipeline(Config(input_path=tmp_path / "absent")).run()
        assert not result.success
        assert result.file_results == []

    def test_ocaml_tree(self, tmp_path, ocaml_stdlib_dir, output_dir):
        src = tmp_path / "lib"
        src.mkdir()
        (src / "greet.ml").write_text("let greet name = print_endline name\n")
        config = Config(input_path=src, output_dir=output_dir, ocaml_stdlib_dir=ocaml_stdlib_dir)

        result = AnonymizationPipeline(config).run()

        assert result.success, result.errors
        assert (output_dir / "greet.ml").read_text() == "let a1 a2 = print_endline a2\n"


class TestConvenienceFunctions:
    """Tests for anonymize_file and anonymize_directory."""

    def test_anonymize_file(self, tmp_path, c_source, system_include_dir):
        source = tmp_path / "prog.c"
        source.write_text(c_source)
        config = Config(system_include_paths=[system_include_dir])

        result = anonymize_file(source, config=config)

        output = (tmp_path / "prog_anon.c").read_text()
        assert "int _2 = _1 + 1;" in output
        assert result.identifiers_renamed == 2

    def test_anonymize_file_explicit_output(self, tmp_path, c_source, system_include_dir):
        source = tmp_path / "prog.c"
        source.write_text(c_source)
        target = tmp_path / "out" / "anon.c"

        anonymize_file(source, target, Config(system_include_paths=[system_include_dir]))

        assert "return _2;" in target.read_text()

    def test_anonymize_file_refuses_overwrite(self, tmp_path, c_source, system_include_dir):
        source = tmp_path / "prog.c"
        source.write_text(c_source)
        (tmp_path / "prog_anon.c").write_text("")
        with pytest.raises(AnonymizerError):
            anonymize_file(source, config=Config(system_include_paths=[system_include_dir]))

    def test_anonymize_directory(self, c_source_dir, include_dir, system_include_dir, output_dir):
        result = anonymize_directory(
            c_source_dir,
            output_dir,
            include_paths=[include_dir],
            system_include_paths=[system_include_dir],
            save_mappings=False,
        )
        assert result.success, result.errors
        assert not (output_dir / "mappings").exists()
        assert (output_dir / REPORT_FILENAME).exists()
