"""
End-to-End Integration Tests for stream-diff

Runs schema generation and comparison over real files, through both the
library API and the command line tool.
"""

import json

import pytest
import yaml

from scripts.stream_diff import StreamDiffTool, main
from src.comparison import ReportWriter, StreamComparator
from src.patterndetection.offline import EMAIL_PATTERN
from src.schema.generator import SchemaGenerator
from src.sources import open_source
from src.utils.config import load_config
from tests.conftest import write_csv, write_jsonl


SOURCE1 = [
    {"id": 1, "email": "ana@example.com", "joined": "2024-01-15", "profile": {"tier": "gold"}},
    {"id": 2, "email": "ben@example.org", "joined": "2024-02-01", "profile": {"tier": "silver"}},
    {"id": 3, "email": "cho@example.net", "joined": "2024-03-10", "profile": {"tier": "gold"}},
]

CSV_HEADER = ["id", "email", "joined", "profile"]
CSV_ROWS = [
    ["1", "ana@example.com", "2024-01-15", '{"tier": "platinum"}'],
    ["2", "ben@example.org", "2024-02-01", '{"tier": "silver"}'],
    ["4", "dev@example.com", "2024-04-22", '{"tier": "bronze"}'],
]


@pytest.fixture
def workspace(tmp_path):
    """JSON-lines and CSV inputs plus a run configuration next to them."""
    write_jsonl(tmp_path / "users.jsonl", SOURCE1)
    write_csv(tmp_path / "users.csv", CSV_HEADER, CSV_ROWS)

    config = {
        "source1": {"type": "json", "path": "users.jsonl"},
        "source2": {
            "type": "csv",
            "path": "users.csv",
            "parser_config": {"json_in_string": True},
        },
        "sampler": {"sample_size": 100},
        "pattern_detection": {"enabled": True, "mode": "offline"},
        "comparison": {
            "key_field": "id",
            "periodic": {"enabled": True, "record_interval": 2},
        },
        "report": {"output_dir": str(tmp_path / "reports"), "format": "yaml"},
    }
    (tmp_path / "run.yaml").write_text(yaml.safe_dump(config))

    return tmp_path


class TestLibraryFlow:
    """Drive the components directly."""

    def test_schema_then_compare(self, workspace):
        config = load_config(workspace / "run.yaml")
        writer = ReportWriter(workspace / "out")

        generator = SchemaGenerator(config.sampler.sample_size, config.pattern_detection)
        with open_source(config.source1) as source:
            schema = generator.generate(source, key_field="id")
        writer.write_schema(schema, "source1")

        assert schema.fields["email"].matchers[0].pattern == EMAIL_PATTERN
        assert schema.fields["profile"].type.value == "object"
        assert schema.fields["profile.tier"].type.value == "string"

        with open_source(config.source1) as source1, open_source(config.source2) as source2:
            result = StreamComparator(
                source1,
                source2,
                config.comparison.periodic,
                config.comparison.key_field,
                on_periodic=writer.periodic_callback()
            ).compare()

        assert result.matching_keys == 2
        assert result.identical_rows == 1
        assert [d.field for d in result.value_diffs["1"]] == ["profile"]
        assert result.keys_only_in_source1 == ["3"]
        assert result.keys_only_in_source2 == ["4"]
        assert writer.periodic_count == 3

    def test_tool_writes_all_reports(self, workspace):
        tool = StreamDiffTool(load_config(workspace / "run.yaml"))

        schemas = tool.generate_schemas(key_field="id")
        final = tool.compare()

        reports = workspace / "reports"
        assert set(schemas) == {"source1", "source2"}
        assert (reports / "schema_source1.yaml").exists()
        assert (reports / "schema_source2.yaml").exists()
        assert final == reports / "comparison_report.yaml"
        assert sorted(p.name for p in reports.glob("periodic_report_*.yaml")) == [
            "periodic_report_1.yaml",
            "periodic_report_2.yaml",
            "periodic_report_3.yaml",
        ]


class TestCommandLine:
    """Drive the command line entry point."""

    def test_compare_json_reports(self, workspace, restore_root_logger):
        out = workspace / "cli-out"

        code = main(["compare", str(workspace / "run.yaml"), "--output-dir", str(out), "--format", "json", "--schema"])

        assert code == 0
        report = json.loads((out / "comparison_report.json").read_text())
        assert report["matching_keys"] == 2
        assert report["keys_only_in_source2"] == ["4"]
        assert report["is_periodic_report"] is False
        assert (out / "schema_source2.json").exists()

    def test_schema_single_source(self, workspace, restore_root_logger):
        out = workspace / "schemas"

        code = main(["schema", str(workspace / "run.yaml"), "--source", "source2", "--output-dir", str(out)])

        assert code == 0
        assert not (out / "schema_source1.yaml").exists()
        schema = yaml.safe_load((out / "schema_source2.yaml").read_text())
        assert schema["key"] == "id"
        assert schema["fields"]["id"]["type"] == "numeric"
        assert schema["fields"]["profile.tier"]["type"] == "string"

    def test_key_field_override(self, workspace, restore_root_logger):
        out = workspace / "by-email"

        code = main(["compare", str(workspace / "run.yaml"), "--key-field", "email", "--output-dir", str(out)])

        assert code == 0
        report = yaml.safe_load((out / "comparison_report.yaml").read_text())
        assert report["keys_only_in_source1"] == ["cho@example.net"]
        assert report["keys_only_in_source2"] == ["dev@example.com"]

    def test_missing_config_fails(self, tmp_path, restore_root_logger):
        assert main(["compare", str(tmp_path / "missing.yaml")]) == 1

    def test_read_error_fails(self, workspace, restore_root_logger):
        with open(workspace / "users.jsonl", "a", encoding="utf-8") as f:
            f.write("{broken\n")

        assert main(["compare", str(workspace / "run.yaml"), "--output-dir", str(workspace / "x")]) == 1

    def test_no_command(self, restore_root_logger):
        assert main([]) == 1
