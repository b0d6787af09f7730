"""Unit tests for the CLI — Typer command registration and basic behavior."""

from __future__ import annotations

from typer.testing import CliRunner

from webhook_connector.cli.app import app

runner = CliRunner()


class TestCliApp:
    """The CLI must register all expected commands and show help."""

    def test_help_flag(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "serve" in result.output
        assert "validate-sink" in result.output
        assert "gen-key" in result.output

    def test_serve_command_exists(self):
        result = runner.invoke(app, ["serve", "--help"])
        assert result.exit_code == 0

    def test_validate_sink_accepts_valid_file_sink(self):
        result = runner.invoke(app, ["validate-sink", "file", "-p", "file_path=/tmp/out.jsonl"])
        assert result.exit_code == 0
        assert "/tmp/out.jsonl" in result.output

    def test_validate_sink_reports_missing_field(self):
        result = runner.invoke(app, ["validate-sink", "table", "-p", "project=p"])
        assert result.exit_code == 1
        assert "dataset" in result.output

    def test_validate_sink_rejects_unknown_type(self):
        result = runner.invoke(app, ["validate-sink", "kafka"])
        assert result.exit_code == 1
        assert "unsupported sink type" in result.output

    def test_validate_sink_rejects_bad_param_syntax(self):
        result = runner.invoke(app, ["validate-sink", "file", "-p", "file_path"])
        assert result.exit_code != 0

    def test_gen_key_prints_key_and_hash(self):
        result = runner.invoke(app, ["gen-key", "cfg-1", "--length", "16"])
        assert result.exit_code == 0
        assert "Key:" in result.output
        assert "Hash:" in result.output
