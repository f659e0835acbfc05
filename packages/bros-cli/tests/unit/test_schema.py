"""Tests for bros schema export."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from bros_cli.commands.schema import schema


class TestSchemaExport:
    """Tests for schema export command."""

    def test_export(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        """All three schemas are written."""
        output = tmp_path / "schemas"
        result = cli_runner.invoke(schema, ["export", "--output-dir", str(output)])

        assert result.exit_code == 0, result.output
        names = sorted(path.name for path in output.iterdir())
        assert names == [
            "block-graph.schema.json",
            "ir.schema.json",
            "validation-result.schema.json",
        ]
        ir_schema = json.loads((output / "ir.schema.json").read_text())
        assert ir_schema["$id"] == "https://bros.dev/schemas/ir.schema.json"

    def test_default_output_dir(self, cli_runner: CliRunner) -> None:
        """Schemas go to ./schemas by default."""
        with cli_runner.isolated_filesystem():
            result = cli_runner.invoke(schema, ["export"])
            assert result.exit_code == 0
            assert Path("schemas/ir.schema.json").is_file()
