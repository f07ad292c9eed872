"""Tests for CLI commands."""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from fitplan.cli import app
from fitplan.validation.models import RuleCode

runner = CliRunner()


@pytest.fixture
def maintenance_file(write_profile):
    return write_profile(
        {
            "demographics": {"age": 28, "gender": "male", "occupation": "desk_job"},
            "body": {
                "height_cm": 180,
                "weight_kg": 80,
                "target_weight_kg": 80,
                "timeline_weeks": 12,
            },
        },
        name="maintenance.yaml",
    )


@pytest.fixture
def blocked_file(write_profile):
    return write_profile(
        {
            "demographics": {"age": 28, "gender": "female"},
            "body": {
                "height_cm": 165,
                "weight_kg": 60,
                "target_weight_kg": 55,
                "timeline_weeks": 8,
            },
            "goals": ["weight_loss"],
        },
        name="blocked.yaml",
    )


class TestMainCommands:
    """Tests for main CLI commands."""

    def test_help(self):
        """Test that --help works."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "evaluate" in result.output.lower()

    def test_evaluate_requires_profile(self):
        """Test that evaluate requires a profile argument."""
        result = runner.invoke(app, ["evaluate"])
        assert result.exit_code != 0


class TestEvaluate:
    """Tests for the evaluate command."""

    def test_json_envelope(self, maintenance_file, config_file):
        """A clean profile reports success and can_proceed."""
        result = runner.invoke(
            app, ["evaluate", str(maintenance_file), "--json", "--config", str(config_file)]
        )
        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["success"] is True
        assert payload["command"] == "evaluate"
        assert payload["data"]["verdict"]["can_proceed"] is True
        assert payload["data"]["profile"] == "maintenance"
        assert payload["blockers"] == []

    def test_blocked_plan_exits_zero(self, blocked_file, config_file):
        """A blocked plan is a result, not a failure."""
        result = runner.invoke(
            app, ["evaluate", str(blocked_file), "--json", "--config", str(config_file)]
        )
        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["success"] is True
        assert payload["data"]["verdict"]["can_proceed"] is False
        assert payload["blockers"][0].startswith("BELOW_BMR")
        assert "Extend timeline to 14 weeks" in payload["suggestions"]

    def test_table_output(self, blocked_file, config_file):
        result = runner.invoke(app, ["evaluate", str(blocked_file), "--config", str(config_file)])
        assert result.exit_code == 0
        assert "BLOCKED" in result.output
        assert "BELOW_BMR" in result.output

    def test_markdown_output(self, maintenance_file, config_file):
        result = runner.invoke(
            app, ["evaluate", str(maintenance_file), "--markdown", "--config", str(config_file)]
        )
        assert result.exit_code == 0
        assert result.output.startswith("# Fitness Plan Evaluation")

    def test_missing_profile(self, tmp_path, config_file):
        result = runner.invoke(
            app,
            ["evaluate", str(tmp_path / "nope.yaml"), "--json", "--config", str(config_file)],
        )
        assert result.exit_code == 1
        payload = json.loads(result.output)
        assert payload["success"] is False
        assert "not found" in payload["errors"][0]

    def test_invalid_profile(self, write_profile, config_file):
        path = write_profile(
            {
                "demographics": {"age": 30, "gender": "robot"},
                "body": {
                    "height_cm": 180,
                    "weight_kg": 80,
                    "target_weight_kg": 80,
                    "timeline_weeks": 12,
                },
            }
        )
        result = runner.invoke(
            app, ["evaluate", str(path), "--json", "--config", str(config_file)]
        )
        assert result.exit_code == 1
        payload = json.loads(result.output)
        assert "gender" in payload["errors"][0]

    def test_missing_config(self, maintenance_file, tmp_path):
        result = runner.invoke(
            app, ["evaluate", str(maintenance_file), "--config", str(tmp_path / "none.yaml")]
        )
        assert result.exit_code == 1

    def test_invalid_config(self, maintenance_file, tmp_path):
        config = tmp_path / "broken.yaml"
        config.write_text("rates:\n  brackets: []\n")
        result = runner.invoke(
            app, ["evaluate", str(maintenance_file), "--json", "--config", str(config)]
        )
        assert result.exit_code == 1
        payload = json.loads(result.output)
        assert payload["success"] is False
        assert "at least one bracket" in payload["errors"][0]

    def test_config_output_format(self, maintenance_file, tmp_path):
        """defaults.output_format picks the format when no flag is given."""
        config = tmp_path / "json.yaml"
        config.write_text("defaults:\n  output_format: json\n")
        result = runner.invoke(app, ["evaluate", str(maintenance_file), "--config", str(config)])
        assert result.exit_code == 0
        assert json.loads(result.output)["success"] is True


class TestInfoCommands:
    """Tests for metrics and rules."""

    def test_metrics_json(self, maintenance_file):
        result = runner.invoke(app, ["metrics", str(maintenance_file), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)["data"]
        assert data["bmr"] == 1790
        assert data["body_fat"]["source"] == "bmi_estimation"

    def test_metrics_table(self, maintenance_file):
        result = runner.invoke(app, ["metrics", str(maintenance_file)])
        assert result.exit_code == 0
        assert "Body Metrics" in result.output

    def test_rules_json(self):
        result = runner.invoke(app, ["rules", "--json"])
        assert result.exit_code == 0
        rules = json.loads(result.output)["data"]["rules"]
        assert len(rules) == len(RuleCode)
        assert {"code": "BELOW_BMR", "severity": "error"} in rules
        assert {"code": "AGGRESSIVE_TIMELINE", "severity": "warning"} in rules


class TestConfigCommands:
    """Tests for config subcommands."""

    def test_config_help(self):
        """Test that config --help works."""
        result = runner.invoke(app, ["config", "--help"])
        assert result.exit_code == 0

    def test_init_and_show(self, tmp_path):
        path = tmp_path / "sub" / "config.yaml"
        result = runner.invoke(app, ["config", "init", "--config", str(path)])
        assert result.exit_code == 0
        assert path.exists()

        result = runner.invoke(app, ["config", "show", "--config", str(path), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)["data"]
        assert data["rates"]["optimal_pct"] == 0.75
        assert data["adjustment"]["max_probes"] == 20

    def test_init_refuses_overwrite(self, config_file):
        result = runner.invoke(app, ["config", "init", "--config", str(config_file)])
        assert result.exit_code == 1
        result = runner.invoke(app, ["config", "init", "--config", str(config_file), "--force"])
        assert result.exit_code == 0
