"""Tests for the covreport command line."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from click.testing import CliRunner

from covreport import __version__
from covreport.cli.main import cli

if TYPE_CHECKING:
    from conftest import ProjectBuilder

runner = CliRunner()


def _with_report(project: ProjectBuilder) -> None:
    project.source("src/A.java", 3)
    project.cobertura("target/site/cobertura/coverage.xml", {"src/A.java": {1: 1, 2: 0}})


class TestCli:
    def test_version(self) -> None:
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_report_help_lists_options(self) -> None:
        result = runner.invoke(cli, ["report", "--help"])

        assert result.exit_code == 0
        assert "--dry-run" in result.output
        assert "--git-file" in result.output


class TestReportCommand:
    """Options flow into the run; failures map to exit codes."""

    def test_dry_run_writes_payload(self, project: ProjectBuilder) -> None:
        # Given
        _with_report(project)

        # When
        result = runner.invoke(
            cli,
            [
                "report",
                "--project-dir",
                str(project.root),
                "--dry-run",
                "--service-name",
                "jenkins",
                "--service-job-id",
                "8",
                "--branch",
                "main",
                "--service-env",
                "jdk=21",
            ],
        )

        # Then
        assert result.exit_code == 0, result.output
        assert "Wrote 1 source file" in result.output
        payload = json.loads((project.root / "target/coveralls.json").read_text())
        assert payload["service_job_id"] == "8"
        assert payload["environment"] == {"jdk": "21"}
        assert payload["source_files"][0]["coverage"] == [1, 0, None]

    def test_repo_token_from_environment(self, project: ProjectBuilder) -> None:
        _with_report(project)

        result = runner.invoke(
            cli,
            ["report", "--project-dir", str(project.root), "--dry-run"],
            env={"COVERALLS_REPO_TOKEN": "from-env"},
        )

        assert result.exit_code == 0, result.output
        payload = json.loads((project.root / "target/coveralls.json").read_text())
        assert payload["repo_token"] == "from-env"

    def test_custom_output_file_and_git_snapshot(self, project: ProjectBuilder) -> None:
        _with_report(project)
        git_file = project.file("git.json", json.dumps({"head": {"id": "abc"}, "branch": "dev"}))

        result = runner.invoke(
            cli,
            [
                "report",
                "--project-dir",
                str(project.root),
                "--dry-run",
                "--coveralls-file",
                "out/payload.json",
                "--git-file",
                str(git_file),
            ],
        )

        assert result.exit_code == 0, result.output
        payload = json.loads((project.root / "out/payload.json").read_text())
        assert payload["git"]["head"]["id"] == "abc"
        assert payload["service_branch"] == "dev"

    def test_no_reports_is_processing_failure(self, project: ProjectBuilder) -> None:
        result = runner.invoke(
            cli, ["report", "--project-dir", str(project.root), "--dry-run"]
        )

        assert result.exit_code == 1
        assert "Processing of input or output data failed" in result.output

    def test_unidentified_job_reports_validation_message(self, project: ProjectBuilder) -> None:
        _with_report(project)

        result = runner.invoke(
            cli,
            ["report", "--project-dir", str(project.root), "--branch", "main"],
            env={"COVERALLS_REPO_TOKEN": None},
        )

        assert result.exit_code == 1
        assert "Invalid job configuration" in result.output

    def test_bad_config_is_build_error(self, project: ProjectBuilder) -> None:
        project.file(".covreport.yaml", "submission:\n  timeout_sec: -1\n")

        result = runner.invoke(cli, ["report", "--project-dir", str(project.root)])

        assert result.exit_code == 1
        assert "Build error" in result.output

    def test_malformed_service_env_rejected(self, project: ProjectBuilder) -> None:
        result = runner.invoke(
            cli, ["report", "--project-dir", str(project.root), "--service-env", "novalue"]
        )

        assert result.exit_code == 2
        assert "KEY=VALUE" in result.output

    def test_skip(self, project: ProjectBuilder) -> None:
        result = runner.invoke(cli, ["report", "--project-dir", str(project.root), "--skip"])

        assert result.exit_code == 0
        assert "Skipped" in result.output
