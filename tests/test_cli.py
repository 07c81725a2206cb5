"""Tests for Typer-based CLI."""

import pygit2
from typer.testing import CliRunner

from buildtag import __version__
from buildtag.cli.app import app


class TestCLIStructure:
    """Test CLI structure and basic functionality."""

    def test_app_help(self):
        """Test main app help output."""
        runner = CliRunner()
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "run" in result.output
        assert "show-config" in result.output

    def test_version_flag(self):
        """Test --version flag."""
        runner = CliRunner()
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"buildtag v{__version__}" in result.output

    def test_run_help_shows_options(self):
        """Test run help lists the step options."""
        runner = CliRunner()
        result = runner.invoke(app, ["run", "--help"])

        assert result.exit_code == 0
        assert "--build-number" in result.output
        assert "--build-directory" in result.output
        assert "--prefix" in result.output
        assert "--source-folder" in result.output
        assert "--config" in result.output

    def test_run_requires_build_number(self, tmp_path):
        """Test run fails without a build number."""
        runner = CliRunner()
        result = runner.invoke(app, ["run", "--build-directory", str(tmp_path)])

        assert result.exit_code != 0


class TestRun:
    """Test running the step from the command line."""

    def test_run_pushes_tag(self, build_dir, origin_path):
        """Test a successful run tags, pushes and prints a summary."""
        runner = CliRunner()
        result = runner.invoke(
            app,
            [
                "run",
                "--build-number",
                "7",
                "--build-directory",
                str(build_dir),
                "--prefix",
                "ci-",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "✅ Tag pushed successfully!" in result.output
        assert "refs/tags/ci-7:refs/tags/ci-7" in result.output
        origin = pygit2.Repository(str(origin_path))
        assert "refs/tags/ci-7" in origin.references

    def test_run_with_config_file(self, build_dir, origin_path, tmp_path):
        """Test options are read from the YAML config file."""
        config = tmp_path / "step.yaml"
        config.write_text("TagNamePrefix: nightly-\nSourceFolder: src\n")

        runner = CliRunner()
        result = runner.invoke(
            app,
            [
                "run",
                "--build-number",
                "3",
                "--build-directory",
                str(build_dir),
                "--config",
                str(config),
            ],
        )

        assert result.exit_code == 0, result.output
        assert "refs/tags/nightly-3" in pygit2.Repository(str(origin_path)).references

    def test_run_reports_rejections(self, build_dir, monkeypatch):
        """Test refused references are shown but do not fail the run."""

        def fake_push(self, specs, callbacks=None, **kwargs):
            callbacks.push_update_reference("refs/tags/5", "rejected")

        monkeypatch.setattr(pygit2.Remote, "push", fake_push)

        runner = CliRunner()
        result = runner.invoke(
            app, ["run", "--build-number", "5", "--build-directory", str(build_dir)]
        )

        assert result.exit_code == 0
        assert "Rejected:    refs/tags/5 (rejected)" in result.output

    def test_run_missing_repository(self, tmp_path):
        """Test a build directory without a checkout fails with exit 1."""
        (tmp_path / "src").mkdir()

        runner = CliRunner()
        result = runner.invoke(
            app, ["run", "--build-number", "1", "--build-directory", str(tmp_path)]
        )

        assert result.exit_code == 1
        assert "❌ Tag and push failed" in result.output

    def test_run_os_error(self, build_dir, monkeypatch):
        """Test an unreadable checkout fails with exit 1 instead of a traceback."""

        def unreadable(path):
            raise PermissionError(13, "Permission denied", path)

        monkeypatch.setattr("buildtag.core.step.open_repository", unreadable)

        runner = CliRunner()
        result = runner.invoke(
            app, ["run", "--build-number", "1", "--build-directory", str(build_dir)]
        )

        assert result.exit_code == 1
        assert "❌ Tag and push failed" in result.output
        assert "Permission denied" in result.output

    def test_run_missing_origin(self, build_dir):
        """Test a checkout without origin fails with exit 1."""
        pygit2.Repository(str(build_dir / "src")).remotes.delete("origin")

        runner = CliRunner()
        result = runner.invoke(
            app, ["run", "--build-number", "1", "--build-directory", str(build_dir)]
        )

        assert result.exit_code == 1
        assert "Remote not found: origin" in result.output

    def test_run_username_without_password(self, build_dir):
        """Test credentials must be given as a pair."""
        runner = CliRunner()
        result = runner.invoke(
            app,
            [
                "run",
                "--build-number",
                "1",
                "--build-directory",
                str(build_dir),
                "--git-username",
                "bot",
            ],
            env={"BUILDTAG_GIT_PASSWORD": ""},
        )

        assert result.exit_code == 1
        assert "must be given together" in result.output

    def test_invalid_log_level(self, build_dir):
        """Test an unknown log level is rejected."""
        runner = CliRunner()
        result = runner.invoke(
            app,
            [
                "run",
                "--build-number",
                "1",
                "--build-directory",
                str(build_dir),
                "--log-level",
                "verbose",
            ],
        )

        assert result.exit_code == 1
        assert "Invalid log level" in result.output


class TestShowConfig:
    """Test printing the effective configuration."""

    def test_defaults(self):
        """Test defaults are printed as YAML."""
        runner = CliRunner()
        result = runner.invoke(app, ["show-config"])

        assert result.exit_code == 0
        assert "tag_name_prefix: ''" in result.output
        assert "source_folder: src" in result.output

    def test_overrides_file(self, tmp_path):
        """Test command-line options override the config file."""
        config = tmp_path / "step.yaml"
        config.write_text("tag_name_prefix: a-\nsource_folder: code\n")

        runner = CliRunner()
        result = runner.invoke(
            app, ["show-config", "--config", str(config), "--prefix", "b-"]
        )

        assert result.exit_code == 0
        assert "tag_name_prefix: b-" in result.output
        assert "source_folder: code" in result.output

    def test_missing_config_file(self, tmp_path):
        """Test a missing config file exits with an error."""
        runner = CliRunner()
        result = runner.invoke(
            app, ["show-config", "--config", str(tmp_path / "nope.yaml")]
        )

        assert result.exit_code == 1
        assert "Config file not found" in result.output

    def test_invalid_config_file(self, tmp_path):
        """Test unknown keys in the config file are reported."""
        config = tmp_path / "step.yaml"
        config.write_text("remote: upstream\n")

        runner = CliRunner()
        result = runner.invoke(app, ["show-config", "--config", str(config)])

        assert result.exit_code == 1
        assert "Invalid config file" in result.output
