"""Unit tests for the command-line interface."""

import pytest
from typer.testing import CliRunner

from rla import __version__, cli
from rla.runtime import RuntimeContext

runner = CliRunner()


@pytest.fixture
def app_env(config, ctx, monkeypatch):
    """Route the CLI through the test config and the simulated toolbox."""
    toolbox_class = type(ctx.toolbox)
    monkeypatch.setattr(cli, "get_config", lambda: config)
    monkeypatch.setattr(cli, "setup_logging", lambda config=None: None)
    monkeypatch.setattr(
        cli, "RuntimeContext", lambda config: RuntimeContext(config, toolbox_factory=toolbox_class)
    )
    return config


class TestUnpackPackCommands:
    """Tests for the unpack and pack commands."""

    def test_unpack_then_pack(self, app_env, sample_apk):
        result = runner.invoke(cli.app, ["unpack", str(sample_apk), "--smali"])
        assert result.exit_code == 0, result.output
        assert "Unpacked" in result.output

        root = sample_apk.parent / "sample"
        assert (root / "smalis" / "classes.dex").is_dir()

        result = runner.invoke(cli.app, ["pack", "--dir", str(root)])
        assert result.exit_code == 0, result.output
        assert (root / "output" / "1.apk").is_file()

    def test_pack_from_project_directory(self, app_env, sample_apk, monkeypatch):
        runner.invoke(cli.app, ["unpack", str(sample_apk), "--no-git", "--no-jadx"])
        monkeypatch.chdir(sample_apk.parent / "sample" / "smalis")

        result = runner.invoke(cli.app, ["pack"])

        assert result.exit_code == 0, result.output
        assert (sample_apk.parent / "sample" / "output" / "1.apk").is_file()

    def test_unpack_twice_needs_force(self, app_env, sample_apk):
        assert runner.invoke(cli.app, ["unpack", str(sample_apk)]).exit_code == 0

        result = runner.invoke(cli.app, ["unpack", str(sample_apk)])
        assert result.exit_code == 1
        assert "AlreadyExistsError" in result.output

        result = runner.invoke(cli.app, ["unpack", str(sample_apk), "--force"])
        assert result.exit_code == 0, result.output

    def test_unpack_over_a_file(self, app_env, sample_apk):
        (sample_apk.parent / "sample").write_text("not a directory")

        result = runner.invoke(cli.app, ["unpack", str(sample_apk), "--force"])

        assert result.exit_code == 1
        assert "WorkspaceError" in result.output
        assert not isinstance(result.exception, OSError)

    def test_unpack_not_an_apk(self, app_env, temp_dir):
        target = temp_dir / "notes.txt"
        target.write_text("hello")

        result = runner.invoke(cli.app, ["unpack", str(target)])

        assert result.exit_code == 1
        assert "NotAnApkError" in result.output
        assert not (temp_dir / "notes").exists()

    def test_pack_without_project(self, app_env, temp_dir, monkeypatch):
        monkeypatch.chdir(temp_dir)

        result = runner.invoke(cli.app, ["pack"])

        assert result.exit_code == 1
        assert "ProjectNotFoundError" in result.output


class TestOtherCommands:
    """Tests for the auxiliary commands."""

    def test_version(self):
        result = runner.invoke(cli.app, ["--version"])
        assert result.exit_code == 0
        assert f"rla v{__version__}" in result.output

    def test_config(self, app_env):
        result = runner.invoke(cli.app, ["config"])
        assert result.exit_code == 0, result.output
        assert "Current Configuration" in result.output

    def test_sign(self, app_env, sample_apk):
        result = runner.invoke(cli.app, ["sign", str(sample_apk)])
        assert result.exit_code == 0, result.output
        assert "Signed" in result.output

    def test_passthrough_missing_jar(self, app_env, tools_dir):
        (tools_dir / "smali-2.5.2.jar").unlink()

        result = runner.invoke(cli.app, ["smali", "a", "smali-src"])

        assert result.exit_code == 1
        assert "smali.jar" in result.output
