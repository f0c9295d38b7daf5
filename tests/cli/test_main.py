"""End-to-end tests of the command line, against a local bare git repository."""

import shutil
from unittest.mock import Mock

import pytest
from click.testing import CliRunner
from git import Repo

from semverstore import __version__
from semverstore.cli.main import cli

requires_git = pytest.mark.skipif(
    shutil.which("git") is None, reason="git executable not available"
)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def git_config(tmp_path):
    remote = tmp_path / "remote.git"
    Repo.init(remote, bare=True).close()
    config = tmp_path / "source.yaml"
    config.write_text(
        "driver: git\n"
        f"uri: {remote}\n"
        "branch: main\n"
        "file: VERSION\n"
        "git_user: CI Bot <ci@example.com>\n"
        "initial_version: 1.0.0\n"
    )
    return str(config)


@pytest.mark.short
def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


@pytest.mark.short
def test_bump_requires_a_component(runner, tmp_path):
    config = tmp_path / "source.yaml"
    config.write_text("bucket: versions\nkey: version\n")

    result = runner.invoke(cli, ["bump", "--config", str(config)])

    assert result.exit_code == 2
    assert "--bump" in result.output


@pytest.mark.short
def test_bump_rejects_invalid_prerelease(runner, tmp_path, capture_logs, monkeypatch):
    config = tmp_path / "source.yaml"
    config.write_text("bucket: versions\nkey: version\n")
    stores = []

    def no_store_access(source, max_retries=None):
        store = Mock()
        stores.append(store)
        return store

    monkeypatch.setattr("semverstore.cli.main.get_store", no_store_access)

    result = runner.invoke(
        cli, ["bump", "--config", str(config), "--bump", "patch", "--pre", "rc_1"]
    )

    assert result.exit_code == 1
    assert "Invalid version format: 'rc_1'" in capture_logs.getvalue()
    stores[0].bump.assert_not_called()


@pytest.mark.short
def test_missing_config_file(runner, tmp_path):
    result = runner.invoke(cli, ["check", "--config", str(tmp_path / "missing.yaml")])
    assert result.exit_code == 2


@pytest.mark.short
def test_unknown_driver(runner, tmp_path, capture_logs):
    config = tmp_path / "source.yaml"
    config.write_text("driver: swift\n")

    result = runner.invoke(cli, ["check", "--config", str(config)])

    assert result.exit_code == 1
    assert "unknown driver: swift" in capture_logs.getvalue()


@pytest.mark.short
def test_invalid_since(runner, tmp_path, capture_logs):
    config = tmp_path / "source.yaml"
    config.write_text("bucket: versions\nkey: version\n")

    result = runner.invoke(cli, ["check", "--config", str(config), "--since", "1.0"])

    assert result.exit_code == 1
    assert "Invalid version format" in capture_logs.getvalue()


@pytest.mark.short
def test_invalid_max_retries(runner, tmp_path):
    config = tmp_path / "source.yaml"
    config.write_text("bucket: versions\nkey: version\n")

    result = runner.invoke(cli, ["check", "--config", str(config), "--max-retries", "0"])

    assert result.exit_code == 2


@requires_git
@pytest.mark.git
class TestGitRoundTrip:
    def test_check_empty_store(self, runner, git_config):
        result = runner.invoke(cli, ["check", "--config", git_config])

        assert result.exit_code == 0, result.output
        assert result.output.strip() == "1.0.0"

    def test_bump_then_check(self, runner, git_config):
        result = runner.invoke(cli, ["bump", "--config", git_config, "--bump", "minor"])
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "1.1.0"

        result = runner.invoke(
            cli, ["bump", "--config", git_config, "--bump", "patch", "--pre", "rc"]
        )
        assert result.output.strip() == "1.1.1-rc.1"

        result = runner.invoke(cli, ["bump", "-c", git_config, "--pre", "rc"])
        assert result.output.strip() == "1.1.1-rc.2"

        result = runner.invoke(cli, ["check", "--config", git_config])
        assert result.output.strip() == "1.1.1-rc.2"

    def test_set_and_check_since(self, runner, git_config):
        result = runner.invoke(cli, ["set", "--config", git_config, "2.0.0"])
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "2.0.0"

        result = runner.invoke(cli, ["check", "-c", git_config, "--since", "1.9.0"])
        assert result.output.strip() == "2.0.0"

        result = runner.invoke(cli, ["check", "-c", git_config, "--since", "2.0.0"])
        assert result.exit_code == 0
        assert result.output.strip() == ""

    def test_set_rejects_invalid_version(self, runner, git_config, capture_logs):
        result = runner.invoke(cli, ["set", "--config", git_config, "two"])

        assert result.exit_code == 1
        assert "Invalid version format" in capture_logs.getvalue()
