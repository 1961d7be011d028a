"""
Tests for CLI utilities.
"""

import argparse

import pytest

from provisionkit.cli.utils import format_version, load_command_config, resolve_project_root
from provisionkit.config.parser import CONFIG_FILENAME
from provisionkit.core.exceptions import ConfigError
from provisionkit.core.version import VersionString


class TestResolveProjectRoot:
    def test_defaults_to_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert resolve_project_root() == tmp_path.resolve()

    def test_relative_path(self, tmp_path, monkeypatch):
        (tmp_path / "app").mkdir()
        monkeypatch.chdir(tmp_path)
        assert resolve_project_root("app") == (tmp_path / "app").resolve()


class TestLoadCommandConfig:
    """Test load_command_config."""

    def test_reads_project_config(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text('toolchain:\n  required_version: "1.74.0"\n')

        config = load_command_config(argparse.Namespace(config=None, project_root=tmp_path))

        assert config.toolchain.required_version == "1.74.0"

    def test_required_version_override(self, tmp_path):
        args = argparse.Namespace(config=None, project_root=tmp_path, required_version="1.80")

        config = load_command_config(args)

        assert config.toolchain.required_version == "1.80"
        assert config.toolchain.compiler == "rustc"

    def test_invalid_override(self, tmp_path):
        args = argparse.Namespace(config=None, project_root=tmp_path, required_version="latest")

        with pytest.raises(ConfigError, match="--required-version"):
            load_command_config(args)


class TestFormatVersion:
    def test_none(self):
        assert format_version(None) == "(none)"

    def test_version(self):
        assert format_version(VersionString.parse("1.75.0")) == "1.75.0"
