"""
Tests for distribution packaging.
"""

import pytest

from provisionkit.config.parser import PackagingSettings
from provisionkit.core.exceptions import PackagingError, UsageError
from provisionkit.deploy.packaging import PACKAGE_USAGE, PackageBuilder, validate_format


class TestValidateFormat:
    """Tests for validate_format."""

    @pytest.mark.parametrize("fmt", ["arch", "deb", "rpm"])
    def test_known_formats(self, fmt):
        assert validate_format(fmt) == fmt

    @pytest.mark.parametrize("fmt", ["", "msi", "DEB", "snap"])
    def test_unknown_format(self, fmt):
        with pytest.raises(UsageError) as exc_info:
            validate_format(fmt)

        assert exc_info.value.usage == PACKAGE_USAGE

    def test_usage_text(self):
        assert PACKAGE_USAGE == "usage: provkit package [arch|deb|rpm]"


class TestPackageBuilder:
    """Tests for PackageBuilder."""

    @pytest.mark.parametrize(
        "fmt,command",
        [
            ("arch", ["makepkg", "-sf"]),
            ("deb", ["dpkg-buildpackage", "-us", "-uc"]),
            ("rpm", ["rpmbuild", "-ba", "git-commit-helper.spec"]),
        ],
    )
    def test_commands(self, runner, project, fmt, command):
        PackageBuilder(runner, project, PackagingSettings()).build(fmt)

        assert runner.calls == [command]
        assert runner.cwds == [project]

    def test_unknown_format_runs_nothing(self, runner, project):
        with pytest.raises(UsageError):
            PackageBuilder(runner, project, PackagingSettings()).build("zip")

        assert runner.calls == []

    def test_tool_failure(self, runner, project):
        runner.on("makepkg", returncode=127, stderr="makepkg: command not found")

        with pytest.raises(PackagingError, match="command not found"):
            PackageBuilder(runner, project, PackagingSettings()).build("arch")
