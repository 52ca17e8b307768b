"""Unit tests for environment precondition checks."""

import pytest

from mac_icon_fetcher.errors import EnvironmentCheckError
from mac_icon_fetcher.services.environment import check_environment


def which_all(tool):
    return f"/usr/bin/{tool}"


class TestCheckEnvironment:

    def test_passes_and_creates_output_dir(self, config):
        assert not config.output_dir.exists()

        check_environment(config, platform="darwin", which=which_all)

        assert config.output_dir.is_dir()

    def test_rejects_other_platforms(self, config):
        with pytest.raises(EnvironmentCheckError, match="only supports macOS") as exc_info:
            check_environment(config, platform="linux", which=which_all)

        assert exc_info.value.suggestion

    def test_missing_required_tool(self, config):
        def which(tool):
            return None if tool == "sips" else which_all(tool)

        with pytest.raises(EnvironmentCheckError, match="sips") as exc_info:
            check_environment(config, platform="darwin", which=which)

        assert exc_info.value.context == {"missing": ["sips"]}

    def test_missing_optional_tool_only_warns(self, config, caplog):
        def which(tool):
            return None if tool == "osascript" else which_all(tool)

        with caplog.at_level("WARNING", logger="mac_icon_fetcher"):
            check_environment(config, platform="darwin", which=which)

        assert "osascript not found" in caplog.text

    def test_missing_data_file(self, config):
        config.data_path.unlink()

        with pytest.raises(EnvironmentCheckError, match="Data file does not exist"):
            check_environment(config, platform="darwin", which=which_all)
