"""Tests for argument parsing, user configuration and the entry point."""

import json
from unittest.mock import patch

import pytest
import yaml

import cli_config
import snapinit
from args import parse_args
from constants import Constants, ExitCodes
from errors import ConfigError, NoMatchingSnapshot

_TUNABLES = (
    "SNAPSHOT_INDEX_URL", "MIN_SUPPORTED_SNAPSHOT", "IGNORED_DIRS",
    "REQUEST_TIMEOUT", "HTTP_RETRY_MAX",
)


@pytest.fixture(autouse=True)
def _restore_constants():
    saved = {name: getattr(Constants, name) for name in _TUNABLES}
    yield
    for name, value in saved.items():
        setattr(Constants, name, value)


class TestParseArgs:
    """Command line parsing."""

    def test_defaults(self):
        args = parse_args([])

        assert args.DIRS == []
        assert args.SNAPSHOT is None
        assert args.OMIT_PACKAGES is False
        assert args.FORCE is False
        assert args.INCLUDE_SUBDIRS is True
        assert args.LOG_LEVEL == "INFO"

    def test_all_flags(self):
        args = parse_args([
            "pkgs", "libs", "--snapshot", "lts-22.28", "--omit-packages", "--force",
            "--ignore-subdirs", "-c", "cfg.yml", "--loglevel", "DEBUG",
        ])

        assert args.DIRS == ["pkgs", "libs"]
        assert args.SNAPSHOT == "lts-22.28"
        assert args.OMIT_PACKAGES and args.FORCE
        assert args.INCLUDE_SUBDIRS is False
        assert args.CONFIG == "cfg.yml"
        assert args.LOG_LEVEL == "DEBUG"

    def test_build_options(self):
        options = snapinit.build_options(parse_args(["a", "--omit-packages", "--ignore-subdirs"]))

        assert options.search_dirs == ("a",)
        assert options.omit_packages is True
        assert options.include_subdirs is False
        assert options.force_overwrite is False


class TestLoadConfig:
    """User configuration files."""

    def test_explicit_yaml_file(self, tmp_path):
        path = tmp_path / "cfg.yml"
        path.write_text(yaml.safe_dump({"ignored_dirs": ["dist", "vendor"], "http": {"timeout": 5}}))

        cfg = cli_config.load_config(str(path))
        cli_config.apply_config_overrides(cfg)

        assert Constants.IGNORED_DIRS == ["dist", "vendor"]
        assert Constants.REQUEST_TIMEOUT == 5

    def test_explicit_json_file(self, tmp_path):
        path = tmp_path / "cfg.json"
        path.write_text(json.dumps({"min_supported_snapshot": "lts-20.0"}))

        cli_config.apply_config_overrides(cli_config.load_config(str(path)))

        assert Constants.MIN_SUPPORTED_SNAPSHOT == "lts-20.0"

    def test_found_by_searching_upwards(self, tmp_path):
        (tmp_path / ".snapinit.yml").write_text("snapshot_index_url: https://mirror.test/s.json\n")
        start = tmp_path / "a" / "b"
        start.mkdir(parents=True)

        assert cli_config.load_config(start_dir=start) == {"snapshot_index_url": "https://mirror.test/s.json"}

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigError):
            cli_config.load_config(str(tmp_path / "nope.yml"))

    @pytest.mark.parametrize("document", [
        {"unknown_key": 1},
        {"min_supported_snapshot": "nightly-2024-01-01"},
        {"http": {"retry_max": 0}},
        ["not", "a", "mapping"],
    ])
    def test_schema_violations(self, tmp_path, document):
        path = tmp_path / "cfg.yml"
        path.write_text(yaml.safe_dump(document))

        with pytest.raises(ConfigError):
            cli_config.load_config(str(path))

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "cfg.yml"
        path.write_text("a: [unclosed\n")

        with pytest.raises(ConfigError):
            cli_config.load_config(str(path))

    def test_cli_wins_over_config(self, tmp_path):
        path = tmp_path / "cfg.yml"
        path.write_text("snapshot_index_url: https://from-config.test/s.json\n")
        cli_config.apply_config_overrides(cli_config.load_config(str(path)))

        cli_config.apply_cli_overrides(parse_args(["--snapshot-index-url", "https://from-cli.test/s.json"]))

        assert Constants.SNAPSHOT_INDEX_URL == "https://from-cli.test/s.json"


class TestMain:
    """Exit codes of the entry point."""

    def test_success(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with patch("snapinit.run") as mock_run, pytest.raises(SystemExit) as exc_info:
            snapinit.main(["--snapshot", "lts-22.28"])

        assert exc_info.value.code == ExitCodes.SUCCESS.value
        mock_run.assert_called_once()

    def test_failure_maps_to_exit_code(self, tmp_path, monkeypatch, caplog):
        monkeypatch.chdir(tmp_path)
        with patch("snapinit.run", side_effect=NoMatchingSnapshot(["lts-22.28"])), \
                pytest.raises(SystemExit) as exc_info:
            snapinit.main([])

        assert exc_info.value.code == ExitCodes.RESOLUTION_ERROR.value
        assert "lts-22.28" in caplog.text

    def test_existing_config_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / Constants.PROJECT_CONFIG_FILE).write_text("x\n")

        with pytest.raises(SystemExit) as exc_info:
            snapinit.main(["--snapshot", "ghc-9.6.6"])

        assert exc_info.value.code == ExitCodes.FILE_ERROR.value
