"""Tests for loading and validating the TOML configuration."""

from datetime import timedelta, timezone
from pathlib import Path

import pytest

from datedprune import Config, ConfigError, PatternError, RetentionPath, RetentionPolicy, compile_pattern, load_config, parse_config


EXAMPLE_CONFIG = """
utc-offset = "+01:00"

[retention]
keep-last = 2
keep-daily = 7

[[paths]]
path = "/backups/db"
file-pattern = "db-{year}-{month}-{day}.sql.gz"

[[paths]]
path = "/backups/www"
file-pattern = "www_{day}{month_abbr}{year}.tar"
retention = { keep-weekly = 4, keep-yearly = 0 }
"""


def _write_config(tmp_path: Path, content: str) -> Path:
    config_file = tmp_path / "config.toml"
    config_file.write_text(content, encoding="utf-8")
    return config_file


def test_load_config(tmp_path: Path) -> None:
    config = load_config(_write_config(tmp_path, EXAMPLE_CONFIG))

    assert config.retention == RetentionPolicy(keep_last=2, keep_daily=7)
    assert config.utc_offset == timezone(timedelta(hours=1))
    assert [p.path for p in config.paths] == [Path("/backups/db"), Path("/backups/www")]
    assert config.paths[0].file_pattern.template == "db-{year}-{month}-{day}.sql.gz"
    assert config.paths[0].retention is None
    assert config.paths[1].retention == RetentionPolicy(keep_weekly=4, keep_yearly=0)


def test_path_policy_falls_back_to_global_policy(tmp_path: Path) -> None:
    config = load_config(_write_config(tmp_path, EXAMPLE_CONFIG))
    assert config.policy_for(config.paths[0]) == RetentionPolicy(keep_last=2, keep_daily=7)
    assert config.policy_for(config.paths[1]) == RetentionPolicy(keep_weekly=4, keep_yearly=0)


def test_minimal_config_uses_identity_policy_and_utc() -> None:
    config = parse_config({"paths": [{"path": "/data", "file-pattern": "{year}"}]})
    assert config.retention.is_identity()
    assert config.utc_offset == timezone.utc
    assert config.policy_for(config.paths[0]).is_identity()


def test_empty_config_has_no_paths() -> None:
    assert parse_config({}).paths == ()


def test_policy_for_explicit_path_policy() -> None:
    global_policy = RetentionPolicy(keep_daily=1)
    path_policy = RetentionPolicy(keep_last=5)
    config = Config(global_policy, (RetentionPath(Path("a"), compile_pattern("{year}")), RetentionPath(Path("b"), compile_pattern("{year}"), path_policy)))
    assert config.policy_for(config.paths[0]) is global_policy
    assert config.policy_for(config.paths[1]) is path_policy


@pytest.mark.parametrize(
    "retention",
    [
        {"keep-dayly": 1},
        {"keep-daily": -1},
        {"keep-daily": "7"},
        {"keep-daily": True},
        {"keep-daily": 1.5},
        "keep-daily",
    ],
)
def test_invalid_retention(retention: object) -> None:
    with pytest.raises(ConfigError):
        RetentionPolicy.from_mapping(retention)


@pytest.mark.parametrize(
    "data",
    [
        {"paths": [{"file-pattern": "{year}"}]},
        {"paths": [{"path": "/data"}]},
        {"paths": [{"path": 1, "file-pattern": "{year}"}]},
        {"paths": [{"path": "/data", "file-pattern": "{year}", "protect": "x"}]},
        {"paths": {"path": "/data"}},
        {"paths": ["/data"]},
        {"retention": {"keep-last": -3}},
        {"utc-offset": "CET"},
        {"unknown": 1},
    ],
)
def test_invalid_config(data: dict) -> None:
    with pytest.raises(ConfigError):
        parse_config(data)


def test_invalid_toml(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_config(_write_config(tmp_path, "[retention\nkeep-last = 1"))


def test_missing_config_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.toml")


def test_config_error_is_value_error() -> None:
    assert issubclass(ConfigError, ValueError)
    assert issubclass(PatternError, ValueError)


def test_identity_policy() -> None:
    assert RetentionPolicy().is_identity()
    assert not RetentionPolicy(keep_last=0).is_identity()
    assert RetentionPolicy.from_mapping({}) == RetentionPolicy()
    assert RetentionPolicy.from_mapping({"keep-hourly": 24, "keep_monthly": 6}) == RetentionPolicy(keep_hourly=24, keep_monthly=6)
