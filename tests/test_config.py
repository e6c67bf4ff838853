import json
import os

import pytest

from cabbridge.config import Config, ConfigError, default_config, load


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in list(os.environ):
        if name.startswith("CAB_"):
            monkeypatch.delenv(name, raising=False)


def test_relative_data_dir_resolved_to_absolute(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CAB_DATA_DIR", "relative/data/dir")

    cfg, warnings = load()
    assert os.path.isabs(cfg.data_dir)
    assert cfg.data_dir.endswith(os.path.join("relative", "data", "dir"))
    assert any("was relative" in w for w in warnings)


def test_absolute_data_dir_unchanged(monkeypatch, tmp_path):
    absolute = str(tmp_path / "cab-data")
    monkeypatch.setenv("CAB_DATA_DIR", absolute)

    cfg, warnings = load()
    assert cfg.data_dir == absolute
    assert not any("was relative" in w for w in warnings)


def test_default_auto_gc_hours():
    assert default_config().auto_gc_hours == 24


def test_default_values(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    cfg = default_config()
    assert cfg == Config(
        data_dir=os.path.join(str(tmp_path), ".claude", "cli-agents-bridge"),
        stale_seconds=300,
        poll_interval_ms=1000,
        max_blocking_seconds=540,
        max_inbox_size=100,
        max_message_bytes=65536,
        retention_days=7,
        heartbeat_tick_ms=30000,
        auto_gc_hours=24,
    )


def test_auto_gc_hours_env_override(monkeypatch, tmp_path):
    monkeypatch.setenv("CAB_DATA_DIR", str(tmp_path / "cab-data"))

    monkeypatch.setenv("CAB_AUTO_GC_HOURS", "48")
    cfg, _ = load()
    assert cfg.auto_gc_hours == 48

    monkeypatch.setenv("CAB_AUTO_GC_HOURS", "0")
    cfg, _ = load()
    assert cfg.auto_gc_hours == 0


def test_default_json_with_comment_is_copyable(monkeypatch, tmp_path):
    monkeypatch.setenv("CAB_DATA_DIR", str(tmp_path))
    document = {
        "_comment": "Reference defaults; copy to config.json and edit.",
        "data_dir": str(tmp_path),
        "stale_seconds": 300,
        "poll_interval_ms": 1000,
        "max_blocking_seconds": 540,
        "max_inbox_size": 100,
        "max_message_bytes": 65536,
        "retention_days": 7,
        "heartbeat_tick_ms": 30000,
        "auto_gc_hours": 24,
    }
    (tmp_path / "config.json").write_text(json.dumps(document, indent=2))

    cfg, _ = load()
    assert cfg.stale_seconds == 300
    assert cfg.auto_gc_hours == 24


def test_user_config_read_from_data_dir_env(monkeypatch, tmp_path):
    monkeypatch.setenv("CAB_DATA_DIR", str(tmp_path))
    (tmp_path / "config.json").write_text('{"stale_seconds": 999}')

    cfg, _ = load()
    assert cfg.stale_seconds == 999


def test_user_config_zero_values_ignored(monkeypatch, tmp_path):
    monkeypatch.setenv("CAB_DATA_DIR", str(tmp_path))
    (tmp_path / "config.json").write_text('{"auto_gc_hours": 0, "retention_days": 3}')

    cfg, _ = load()
    assert cfg.auto_gc_hours == 24
    assert cfg.retention_days == 3


def test_env_wins_over_user_file(monkeypatch, tmp_path):
    monkeypatch.setenv("CAB_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("CAB_STALE_SECONDS", "42")
    (tmp_path / "config.json").write_text('{"stale_seconds": 999}')

    cfg, _ = load()
    assert cfg.stale_seconds == 42


def test_user_config_unknown_field_rejected(monkeypatch, tmp_path):
    monkeypatch.setenv("CAB_DATA_DIR", str(tmp_path))
    (tmp_path / "config.json").write_text('{"stale_secnds": 10}')

    with pytest.raises(ConfigError, match="unknown field"):
        load()


def test_user_config_malformed_json_rejected(monkeypatch, tmp_path):
    monkeypatch.setenv("CAB_DATA_DIR", str(tmp_path))
    (tmp_path / "config.json").write_text("{not json")

    with pytest.raises(ConfigError, match="parse json"):
        load()


def test_user_config_wrong_type_rejected(monkeypatch, tmp_path):
    monkeypatch.setenv("CAB_DATA_DIR", str(tmp_path))
    (tmp_path / "config.json").write_text('{"stale_seconds": "300"}')

    with pytest.raises(ConfigError):
        load()


def test_malformed_env_int_warns_and_keeps_value(monkeypatch, tmp_path):
    monkeypatch.setenv("CAB_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("CAB_MAX_INBOX_SIZE", "lots")

    cfg, warnings = load()
    assert cfg.max_inbox_size == 100
    assert any("CAB_MAX_INBOX_SIZE" in w and "not a valid int" in w for w in warnings)


def test_env_int_with_whitespace_is_rejected(monkeypatch, tmp_path):
    monkeypatch.setenv("CAB_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("CAB_RETENTION_DAYS", " 5")

    cfg, warnings = load()
    assert cfg.retention_days == 7
    assert len(warnings) == 1