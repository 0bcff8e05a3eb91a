from __future__ import annotations

import json

from core.config import ENV_FLAG, Config, apply_env_overrides, load_config
from services.executor import build_executor
from ui.trace import FileTraceSink


def test_load_config_creates_default(tmp_path):
    path = tmp_path / "nested" / "config.json"
    config = load_config(path)
    assert config == Config()
    assert json.loads(path.read_text())["executor"]["timeout"] == 30.0


def test_load_config_reads_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"executor": {"timeout": 5, "debug": True}, "trace": {"sink": "file"}}))
    config = load_config(path)
    assert config.executor.timeout == 5.0
    assert config.executor.debug is True
    assert config.trace.sink == "file"


def test_load_config_recovers_from_corruption(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    config = load_config(path)
    assert config == Config()
    assert (tmp_path / "config.json.bak").read_text() == "{not json"


def test_invalid_values_are_replaced(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"executor": {"timeout": -1}}))
    assert load_config(path).executor.timeout == 30.0


def test_env_flag_enables_mock_mode():
    config = apply_env_overrides(Config(), {ENV_FLAG: "development"})
    assert config.executor.mock_mode is True


def test_env_flag_production_disables_mock_mode():
    base = Config.model_validate({"executor": {"mock_mode": True}})
    config = apply_env_overrides(base, {ENV_FLAG: "Production"})
    assert config.executor.mock_mode is False
    assert base.executor.mock_mode is True


def test_env_flag_absent_keeps_config():
    base = Config.model_validate({"executor": {"mock_mode": True}})
    assert apply_env_overrides(base, {}) is base


def test_build_executor_from_config(tmp_path):
    config = Config.model_validate(
        {
            "executor": {"timeout": 2.5, "debug": True, "mock_mode": True, "user_agent": "probe/1"},
            "trace": {"sink": "file", "log_dir": str(tmp_path)},
        }
    )
    with build_executor(config) as executor:
        assert executor.mock_mode is True
        assert executor.debug is True
        assert isinstance(executor.trace_sink, FileTraceSink)
        assert executor.trace_sink.log_root == tmp_path
        assert executor.client.timeout.read == 2.5
        assert executor.client.headers["user-agent"] == "probe/1"
        assert executor.client.follow_redirects is True
