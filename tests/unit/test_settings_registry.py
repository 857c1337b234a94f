import json

import pytest

from config import load_config
from config.registry import COACH_KEY, SUMMARY_KEY, bind_model, get_model, is_bound
from config.settings import Settings
from coaching_agent import bind_with_config


def test_settings_defaults():
    settings = Settings(_env_file=None)
    assert settings.DB_PATH.endswith(".db")
    assert settings.DAILY_SESSION_LIMIT == 2
    assert settings.MONTHLY_COST_THRESHOLD_USD == 285.0
    assert settings.COACHING_MAX_WORKERS == 4


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("DAILY_SESSION_LIMIT", "5")
    monkeypatch.setenv("REVIEWER_IDS", '["rev-1", "rev-2"]')
    settings = Settings(_env_file=None)
    assert settings.DAILY_SESSION_LIMIT == 5
    assert settings.REVIEWER_IDS == ["rev-1", "rev-2"]


def test_registry_bind_and_retrieve():
    marker = object()
    bind_model(COACH_KEY, lambda **_: marker)
    model = get_model(COACH_KEY)
    assert model() is marker


def test_registry_missing_key():
    assert is_bound("coaching.unknown") is False
    with pytest.raises(KeyError):
        get_model("coaching.unknown")


def test_shipped_app_config_routes_both_keys():
    from pathlib import Path

    cfg = load_config(Path(__file__).resolve().parents[2] / "app_config.json")
    assert cfg.registry[COACH_KEY] in cfg.llm_routes
    assert cfg.registry[SUMMARY_KEY] in cfg.llm_routes
    assert cfg.llm_routes[cfg.registry[COACH_KEY]].output_cost_per_1k > 0


def test_bind_with_config(tmp_path):
    config_path = tmp_path / "app_config.json"
    config_path.write_text(
        json.dumps(
            {
                "llm_routes": {
                    "local": {
                        "name": "local",
                        "base_url": "http://localhost:11434",
                        "endpoint": "/v1/chat/completions",
                        "model": "llama3",
                        "timeout_s": 30,
                    }
                },
                "registry": {COACH_KEY: "local", SUMMARY_KEY: "local"},
            }
        ),
        encoding="utf-8",
    )
    bind_with_config(config_path)
    assert callable(get_model(COACH_KEY))
    assert callable(get_model(SUMMARY_KEY))
