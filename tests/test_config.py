import pytest

from spviz.config import (
    PLAYBACK_DEFAULTS,
    SPEED_PRESETS,
    AppConfig,
    GenerationParams,
    parse_bool,
    speed_from_slider,
)


@pytest.mark.parametrize("level, seconds", [(1, 1.8), (3, 1.0), (5, 0.2), (0, 1.8), (9, 0.2)])
def test_speed_from_slider(level, seconds):
    assert speed_from_slider(level) == pytest.approx(seconds)


def test_presets_match_slider():
    assert SPEED_PRESETS["slow"] == speed_from_slider(1)
    assert PLAYBACK_DEFAULTS.interval == SPEED_PRESETS["medium"]


def test_generation_params_from_dict():
    params = GenerationParams.from_dict({"nodes": "9", "density": 0.2, "allow_negative": 1, "extra": True})
    assert params.node_count == 9
    assert params.density == 0.2
    assert params.allow_negative_edges is True
    assert params.max_weight == GenerationParams().max_weight


@pytest.mark.parametrize(
    "value, expected",
    [(True, True), (False, False), (1, True), (0, False), ("false", False), ("0", False),
     (" TRUE ", True), ("yes", True), ("off", False)],
)
def test_parse_bool(value, expected):
    assert parse_bool(value) is expected


@pytest.mark.parametrize("value", ["maybe", 2, None, 0.5, []])
def test_parse_bool_rejects(value):
    with pytest.raises(ValueError):
        parse_bool(value)


def test_string_flag_is_not_truthiness():
    assert GenerationParams.from_dict({"allow_negative": "false"}).allow_negative_edges is False
    assert GenerationParams.from_dict({"allow_negative": "true"}).allow_negative_edges is True
    with pytest.raises(ValueError):
        GenerationParams.from_dict({"allow_negative": "nope"})


def test_app_config_from_env(monkeypatch):
    monkeypatch.setenv("SPVIZ_SECRET_KEY", "s3cret")
    monkeypatch.setenv("SPVIZ_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("SPVIZ_MAX_SESSIONS", "8")
    config = AppConfig.from_env()
    assert config == AppConfig(secret_key="s3cret", log_level="DEBUG", max_sessions=8)


def test_app_config_defaults(monkeypatch):
    monkeypatch.delenv("SPVIZ_SECRET_KEY", raising=False)
    monkeypatch.delenv("SPVIZ_LOG_LEVEL", raising=False)
    monkeypatch.delenv("SPVIZ_MAX_SESSIONS", raising=False)
    assert AppConfig.from_env() == AppConfig()
