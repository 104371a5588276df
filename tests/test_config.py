"""Tests for config module."""
from clickerengine.config import EngineConfig


def test_defaults():
    config = EngineConfig()
    assert config.tick_interval == 1.0
    assert config.autosave_interval == 3.0
    assert config.boost_poll_interval == 10.0
    assert config.validate() == []


def test_cache_key_is_namespaced_per_player():
    config = EngineConfig()
    assert config.cache_key("p1") == "cookiePlayerData_p1"
    assert config.cache_key("p1") != config.cache_key("p2")


def test_validate_rejects_non_positive_intervals():
    config = EngineConfig(tick_interval=0, autosave_interval=-1, cache_key_prefix="")
    errors = config.validate()
    assert len(errors) == 3
