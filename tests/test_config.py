"""
test_config.py — Settings defaults and env overrides.
"""

from heatwave.core.config import Settings


def test_defaults():
    s = Settings(_env_file=None)
    assert s.upstream_base_url == "http://localhost:5000/api"
    assert s.health_timeout_seconds == 3.0
    assert s.request_timeout_seconds == 30.0
    assert s.proximity_radius_degrees == 1.5
    assert s.nearby_fallback_limit == 50
    assert s.force_mock_mode is None


def test_env_override(monkeypatch):
    monkeypatch.setenv("UPSTREAM_BASE_URL", "http://inference:5000/api")
    monkeypatch.setenv("FORCE_MOCK_MODE", "true")
    s = Settings(_env_file=None)
    assert s.upstream_base_url == "http://inference:5000/api"
    assert s.force_mock_mode is True


def test_cors_origins_parsed():
    s = Settings(_env_file=None, cors_origins_str=" http://a , ,http://b")
    assert s.cors_origins == ["http://a", "http://b"]
