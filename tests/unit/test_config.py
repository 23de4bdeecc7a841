from __future__ import annotations

import pytest

from src.adapters.config import ViewConfig

_VARS = (
    "BUSNOTIFY_POSITIONS_LAT",
    "BUSNOTIFY_POSITIONS_LON",
    "BUSNOTIFY_GTFS_ID",
    "BUSNOTIFY_SCHEDULE_SOURCE",
    "BUSNOTIFY_NOTIFICATION_MODE",
    "BUSNOTIFY_CREDENTIAL_STORE",
    "BUSNOTIFY_FETCH_TIMEOUT_S",
    "BUSNOTIFY_SESSION_COOKIE",
    "BUSNOTIFY_SECURE_COOKIES",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_match_the_okinawa_view() -> None:
    cfg = ViewConfig.from_env()

    assert cfg.positions_lat == pytest.approx(26.2233)
    assert cfg.positions_lon == pytest.approx(127.691028)
    assert cfg.gtfs_id == "yanbaru-expressbus"
    assert cfg.schedule_source == "local"
    assert cfg.notification_mode == "live"
    assert cfg.credential_param == "jwt"
    assert cfg.session_cookie == "busnotify_session"
    assert cfg.secure_cookies is False


def test_variant_settings_from_env(monkeypatch) -> None:
    monkeypatch.setenv("BUSNOTIFY_POSITIONS_LAT", "35.6812")
    monkeypatch.setenv("BUSNOTIFY_POSITIONS_LON", "139.7671")
    monkeypatch.setenv("BUSNOTIFY_GTFS_ID", "toei-bus")
    monkeypatch.setenv("BUSNOTIFY_SCHEDULE_SOURCE", "S3")
    monkeypatch.setenv("BUSNOTIFY_NOTIFICATION_MODE", "stub")
    monkeypatch.setenv("BUSNOTIFY_FETCH_TIMEOUT_S", "2.5")
    monkeypatch.setenv("BUSNOTIFY_SECURE_COOKIES", "true")

    cfg = ViewConfig.from_env()

    assert (cfg.positions_lat, cfg.positions_lon) == (35.6812, 139.7671)
    assert cfg.gtfs_id == "toei-bus"
    assert cfg.schedule_source == "s3"
    assert cfg.notification_mode == "stub"
    assert cfg.fetch_timeout_s == 2.5
    assert cfg.secure_cookies is True


def test_unknown_choice_is_rejected(monkeypatch) -> None:
    monkeypatch.setenv("BUSNOTIFY_NOTIFICATION_MODE", "carrier-pigeon")

    with pytest.raises(RuntimeError, match="BUSNOTIFY_NOTIFICATION_MODE"):
        ViewConfig.from_env()
