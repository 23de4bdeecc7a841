from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

DEFAULT_NOTIFICATION_URL = (
    "https://mfp6wj7mv6mf45q6o3tse7v4oe0gzgrp.lambda-url.ap-northeast-1.on.aws/"
)
DEFAULT_NOTIFICATION_READABLE = "window-grapher@takoyaki3.com"
DEFAULT_LOGIN_URL = "https://takoyaki3-auth.web.app"
DEFAULT_TILE_URL = "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"

ScheduleSource = Literal["local", "s3"]
NotificationMode = Literal["live", "stub"]
CredentialStoreKind = Literal["file", "dynamodb"]


def env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    return float(raw) if raw else default


def _env_choice(name: str, default: str, choices: set[str]) -> str:
    value = (os.getenv(name) or default).strip().lower()
    if value not in choices:
        raise RuntimeError(
            f"Unsupported {name}: {value!r} (expected one of {sorted(choices)})"
        )
    return value


@dataclass(frozen=True, slots=True)
class ViewConfig:
    """Settings for the bus view.

    One view covers every deployment: coordinates, the schedule data source
    and whether notification registration is live or stubbed are all settings.
    """

    positions_lat: float = 26.223300
    positions_lon: float = 127.691028
    map_center_lat: float = 26.228682
    map_center_lon: float = 127.683985
    map_zoom: int = 13
    tile_url: str = DEFAULT_TILE_URL
    gtfs_id: str = "yanbaru-expressbus"
    schedule_source: ScheduleSource = "local"
    notification_mode: NotificationMode = "live"
    notification_url: str = DEFAULT_NOTIFICATION_URL
    notification_readable: str = DEFAULT_NOTIFICATION_READABLE
    login_url: str = DEFAULT_LOGIN_URL
    credential_param: str = "jwt"
    credential_store: CredentialStoreKind = "file"
    session_cookie: str = "busnotify_session"
    secure_cookies: bool = False
    fetch_timeout_s: float = 10.0

    @staticmethod
    def from_env() -> "ViewConfig":
        d = ViewConfig()
        return ViewConfig(
            positions_lat=_env_float("BUSNOTIFY_POSITIONS_LAT", d.positions_lat),
            positions_lon=_env_float("BUSNOTIFY_POSITIONS_LON", d.positions_lon),
            map_center_lat=_env_float("BUSNOTIFY_MAP_CENTER_LAT", d.map_center_lat),
            map_center_lon=_env_float("BUSNOTIFY_MAP_CENTER_LON", d.map_center_lon),
            map_zoom=int(_env_float("BUSNOTIFY_MAP_ZOOM", d.map_zoom)),
            tile_url=os.getenv("BUSNOTIFY_TILE_URL") or d.tile_url,
            gtfs_id=os.getenv("BUSNOTIFY_GTFS_ID") or d.gtfs_id,
            schedule_source=_env_choice(  # type: ignore[arg-type]
                "BUSNOTIFY_SCHEDULE_SOURCE", d.schedule_source, {"local", "s3"}
            ),
            notification_mode=_env_choice(  # type: ignore[arg-type]
                "BUSNOTIFY_NOTIFICATION_MODE", d.notification_mode, {"live", "stub"}
            ),
            notification_url=os.getenv("BUSNOTIFY_NOTIFICATION_URL")
            or d.notification_url,
            notification_readable=os.getenv("BUSNOTIFY_NOTIFICATION_READABLE")
            or d.notification_readable,
            login_url=os.getenv("BUSNOTIFY_LOGIN_URL") or d.login_url,
            credential_param=os.getenv("BUSNOTIFY_CREDENTIAL_PARAM")
            or d.credential_param,
            credential_store=_env_choice(  # type: ignore[arg-type]
                "BUSNOTIFY_CREDENTIAL_STORE", d.credential_store, {"file", "dynamodb"}
            ),
            session_cookie=os.getenv("BUSNOTIFY_SESSION_COOKIE") or d.session_cookie,
            secure_cookies=env_bool("BUSNOTIFY_SECURE_COOKIES", d.secure_cookies),
            fetch_timeout_s=_env_float("BUSNOTIFY_FETCH_TIMEOUT_S", d.fetch_timeout_s),
        )
