from __future__ import annotations

import asyncio
import base64
import json
import threading
import time
from dataclasses import dataclass, field

import httpx
import pytest

from src.adapters.api.dependencies import (
    get_bus_view_service,
    get_notification_service,
    get_session_context,
    get_session_service,
    get_view_config,
)
from src.adapters.config import ViewConfig
from src.adapters.notifications import StubNotificationBackend
from src.app.services.bus_view_service import BusViewService
from src.app.services.notification_service import NotificationService
from src.app.services.session_service import SessionContext, SessionService
from src.app.services.trip_schedule_service import TripScheduleService
from src.domain.exceptions import VehicleFeedError
from src.domain.models import GeoPoint, ScheduleEntry, Stop, Vehicle
from src.main import app

SESSION_COOKIE = ViewConfig().session_cookie


@dataclass(slots=True)
class _MemoryStore:
    tokens: dict[str, str] = field(default_factory=dict)

    def get(self, client_key: str) -> str | None:
        return self.tokens.get(client_key)

    def put(self, client_key: str, token: str) -> None:
        self.tokens[client_key] = token

    def clear(self, client_key: str) -> None:
        self.tokens.pop(client_key, None)


@dataclass(slots=True)
class _FakeVehicleProvider:
    vehicles: tuple[Vehicle, ...]
    fail: bool = False

    async def get_positions_near(self, lat: float, lon: float) -> tuple[Vehicle, ...]:
        if self.fail:
            raise VehicleFeedError("feed down")
        return self.vehicles


@dataclass(slots=True)
class _FakeScheduleProvider:
    fail: bool = False
    # When set, the next version lookup blocks until the event fires.
    gate: threading.Event | None = None
    entered: threading.Event = field(default_factory=threading.Event)

    def get_dataset_version(self, gtfs_id: str) -> str:
        if self.fail:
            raise RuntimeError("schedule store down")
        gate = self.gate
        if gate is not None:
            self.entered.set()
            gate.wait(timeout=5)
        return "v1"

    def get_schedule_entries(self, gtfs_id: str, version_id: str):
        # Past 24:00 so the stop is upcoming whatever the wall clock says.
        return (
            ScheduleEntry(
                trip_id="T1",
                stop_id="S2",
                arrival_time="25:10:00",
                departure_time="25:10:30",
            ),
            ScheduleEntry(
                trip_id="T1",
                stop_id="S404",
                arrival_time="25:20:00",
                departure_time="25:20:00",
            ),
        )

    def get_stops(self, gtfs_id: str, version_id: str):
        return (Stop(id="S2", name="Beta", location=GeoPoint(lat=26.23, lon=127.68)),)


BUS = Vehicle(
    entity_id="e1",
    vehicle_id="bus-1",
    trip_id="T1",
    gtfs_id="okinawa-bus",
    position=GeoPoint(lat=26.22, lon=127.69),
)
GHOST = Vehicle(entity_id="e2", vehicle_id="bus-2", trip_id="T2")


def _segment(obj) -> str:
    raw = json.dumps(obj).encode("utf-8")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _jwt(email: str, exp_offset_s: int = 3600) -> str:
    claims = {"email": email, "exp": int(time.time()) + exp_offset_s}
    return f"{_segment({'alg': 'RS256'})}.{_segment(claims)}.sig"


def _view_service(
    provider: _FakeVehicleProvider, schedules: _FakeScheduleProvider
) -> BusViewService:
    return BusViewService(
        vehicle_provider=provider,
        trip_schedules=TripScheduleService(
            schedule_provider=schedules, default_gtfs_id="okinawa-bus"
        ),
        positions_at=GeoPoint(lat=26.2233, lon=127.691028),
    )


@pytest.fixture
def context() -> SessionContext:
    return SessionContext()


@pytest.fixture
def store() -> _MemoryStore:
    return _MemoryStore()


@pytest.fixture
def backend() -> StubNotificationBackend:
    return StubNotificationBackend()


@pytest.fixture
def provider() -> _FakeVehicleProvider:
    return _FakeVehicleProvider(vehicles=(BUS, GHOST))


@pytest.fixture
def schedules() -> _FakeScheduleProvider:
    return _FakeScheduleProvider()


@pytest.fixture(autouse=True)
def overrides(context, store, backend, provider, schedules):
    views = _view_service(provider, schedules)
    sessions = SessionService(
        store=store, context=context, login_url="https://login.example"
    )
    notifications = NotificationService(
        backend=backend, default_gtfs_id="okinawa-bus", readable="grapher@example.com"
    )

    app.dependency_overrides[get_view_config] = lambda: ViewConfig()
    app.dependency_overrides[get_session_context] = lambda: context
    app.dependency_overrides[get_session_service] = lambda: sessions
    app.dependency_overrides[get_bus_view_service] = lambda: views
    app.dependency_overrides[get_notification_service] = lambda: notifications
    yield
    app.dependency_overrides.clear()


def _client(session_key: str | None = None) -> httpx.AsyncClient:
    transport = httpx.ASGITransport(app=app)
    headers = {"cookie": f"{SESSION_COOKIE}={session_key}"} if session_key else None
    return httpx.AsyncClient(
        transport=transport, base_url="http://test", headers=headers
    )


@pytest.mark.unit
@pytest.mark.anyio
async def test_health() -> None:
    async with _client() as client:
        resp = await client.get("/health")

    assert resp.json() == {"status": "ok"}


@pytest.mark.unit
@pytest.mark.anyio
async def test_view_exposes_map_settings() -> None:
    async with _client() as client:
        resp = await client.get("/view")

    payload = resp.json()
    assert payload["center"] == {"lat": 26.228682, "lon": 127.683985}
    assert payload["zoom"] == 13
    assert payload["gtfs_id"] == "yanbaru-expressbus"


@pytest.mark.unit
@pytest.mark.anyio
async def test_session_without_credential_redirects_to_login() -> None:
    async with _client() as client:
        resp = await client.get("/session")

    assert resp.status_code == 307
    assert resp.headers["location"] == (
        "https://login.example?r=http%3A%2F%2Ftest%2Fsession"
    )


@pytest.mark.unit
@pytest.mark.anyio
async def test_session_with_query_credential_strips_it(store, context) -> None:
    token = _jwt("rider@example.com")

    async with _client() as client:
        first = await client.get("/session", params={"jwt": token, "lang": "ja"})
        second = await client.get("/session")

    assert first.status_code == 303
    assert first.headers["location"] == "http://test/session?lang=ja"
    key = first.cookies[SESSION_COOKIE]
    assert store.tokens == {key: token}
    assert context.require(key).email == "rider@example.com"

    assert second.status_code == 200
    assert second.json()["email"] == "rider@example.com"


@pytest.mark.unit
@pytest.mark.anyio
async def test_session_with_expired_credential_redirects(store) -> None:
    store.tokens["rider-1"] = _jwt("rider@example.com", exp_offset_s=-60)

    async with _client(session_key="rider-1") as client:
        resp = await client.get("/session")

    assert resp.status_code == 307


@pytest.mark.unit
@pytest.mark.anyio
async def test_vehicles_lists_only_positioned_buses() -> None:
    async with _client() as client:
        resp = await client.get("/vehicles")

    assert resp.status_code == 200
    vehicles = resp.json()["vehicles"]
    assert [v["id"] for v in vehicles] == ["bus-1"]
    assert vehicles[0]["position"] == {"lat": 26.22, "lon": 127.69}


@pytest.mark.unit
@pytest.mark.anyio
async def test_vehicles_feed_failure_is_502(provider) -> None:
    provider.fail = True

    async with _client() as client:
        resp = await client.get("/vehicles")

    assert resp.status_code == 502


@pytest.mark.unit
@pytest.mark.anyio
async def test_upcoming_stops_for_selected_bus() -> None:
    async with _client() as client:
        await client.get("/vehicles")
        resp = await client.get("/vehicles/bus-1/upcoming-stops")

    assert resp.status_code == 200
    payload = resp.json()
    assert payload["status"] == "ok"
    assert payload["trip_id"] == "T1"
    assert [(s["stop_id"], s["name"], s["arrival_time"]) for s in payload["stops"]] == [
        ("S2", "Beta", "25:10:00"),
        ("S404", None, "25:20:00"),
    ]


@pytest.mark.unit
@pytest.mark.anyio
async def test_upcoming_stops_for_unknown_bus_is_404() -> None:
    async with _client() as client:
        resp = await client.get("/vehicles/bus-2/upcoming-stops")

    assert resp.status_code == 404


@pytest.mark.unit
@pytest.mark.anyio
async def test_notification_requires_session() -> None:
    async with _client() as client:
        await client.get("/vehicles")
        resp = await client.post(
            "/notifications", json={"vehicle_id": "bus-1", "stop_id": "S2"}
        )

    assert resp.status_code == 401


@pytest.mark.unit
@pytest.mark.anyio
async def test_notification_registration(backend) -> None:
    async with _client() as client:
        await client.get("/session", params={"jwt": _jwt("rider@example.com")})
        await client.get("/vehicles")
        resp = await client.post(
            "/notifications", json={"vehicle_id": "bus-1", "stop_id": "S2"}
        )

    assert resp.status_code == 200
    assert resp.json() == {"registered": True, "message": "registration completed"}
    trigger = backend.submitted[0]
    assert trigger.key == "trigger@rider@example.com"
    assert json.loads(trigger.data)["triggerDetail"] == {
        "gtfs_id": "okinawa-bus",
        "trip_id": "T1",
        "stop_id": "S2",
    }


@pytest.mark.unit
@pytest.mark.anyio
async def test_stored_credential_is_only_used_by_its_own_client(store) -> None:
    store.tokens["rider-1"] = _jwt("rider@example.com")

    async with _client(session_key="rider-1") as owner:
        own = await owner.get("/session")
    async with _client(session_key="someone-else") as other:
        foreign = await other.get("/session")

    assert own.status_code == 200
    assert own.json()["email"] == "rider@example.com"
    assert foreign.status_code == 307


@pytest.mark.unit
@pytest.mark.anyio
async def test_other_client_cannot_register_with_someone_elses_session(
    backend,
) -> None:
    body = {"vehicle_id": "bus-1", "stop_id": "S2"}

    async with _client() as alice:
        await alice.get("/session", params={"jwt": _jwt("alice@example.com")})
        await alice.get("/vehicles")

        async with _client() as bob:
            bob_session = await bob.get("/session")
            bob_resp = await bob.post(
                "/notifications", json=body, headers={"x-client-id": "bob"}
            )
        async with _client(session_key="guessed") as mallory:
            mallory_resp = await mallory.post("/notifications", json=body)

        alice_resp = await alice.post("/notifications", json=body)

    assert bob_session.status_code == 307
    assert bob_resp.status_code == 401
    assert mallory_resp.status_code == 401
    assert alice_resp.status_code == 200
    assert [t.key for t in backend.submitted] == ["trigger@alice@example.com"]


@pytest.mark.unit
@pytest.mark.anyio
async def test_schedule_fetch_failure_is_502_and_keeps_vehicles(schedules) -> None:
    schedules.fail = True

    async with _client() as client:
        await client.get("/vehicles")
        failed = await client.get("/vehicles/bus-1/upcoming-stops")
        schedules.fail = False
        retried = await client.get("/vehicles/bus-1/upcoming-stops")

    assert failed.status_code == 502
    assert retried.status_code == 200
    assert [s["stop_id"] for s in retried.json()["stops"]] == ["S2", "S404"]


@pytest.mark.unit
@pytest.mark.anyio
async def test_newer_selection_by_same_client_supersedes_older_one(
    schedules,
) -> None:
    gate = threading.Event()
    schedules.gate = gate
    headers = {"x-client-id": "rider-1"}
    path = "/vehicles/bus-1/upcoming-stops"

    async with _client() as client:
        await client.get("/vehicles")
        first = asyncio.create_task(client.get(path, headers=headers))
        try:
            for _ in range(500):
                if schedules.entered.is_set():
                    break
                await asyncio.sleep(0.01)
            assert schedules.entered.is_set()

            schedules.gate = None
            second = await client.get(path, headers=headers)
        finally:
            gate.set()
        first_resp = await first

    assert first_resp.status_code == 409
    assert second.status_code == 200
    assert second.json()["status"] == "ok"
