import json
from datetime import datetime

import httpx
import pytest
import pytest_asyncio

from game_storage.models.dc_models import StartGameModel, StartGameTeamModel
from game_storage.services.notifier import MatchNotifier

START_GAME = StartGameModel(
    code="A1B2C3D4E5",
    teams=[StartGameTeamModel(code="RED", id=1), StartGameTeamModel(code="BLU", id=2)],
    start_time=datetime(2026, 10, 18, 14, 0, 0),
    duration_minutes=60,
)


def make_notifier(handler) -> MatchNotifier:
    return MatchNotifier(
        "https://match-service.test",
        timeout=1.0,
        transport=httpx.MockTransport(handler),
    )


class TestAnnounceStart:
    @pytest.mark.asyncio
    async def test_accepted_announcement(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"ok": True})

        notifier = make_notifier(handler)
        try:
            assert await notifier.announce_start(START_GAME) is True
        finally:
            await notifier.close()

        assert len(requests) == 1
        request = requests[0]
        assert request.method == "POST"
        assert request.url == "https://match-service.test/v1a/create"
        assert request.headers["Idempotency-Key"] == "A1B2C3D4E5"
        assert request.headers["Content-Type"] == "application/json"
        body = json.loads(request.content)
        assert body["code"] == "A1B2C3D4E5"
        assert body["teams"] == [{"code": "RED", "id": 1}, {"code": "BLU", "id": 2}]
        assert body["start_time"] == "2026-10-18T14:00:00"
        assert body["duration_minutes"] == 60

    @pytest.mark.asyncio
    async def test_any_2xx_is_success(self):
        notifier = make_notifier(lambda request: httpx.Response(201))
        try:
            assert await notifier.announce_start(START_GAME) is True
        finally:
            await notifier.close()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [400, 409, 500, 503])
    async def test_error_status_is_failure(self, status_code):
        notifier = make_notifier(lambda request: httpx.Response(status_code, text="nope"))
        try:
            assert await notifier.announce_start(START_GAME) is False
        finally:
            await notifier.close()

    @pytest.mark.asyncio
    async def test_timeout_is_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        notifier = make_notifier(handler)
        try:
            assert await notifier.announce_start(START_GAME) is False
        finally:
            await notifier.close()

    @pytest.mark.asyncio
    async def test_unreachable_service_is_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        notifier = make_notifier(handler)
        try:
            assert await notifier.announce_start(START_GAME) is False
        finally:
            await notifier.close()


class TestClient:
    @pytest_asyncio.fixture
    async def notifier(self):
        notifier = MatchNotifier("https://match-service.test", timeout=2.5, retries=3)
        yield notifier
        await notifier.close()

    @pytest.mark.asyncio
    async def test_client_is_reused_with_timeout(self, notifier):
        client = notifier.client
        assert client.timeout == httpx.Timeout(2.5)
        assert str(client.base_url).rstrip("/") == "https://match-service.test"
        assert notifier.client is client
