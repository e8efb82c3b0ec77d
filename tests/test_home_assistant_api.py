import logging

from skillpack.skills import home_assistant_api
from tests.helpers import StubClient, ctx, upstream


async def test_get_states():
    client = StubClient(default=[{"entity_id": "light.kitchen", "state": "on"}])
    res = await home_assistant_api.execute({"action": "get_states"}, ctx(client))
    assert "light.kitchen: on" in res["result"]
    assert res["metadata"]["count"] == 1


async def test_call_service():
    client = StubClient(default=[{"entity_id": "light.kitchen", "state": "on"}])
    res = await home_assistant_api.execute({
        "action": "call_service", "domain": "light", "service": "turn_on",
        "service_data": {"entity_id": "light.kitchen"},
    }, ctx(client))
    assert client.last["path"] == "/api/services/light/turn_on"
    assert client.last["body"] == {"entity_id": "light.kitchen"}
    assert res["metadata"]["changed"] == ["light.kitchen"]
    assert "1 entity changed" in res["result"]


def test_service_data_must_be_object():
    res = home_assistant_api.validate(
        {"action": "call_service", "domain": "light", "service": "turn_on", "service_data": "on"},
    )
    assert res["valid"] is False


async def test_get_history_filters_entity():
    client = StubClient(default=[[]])
    await home_assistant_api.execute({"action": "get_history", "entity_id": "sensor.temp"}, ctx(client))
    assert client.last["params"] == {"filter_entity_id": "sensor.temp"}


async def test_slow_upstream_times_out():
    client = StubClient(default=[], delay=1)
    res = await home_assistant_api.execute({"action": "get_states"}, ctx(client, timeout_ms=50))
    err = res["metadata"]["error"]
    assert err["code"] == "TIMEOUT"
    assert err["retriable"] is True
    assert "50ms" in err["message"]


async def test_entity_dump_redacts_secrets():
    client = StubClient(default={
        "entity_id": "sensor.weather", "state": "sunny", "attributes": {"api_key": "wx-9f8e7d6c5b"},
    })
    res = await home_assistant_api.execute({"action": "get_entity", "entity_id": "sensor.weather"}, ctx(client))
    assert res["metadata"]["success"] is True
    assert "wx-9f8e7d6c5b" not in res["result"]
    assert "[REDACTED]" in res["result"]


async def test_failure_log_is_redacted(caplog):
    caplog.set_level(logging.WARNING, logger="skillpack")
    client = StubClient(error=upstream(401, "bad token=ha-0123456789"))
    res = await home_assistant_api.execute({"action": "get_states"}, ctx(client))
    assert res["metadata"]["error"]["code"] == "UPSTREAM_ERROR"
    assert "ha-0123456789" not in res["metadata"]["error"]["message"]
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert warnings
    assert "ha-0123456789" not in caplog.text
