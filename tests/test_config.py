import json
import logging

import httpx
import pytest

from skillpack import config
from skillpack.client import ProviderClient
from skillpack.skills import frigate_nvr_api, home_assistant_api


def test_load_config_defaults_when_missing(tmp_path):
    cfg = config.load_config(tmp_path / "config.json")
    assert cfg["timeout_ms"] == 30_000
    assert cfg["skills"] == {}


def test_load_config_merges_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"timeout_ms": 5000, "gateway_url": "https://gw.test"}))
    cfg = config.load_config(path)
    assert cfg["timeout_ms"] == 5000
    assert cfg["gateway_url"] == "https://gw.test"
    assert cfg["log_level"] == "INFO"


@pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
def test_bad_config_raises(tmp_path, content):
    path = tmp_path / "config.json"
    path.write_text(content)
    with pytest.raises(config.ConfigError):
        config.load_config(path)


def test_load_secrets(tmp_path):
    assert config.load_secrets(tmp_path / "missing.json") == {}
    path = tmp_path / "secrets.json"
    path.write_text(json.dumps({"home_assistant_token": "abc"}))
    assert config.load_secrets(path) == {"home_assistant_token": "abc"}


def test_build_context_without_secret_has_no_provider():
    context = config.build_context(home_assistant_api, dict(config.DEFAULTS), {})
    assert "provider_client" not in context
    assert "gateway_client" not in context
    assert context["config"] == {"timeout_ms": 30_000}


def test_build_context_with_secret_and_overrides():
    cfg = dict(config.DEFAULTS)
    cfg["skills"] = {"home-assistant-api": {"base_url": "http://ha.lan:8123", "timeout_ms": 2000}}
    context = config.build_context(home_assistant_api, cfg, {"home_assistant_token": "abc"})
    client = context["provider_client"]
    assert isinstance(client, ProviderClient)
    assert client.base_url == "http://ha.lan:8123"
    assert context["config"]["timeout_ms"] == 2000


def test_build_context_skill_without_secret_name():
    context = config.build_context(frigate_nvr_api, dict(config.DEFAULTS), {})
    assert isinstance(context["provider_client"], ProviderClient)


async def test_gateway_client_routes_by_skill_name():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["authorization"]
        return httpx.Response(200, json=[])

    cfg = dict(config.DEFAULTS, gateway_url="https://gw.test/")
    context = config.build_context(
        home_assistant_api, cfg, {"gateway_token": "gw-token"}, transport=httpx.MockTransport(handler),
    )
    assert "provider_client" not in context
    result = await home_assistant_api.execute({"action": "get_states"}, context)
    assert result["metadata"]["success"] is True
    assert result["metadata"]["client"] == "gateway"
    assert seen["url"] == "https://gw.test/home-assistant-api/api/states"
    assert seen["auth"] == "Bearer gw-token"


def test_configure_logging_sets_level(monkeypatch):
    seen = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: seen.update(kw))
    config.configure_logging("debug")
    assert seen["level"] == logging.DEBUG
    config.configure_logging("nonsense")
    assert seen["level"] == logging.INFO


def test_build_context_tolerates_bad_values():
    cfg = dict(config.DEFAULTS, timeout_ms="fast", gateway_url=None)
    context = config.build_context(frigate_nvr_api, cfg, {"gateway_token": "gw"})
    assert context["config"]["timeout_ms"] == 30_000
    assert isinstance(context["provider_client"], ProviderClient)
    assert "gateway_client" not in context
