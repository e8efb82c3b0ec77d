"""Frigate integration: camera events, config, stats and recordings."""

from urllib.parse import quote

from skillpack import envelope
from skillpack.envelope import bounded_int, optional_string, require

NAME = "frigate-nvr-api"
VERSION = "1.0.0"
DESCRIPTION = "Monitor cameras, view events and manage recordings via Frigate NVR."
ACTIONS = {
    "get_events": "List recent detection events",
    "get_config": "Get the Frigate configuration",
    "get_stats": "Get detector and camera stats",
    "get_recordings": "Summarize recordings for a camera",
}
PROVIDER = {
    "base_url": "http://frigate.local:5000",
    "secret": None,
}

DEFAULT_EVENT_LIMIT = 20
MAX_EVENT_LIMIT = 100


def _event_query(params: dict) -> dict:
    return {
        "limit": bounded_int(params.get("limit"), "limit", DEFAULT_EVENT_LIMIT, 1, MAX_EVENT_LIMIT),
        "label": optional_string(params.get("label"), "label"),
        "cameras": optional_string(params.get("camera"), "camera"),
    }


async def _get_events(params, call):
    query = _event_query(params)
    events = await call.get("/api/events", params=query)
    if not isinstance(events, list):
        events = []
    lines = [f"Events ({len(events)}):"]
    for e in events:
        score = e.get("top_score") or e.get("score")
        score = f" {score:.0%}" if isinstance(score, (int, float)) else ""
        lines.append(f"  [{e.get('id')}] {e.get('camera')}: {e.get('label')}{score}")
    return "\n".join(lines), {"count": len(events), "limit": query["limit"]}


async def _get_config(params, call):
    data = await call.get("/api/config")
    cameras = sorted((data.get("cameras") or {}).keys()) if isinstance(data, dict) else []
    return envelope.dump(data), {"cameras": cameras}


async def _get_stats(params, call):
    data = await call.get("/api/stats")
    return envelope.dump(data), {}


async def _get_recordings(params, call):
    (camera,) = require(params, "camera")
    data = await call.get(f"/api/{quote(camera, safe='')}/recordings/summary")
    return envelope.dump(data), {"camera": camera}


HANDLERS = {
    "get_events": _get_events,
    "get_config": _get_config,
    "get_stats": _get_stats,
    "get_recordings": _get_recordings,
}

RULES = {
    "get_events": _event_query,
    "get_recordings": lambda p: require(p, "camera"),
}


def validate(params) -> dict:
    return envelope.validate_params(params, ACTIONS, RULES)


async def execute(params, context) -> dict:
    return await envelope.execute_action(NAME, ACTIONS, HANDLERS, params, context)
