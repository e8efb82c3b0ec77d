"""Home Assistant integration: read entity states and call services."""

from urllib.parse import quote

from skillpack import envelope
from skillpack.envelope import invalid_input, require

NAME = "home-assistant-api"
VERSION = "1.0.0"
DESCRIPTION = "Control smart home devices and automations via the Home Assistant API."
ACTIONS = {
    "get_states": "List all entity states",
    "get_entity": "Get the state of one entity",
    "call_service": "Call a service such as light.turn_on",
    "get_history": "Get the state history of an entity",
}
PROVIDER = {
    "base_url": "http://homeassistant.local:8123",
    "secret": "home_assistant_token",
}


def _service_args(params: dict) -> tuple[str, str, dict]:
    domain, service = require(params, "domain", "service")
    data = params.get("service_data") or {}
    if not isinstance(data, dict):
        raise invalid_input('The "service_data" parameter must be an object.')
    return domain, service, data


async def _get_states(params, call):
    states = await call.get("/api/states")
    if not isinstance(states, list):
        states = []
    lines = [f"Entities ({len(states)}):"]
    for s in states:
        lines.append(f"  {s.get('entity_id')}: {s.get('state')}")
    return "\n".join(lines), {"count": len(states)}


async def _get_entity(params, call):
    (entity_id,) = require(params, "entity_id")
    data = await call.get(f"/api/states/{quote(entity_id, safe='')}")
    return envelope.dump(data), {"entity_id": entity_id, "state": data.get("state")}


async def _call_service(params, call):
    domain, service, data = _service_args(params)
    changed = await call.post(
        f"/api/services/{quote(domain, safe='')}/{quote(service, safe='')}",
        body=data,
    )
    changed = changed if isinstance(changed, list) else []
    text = f"Called {domain}.{service}; {len(changed)} entit{'y' if len(changed) == 1 else 'ies'} changed."
    return text, {
        "domain": domain,
        "service": service,
        "changed": [s.get("entity_id") for s in changed],
    }


async def _get_history(params, call):
    (entity_id,) = require(params, "entity_id")
    data = await call.get("/api/history/period", params={"filter_entity_id": entity_id})
    return envelope.dump(data), {"entity_id": entity_id}


HANDLERS = {
    "get_states": _get_states,
    "get_entity": _get_entity,
    "call_service": _call_service,
    "get_history": _get_history,
}

RULES = {
    "get_entity": lambda p: require(p, "entity_id"),
    "call_service": _service_args,
    "get_history": lambda p: require(p, "entity_id"),
}


def validate(params) -> dict:
    return envelope.validate_params(params, ACTIONS, RULES)


async def execute(params, context) -> dict:
    return await envelope.execute_action(NAME, ACTIONS, HANDLERS, params, context)
