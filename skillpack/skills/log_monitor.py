"""Log monitoring integration: search logs, stats and pattern alerts."""

from skillpack import envelope
from skillpack.envelope import bounded_int, one_of, require

NAME = "log-monitor"
VERSION = "1.0.0"
DESCRIPTION = "Monitor, search and analyze application logs."
ACTIONS = {
    "search_logs": "Search log lines matching a query",
    "get_stats": "Log volume and error-rate stats",
    "create_alert": "Alert when a pattern appears",
    "list_alerts": "List configured alerts",
}
PROVIDER = {
    "base_url": "https://logs.example.invalid/api",
    "secret": "log_monitor_api_key",
}

TIME_RANGES = ["15m", "1h", "6h", "24h", "7d"]
DEFAULT_SEARCH_LIMIT = 100
MAX_SEARCH_LIMIT = 1000


def _search_args(params: dict) -> dict:
    (query,) = require(params, "query")
    return {
        "query": query,
        "limit": bounded_int(params.get("limit"), "limit", DEFAULT_SEARCH_LIMIT, 1, MAX_SEARCH_LIMIT),
    }


def _alert_args(params: dict) -> dict:
    (pattern,) = require(params, "pattern")
    return {
        "pattern": pattern,
        "threshold": bounded_int(params.get("threshold"), "threshold", 1, 1),
    }


async def _search_logs(params, call):
    body = _search_args(params)
    data = await call.post("/search", body=body)
    entries = data.get("entries") or data.get("results") or []
    lines = [f'{len(entries)} line(s) matching "{body["query"]}":']
    for e in entries:
        if isinstance(e, dict):
            lines.append(f"  {e.get('timestamp', '')} [{e.get('level', '-')}] {e.get('message', '')}")
        else:
            lines.append(f"  {e}")
    return "\n".join(lines), {"query": body["query"], "count": len(entries)}


async def _get_stats(params, call):
    time_range = one_of(params.get("time_range"), "time_range", TIME_RANGES, "1h")
    data = await call.get("/stats", params={"timeRange": time_range})
    return envelope.dump(data), {"time_range": time_range}


async def _create_alert(params, call):
    body = _alert_args(params)
    data = await call.post("/alerts", body=body)
    alert_id = data.get("id")
    text = f'Alert {alert_id} created for "{body["pattern"]}" (threshold {body["threshold"]}).'
    return text, {"alert_id": alert_id, **body}


async def _list_alerts(params, call):
    data = await call.get("/alerts")
    alerts = data if isinstance(data, list) else data.get("alerts", [])
    if not alerts:
        return "No alerts configured.", {"count": 0}
    lines = [f"Alerts ({len(alerts)}):"]
    for a in alerts:
        lines.append(f"  [{a.get('id')}] {a.get('pattern')} (threshold {a.get('threshold', 1)})")
    return "\n".join(lines), {"count": len(alerts)}


HANDLERS = {
    "search_logs": _search_logs,
    "get_stats": _get_stats,
    "create_alert": _create_alert,
    "list_alerts": _list_alerts,
}

RULES = {
    "search_logs": _search_args,
    "get_stats": lambda p: one_of(p.get("time_range"), "time_range", TIME_RANGES),
    "create_alert": _alert_args,
}


def validate(params) -> dict:
    return envelope.validate_params(params, ACTIONS, RULES)


async def execute(params, context) -> dict:
    return await envelope.execute_action(NAME, ACTIONS, HANDLERS, params, context)
