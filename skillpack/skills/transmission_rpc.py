"""Transmission integration: manage torrents over the Transmission JSON-RPC interface."""

from skillpack import envelope
from skillpack.envelope import invalid_input, require

NAME = "transmission-rpc"
VERSION = "1.0.0"
DESCRIPTION = "Manage torrent downloads via the Transmission RPC interface."
ACTIONS = {
    "list_torrents": "List torrents with status and progress",
    "add_torrent": "Add a torrent by URL or magnet link",
    "remove_torrent": "Remove a torrent, optionally deleting its data",
    "get_session": "Get session settings",
}
PROVIDER = {
    "base_url": "http://localhost:9091",
    "secret": "transmission_credentials",
    "auth_scheme": "Basic",
}

RPC_PATH = "/transmission/rpc"
TORRENT_FIELDS = ["id", "name", "status", "percentDone", "rateDownload", "rateUpload", "eta"]

STATUS_NAMES = {
    0: "stopped",
    1: "check pending",
    2: "checking",
    3: "download pending",
    4: "downloading",
    5: "seed pending",
    6: "seeding",
}


async def _rpc(call, method: str, arguments: dict | None = None) -> dict:
    data = await call.post(RPC_PATH, body={"method": method, "arguments": arguments or {}})
    if isinstance(data, dict) and data.get("result") not in (None, "success"):
        raise envelope.SkillError(envelope.UPSTREAM_ERROR, f"Transmission: {data['result']}", retriable=False)
    return data.get("arguments", {}) if isinstance(data, dict) else {}


def _torrent_id(value: str):
    # Numeric ids are ints on the wire, hashes stay strings.
    return int(value) if value.isascii() and value.isdigit() else value


def _delete_data(params: dict) -> bool:
    value = params.get("delete_data")
    if value is None:
        return False
    if not isinstance(value, bool):
        raise invalid_input('The "delete_data" parameter must be a boolean.')
    return value


def _remove_args(params: dict) -> tuple[str, bool]:
    (torrent_id,) = require(params, "torrent_id")
    return torrent_id, _delete_data(params)


async def _list_torrents(params, call):
    args = await _rpc(call, "torrent-get", {"fields": TORRENT_FIELDS})
    torrents = args.get("torrents", [])
    if not torrents:
        return "No torrents.", {"count": 0, "torrents": []}

    lines = [f"Torrents ({len(torrents)}):"]
    for t in torrents:
        status = STATUS_NAMES.get(t.get("status"), f"status {t.get('status')}")
        done = (t.get("percentDone") or 0) * 100
        lines.append(f"  [{t.get('id')}] {t.get('name')} - {status}, {done:.1f}%")
    return "\n".join(lines), {"count": len(torrents), "torrents": torrents}


async def _add_torrent(params, call):
    (url,) = require(params, "url")
    args = await _rpc(call, "torrent-add", {"filename": url})
    added = args.get("torrent-added") or args.get("torrent-duplicate") or {}
    duplicate = "torrent-duplicate" in args
    verb = "Already present" if duplicate else "Added"
    return f"{verb}: {added.get('name', url)} (id {added.get('id')})", {
        "torrent_id": added.get("id"),
        "duplicate": duplicate,
    }


async def _remove_torrent(params, call):
    torrent_id, delete_data = _remove_args(params)
    await _rpc(call, "torrent-remove", {
        "ids": [_torrent_id(torrent_id)],
        "delete-local-data": delete_data,
    })
    suffix = " and its local data" if delete_data else ""
    return f"Removed torrent {torrent_id}{suffix}.", {"torrent_id": torrent_id, "delete_data": delete_data}


async def _get_session(params, call):
    args = await _rpc(call, "session-get")
    return envelope.dump(args), {"version": args.get("version")}


HANDLERS = {
    "list_torrents": _list_torrents,
    "add_torrent": _add_torrent,
    "remove_torrent": _remove_torrent,
    "get_session": _get_session,
}

RULES = {
    "add_torrent": lambda p: require(p, "url"),
    "remove_torrent": _remove_args,
}


def validate(params) -> dict:
    return envelope.validate_params(params, ACTIONS, RULES)


async def execute(params, context) -> dict:
    return await envelope.execute_action(NAME, ACTIONS, HANDLERS, params, context)
