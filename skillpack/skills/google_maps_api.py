"""Google Maps integration: geocoding, place search and directions."""

from skillpack import envelope
from skillpack.envelope import SkillError, UPSTREAM_ERROR, bounded_int, one_of, require

NAME = "google-maps-api"
VERSION = "1.0.0"
DESCRIPTION = "Geocode addresses, search places and calculate routes via Google Maps."
ACTIONS = {
    "geocode": "Turn an address into coordinates",
    "search_places": "Text search for places",
    "get_directions": "Route between two places",
    "get_place_details": "Get details for a place id",
}
PROVIDER = {
    "base_url": "https://maps.googleapis.com/maps/api",
    "secret": "google_maps_api_key",
    "auth_param": "key",
}

TRAVEL_MODES = ["driving", "walking", "bicycling", "transit"]
DEFAULT_RADIUS = 5000
MAX_RADIUS = 50_000


def _checked(data: dict) -> dict:
    """Google answers 200 with a status field; surface non-OK statuses."""
    status = data.get("status", "OK") if isinstance(data, dict) else "OK"
    if status not in ("OK", "ZERO_RESULTS"):
        message = data.get("error_message") or status
        raise SkillError(UPSTREAM_ERROR, f"Google Maps: {message}", retriable=status == "OVER_QUERY_LIMIT")
    return data


def _directions_args(params: dict) -> tuple[str, str, str]:
    origin, destination = require(params, "origin", "destination")
    mode = one_of(params.get("mode"), "mode", TRAVEL_MODES, "driving")
    return origin, destination, mode


async def _geocode(params, call):
    (address,) = require(params, "address")
    data = _checked(await call.get("/geocode/json", params={"address": address}))
    results = data.get("results", [])
    if not results:
        return f'No results for "{address}".', {"address": address, "found": False}
    top = results[0]
    loc = top.get("geometry", {}).get("location", {})
    text = f"{top.get('formatted_address')}\nLat/Lng: {loc.get('lat')}, {loc.get('lng')}"
    return text, {"address": address, "found": True, "lat": loc.get("lat"), "lng": loc.get("lng")}


async def _search_places(params, call):
    (query,) = require(params, "query")
    radius = bounded_int(params.get("radius"), "radius", DEFAULT_RADIUS, 1, MAX_RADIUS)
    data = _checked(await call.get("/place/textsearch/json", params={"query": query, "radius": radius}))
    places = data.get("results", [])
    lines = [f'Places for "{query}" ({len(places)}):']
    for p in places[:10]:
        rating = f" (rating {p['rating']})" if p.get("rating") else ""
        lines.append(f"  {p.get('name')}{rating} - {p.get('formatted_address', '')}")
    return "\n".join(lines), {"query": query, "count": len(places)}


async def _get_directions(params, call):
    origin, destination, mode = _directions_args(params)
    data = _checked(await call.get("/directions/json", params={
        "origin": origin,
        "destination": destination,
        "mode": mode,
    }))
    routes = data.get("routes", [])
    if not routes:
        return f"No {mode} route from {origin} to {destination}.", {"mode": mode, "found": False}
    leg = (routes[0].get("legs") or [{}])[0]
    distance = leg.get("distance", {}).get("text", "?")
    duration = leg.get("duration", {}).get("text", "?")
    text = f"{origin} -> {destination} ({mode}): {distance}, {duration}"
    return text, {"mode": mode, "found": True, "distance": distance, "duration": duration}


async def _get_place_details(params, call):
    (place_id,) = require(params, "place_id")
    data = _checked(await call.get("/place/details/json", params={"place_id": place_id}))
    return envelope.dump(data.get("result", data)), {"place_id": place_id}


HANDLERS = {
    "geocode": _geocode,
    "search_places": _search_places,
    "get_directions": _get_directions,
    "get_place_details": _get_place_details,
}

RULES = {
    "geocode": lambda p: require(p, "address"),
    "search_places": lambda p: (
        require(p, "query"),
        bounded_int(p.get("radius"), "radius", DEFAULT_RADIUS, 1, MAX_RADIUS),
    ),
    "get_directions": _directions_args,
    "get_place_details": lambda p: require(p, "place_id"),
}


def validate(params) -> dict:
    return envelope.validate_params(params, ACTIONS, RULES)


async def execute(params, context) -> dict:
    return await envelope.execute_action(NAME, ACTIONS, HANDLERS, params, context)
