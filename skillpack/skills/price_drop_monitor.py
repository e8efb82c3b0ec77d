"""Price tracking integration: current prices, history, deals and price alerts.

Alerts are kept in memory for the life of the process; everything else goes
through the provider client.
"""

import math
import re
from datetime import datetime, timezone
from urllib.parse import quote

from skillpack import envelope
from skillpack.envelope import SkillError, bounded_int, invalid_input, one_of

NAME = "price-drop-monitor"
VERSION = "1.0.0"
DESCRIPTION = "Track product prices, set price alerts and analyze price history."
ACTIONS = {
    "check_price": "Check the current price of a product",
    "set_alert": "Set a target-price alert",
    "list_alerts": "List price alerts",
    "remove_alert": "Remove a price alert",
    "price_history": "Price history summary for a product",
    "compare_prices": "Compare a product's price across stores",
    "find_deals": "Find discounted products in a category",
    "analyze_trend": "Trend direction and volatility of a product's price",
}
PROVIDER = {
    "base_url": "https://prices.example.invalid/v1",
    "secret": "price_api_key",
}

DEFAULT_TIMEOUT_MS = 15_000
MAX_TIMEOUT_MS = 30_000
DEFAULT_HISTORY_DAYS = 30
NOTIFY_METHODS = ["email", "sms", "push", "webhook"]
NOT_FOUND = "NOT_FOUND"

TREND_THRESHOLD_PCT = 5
HIGH_VOLATILITY_PCT = 20
MODERATE_VOLATILITY_PCT = 10

_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

# ---------------------------------------------------------------------------
# In-memory alert store
# ---------------------------------------------------------------------------

_alerts: dict[str, dict] = {}
_alert_counter = 0


def _clear_alerts():
    """Reset alert state (tests)."""
    global _alert_counter
    _alerts.clear()
    _alert_counter = 0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def sanitize(value) -> str | None:
    """Trim and strip control characters; non-strings are stringified."""
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)
    return _CONTROL_CHARS_RE.sub("", value.strip()) or None


def format_price(price, currency: str = "USD") -> str:
    if not isinstance(price, (int, float)) or isinstance(price, bool) or math.isnan(price):
        return "N/A"
    return f"{currency or 'USD'} {price:.2f}"


def percent_change(old: float, new: float) -> float:
    if old == 0:
        return 0.0
    return (new - old) / old * 100


def _number(value, field: str, default=None):
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value) or value < 0:
        raise invalid_input(f'The "{field}" parameter must be a non-negative number.')
    return value


def _product_id(params: dict, *aliases: str) -> str:
    for key in ("product_id", *aliases):
        value = sanitize(params.get(key))
        if value:
            return value
    names = " or ".join(f'"{k}"' for k in ("product_id", *aliases))
    raise invalid_input(f"The {names} parameter is required.")


def _days(params: dict) -> int:
    return bounded_int(params.get("days"), "days", DEFAULT_HISTORY_DAYS, 1, 365)


def _prices(history: list) -> list[float]:
    return [
        h["price"] for h in history
        if isinstance(h, dict) and isinstance(h.get("price"), (int, float)) and not isinstance(h.get("price"), bool)
    ]


def _alert_args(params: dict) -> dict:
    target = params.get("target_price")
    if target is None:
        raise invalid_input('The "target_price" parameter must be a non-negative number.')
    return {
        "product_id": _product_id(params),
        "target_price": _number(target, "target_price"),
        "notify_method": one_of(params.get("notify_method"), "notify_method", NOTIFY_METHODS, "email"),
    }


def _compare_args(params: dict) -> tuple[str, list[str]]:
    product_id = _product_id(params, "query")
    stores = params.get("stores")
    stores = [s for s in (sanitize(s) for s in stores) if s] if isinstance(stores, list) else []
    if not stores:
        raise invalid_input('The "stores" parameter must be a non-empty array.')
    return product_id, stores


def _deal_args(params: dict) -> dict:
    category = sanitize(params.get("category"))
    if not category:
        raise invalid_input('The "category" parameter is required.')
    body = {
        "category": category,
        "min_discount": _number(params.get("min_discount"), "min_discount", 0),
    }
    max_price = _number(params.get("max_price"), "max_price")
    if max_price is not None:
        body["max_price"] = max_price
    return body


async def _history(call, product_id: str, days: int) -> dict:
    return await call.get(f"/prices/{quote(product_id, safe='')}/history", params={"days": days})


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


async def _check_price(params, call):
    product_id = _product_id(params, "url")
    store = sanitize(params.get("store"))
    data = await call.get(f"/prices/{quote(product_id, safe='')}", params={"store": store})

    if not data or data.get("found") is False:
        return f'No price data found for product "{product_id}".', {
            "product_id": product_id, "store": store, "found": False,
        }

    price = data.get("price", data.get("current_price"))
    currency = data.get("currency") or "USD"
    name = data.get("name") or data.get("title") or product_id
    in_stock = data.get("in_stock")
    updated = data.get("last_updated") or data.get("updated_at")

    stock = "N/A" if in_stock is None else ("Yes" if in_stock else "No")
    text = "\n".join([
        f"Product: {name}",
        f"Store: {data.get('store') or store or 'N/A'}",
        f"Price: {format_price(price, currency)}",
        f"In Stock: {stock}",
        f"Last Updated: {updated or 'N/A'}",
    ])
    return text, {
        "product_id": product_id,
        "found": True,
        "price": price,
        "currency": currency,
        "name": name,
        "in_stock": in_stock,
    }


async def _set_alert(params, call):
    global _alert_counter
    args = _alert_args(params)
    _alert_counter += 1
    alert_id = f"alert_{_alert_counter}"
    _alerts[alert_id] = {
        "alert_id": alert_id,
        **args,
        "created_at": datetime.now(timezone.utc).isoformat(),
        "active": True,
    }
    text = (
        f'Alert "{alert_id}" set for product "{args["product_id"]}" at target price '
        f'{args["target_price"]}. Notify via {args["notify_method"]}.'
    )
    return text, {"alert_id": alert_id, **args, "active": True}


async def _list_alerts(params, call):
    alerts = [dict(a) for a in _alerts.values()]
    if not alerts:
        return "No price alerts configured.", {"count": 0, "alerts": []}
    lines = [f"Price Alerts ({len(alerts)}):"]
    for a in alerts:
        state = "ACTIVE" if a["active"] else "INACTIVE"
        lines.append(
            f"[{a['alert_id']}] {a['product_id']} - target: {a['target_price']} ({a['notify_method']}) {state}"
        )
    return "\n".join(lines), {"count": len(alerts), "alerts": alerts}


def _alert_id(params: dict) -> str:
    alert_id = sanitize(params.get("alert_id"))
    if not alert_id:
        raise invalid_input('The "alert_id" parameter is required.')
    return alert_id


async def _remove_alert(params, call):
    alert_id = _alert_id(params)
    removed = _alerts.pop(alert_id, None)
    if removed is None:
        raise SkillError(NOT_FOUND, f'Alert "{alert_id}" not found.')
    text = f'Alert "{alert_id}" for product "{removed["product_id"]}" has been removed.'
    return text, {"alert_id": alert_id, "product_id": removed["product_id"], "removed": True}


async def _price_history(params, call):
    product_id = _product_id(params)
    days = _days(params)
    data = await _history(call, product_id, days)
    history = data.get("history") if isinstance(data.get("history"), list) else []
    if not history:
        return f'No price history found for product "{product_id}" over the last {days} days.', {
            "product_id": product_id, "days": days, "found": False, "count": 0,
        }

    currency = data.get("currency") or "USD"
    prices = _prices(history)
    current = prices[-1] if prices else None
    high = max(prices) if prices else None
    low = min(prices) if prices else None
    avg = sum(prices) / len(prices) if prices else None

    text = "\n".join([
        f"Price History for: {data.get('name') or product_id} (last {days} days)",
        f"Current: {format_price(current, currency)}",
        f"High: {format_price(high, currency)}",
        f"Low: {format_price(low, currency)}",
        f"Average: {format_price(avg, currency)}",
        f"Data Points: {len(history)}",
    ])
    return text, {
        "product_id": product_id,
        "days": days,
        "found": True,
        "count": len(history),
        "current_price": current,
        "high_price": high,
        "low_price": low,
        "avg_price": round(avg, 2) if avg is not None else None,
    }


async def _compare_prices(params, call):
    product_id, stores = _compare_args(params)
    data = await call.post("/prices/compare", body={"product_id": product_id, "stores": stores})
    results = data.get("results") if isinstance(data.get("results"), list) else []
    if not results:
        return f'No price comparison data found for "{product_id}".', {
            "product_id": product_id, "stores": stores, "found": False, "count": 0,
        }

    priced = [r for r in results if isinstance(r.get("price"), (int, float))]
    best = min(priced, key=lambda r: r["price"]) if priced else None
    lines = [f"Price Comparison for: {data.get('name') or product_id}"]
    for r in results:
        stock = " (Out of Stock)" if r.get("in_stock") is False else ""
        lines.append(f"  {r.get('store') or 'Unknown'}: {format_price(r.get('price'), r.get('currency'))}{stock}")
    if best:
        lines.append(f"Best Price: {format_price(best['price'], best.get('currency'))} at {best.get('store') or 'Unknown'}")

    return "\n".join(lines), {
        "product_id": product_id,
        "stores": stores,
        "found": True,
        "count": len(results),
        "lowest_price": best["price"] if best else None,
        "highest_price": max(r["price"] for r in priced) if priced else None,
        "best_store": best.get("store") if best else None,
    }


async def _find_deals(params, call):
    body = _deal_args(params)
    data = await call.post("/prices/deals", body=body)
    deals = data.get("deals") if isinstance(data.get("deals"), list) else []
    category = body["category"]
    if not deals:
        return f'No deals found for category "{category}".', {**body, "count": 0}

    lines = [f'Deals in "{category}" ({len(deals)} found):']
    for d in deals:
        currency = d.get("currency") or "USD"
        was = f" (was {format_price(d['original_price'], currency)})" if d.get("original_price") else ""
        off = f" {d['discount']}% off" if d.get("discount") else ""
        lines.append(f"  {d.get('name') or d.get('product_id') or 'Unknown'}: {format_price(d.get('price'), currency)}{was}{off}")
    return "\n".join(lines), {**body, "count": len(deals)}


async def _analyze_trend(params, call):
    product_id = _product_id(params)
    days = _days(params)
    data = await _history(call, product_id, days)
    history = data.get("history") if isinstance(data.get("history"), list) else []
    prices = _prices(history)
    if len(prices) < 2:
        return (
            f'Not enough price data to analyze trend for "{product_id}". Need at least 2 data points.',
            {"product_id": product_id, "days": days, "found": False, "data_points": len(prices)},
        )

    currency = data.get("currency") or "USD"
    avg = sum(prices) / len(prices)
    start, current = prices[0], prices[-1]
    change = percent_change(start, current)
    if change > TREND_THRESHOLD_PCT:
        direction = "up"
    elif change < -TREND_THRESHOLD_PCT:
        direction = "down"
    else:
        direction = "stable"

    # Coefficient of variation, as a percentage.
    std_dev = math.sqrt(sum((p - avg) ** 2 for p in prices) / len(prices))
    volatility = std_dev / avg * 100 if avg > 0 else 0.0
    if volatility > HIGH_VOLATILITY_PCT:
        level = "high"
    elif volatility > MODERATE_VOLATILITY_PCT:
        level = "moderate"
    else:
        level = "low"

    sign = "+" if change >= 0 else ""
    text = "\n".join([
        f"Price Trend Analysis for: {data.get('name') or product_id} (last {days} days)",
        f"Trend: {direction} ({sign}{change:.2f}%)",
        f"Current: {format_price(current, currency)}",
        f"Average: {format_price(avg, currency)}",
        f"High: {format_price(max(prices), currency)} | Low: {format_price(min(prices), currency)}",
        f"Volatility: {volatility:.2f}% ({level})",
        f"Data Points: {len(prices)}",
    ])
    return text, {
        "product_id": product_id,
        "days": days,
        "found": True,
        "trend_direction": direction,
        "change_percent": round(change, 2),
        "volatility": round(volatility, 2),
        "volatility_level": level,
        "data_points": len(prices),
    }


HANDLERS = {
    "check_price": _check_price,
    "set_alert": _set_alert,
    "list_alerts": _list_alerts,
    "remove_alert": _remove_alert,
    "price_history": _price_history,
    "compare_prices": _compare_prices,
    "find_deals": _find_deals,
    "analyze_trend": _analyze_trend,
}

RULES = {
    "check_price": lambda p: _product_id(p, "url"),
    "set_alert": _alert_args,
    "remove_alert": _alert_id,
    "price_history": lambda p: (_product_id(p), _days(p)),
    "compare_prices": _compare_args,
    "find_deals": _deal_args,
    "analyze_trend": lambda p: (_product_id(p), _days(p)),
}


def validate(params) -> dict:
    return envelope.validate_params(params, ACTIONS, RULES)


async def execute(params, context) -> dict:
    return await envelope.execute_action(
        NAME, ACTIONS, HANDLERS, params, context,
        default_timeout_ms=DEFAULT_TIMEOUT_MS, max_timeout_ms=MAX_TIMEOUT_MS,
    )
