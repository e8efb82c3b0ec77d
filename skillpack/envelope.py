"""Shared request envelope for skill handlers.

Every skill exposes `validate(params)` and `execute(params, context)`. This
module holds the guard logic those two functions share: action dispatch,
client resolution, timeout-bounded requests, secret redaction and error
classification.
"""

import asyncio
import json
import logging
import re
from datetime import datetime, timezone

import httpx

log = logging.getLogger("skillpack")

DEFAULT_TIMEOUT_MS = 30_000
MAX_TIMEOUT_MS = 120_000

INVALID_ACTION = "INVALID_ACTION"
INVALID_INPUT = "INVALID_INPUT"
PROVIDER_NOT_CONFIGURED = "PROVIDER_NOT_CONFIGURED"
TIMEOUT = "TIMEOUT"
UPSTREAM_ERROR = "UPSTREAM_ERROR"

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class SkillError(Exception):
    """A failure that maps onto one envelope error code."""

    def __init__(self, code: str, message: str, retriable: bool | None = False):
        super().__init__(message)
        self.code = code
        self.message = message
        self.retriable = retriable

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": redact_sensitive(self.message),
            "retriable": self.retriable,
        }


def invalid_input(message: str) -> SkillError:
    return SkillError(INVALID_INPUT, message)


def upstream_retriable(status_code: int | None) -> bool | None:
    """Rate limits and server errors are worth retrying, other 4xx are not."""
    if status_code is None:
        return None
    if status_code == 429 or status_code >= 500:
        return True
    return False


# ---------------------------------------------------------------------------
# Redaction
# ---------------------------------------------------------------------------

# Header values go first so "Authorization: Bearer x" loses the credential,
# not just the scheme word.
SENSITIVE_PATTERNS = [
    re.compile(r"\bbearer\s+[A-Za-z0-9._~+/-]{8,}=*", re.IGNORECASE),
    re.compile(
        r"(?:api[_-]?key|token|secret|password|authorization|bearer)[\"']?\s*[:=]\s*\S+",
        re.IGNORECASE,
    ),
    re.compile(r"\b(?:sk|pk)[-_](?:live|test)[-_]\S{10,}"),
    re.compile(r"(?<=[?&])key=[^&\s\"']+"),
]


def redact_sensitive(text):
    """Replace key/value secrets in text with [REDACTED]. Non-strings pass through."""
    if not isinstance(text, str):
        return text
    for pattern in SENSITIVE_PATTERNS:
        text = pattern.sub("[REDACTED]", text)
    return text


def dump(data) -> str:
    """Pretty JSON for pass-through results."""
    if isinstance(data, str):
        return data
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


# ---------------------------------------------------------------------------
# Client and timeout resolution
# ---------------------------------------------------------------------------


def get_client(context: dict | None) -> tuple[object, str] | None:
    """Return (client, kind), preferring the provider client over the gateway."""
    context = context or {}
    if context.get("provider_client") is not None:
        return context["provider_client"], "provider"
    if context.get("gateway_client") is not None:
        return context["gateway_client"], "gateway"
    return None


def provider_not_configured(label: str = "this skill") -> SkillError:
    return SkillError(
        PROVIDER_NOT_CONFIGURED,
        f"Provider client required for {label}. Configure an API key or platform gateway.",
        retriable=False,
    )


def resolve_timeout(context: dict | None, default_ms: int = DEFAULT_TIMEOUT_MS,
                    max_ms: int = MAX_TIMEOUT_MS) -> int:
    config = (context or {}).get("config") or {}
    configured = config.get("timeout_ms")
    if isinstance(configured, (int, float)) and not isinstance(configured, bool) and configured > 0:
        return int(min(configured, max_ms))
    return default_ms


async def request_with_timeout(client, method: str, path: str, body=None, params=None,
                               timeout_ms: int = DEFAULT_TIMEOUT_MS):
    """Run one client request, cancelling it once timeout_ms has elapsed."""
    try:
        return await asyncio.wait_for(
            client.request(method, path, body=body, params=params),
            timeout=timeout_ms / 1000,
        )
    except (asyncio.TimeoutError, TimeoutError, httpx.TimeoutException):
        raise SkillError(TIMEOUT, f"Request timed out after {timeout_ms}ms.", retriable=True)
    except SkillError:
        raise
    except Exception as e:
        status = getattr(e, "status_code", None)
        raise SkillError(
            UPSTREAM_ERROR,
            str(e) or "Unknown upstream error",
            retriable=upstream_retriable(status),
        ) from e


class Call:
    """Per-execution request helper handed to action handlers.

    The client is resolved on first use, so handlers validate their input
    before a missing client is reported and local-only actions never need one.
    """

    def __init__(self, context: dict | None, label: str,
                 default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
                 max_timeout_ms: int = MAX_TIMEOUT_MS):
        self.context = context or {}
        self.label = label
        self.timeout_ms = resolve_timeout(self.context, default_timeout_ms, max_timeout_ms)
        self.client_kind: str | None = None

    async def request(self, method: str, path: str, body=None, params=None):
        resolved = get_client(self.context)
        if resolved is None:
            raise provider_not_configured(self.label)
        client, self.client_kind = resolved
        log.debug("%s %s %s via %s client", self.label, method, path, self.client_kind)
        return await request_with_timeout(client, method, path, body, params, self.timeout_ms)

    async def get(self, path: str, params=None):
        return await self.request("GET", path, params=params)

    async def post(self, path: str, body=None, params=None):
        return await self.request("POST", path, body=body, params=params)


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------


def validate_non_empty_string(value, field: str) -> str:
    if not value or not isinstance(value, str):
        raise invalid_input(f'The "{field}" parameter is required and must be a non-empty string.')
    trimmed = value.strip()
    if not trimmed:
        raise invalid_input(f'The "{field}" parameter must not be empty.')
    return trimmed


def optional_string(value, field: str, default: str | None = None) -> str | None:
    if value is None:
        return default
    if not isinstance(value, str):
        raise invalid_input(f'The "{field}" parameter must be a string.')
    return value.strip() or default


def bounded_int(value, field: str, default: int, minimum: int = 1,
                maximum: int | None = None) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise invalid_input(f'The "{field}" parameter must be an integer.')
    if isinstance(value, float) and not value.is_integer():
        raise invalid_input(f'The "{field}" parameter must be an integer.')
    value = int(value)
    if maximum is None and value < minimum:
        raise invalid_input(f'The "{field}" parameter must be at least {minimum}.')
    if maximum is not None and not minimum <= value <= maximum:
        raise invalid_input(f'The "{field}" parameter must be between {minimum} and {maximum}.')
    return value


def one_of(value, field: str, choices, default: str | None = None) -> str | None:
    if value is None:
        return default
    if not isinstance(value, str) or value.strip().lower() not in choices:
        raise invalid_input(f'Invalid {field} "{value}". Must be one of: {", ".join(choices)}')
    return value.strip().lower()


def string_list(value, field: str, max_items: int | None = None,
                max_length: int | None = None) -> list[str]:
    if not isinstance(value, list):
        raise invalid_input(f'The "{field}" parameter is required and must be an array of strings.')
    if not value:
        raise invalid_input(f'The "{field}" array must contain at least 1 item.')
    if max_items is not None and len(value) > max_items:
        raise invalid_input(f'The "{field}" array exceeds maximum of {max_items} items.')
    items = []
    for i, item in enumerate(value):
        if not isinstance(item, str):
            raise invalid_input(f'Item at index {i} in "{field}" must be a string.')
        item = item.strip()
        if not item:
            raise invalid_input(f'Item at index {i} in "{field}" must not be empty.')
        if max_length is not None and len(item) > max_length:
            raise invalid_input(
                f'Item at index {i} in "{field}" exceeds maximum length of {max_length} characters.'
            )
        items.append(item)
    return items


def require(params: dict, *fields: str) -> list[str]:
    """Validate each named field as a non-empty string, in order."""
    return [validate_non_empty_string(params.get(f), f) for f in fields]


def validate_params(params, actions: dict, rules: dict) -> dict:
    """Shared body of a skill's validate().

    `rules` maps an action to a callable that raises SkillError on bad input.
    Actions without a rule take no parameters.
    """
    params = params if isinstance(params, dict) else {}
    action = params.get("action")
    if not isinstance(action, str) or action not in actions:
        return {"valid": False, "error": _invalid_action_message(action, actions)}
    rule = rules.get(action)
    if rule is not None:
        try:
            rule(params)
        except SkillError as e:
            return {"valid": False, "error": e.message}
    return {"valid": True}


# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _invalid_action_message(action, actions) -> str:
    return f'Invalid action "{action}". Must be one of: {", ".join(actions)}'


def success(action: str, result: str, **metadata) -> dict:
    return {
        "result": redact_sensitive(result),
        "metadata": {"success": True, "action": action, **metadata, "timestamp": _now()},
    }


def failure(action, error: SkillError) -> dict:
    return {
        "result": redact_sensitive(f"Error: {error.message}"),
        "metadata": {
            "success": False,
            "action": action,
            "error": error.to_dict(),
            "timestamp": _now(),
        },
    }


async def execute_action(name: str, actions: dict, handlers: dict, params, context,
                         default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
                         max_timeout_ms: int = MAX_TIMEOUT_MS) -> dict:
    """Shared body of a skill's execute().

    Handlers are `async def handler(params, call) -> (result_text, metadata)`.
    """
    params = params if isinstance(params, dict) else {}
    action = params.get("action")
    if not isinstance(action, str) or action not in actions:
        err = SkillError(INVALID_ACTION, _invalid_action_message(action, actions))
        return failure(action if isinstance(action, str) else None, err)

    call = Call(context, name, default_timeout_ms, max_timeout_ms)
    try:
        text, metadata = await handlers[action](params, call)
    except SkillError as e:
        log.warning("%s %s failed [%s]: %s", name, action, e.code, redact_sensitive(e.message))
        return failure(action, e)
    except Exception as e:
        log.warning("%s %s failed: %s", name, action, redact_sensitive(str(e)))
        err = SkillError(UPSTREAM_ERROR, f"Error during {action}: {e}", retriable=None)
        return failure(action, err)

    log.debug("%s %s ok", name, action)
    if call.client_kind:
        metadata.setdefault("client", call.client_kind)
    return success(action, text, **metadata)
