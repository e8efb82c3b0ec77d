"""Email validation integration: syntax, deliverability and domain checks."""

import re
from urllib.parse import quote

from skillpack import envelope
from skillpack.envelope import invalid_input, require

NAME = "email-validator"
VERSION = "1.0.0"
DESCRIPTION = "Validate email addresses and check deliverability."
ACTIONS = {
    "validate_email": "Check one address for syntax and deliverability",
    "bulk_validate": "Check a comma-separated list of addresses",
    "check_domain": "Check a domain's MX and disposable status",
    "get_suggestions": "Suggest corrections for a mistyped address",
}
PROVIDER = {
    "base_url": "https://email-check.example.invalid/v1",
    "secret": "email_validator_api_key",
}

EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
DOMAIN_RE = re.compile(r"^(?:[a-zA-Z0-9-]+\.)+[a-zA-Z]{2,}$")
MAX_BULK = 100


def _email(params: dict) -> str:
    (email,) = require(params, "email")
    if not EMAIL_RE.fullmatch(email):
        raise invalid_input(f'"{email}" is not a syntactically valid email address.')
    return email.lower()


def _emails(params: dict) -> list[str]:
    (raw,) = require(params, "emails")
    emails = [e.strip().lower() for e in re.split(r"[,\s;]+", raw) if e.strip()]
    if not emails:
        raise invalid_input('The "emails" parameter must list at least one address.')
    if len(emails) > MAX_BULK:
        raise invalid_input(f'The "emails" parameter exceeds maximum of {MAX_BULK} addresses.')
    return emails


def _domain(params: dict) -> str:
    (domain,) = require(params, "domain")
    if not DOMAIN_RE.match(domain):
        raise invalid_input(f'"{domain}" is not a valid domain name.')
    return domain.lower()


async def _validate_email(params, call):
    email = _email(params)
    data = await call.post("/validate", body={"email": email})
    valid = bool(data.get("valid", data.get("deliverable", False)))
    reason = data.get("reason") or ("deliverable" if valid else "undeliverable")
    return f"{email}: {'valid' if valid else 'invalid'} ({reason})", {"email": email, "valid": valid}


async def _bulk_validate(params, call):
    emails = _emails(params)
    # Syntax failures never leave the process.
    syntax_ok = [e for e in emails if EMAIL_RE.fullmatch(e)]
    rejected = [e for e in emails if e not in syntax_ok]
    data = await call.post("/bulk", body={"emails": syntax_ok}) if syntax_ok else {"results": []}
    results = data.get("results", [])

    lines = [f"Checked {len(emails)} address(es):"]
    for r in results:
        lines.append(f"  {r.get('email')}: {'valid' if r.get('valid') else 'invalid'}")
    for e in rejected:
        lines.append(f"  {e}: invalid (syntax)")
    valid_count = sum(1 for r in results if r.get("valid"))
    return "\n".join(lines), {
        "total": len(emails),
        "valid": valid_count,
        "invalid": len(emails) - valid_count,
    }


async def _check_domain(params, call):
    domain = _domain(params)
    data = await call.get(f"/domain/{quote(domain, safe='')}")
    return envelope.dump(data), {
        "domain": domain,
        "has_mx": data.get("has_mx"),
        "disposable": data.get("disposable"),
    }


async def _get_suggestions(params, call):
    (email,) = require(params, "email")
    data = await call.post("/suggest", body={"email": email})
    suggestions = data.get("suggestions", [])
    if not suggestions:
        return f"No suggestions for {email}.", {"email": email, "suggestions": []}
    return f"Did you mean: {', '.join(suggestions)}?", {"email": email, "suggestions": suggestions}


HANDLERS = {
    "validate_email": _validate_email,
    "bulk_validate": _bulk_validate,
    "check_domain": _check_domain,
    "get_suggestions": _get_suggestions,
}

RULES = {
    "validate_email": _email,
    "bulk_validate": _emails,
    "check_domain": _domain,
    "get_suggestions": lambda p: require(p, "email"),
}


def validate(params) -> dict:
    return envelope.validate_params(params, ACTIONS, RULES)


async def execute(params, context) -> dict:
    return await envelope.execute_action(NAME, ACTIONS, HANDLERS, params, context)
