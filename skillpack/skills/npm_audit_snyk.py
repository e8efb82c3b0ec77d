"""Dependency audit integration: npm audit / Snyk vulnerability and license checks."""

import json

from skillpack import envelope
from skillpack.envelope import invalid_input, require

NAME = "npm-audit-snyk"
VERSION = "1.0.0"
DESCRIPTION = "Scan dependencies for security vulnerabilities via npm audit or Snyk."
ACTIONS = {
    "audit_deps": "Audit a package.json for known vulnerabilities",
    "get_advisories": "List advisories for one package",
    "check_license": "Check dependency licenses",
    "fix_vulnerabilities": "Suggest upgrades that fix vulnerabilities",
}
PROVIDER = {
    "base_url": "https://api.snyk.io/v1",
    "secret": "snyk_token",
    "auth_scheme": "token",
}

SEVERITIES = ["critical", "high", "moderate", "low"]


def _package_json(params: dict) -> dict:
    (raw,) = require(params, "package_json")
    try:
        manifest = json.loads(raw)
    except json.JSONDecodeError as e:
        raise invalid_input(f'The "package_json" parameter is not valid JSON: {e.msg}.')
    if not isinstance(manifest, dict):
        raise invalid_input('The "package_json" parameter must be a JSON object.')
    return manifest


def _severity_summary(vulns: list) -> dict:
    counts = {s: 0 for s in SEVERITIES}
    for v in vulns:
        sev = str(v.get("severity", "low")).lower()
        counts[sev if sev in counts else "low"] += 1
    return counts


async def _audit_deps(params, call):
    manifest = _package_json(params)
    data = await call.post("/audit", body={"package": manifest})
    vulns = data.get("vulnerabilities", [])
    counts = _severity_summary(vulns)
    summary = ", ".join(f"{counts[s]} {s}" for s in SEVERITIES)
    lines = [f"{len(vulns)} vulnerabilit{'y' if len(vulns) == 1 else 'ies'} found ({summary})"]
    for v in vulns:
        lines.append(f"  [{v.get('severity', '?')}] {v.get('package', v.get('name'))}: {v.get('title', '')}")
    return "\n".join(lines), {"count": len(vulns), "severity": counts}


async def _get_advisories(params, call):
    (package,) = require(params, "package")
    data = await call.get("/advisories", params={"package": package})
    return envelope.dump(data), {"package": package}


async def _check_license(params, call):
    manifest = _package_json(params)
    data = await call.post("/license", body={"package": manifest})
    return envelope.dump(data), {"issues": len(data.get("issues", []))}


async def _fix_vulnerabilities(params, call):
    manifest = _package_json(params)
    data = await call.post("/fix", body={"package": manifest})
    upgrades = data.get("upgrades", [])
    if not upgrades:
        return "No upgrades available.", {"upgrades": []}
    lines = ["Suggested upgrades:"]
    for u in upgrades:
        lines.append(f"  {u.get('package')}: {u.get('from')} -> {u.get('to')}")
    return "\n".join(lines), {"upgrades": upgrades}


HANDLERS = {
    "audit_deps": _audit_deps,
    "get_advisories": _get_advisories,
    "check_license": _check_license,
    "fix_vulnerabilities": _fix_vulnerabilities,
}

RULES = {
    "audit_deps": _package_json,
    "get_advisories": lambda p: require(p, "package"),
    "check_license": _package_json,
    "fix_vulnerabilities": _package_json,
}


def validate(params) -> dict:
    return envelope.validate_params(params, ACTIONS, RULES)


async def execute(params, context) -> dict:
    return await envelope.execute_action(NAME, ACTIONS, HANDLERS, params, context)
