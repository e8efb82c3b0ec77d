"""Config and secrets loading, plus per-skill context construction.

config.json holds non-secret settings; secrets.json holds API keys keyed by
the `secret` name each skill declares in its PROVIDER entry.
"""

import json
import logging
from pathlib import Path

from skillpack.client import ProviderClient, build_auth
from skillpack.envelope import DEFAULT_TIMEOUT_MS

log = logging.getLogger("skillpack.config")

BASE_DIR = Path.cwd()
CONFIG_PATH = BASE_DIR / "config.json"
SECRETS_PATH = BASE_DIR / "secrets.json"

DEFAULTS = {
    "timeout_ms": DEFAULT_TIMEOUT_MS,
    "log_level": "INFO",
    "gateway_url": "",
    "skills": {},
}


class ConfigError(Exception):
    pass


def _read_json(path: Path) -> dict:
    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"{path.name} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path.name} must contain a JSON object")
    return data


def load_config(path: str | Path = CONFIG_PATH) -> dict:
    """Load config.json over the defaults. A missing file means defaults."""
    path = Path(path)
    cfg = dict(DEFAULTS)
    if path.exists():
        cfg.update(_read_json(path))
        log.info("Loaded config from %s", path)
    else:
        log.info("No config at %s, using defaults", path)
    return cfg


def load_secrets(path: str | Path = SECRETS_PATH) -> dict:
    path = Path(path)
    if not path.exists():
        return {}
    secrets = _read_json(path)
    # Key names only, never values.
    log.info("Loaded %d secret(s): %s", len(secrets), ", ".join(sorted(secrets)))
    return secrets


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        format="%(asctime)s [%(levelname)s] %(message)s",
        level=getattr(logging, str(level).upper(), logging.INFO),
    )


def build_context(skill, cfg: dict, secrets: dict, transport=None) -> dict:
    """Build the execution context for one skill module.

    The provider client is only built when the skill's secret is present (or
    the skill needs none). The gateway client is built from `gateway_url` and
    the `gateway_token` secret. `transport` is passed through to httpx.
    """
    skill_cfg = cfg.get("skills", {}).get(skill.NAME, {})
    timeout_ms = skill_cfg.get("timeout_ms", cfg.get("timeout_ms", DEFAULT_TIMEOUT_MS))
    if isinstance(timeout_ms, bool) or not isinstance(timeout_ms, (int, float)) or timeout_ms <= 0:
        log.warning("%s: invalid timeout_ms %r, using %d", skill.NAME, timeout_ms, DEFAULT_TIMEOUT_MS)
        timeout_ms = DEFAULT_TIMEOUT_MS
    context = {"config": {"timeout_ms": timeout_ms}}

    provider = getattr(skill, "PROVIDER", {})
    base_url = skill_cfg.get("base_url") or provider.get("base_url")
    secret_name = provider.get("secret")
    secret = secrets.get(secret_name) if secret_name else None

    if base_url and (secret or not secret_name):
        context["provider_client"] = ProviderClient(
            base_url, timeout=timeout_ms / 1000, transport=transport,
            **build_auth(provider, secret),
        )
    elif secret_name:
        log.info("%s: secret '%s' not set, no provider client", skill.NAME, secret_name)

    gateway_url = (cfg.get("gateway_url") or "").rstrip("/")
    if gateway_url and secrets.get("gateway_token"):
        context["gateway_client"] = ProviderClient(
            f"{gateway_url}/{skill.NAME}",
            headers={"Authorization": f"Bearer {secrets['gateway_token']}"},
            timeout=timeout_ms / 1000,
            transport=transport,
        )
    return context
