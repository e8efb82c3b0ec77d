"""httpx-backed provider client injected into skill contexts.

Skills only see `await client.request(method, path, body=None, params=None)`.
Base URL and credentials are bound here, never inside a skill.
"""

import logging

import httpx

log = logging.getLogger("skillpack.client")


class UpstreamError(Exception):
    """Non-2xx response from the upstream API."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def build_auth(provider: dict, secret: str | None) -> dict:
    """Turn a skill's PROVIDER entry plus its secret into httpx client kwargs.

    Supported shapes:
      auth_scheme "Basic": secret is "user:password"
      auth_param "key": secret sent as ?key=<secret>
      auth_header + auth_scheme: e.g. "Authorization: Bot <secret>"
    """
    if not secret:
        return {}

    scheme = provider.get("auth_scheme", "Bearer")
    if scheme == "Basic":
        user, _, password = secret.partition(":")
        return {"auth": httpx.BasicAuth(user, password)}

    if provider.get("auth_param"):
        return {"params": {provider["auth_param"]: secret}}

    header = provider.get("auth_header", "Authorization")
    value = f"{scheme} {secret}" if scheme else secret
    return {"headers": {header: value}}


def _error_message(r: httpx.Response) -> str:
    detail = ""
    try:
        data = r.json()
        if isinstance(data, dict):
            detail = data.get("message") or data.get("error") or ""
            if isinstance(detail, dict):
                detail = detail.get("message", "")
    except ValueError:
        detail = r.text[:200]
    return f"HTTP {r.status_code}: {detail or r.reason_phrase}"


class ProviderClient:
    """Thin JSON wrapper around httpx.AsyncClient."""

    def __init__(self, base_url: str, headers: dict | None = None, params: dict | None = None,
                 auth: httpx.Auth | None = None, timeout: float = 30.0,
                 transport: httpx.AsyncBaseTransport | None = None):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Accept": "application/json", **(headers or {})},
            params=params,
            auth=auth,
            timeout=timeout,
            transport=transport,
        )

    async def request(self, method: str, path: str, body=None, params=None):
        if params:
            params = {k: v for k, v in params.items() if v is not None}
        r = await self._client.request(
            method,
            path,
            json=body,
            params=params or None,
        )
        if r.is_error:
            raise UpstreamError(_error_message(r), r.status_code)
        if not r.content:
            return {}
        try:
            return r.json()
        except ValueError:
            return r.text

    async def aclose(self):
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.aclose()
