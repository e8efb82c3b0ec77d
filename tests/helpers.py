import asyncio

from skillpack.client import UpstreamError


class StubClient:
    """Records every request and replays canned responses keyed by (method, path)."""

    def __init__(self, responses=None, default=None, error=None, delay=0):
        self.responses = responses or {}
        self.default = {} if default is None else default
        self.error = error
        self.delay = delay
        self.calls = []

    async def request(self, method, path, body=None, params=None):
        self.calls.append({"method": method, "path": path, "body": body, "params": params})
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.responses.get((method, path), self.default)

    @property
    def last(self):
        return self.calls[-1]


def ctx(client=None, gateway=None, timeout_ms=None):
    context = {}
    if client is not None:
        context["provider_client"] = client
    if gateway is not None:
        context["gateway_client"] = gateway
    if timeout_ms is not None:
        context["config"] = {"timeout_ms": timeout_ms}
    return context


def upstream(status, message="boom"):
    return UpstreamError(f"HTTP {status}: {message}", status)
