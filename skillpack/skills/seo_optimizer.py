"""SEO integration: page analysis, keyword checks, backlinks and page speed."""

from skillpack import envelope
from skillpack.envelope import one_of, require

NAME = "seo-optimizer"
VERSION = "1.0.0"
DESCRIPTION = "Analyze and optimize web pages for search engine rankings."
ACTIONS = {
    "analyze_page": "Audit a page's on-page SEO",
    "check_keywords": "Check keyword usage on a page",
    "get_backlinks": "List backlinks pointing at a URL",
    "check_speed": "Measure page load performance",
}
PROVIDER = {
    "base_url": "https://seo.example.invalid/v1",
    "secret": "seo_api_key",
    "auth_header": "X-Api-Key",
    "auth_scheme": "",
}

STRATEGIES = ["mobile", "desktop"]


def _url(params: dict) -> str:
    (url,) = require(params, "url")
    if not url.startswith(("http://", "https://")):
        url = "https://" + url
    return url


def _keywords(params: dict) -> list[str]:
    (raw,) = require(params, "keywords")
    keywords = [k.strip() for k in raw.split(",") if k.strip()]
    if not keywords:
        raise envelope.invalid_input('The "keywords" parameter must list at least one keyword.')
    return keywords


async def _analyze_page(params, call):
    url = _url(params)
    data = await call.post("/analyze", body={"url": url})
    return envelope.dump(data), {"url": url, "score": data.get("score") if isinstance(data, dict) else None}


async def _check_keywords(params, call):
    url = _url(params)
    keywords = _keywords(params)
    data = await call.post("/keywords", body={"url": url, "keywords": keywords})
    return envelope.dump(data), {"url": url, "keywords": keywords}


async def _get_backlinks(params, call):
    url = _url(params)
    data = await call.get("/backlinks", params={"url": url})
    return envelope.dump(data), {"url": url}


async def _check_speed(params, call):
    url = _url(params)
    strategy = one_of(params.get("strategy"), "strategy", STRATEGIES, "mobile")
    data = await call.post("/speed", body={"url": url, "strategy": strategy})
    return envelope.dump(data), {"url": url, "strategy": strategy}


HANDLERS = {
    "analyze_page": _analyze_page,
    "check_keywords": _check_keywords,
    "get_backlinks": _get_backlinks,
    "check_speed": _check_speed,
}

RULES = {
    "analyze_page": _url,
    "check_keywords": lambda p: (_url(p), _keywords(p)),
    "get_backlinks": _url,
    "check_speed": lambda p: (_url(p), one_of(p.get("strategy"), "strategy", STRATEGIES)),
}


def validate(params) -> dict:
    return envelope.validate_params(params, ACTIONS, RULES)


async def execute(params, context) -> dict:
    return await envelope.execute_action(NAME, ACTIONS, HANDLERS, params, context)
