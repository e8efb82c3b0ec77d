"""Calibre integration: browse and search an e-book library via the content server."""

from urllib.parse import quote

from skillpack import envelope
from skillpack.envelope import bounded_int, require

NAME = "calibre-api"
VERSION = "1.0.0"
DESCRIPTION = "Browse and search a Calibre e-book library through the Calibre content server."
ACTIONS = {
    "list_books": "List book ids in the library",
    "get_book": "Get metadata for one book",
    "get_categories": "List tag, author and series categories",
    "search_books": "Search the library with a Calibre query",
}
PROVIDER = {
    "base_url": "http://localhost:8080",
    "secret": "calibre_credentials",
    "auth_scheme": "Basic",
}

DEFAULT_LIMIT = 25
MAX_LIMIT = 500


def _paging(params: dict) -> dict:
    return {
        "num": bounded_int(params.get("limit"), "limit", DEFAULT_LIMIT, 1, MAX_LIMIT),
        "offset": bounded_int(params.get("offset"), "offset", 0, 0),
    }


def _format_ids(data: dict, heading: str) -> str:
    ids = data.get("book_ids", [])
    total = data.get("total_num", len(ids))
    shown = ", ".join(str(i) for i in ids) or "(none)"
    return f"{heading}: {total} book(s)\nBook IDs: {shown}"


async def _list_books(params, call):
    query = _paging(params)
    data = await call.get("/ajax/search", params=query)
    return _format_ids(data, "Library"), {"total": data.get("total_num"), "book_ids": data.get("book_ids", [])}


async def _get_book(params, call):
    (book_id,) = require(params, "book_id")
    data = await call.get(f"/ajax/book/{quote(book_id, safe='')}")
    lines = [
        f"Title: {data.get('title', '(untitled)')}",
        f"Authors: {', '.join(data.get('authors', [])) or 'Unknown'}",
        f"Formats: {', '.join(f.upper() for f in data.get('formats', [])) or 'none'}",
    ]
    if data.get("series"):
        lines.append(f"Series: {data['series']}")
    return "\n".join(lines), {"book_id": book_id, "title": data.get("title")}


async def _get_categories(params, call):
    data = await call.get("/ajax/categories")
    return envelope.dump(data), {}


async def _search_books(params, call):
    (query,) = require(params, "query")
    data = await call.get("/ajax/search", params={"query": query, **_paging(params)})
    return _format_ids(data, f'Search "{query}"'), {"query": query, "total": data.get("total_num")}


HANDLERS = {
    "list_books": _list_books,
    "get_book": _get_book,
    "get_categories": _get_categories,
    "search_books": _search_books,
}

RULES = {
    "list_books": _paging,
    "get_book": lambda p: require(p, "book_id"),
    "search_books": lambda p: (require(p, "query"), _paging(p)),
}


def validate(params) -> dict:
    return envelope.validate_params(params, ACTIONS, RULES)


async def execute(params, context) -> dict:
    return await envelope.execute_action(NAME, ACTIONS, HANDLERS, params, context)
