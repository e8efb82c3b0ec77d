"""Translator integration: text translation and language detection (DeepL / Google).

The provider client points at a DeepL- or Google-compatible translation
endpoint exposing /translate, /translate/batch, /detect, /usage and
/glossaries. Supported languages are answered locally.
"""

import re

from skillpack import envelope
from skillpack.envelope import invalid_input, one_of, string_list

NAME = "translator-deepl-google"
VERSION = "1.0.0"
DESCRIPTION = (
    "Translate text, detect languages, batch translate and manage glossaries "
    "via a DeepL or Google translation provider."
)
ACTIONS = {
    "translate": "Translate text into a target language",
    "detect_language": "Detect the language of a text",
    "translate_batch": "Translate a list of texts in one request",
    "get_usage": "Show character usage against the account limit",
    "list_languages": "List supported language codes",
    "get_glossaries": "List configured glossaries",
}
PROVIDER = {
    "base_url": "https://api-free.deepl.com/v2",
    "secret": "deepl_api_key",
    "auth_scheme": "DeepL-Auth-Key",
}

SUPPORTED_LANGUAGES = {
    "en": "English",
    "de": "German",
    "fr": "French",
    "es": "Spanish",
    "it": "Italian",
    "pt": "Portuguese",
    "nl": "Dutch",
    "pl": "Polish",
    "ru": "Russian",
    "ja": "Japanese",
    "ko": "Korean",
    "zh": "Chinese",
    "ar": "Arabic",
    "hi": "Hindi",
    "sv": "Swedish",
    "da": "Danish",
    "fi": "Finnish",
    "nb": "Norwegian Bokmal",
    "el": "Greek",
    "cs": "Czech",
    "ro": "Romanian",
    "hu": "Hungarian",
    "tr": "Turkish",
    "id": "Indonesian",
    "th": "Thai",
    "vi": "Vietnamese",
    "uk": "Ukrainian",
}

FORMALITY_LEVELS = ["default", "more", "less"]

MAX_TEXT_LENGTH = 10_000
MAX_DETECT_TEXT_LENGTH = 5_000
MAX_BATCH_ITEMS = 50
MAX_BATCH_ITEM_LENGTH = 5_000

LANG_CODE_RE = re.compile(r"^[a-z]{2,5}$")

# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------


def validate_text(text, max_length: int = MAX_TEXT_LENGTH) -> str:
    if not isinstance(text, str):
        raise invalid_input('The "text" parameter is required and must be a non-empty string.')
    trimmed = text.strip()
    if not trimmed:
        raise invalid_input('The "text" parameter must not be empty.')
    if len(trimmed) > max_length:
        raise invalid_input(f'The "text" parameter exceeds maximum length of {max_length} characters.')
    return trimmed


def validate_lang_code(lang, field: str, required: bool) -> str | None:
    if lang is None or (isinstance(lang, str) and not lang.strip()):
        if required:
            raise invalid_input(f'The "{field}" parameter is required.')
        return None
    if not isinstance(lang, str):
        raise invalid_input(f'The "{field}" parameter must be a string.')
    code = lang.strip().lower()
    if not LANG_CODE_RE.match(code):
        raise invalid_input(f'Invalid "{field}" code "{lang}". Must be a 2-5 letter language code.')
    return code


def _translate_args(params: dict) -> dict:
    return {
        "text": validate_text(params.get("text")),
        "target_lang": validate_lang_code(params.get("target_lang"), "target_lang", True),
        "source_lang": validate_lang_code(params.get("source_lang"), "source_lang", False),
        "formality": one_of(params.get("formality"), "formality", FORMALITY_LEVELS),
    }


def _batch_args(params: dict) -> dict:
    return {
        "texts": string_list(params.get("texts"), "texts", MAX_BATCH_ITEMS, MAX_BATCH_ITEM_LENGTH),
        "target_lang": validate_lang_code(params.get("target_lang"), "target_lang", True),
        "source_lang": validate_lang_code(params.get("source_lang"), "source_lang", False),
    }


def _without_none(d: dict) -> dict:
    return {k: v for k, v in d.items() if v is not None}


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


async def _translate(params, call):
    args = _translate_args(params)
    data = await call.post("/translate", body=_without_none(args))

    translated = data.get("translated_text") or data.get("text") or data.get("translation") or ""
    detected = data.get("detected_language") or data.get("source_lang") or args["source_lang"] or "auto"
    chars = data.get("character_count") or len(args["text"])

    lines = [
        "Translation Result",
        f"Source language: {detected}",
        f"Target language: {args['target_lang']}",
    ]
    if args["formality"]:
        lines.append(f"Formality: {args['formality']}")
    lines += [f"Characters: {chars}", "", translated]

    return "\n".join(lines), {
        "source_lang": detected,
        "target_lang": args["target_lang"],
        "formality": args["formality"] or "default",
        "character_count": chars,
        "translated_text": envelope.redact_sensitive(translated),
    }


async def _detect_language(params, call):
    text = validate_text(params.get("text"), MAX_DETECT_TEXT_LENGTH)
    data = await call.post("/detect", body={"text": text})

    language = data.get("language") or data.get("detected_language") or "unknown"
    confidence = data.get("confidence")
    alternatives = data.get("alternatives") or []

    lines = ["Language Detection Result", f"Detected language: {language}"]
    if confidence is not None:
        lines.append(f"Confidence: {confidence}")
    if alternatives:
        alts = ", ".join(f"{a.get('language')} ({a.get('confidence')})" for a in alternatives)
        lines.append(f"Alternatives: {alts}")

    return "\n".join(lines), {
        "detected_language": language,
        "confidence": confidence,
        "alternatives": alternatives,
    }


async def _translate_batch(params, call):
    args = _batch_args(params)
    data = await call.post("/translate/batch", body=_without_none(args))

    translations = data.get("translations") or data.get("results") or []
    total_chars = sum(len(t) for t in args["texts"])
    source = args["source_lang"]

    lines = [
        "Batch Translation Result",
        f"Items: {len(args['texts'])}",
        f"Target language: {args['target_lang']}",
        f"Source language: {source}" if source else "Source language: auto-detect",
        f"Total characters: {total_chars}",
        "",
    ]
    for i, t in enumerate(translations, 1):
        text = t if isinstance(t, str) else (t.get("translated_text") or t.get("text") or "")
        lines.append(f"{i}. {text}")

    return "\n".join(lines), {
        "source_lang": source or "auto",
        "target_lang": args["target_lang"],
        "item_count": len(args["texts"]),
        "total_characters": total_chars,
    }


async def _get_usage(params, call):
    data = await call.get("/usage")
    used = data.get("character_count") or 0
    limit = data.get("character_limit") or 0
    remaining = limit - used
    text = "\n".join([
        "Translation Usage",
        f"Characters used: {used}",
        f"Character limit: {limit}",
        f"Remaining: {remaining}",
    ])
    return text, {"character_count": used, "character_limit": limit, "remaining": remaining}


async def _list_languages(params, call):
    lines = [f"Supported Languages ({len(SUPPORTED_LANGUAGES)})", ""]
    for i, (code, name) in enumerate(SUPPORTED_LANGUAGES.items(), 1):
        lines.append(f"{i}. {code} - {name}")
    return "\n".join(lines), {
        "language_count": len(SUPPORTED_LANGUAGES),
        "languages": [{"code": c, "name": n} for c, n in SUPPORTED_LANGUAGES.items()],
    }


async def _get_glossaries(params, call):
    data = await call.get("/glossaries")
    glossaries = data.get("glossaries") or data.get("data") or []
    lines = [f"Glossaries ({len(glossaries)})", ""]
    for i, g in enumerate(glossaries, 1):
        name = g.get("name") or g.get("title") or f"Glossary {i}"
        lines.append(
            f"{i}. {name} ({g.get('source_lang', '')} -> {g.get('target_lang', '')}, "
            f"{g.get('entry_count', 0)} entries)"
        )
    return "\n".join(lines), {"glossary_count": len(glossaries)}


HANDLERS = {
    "translate": _translate,
    "detect_language": _detect_language,
    "translate_batch": _translate_batch,
    "get_usage": _get_usage,
    "list_languages": _list_languages,
    "get_glossaries": _get_glossaries,
}

RULES = {
    "translate": _translate_args,
    "detect_language": lambda p: validate_text(p.get("text"), MAX_DETECT_TEXT_LENGTH),
    "translate_batch": _batch_args,
}


def validate(params) -> dict:
    return envelope.validate_params(params, ACTIONS, RULES)


async def execute(params, context) -> dict:
    return await envelope.execute_action(NAME, ACTIONS, HANDLERS, params, context)
