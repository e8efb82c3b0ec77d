"""Ollama integration: local LLM inference and model management."""

from skillpack import envelope
from skillpack.envelope import require

NAME = "ollama-local-llm"
VERSION = "1.0.0"
DESCRIPTION = "Run local LLM inference via the Ollama API."
ACTIONS = {
    "generate": "Complete a prompt with a model",
    "chat": "Send one chat message to a model",
    "list_models": "List locally available models",
    "pull_model": "Download a model",
}
PROVIDER = {
    "base_url": "http://localhost:11434",
    "secret": None,
}


def _size_gb(size) -> str:
    return f"{size / 1e9:.1f} GB" if isinstance(size, (int, float)) else "?"


async def _generate(params, call):
    model, prompt = require(params, "model", "prompt")
    data = await call.post("/api/generate", body={"model": model, "prompt": prompt, "stream": False})
    return data.get("response", ""), {
        "model": model,
        "eval_count": data.get("eval_count"),
        "done": data.get("done", True),
    }


async def _chat(params, call):
    model, message = require(params, "model", "message")
    data = await call.post("/api/chat", body={
        "model": model,
        "messages": [{"role": "user", "content": message}],
        "stream": False,
    })
    reply = (data.get("message") or {}).get("content", "")
    return reply, {"model": model, "eval_count": data.get("eval_count")}


async def _list_models(params, call):
    data = await call.get("/api/tags")
    models = data.get("models", [])
    if not models:
        return "No models installed.", {"count": 0, "models": []}
    lines = [f"Models ({len(models)}):"]
    for m in models:
        lines.append(f"  {m.get('name')} ({_size_gb(m.get('size'))})")
    return "\n".join(lines), {"count": len(models), "models": [m.get("name") for m in models]}


async def _pull_model(params, call):
    (model,) = require(params, "model")
    data = await call.post("/api/pull", body={"model": model, "stream": False})
    status = data.get("status", "unknown")
    return f"Pull {model}: {status}", {"model": model, "status": status}


HANDLERS = {
    "generate": _generate,
    "chat": _chat,
    "list_models": _list_models,
    "pull_model": _pull_model,
}

RULES = {
    "generate": lambda p: require(p, "model", "prompt"),
    "chat": lambda p: require(p, "model", "message"),
    "pull_model": lambda p: require(p, "model"),
}


def validate(params) -> dict:
    return envelope.validate_params(params, ACTIONS, RULES)


async def execute(params, context) -> dict:
    return await envelope.execute_action(NAME, ACTIONS, HANDLERS, params, context)
