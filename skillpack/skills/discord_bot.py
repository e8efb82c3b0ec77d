"""Discord integration: post messages and inspect channels via the Discord API (v10)."""

from urllib.parse import quote

from skillpack import envelope
from skillpack.envelope import invalid_input, require

NAME = "discord-bot"
VERSION = "1.0.0"
DESCRIPTION = "Send messages, get channel information and list guild channels on Discord."
ACTIONS = {
    "send_message": "Send a message to a channel",
    "get_channel": "Get details about a channel",
    "list_channels": "List every channel in the channel's guild",
}
PROVIDER = {
    "base_url": "https://discord.com/api/v10",
    "secret": "discord_bot_token",
    "auth_scheme": "Bot",
}

MAX_CONTENT_LENGTH = 2000

CHANNEL_TYPES = {
    0: "Text",
    1: "DM",
    2: "Voice",
    3: "Group DM",
    4: "Category",
    5: "Announcement",
    10: "Announcement Thread",
    11: "Public Thread",
    12: "Private Thread",
    13: "Stage Voice",
    14: "Directory",
    15: "Forum",
    16: "Media",
}
CATEGORY = 4


def _type_name(channel_type) -> str:
    return CHANNEL_TYPES.get(channel_type, f"Unknown ({channel_type})")


def _check_send(params: dict) -> tuple[str, str]:
    channel_id, content = require(params, "channel_id", "content")
    if len(content) > MAX_CONTENT_LENGTH:
        raise invalid_input(f'The "content" parameter exceeds {MAX_CONTENT_LENGTH} characters.')
    return channel_id, content


async def _send_message(params, call):
    channel_id, content = _check_send(params)
    msg = await call.post(f"/channels/{quote(channel_id, safe='')}/messages", body={"content": content})
    author = msg.get("author") or {}
    text = (
        f"Message sent successfully to channel {channel_id}.\n"
        f"Message ID: {msg.get('id')}\n"
        f"Timestamp: {msg.get('timestamp')}\n"
        f"Content: {msg.get('content', content)}"
    )
    return text, {
        "message_id": msg.get("id"),
        "channel_id": msg.get("channel_id", channel_id),
        "author": {"id": author.get("id"), "username": author.get("username")},
    }


async def _get_channel(params, call):
    (channel_id,) = require(params, "channel_id")
    channel = await call.get(f"/channels/{quote(channel_id, safe='')}")
    nsfw = channel.get("nsfw")
    position = channel.get("position")
    text = "\n".join([
        "Channel Information:",
        f"  Name: #{channel.get('name') or '(unnamed)'}",
        f"  ID: {channel.get('id')}",
        f"  Type: {_type_name(channel.get('type'))}",
        f"  Guild ID: {channel.get('guild_id') or 'N/A (DM)'}",
        f"  Topic: {channel.get('topic') or '(no topic set)'}",
        f"  NSFW: {nsfw if nsfw is not None else 'N/A'}",
        f"  Position: {position if position is not None else 'N/A'}",
    ])
    return text, {
        "id": channel.get("id"),
        "name": channel.get("name"),
        "type": channel.get("type"),
        "type_name": CHANNEL_TYPES.get(channel.get("type"), "Unknown"),
        "guild_id": channel.get("guild_id"),
    }


async def _list_channels(params, call):
    (channel_id,) = require(params, "channel_id")
    channel = await call.get(f"/channels/{quote(channel_id, safe='')}")
    guild_id = channel.get("guild_id")
    if not guild_id:
        raise invalid_input(
            "This channel does not belong to a guild (it may be a DM). Cannot list guild channels."
        )

    channels = await call.get(f"/guilds/{quote(str(guild_id), safe='')}/channels")
    lines = []
    for ch in sorted(channels, key=lambda c: c.get("position") or 0):
        kind = CHANNEL_TYPES.get(ch.get("type"), f"Type({ch.get('type')})")
        if ch.get("type") == CATEGORY:
            lines.append(f"\n{(ch.get('name') or '').upper()} ({kind}) - ID: {ch.get('id')}")
        else:
            lines.append(f"  #{ch.get('name')} ({kind}) - ID: {ch.get('id')}")

    text = f"Channels in guild {guild_id}:\n" + "\n".join(lines)
    return text, {
        "guild_id": guild_id,
        "channel_count": len(channels),
        "channels": [{"id": c.get("id"), "name": c.get("name"), "type": c.get("type")} for c in channels],
    }


HANDLERS = {
    "send_message": _send_message,
    "get_channel": _get_channel,
    "list_channels": _list_channels,
}

RULES = {
    "send_message": _check_send,
    "get_channel": lambda p: require(p, "channel_id"),
    "list_channels": lambda p: require(p, "channel_id"),
}


def validate(params) -> dict:
    return envelope.validate_params(params, ACTIONS, RULES)


async def execute(params, context) -> dict:
    return await envelope.execute_action(NAME, ACTIONS, HANDLERS, params, context)
