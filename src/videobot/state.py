from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

log = logging.getLogger("videobot.state")


def parse_timestamp(value: str) -> datetime:
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def published_at(video: dict[str, Any]) -> datetime | None:
    raw = (video.get("snippet") or {}).get("publishedAt")
    if not raw:
        return None
    try:
        return parse_timestamp(raw)
    except ValueError:
        log.warning("unparseable publishedAt %r for video %s", raw, video.get("id"))
        return None


def read_last_created(path: str) -> datetime | None:
    try:
        content = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    if not content.strip():
        return None
    return parse_timestamp(content)


def save_last_created(path: str, video: dict[str, Any]) -> None:
    when = published_at(video)
    if when is None:
        return
    Path(path).write_text(format_timestamp(when), encoding="utf-8")
