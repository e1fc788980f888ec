from __future__ import annotations

import re
from datetime import timezone
from typing import Any

from .state import published_at
from .titleinfo import FALSE_SUBPAGE_REASON, TitleInfo


WATCH_URL = "https://www.youtube.com/watch?v={video_id}"

MEDIA_TEMPLATE = """{{Media
|name=NAME
|image=MEDIA.jpg
|type=TYPE
|date=DATE
|duration=DURATION
|youtube=YOUTUBE_URL
}}
'''NAME''' is a TYPE published on DATE.

== Description ==
DESCRIPTION

[[CATEGORY]]"""

PLACEHOLDER_RE = re.compile(r"\b(?:NAME|MEDIA|DATE|TYPE|DURATION|YOUTUBE_URL|DESCRIPTION|CATEGORY)\b")
DURATION_RE = re.compile(
    r"^P(?:(?P<days>\d+)D)?(?:T(?:(?P<hours>\d+)H)?(?:(?P<minutes>\d+)M)?(?:(?P<seconds>\d+(?:\.\d+)?)S)?)?$"
)
SINGLE_NEWLINE_RE = re.compile(r"(?<!\n)\n(?!\n)")
LIST_MARKER_RE = re.compile(r"\n([#*])")


def video_url(video_id: str) -> str:
    return WATCH_URL.format(video_id=video_id)


def format_duration(duration: str | None) -> str:
    if not duration:
        return ""
    m = DURATION_RE.match(duration)
    if not m:
        return ""
    hours = int(m.group("days") or 0) * 24 + int(m.group("hours") or 0)
    minutes = int(m.group("minutes") or 0)
    seconds = int(float(m.group("seconds") or 0))
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_date(video: dict[str, Any]) -> str:
    when = published_at(video)
    if when is None:
        return ""
    when = when.astimezone(timezone.utc)
    return f"{when.day} {when.strftime('%B %Y')}"


def clean_description(text: str | None) -> str:
    if not text:
        return ""
    text = text.replace("\u200e", "")
    text = re.sub("[“”]", '"', text)
    text = re.sub("[‘’]", "'", text)
    text = SINGLE_NEWLINE_RE.sub("<br>\n", text)
    # keep lines starting with # or * from becoming lists
    text = LIST_MARKER_RE.sub(r"\n<nowiki/>\1", text)
    return text


def best_thumbnail(thumbnails: dict[str, Any] | None) -> dict[str, Any] | None:
    best = None
    best_resolution = 0
    for thumb in (thumbnails or {}).values():
        if not thumb or not thumb.get("url"):
            continue
        resolution = int(thumb.get("width") or 0) * int(thumb.get("height") or 0)
        if resolution > best_resolution:
            best_resolution = resolution
            best = thumb
    return best


def render_template(template: str, values: dict[str, str]) -> str:
    return PLACEHOLDER_RE.sub(lambda m: values[m.group(0)], template)


def restricted_title_template(info: TitleInfo) -> str:
    reasons = "|".join(info.restricted_title_reasons)
    subpage = "|subpage=1" if FALSE_SUBPAGE_REASON in info.restricted_title_reasons else ""
    return f"{{{{Restricted title|{reasons}{subpage}}}}}"


def build_page_content(
    video: dict[str, Any],
    info: TitleInfo,
    url: str,
    template: str = MEDIA_TEMPLATE,
    category: str = "Category:Videos",
) -> str:
    snippet = video.get("snippet") or {}
    content_details = video.get("contentDetails") or {}
    content = render_template(
        template,
        {
            "NAME": info.original_title,
            "MEDIA": info.media_title,
            "DATE": format_date(video),
            "TYPE": "video",
            "DURATION": format_duration(content_details.get("duration")),
            "YOUTUBE_URL": url,
            "DESCRIPTION": clean_description(snippet.get("description")),
            "CATEGORY": category,
        },
    )
    if info.restricted_title_reasons:
        content += "\n" + restricted_title_template(info)
        if info.original_title != info.title:
            content = f"{{{{DISPLAYTITLE:{info.original_title}}}}}\n" + content
    return content
