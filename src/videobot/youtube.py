from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

import requests

from .state import format_timestamp, parse_timestamp, published_at


log = logging.getLogger("videobot.youtube")

YOUTUBE_API_URL = "https://www.googleapis.com/youtube/v3"
VIDEO_BATCH_SIZE = 50
SEARCH_PAGE_SIZE = 25


class YouTubeError(RuntimeError):
    pass


@dataclass
class YouTubeClient:
    api_key: str
    session: requests.Session
    api_url: str = YOUTUBE_API_URL

    def _get(self, endpoint: str, params: dict[str, Any]) -> dict[str, Any]:
        resp = self.session.get(
            f"{self.api_url}/{endpoint}",
            params={**params, "key": self.api_key},
            timeout=30,
        )
        resp.raise_for_status()
        data = resp.json()
        if "error" in data:
            raise YouTubeError(f"YouTube API error: {data['error']}")
        return data

    def search_videos(self, channel_id: str, published_after: datetime | None = None) -> list[str]:
        video_ids: list[str] = []
        page_token: str | None = None
        while True:
            params: dict[str, Any] = {
                "part": "snippet",
                "channelId": channel_id,
                "order": "date",
                "maxResults": SEARCH_PAGE_SIZE,
                "safeSearch": "none",
                "type": "video",
            }
            if published_after is not None:
                params["publishedAfter"] = format_timestamp(published_after)
            if page_token:
                params["pageToken"] = page_token
            data = self._get("search", params)
            items = data.get("items") or []
            log.info("fetched search page from YouTube; found %s items", len(items))
            for item in items:
                video_id = (item.get("id") or {}).get("videoId")
                if video_id:
                    video_ids.append(video_id)
            page_token = data.get("nextPageToken")
            if not page_token:
                break
        return video_ids

    def fetch_video_data(self, video_ids: list[str]) -> list[dict[str, Any]]:
        videos: list[dict[str, Any]] = []
        for start in range(0, len(video_ids), VIDEO_BATCH_SIZE):
            chunk = video_ids[start : start + VIDEO_BATCH_SIZE]
            data = self._get(
                "videos",
                {"part": "snippet,contentDetails", "id": ",".join(chunk)},
            )
            items = data.get("items") or []
            log.info("fetched video data from YouTube; found %s items", len(items))
            videos.extend(items)
        return videos


def load_video_cache(path: str) -> list[dict[str, Any]]:
    cache = Path(path)
    if not cache.exists():
        return []
    try:
        data = json.loads(cache.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        log.warning("could not read video cache %s: %s", path, exc)
        return []
    if not isinstance(data, list):
        log.warning("video cache %s is not a list; ignoring it", path)
        return []
    return data


def write_video_cache(path: str, videos: list[dict[str, Any]]) -> None:
    Path(path).write_text(json.dumps(videos, indent=2, ensure_ascii=False), encoding="utf-8")


def merge_videos(
    new_videos: list[dict[str, Any]], known_videos: list[dict[str, Any]]
) -> list[dict[str, Any]]:
    seen: set[str] = set()
    merged: list[dict[str, Any]] = []
    for video in [*new_videos, *known_videos]:
        video_id = video.get("id") or ""
        if video_id in seen:
            continue
        seen.add(video_id)
        merged.append(video)
    merged.sort(key=_published_sort_key, reverse=True)
    return merged


def _published_sort_key(video: dict[str, Any]) -> float:
    when = published_at(video)
    return when.timestamp() if when else 0.0


def sort_oldest_first(videos: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return sorted(videos, key=_published_sort_key)


def fetch_all_videos(
    client: YouTubeClient,
    channel_id: str,
    cache_path: str,
    after: datetime | None = None,
) -> list[dict[str, Any]]:
    log.info("fetching new videos from YouTube")
    known = load_video_cache(cache_path)
    if known:
        # newest video is always first in the cache
        latest = (known[0].get("snippet") or {}).get("publishedAt")
        if latest:
            after = parse_timestamp(latest)
    else:
        log.warning("no cached videos in %s; assuming first run", cache_path)
    log.info("recent video time: %s", format_timestamp(after) if after else "Never")

    since = after + timedelta(seconds=1) if after else None
    video_ids = client.search_videos(channel_id, since)
    if not video_ids:
        log.warning("no new videos found on YouTube")
        return known
    log.info("found %s new videos; fetching data", len(video_ids))
    items = client.fetch_video_data(video_ids)

    combined = merge_videos(items, known)
    write_video_cache(cache_path, combined)
    log.info("%s total videos known", len(combined))
    return combined
