from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any
from urllib.parse import parse_qs, urlparse


def watch_id(url: str) -> str | None:
    values = parse_qs(urlparse(url).query).get("v")
    return values[0] if values else None


def missing_from_channel(channel_urls: list[str], videos: list[dict[str, Any]]) -> list[dict[str, Any]]:
    channel_ids = {watch_id(url) for url in channel_urls}
    return [video for video in videos if video.get("id") and video["id"] not in channel_ids]


def missing_from_api(channel_urls: list[str], videos: list[dict[str, Any]]) -> list[str | None]:
    api_ids = {video.get("id") for video in videos}
    return [vid for vid in (watch_id(url) for url in channel_urls) if vid not in api_ids]


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Compare a scraped channel video list with the API video cache"
    )
    parser.add_argument("--channel-file", default="channelVids.json")
    parser.add_argument("--videos-file", default="videos.json")
    args = parser.parse_args()

    try:
        channel_urls = json.loads(Path(args.channel_file).read_text(encoding="utf-8"))
        videos = json.loads(Path(args.videos_file).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise SystemExit(f"could not read video lists: {exc}") from exc

    print("Missing from channel:")
    print(json.dumps(missing_from_channel(channel_urls, videos), indent=2, ensure_ascii=False))
    print("")
    print("Missing from API:")
    print(json.dumps(missing_from_api(channel_urls, videos), indent=2))


if __name__ == "__main__":
    main()
