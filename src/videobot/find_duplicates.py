from __future__ import annotations

import logging
from typing import Any, Iterable

import requests

from .config import load_config, require_youtube
from .logging import configure_logging
from .mediawiki import MediaWikiClient
from .page import video_url
from .titleinfo import duplicate_groups, find_duplicates
from .youtube import YouTubeClient, fetch_all_videos, sort_oldest_first

log = logging.getLogger("videobot.find_duplicates")


def report_duplicates(namespaces: Iterable[str], videos: list[dict[str, Any]]) -> dict[str, list[str]]:
    groups = find_duplicates(
        namespaces,
        ((video.get("id") or "", (video.get("snippet") or {}).get("title")) for video in videos),
    )
    duplicates = duplicate_groups(groups)
    if not duplicates:
        log.info("no duplicate titles found")
        return duplicates
    log.warning("duplicate titles found:")
    for title, ids in duplicates.items():
        log.warning("  %s", title)
        for video_id in ids:
            log.warning("   - %s", video_url(video_id))
    return duplicates


def main() -> None:
    configure_logging()
    cfg = load_config()
    api_key, channel_id = require_youtube(cfg)

    session = requests.Session()
    client = MediaWikiClient(cfg.mw_api_url, cfg.mw_user_agent, session)
    client.login(cfg.mw_username, cfg.mw_password)
    namespaces = client.namespace_names()

    youtube = YouTubeClient(api_key, requests.Session())
    videos = sort_oldest_first(fetch_all_videos(youtube, channel_id, cfg.videos_file))
    log.info("total videos: %s", len(videos))
    report_duplicates(namespaces, videos)


if __name__ == "__main__":
    main()
