from __future__ import annotations

import argparse
import logging
import os
import tempfile
import time
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Callable

import requests

from .config import Config, load_config, require_youtube
from .logging import attach_file_logging, configure_logging
from .mediawiki import MediaWikiClient
from .page import best_thumbnail, build_page_content, video_url
from .shutoff import ShutoffWatcher
from .state import published_at, read_last_created, save_last_created
from .titleinfo import TitleInfo, clean_title, duplicate_groups, find_duplicates
from .youtube import YouTubeClient, fetch_all_videos, sort_oldest_first

log = logging.getLogger("videobot.create_videos")

YES_ANSWERS = ("y", "yes")
NO_ANSWERS = ("n", "no")


@dataclass
class RunStats:
    created: int = 0
    uploaded: int = 0
    skipped: int = 0
    done: int = 0


def ask_to_continue(prompt: str, read: Callable[[str], str] = input) -> bool:
    while True:
        answer = read(prompt).strip().lower()
        if answer in NO_ANSWERS:
            return False
        if answer in YES_ANSWERS:
            return True


def new_videos_since(
    videos: list[dict[str, Any]], last_created: datetime | None
) -> list[dict[str, Any]]:
    selected = []
    for video in videos:
        when = published_at(video)
        if last_created is not None and when is not None and when <= last_created:
            continue
        selected.append(video)
    return sort_oldest_first(selected)


def create_page(
    client: MediaWikiClient,
    video: dict[str, Any],
    info: TitleInfo,
    url: str,
    live: bool,
    category: str = "Category:Videos",
) -> None:
    log.info("creating page for video: %s (%s)", info.title, url)
    content = build_page_content(video, info, url, category=category)
    if info.restricted_title_reasons:
        log.warning(
            'title "%s" has restrictions: %s',
            info.original_title,
            "; ".join(info.restricted_title_reasons),
        )
    if not live:
        log.info("(simulated) created page: %s", info.title)
        return
    client.create_page(info.title, content, f"Automated creation of page for YouTube video {url}")
    log.info("created page: %s", info.title)


def upload_thumbnail(
    client: MediaWikiClient,
    session: requests.Session,
    video: dict[str, Any],
    info: TitleInfo,
    url: str,
    live: bool,
) -> bool:
    log.info("uploading video's thumbnail image: %s", info.media_title)
    thumb = best_thumbnail((video.get("snippet") or {}).get("thumbnails"))
    if not thumb:
        log.warning("no thumbnail available for %s", url)
        return False
    image_url = thumb["url"]
    if not live:
        log.info("(simulated) uploaded image: %s", image_url)
        return True

    resp = session.get(image_url, timeout=30)
    resp.raise_for_status()
    fd, temp_path = tempfile.mkstemp(prefix="thumbnail-", suffix=".jpg")
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(resp.content)
        client.upload_file(
            temp_path,
            f"{info.media_title}.jpg",
            f"{{{{Media thumbnail|link={image_url}}}}}",
            f"Automated upload of thumbnail image for YouTube video {url}",
        )
    finally:
        os.remove(temp_path)
    log.info("uploaded image: %s", image_url)
    return True


def process_video(
    cfg: Config,
    client: MediaWikiClient,
    session: requests.Session,
    video: dict[str, Any],
    info: TitleInfo,
    live: bool,
) -> tuple[bool, bool]:
    url = video_url(video.get("id") or "")
    did_create = False
    if client.page_exists(info.title):
        if cfg.video_category in client.page_categories(info.title):
            log.warning("page for video already exists: %s (%s)", info.title, url)
        else:
            info = replace(
                info,
                title=f"{info.title} (video)",
                media_title=f"{info.media_title} (video)",
            )
            if client.page_exists(info.title):
                log.warning("page for video already exists: %s (%s)", info.title, url)
            else:
                create_page(client, video, info, url, live, cfg.video_category)
                did_create = True
    else:
        create_page(client, video, info, url, live, cfg.video_category)
        did_create = True

    did_upload = False
    file_title = f"File:{info.media_title}.jpg"
    if client.page_exists(file_title):
        log.warning("file page already exists: %s (%s)", file_title, url)
    else:
        did_upload = upload_thumbnail(client, session, video, info, url, live)
    return did_create, did_upload


def run(
    cfg: Config,
    client: MediaWikiClient,
    session: requests.Session,
    videos: list[dict[str, Any]],
    live: bool,
    shutoff: ShutoffWatcher | None = None,
    assume_yes: bool = False,
    read: Callable[[str], str] = input,
) -> RunStats:
    stats = RunStats()
    last_created = read_last_created(cfg.last_created_file)
    log.info("last created video date: %s", last_created.isoformat() if last_created else "None")

    pending = new_videos_since(videos, last_created)
    if not pending:
        log.warning("no videos found in total")
        return stats
    log.info("total new videos to process: %s", len(pending))

    namespaces = client.namespace_names()
    cache: dict[str, TitleInfo] = {}
    groups = find_duplicates(
        namespaces,
        ((video.get("id") or "", (video.get("snippet") or {}).get("title")) for video in videos),
        cache=cache,
    )
    for title, ids in duplicate_groups(groups).items():
        log.warning("duplicate title detected: %s", title)
        for video_id in ids:
            log.warning("   - %s", video_url(video_id))

    batch = 0
    for video in pending:
        if shutoff is not None and shutoff.tripped.is_set():
            log.warning("shutoff requested; stopping")
            break
        if batch >= cfg.max_pages:
            next_batch = min(len(pending) - stats.done, cfg.max_pages)
            prompt = f"Processed {stats.done}/{len(pending)} videos. Create {next_batch} more? (y/n): "
            if not assume_yes and not ask_to_continue(prompt, read):
                break
            batch = 0

        video_id = video.get("id") or ""
        url = video_url(video_id)
        info = cache.get(video_id) if video_id else None
        if info is None:
            info = clean_title(namespaces, (video.get("snippet") or {}).get("title"))
            if video_id:
                cache[video_id] = info
        if not info.title:
            log.warning("skipping video with empty title: %s", url)
            save_last_created(cfg.last_created_file, video)
            stats.skipped += 1
            continue
        if len(groups.get(info.title, [])) > 1:
            log.warning("skipping video with duplicate title: %s (%s)", info.title, url)
            save_last_created(cfg.last_created_file, video)
            stats.skipped += 1
            continue

        did_create, did_upload = process_video(cfg, client, session, video, info, live)
        save_last_created(cfg.last_created_file, video)
        stats.done += 1
        stats.created += int(did_create)
        stats.uploaded += int(did_upload)

        if did_create or did_upload:
            batch += 1
            if shutoff is not None:
                shutoff.sleep(cfg.time_between_pages)
            else:
                time.sleep(cfg.time_between_pages)
    return stats


def main() -> None:
    parser = argparse.ArgumentParser(description="Create wiki pages for new YouTube videos")
    parser.add_argument("--dry-run", action="store_true", help="simulate edits and uploads")
    parser.add_argument("--yes", action="store_true", help="do not prompt between batches")
    parser.add_argument("--max-pages", type=int, default=None)
    parser.add_argument("--log-file", default=None)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    configure_logging(args.verbose)
    if args.log_file:
        attach_file_logging(args.log_file)
    cfg = load_config()
    if args.max_pages is not None:
        cfg = replace(cfg, max_pages=args.max_pages)
    api_key, channel_id = require_youtube(cfg)
    live = cfg.live_edits and not args.dry_run

    session = requests.Session()
    client = MediaWikiClient(cfg.mw_api_url, cfg.mw_user_agent, session)
    client.login(cfg.mw_username, cfg.mw_password)

    watcher_session = requests.Session()
    watcher_session.cookies = session.cookies
    watcher_client = MediaWikiClient(
        cfg.mw_api_url, cfg.mw_user_agent, watcher_session, default_params={"assert": "bot"}
    )

    youtube = YouTubeClient(api_key, requests.Session())
    with ShutoffWatcher(watcher_client, cfg.shutoff_interval_seconds) as shutoff:
        last_created = read_last_created(cfg.last_created_file)
        videos = fetch_all_videos(youtube, channel_id, cfg.videos_file, after=last_created)
        stats = run(cfg, client, session, videos, live, shutoff=shutoff, assume_yes=args.yes)

    log.info(
        "finished creating video pages: done=%s created=%s uploaded=%s skipped=%s",
        stats.done,
        stats.created,
        stats.uploaded,
        stats.skipped,
    )
    if shutoff.tripped.is_set():
        raise SystemExit(1)


if __name__ == "__main__":
    main()
