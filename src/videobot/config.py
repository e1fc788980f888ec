from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Config:
    mw_api_url: str
    mw_username: str
    mw_password: str
    mw_user_agent: str

    youtube_api_key: str | None = None
    youtube_channel_id: str | None = None

    live_edits: bool = False
    videos_file: str = "videos.json"
    last_created_file: str = "lastCreated.txt"

    time_between_pages: int = 3
    max_pages: int = 10
    shutoff_interval_seconds: int = 5
    video_category: str = "Category:Videos"


def load_config() -> Config:
    def req(name: str) -> str:
        value = os.getenv(name)
        if not value:
            raise RuntimeError(f"Missing required env var: {name}")
        return value

    def _int(name: str, default: int) -> int:
        raw = os.getenv(name)
        if not raw:
            return default
        try:
            return int(raw)
        except ValueError as exc:
            raise RuntimeError(f"{name} must be an integer") from exc

    cfg = Config(
        mw_api_url=req("MW_API_URL"),
        mw_username=req("MW_USERNAME"),
        mw_password=req("MW_PASSWORD"),
        mw_user_agent=os.getenv("MW_USER_AGENT", "AllianceBot/1.0.0"),
        youtube_api_key=os.getenv("YOUTUBE_API_KEY"),
        youtube_channel_id=os.getenv("YOUTUBE_CHANNEL_ID"),
        live_edits=os.getenv("BOT_ENV", "") == "production",
        videos_file=os.getenv("BOT_VIDEOS_FILE", "videos.json"),
        last_created_file=os.getenv("BOT_LAST_CREATED_FILE", "lastCreated.txt"),
        time_between_pages=_int("BOT_TIME_BETWEEN_PAGES", 3),
        max_pages=_int("BOT_MAX_PAGES", 10),
        shutoff_interval_seconds=_int("BOT_SHUTOFF_INTERVAL", 5),
        video_category=os.getenv("BOT_VIDEO_CATEGORY", "Category:Videos"),
    )
    return cfg


def require_youtube(cfg: Config) -> tuple[str, str]:
    if not cfg.youtube_api_key:
        raise SystemExit("YOUTUBE_API_KEY is required to fetch videos")
    if not cfg.youtube_channel_id:
        raise SystemExit("YOUTUBE_CHANNEL_ID is required to fetch videos")
    return cfg.youtube_api_key, cfg.youtube_channel_id
