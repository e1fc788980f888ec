from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict
from typing import Callable, Iterable

import requests

from .config import load_config
from .logging import configure_logging
from .mediawiki import MediaWikiClient
from .titleinfo import TitleInfo, clean_title

log = logging.getLogger("videobot.get_titleinfo")

PROMPT = "Enter a title to clean: "
EXIT_WORDS = ("exit", "quit", "q")


def format_title_info(info: TitleInfo) -> str:
    return json.dumps(asdict(info), indent=2, ensure_ascii=False)


def interactive_loop(
    namespaces: Iterable[str],
    read: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
) -> None:
    namespace_set = frozenset(namespaces)
    while True:
        try:
            line = read(PROMPT)
        except EOFError:
            break
        title = line.strip()
        if not title:
            continue
        if title.lower() in EXIT_WORDS:
            log.info("exiting")
            break
        write(format_title_info(clean_title(namespace_set, title)))


def main() -> None:
    parser = argparse.ArgumentParser(description="Show how a video title would be sanitized")
    parser.add_argument("-t", "--title", default=None)
    args = parser.parse_args()

    configure_logging()
    cfg = load_config()

    session = requests.Session()
    client = MediaWikiClient(cfg.mw_api_url, cfg.mw_user_agent, session)
    client.login(cfg.mw_username, cfg.mw_password)
    namespaces = client.namespace_names()

    if not args.title:
        interactive_loop(namespaces)
        return
    print(format_title_info(clean_title(namespaces, args.title)))


if __name__ == "__main__":
    main()
