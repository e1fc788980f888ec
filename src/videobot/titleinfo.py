from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable


FALSE_SUBPAGE_REASON = "false subpage"
PIPE_REASON = "Cannot use pipe characters in titles"
HASH_REASON = "Cannot use # in titles"
BRACKETS_REASON = "Cannot use square brackets in titles"

HTML_ENTITIES = {
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&#39;": "'",
    "&quot;": '"',
}
HTML_ENTITY_RE = re.compile("|".join(re.escape(entity) for entity in HTML_ENTITIES))
CURLY_SINGLE_RE = re.compile("[‘’]")
CURLY_DOUBLE_RE = re.compile("[“”]")
COLON_PREFIX_RE = re.compile(r"^([^:]+): *(.*)")
COLON_RE = re.compile(r": *")


@dataclass(frozen=True)
class TitleInfo:
    title: str
    media_title: str
    restricted_title_reasons: tuple[str, ...]
    original_title: str

    @classmethod
    def empty(cls) -> "TitleInfo":
        return cls(title="", media_title="", restricted_title_reasons=(), original_title="")


def unescape_html(text: str) -> str:
    return HTML_ENTITY_RE.sub(lambda m: HTML_ENTITIES[m.group(0)], text)


def namespace_reason(prefix: str) -> str:
    return (
        f"actual name begins with '{prefix}:', putting it in the wrong namespace; "
        "displaytitle used"
    )


def clean_title(namespaces: Iterable[str], raw_title: str | None) -> TitleInfo:
    """Map a raw video title to the wiki page title it should be created under.

    Each rule that has to alter the title records a reason and resets
    ``original_title`` to the title as it stood before that rule, so the last
    rule to fire decides the display form. ``media_title`` is derived
    separately for the thumbnail file page.
    """
    if not raw_title:
        return TitleInfo.empty()

    reasons: list[str] = []
    title = unescape_html(raw_title)
    title = CURLY_SINGLE_RE.sub("'", title)
    title = CURLY_DOUBLE_RE.sub('"', title)
    original_title = title

    if "|" in title:
        original_title = title.replace("|", "{{!}}")
        title = title.replace("|", "-")
        reasons.append(PIPE_REASON)
    if "#" in title:
        original_title = title
        title = title.replace("#", "")
        reasons.append(HASH_REASON)
    if "[" in title or "]" in title:
        original_title = title
        title = title.replace("[", "(").replace("]", ")")
        reasons.append(BRACKETS_REASON)
    if "/" in title:
        reasons.append(FALSE_SUBPAGE_REASON)
    # display form only; title keeps its leading case
    if title[:1] != title[:1].upper():
        original_title = original_title or title

    match = COLON_PREFIX_RE.match(title)
    if match:
        media_title = COLON_RE.sub("-", title)
        prefix = match.group(1)
        if prefix in set(namespaces):
            original_title = title
            title = f"{prefix} - {match.group(2)}"
            reasons.append(namespace_reason(prefix))
    else:
        media_title = title
    media_title = media_title[:1].upper() + media_title[1:].replace("/", "-")

    return TitleInfo(
        title=title,
        media_title=media_title,
        restricted_title_reasons=tuple(reasons),
        original_title=original_title,
    )


def find_duplicates(
    namespaces: Iterable[str],
    entries: Iterable[tuple[str, str | None]],
    cache: dict[str, TitleInfo] | None = None,
) -> dict[str, list[str]]:
    """Group entry ids by sanitized title, in first-seen order.

    Singleton groups are kept. ``cache`` maps ids to already computed
    ``TitleInfo`` values and is filled in for ids not seen before; entries
    without an id bypass it.
    """
    namespace_set = frozenset(namespaces)
    groups: dict[str, list[str]] = {}
    for entry_id, raw_title in entries:
        use_cache = cache is not None and bool(entry_id)
        info = cache.get(entry_id) if use_cache else None
        if info is None:
            info = clean_title(namespace_set, raw_title)
            if use_cache:
                cache[entry_id] = info
        if not info.title:
            continue
        groups.setdefault(info.title, []).append(entry_id)
    return groups


def duplicate_groups(groups: dict[str, list[str]]) -> dict[str, list[str]]:
    return {title: ids for title, ids in groups.items() if len(ids) > 1}
