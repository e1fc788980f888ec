from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any

import requests


log = logging.getLogger("videobot.mediawiki")


class MediaWikiError(RuntimeError):
    pass


@dataclass
class MediaWikiClient:
    api_url: str
    user_agent: str
    session: requests.Session

    csrf_token: str | None = None
    default_params: dict[str, Any] = field(default_factory=dict)

    def _request(
        self,
        method: str,
        params: dict[str, Any],
        files: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        params = {"format": "json", "formatversion": 2, **self.default_params, **params}
        headers = {"User-Agent": self.user_agent}
        backoff = 1
        badtoken_retry = False
        for attempt in range(5):
            if method == "GET":
                resp = self.session.get(self.api_url, params=params, headers=headers, timeout=30)
            else:
                resp = self.session.post(
                    self.api_url, data=params, files=files, headers=headers, timeout=30
                )
            resp.raise_for_status()
            data = resp.json()
            if "error" not in data:
                return data
            error = data["error"]
            code = str(error.get("code", ""))
            info = str(error.get("info", ""))
            if code == "badtoken" and method == "POST" and "token" in params and not badtoken_retry:
                badtoken_retry = True
                self.csrf_token = self.get_csrf_token()
                params = {**params, "token": self.csrf_token}
                continue
            if code == "ratelimited" or "rate limit" in info.lower():
                if attempt < 4:
                    log.warning("rate limited; backing off %ss", backoff)
                    time.sleep(backoff)
                    backoff *= 2
                    continue
            raise MediaWikiError(f"MediaWiki API error: {error}")
        raise MediaWikiError("MediaWiki API error: exceeded retry attempts")

    def get_login_token(self) -> str:
        data = self._request("GET", {"action": "query", "meta": "tokens", "type": "login"})
        token = data["query"]["tokens"]["logintoken"]
        if not token:
            raise MediaWikiError("login token missing")
        return token

    def login(self, username: str, password: str) -> None:
        token = self.get_login_token()
        data = self._request(
            "POST",
            {
                "action": "login",
                "lgname": username,
                "lgpassword": password,
                "lgtoken": token,
            },
        )
        result = data.get("login", {}).get("result")
        if result != "Success":
            raise MediaWikiError(f"login failed: {result}")
        self.default_params = {"assert": "bot"}
        self.csrf_token = self.get_csrf_token()
        log.info("logged in as %s", username)

    def get_csrf_token(self) -> str:
        data = self._request("GET", {"action": "query", "meta": "tokens"})
        token = data["query"]["tokens"]["csrftoken"]
        if not token:
            raise MediaWikiError("csrf token missing")
        return token

    def namespace_names(self) -> list[str]:
        data = self._request(
            "GET", {"action": "query", "meta": "siteinfo", "siprop": "namespaces"}
        )
        namespaces = data["query"]["namespaces"]
        return [str(ns.get("name", "")) for ns in namespaces.values()]

    def page_exists(self, title: str) -> bool:
        data = self._request("GET", {"action": "query", "titles": title})
        pages = data.get("query", {}).get("pages") or []
        if not pages:
            return False
        page = pages[0]
        return not page.get("missing") and not page.get("invalid")

    def page_categories(self, title: str) -> list[str]:
        categories: list[str] = []
        clcontinue = None
        while True:
            params: dict[str, Any] = {
                "action": "query",
                "prop": "categories",
                "titles": title,
                "cllimit": "max",
            }
            if clcontinue:
                params["clcontinue"] = clcontinue
            data = self._request("GET", params)
            for page in data.get("query", {}).get("pages", []):
                for cat in page.get("categories") or []:
                    name = cat.get("title")
                    if name:
                        categories.append(name)
            clcontinue = data.get("continue", {}).get("clcontinue")
            if not clcontinue:
                break
        return categories

    def create_page(self, title: str, text: str, summary: str, bot: bool = True) -> int:
        if not self.csrf_token:
            raise MediaWikiError("csrf token missing; call login() first")
        data = self._request(
            "POST",
            {
                "action": "edit",
                "title": title,
                "text": text,
                "summary": summary,
                "createonly": 1,
                "token": self.csrf_token,
                "bot": 1 if bot else 0,
            },
        )
        edit = data.get("edit", {})
        if edit.get("result") != "Success":
            raise MediaWikiError(f"edit failed: {edit}")
        newrevid = edit.get("newrevid")
        if newrevid is None:
            return 0
        return int(newrevid)

    def upload_file(self, path: str, filename: str, text: str, comment: str) -> str:
        if not self.csrf_token:
            raise MediaWikiError("csrf token missing; call login() first")
        with open(path, "rb") as fh:
            content = fh.read()
        # retried requests must resend the full body
        data = self._request(
            "POST",
            {
                "action": "upload",
                "filename": filename,
                "text": text,
                "comment": comment,
                "token": self.csrf_token,
            },
            files={"file": (filename, content, "application/octet-stream")},
        )
        upload = data.get("upload", {})
        if upload.get("result") != "Success":
            raise MediaWikiError(f"upload failed: {upload}")
        return str(upload.get("filename") or filename)

    def unread_notification_count(self) -> int:
        data = self._request(
            "GET",
            {
                "action": "query",
                "meta": "notifications",
                "notprop": "count",
                "notsections": "alert|message",
            },
        )
        return int(data.get("query", {}).get("notifications", {}).get("rawcount", 0))
