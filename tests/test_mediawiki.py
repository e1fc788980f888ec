import pytest

from videobot.mediawiki import MediaWikiClient, MediaWikiError


class FakeResponse:
    def __init__(self, payload: dict):
        self._payload = payload

    def raise_for_status(self):
        return None

    def json(self):
        return self._payload


class FakeSession:
    def __init__(self, responses: list[dict]):
        self.responses = responses
        self.requests = []
        self.uploaded = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.requests.append(("GET", url, params))
        return FakeResponse(self.responses.pop(0))

    def post(self, url, data=None, files=None, headers=None, timeout=None):
        self.requests.append(("POST", url, data))
        if files:
            self.uploaded.append(files["file"][1])
        return FakeResponse(self.responses.pop(0))


def _client(responses):
    session = FakeSession(responses)
    return MediaWikiClient("https://example.org/api.php", "ua", session), session


def test_login_sets_csrf_token_and_bot_assertion():
    client, session = _client(
        [
            {"query": {"tokens": {"logintoken": "LOGIN"}}},
            {"login": {"result": "Success"}},
            {"query": {"tokens": {"csrftoken": "CSRF"}}},
        ]
    )

    client.login("user", "pass")

    assert client.csrf_token == "CSRF"
    assert [r[0] for r in session.requests] == ["GET", "POST", "GET"]
    assert "assert" not in session.requests[1][2]
    assert session.requests[2][2]["assert"] == "bot"


def test_login_failure_raises():
    client, _ = _client(
        [
            {"query": {"tokens": {"logintoken": "LOGIN"}}},
            {"login": {"result": "Failed"}},
        ]
    )
    with pytest.raises(MediaWikiError):
        client.login("user", "wrong")


def test_request_retries_on_ratelimit(monkeypatch):
    monkeypatch.setattr("videobot.mediawiki.time.sleep", lambda s: None)
    client, session = _client(
        [
            {"error": {"code": "ratelimited", "info": "rate limit"}},
            {"query": {"tokens": {"logintoken": "LOGIN"}}},
        ]
    )

    assert client.get_login_token() == "LOGIN"
    assert len(session.requests) == 2


def test_namespace_names():
    client, _ = _client(
        [
            {
                "query": {
                    "namespaces": {
                        "0": {"id": 0, "name": "", "canonical": ""},
                        "6": {"id": 6, "name": "File", "canonical": "File"},
                        "14": {"id": 14, "name": "Category", "canonical": "Category"},
                    }
                }
            }
        ]
    )
    assert client.namespace_names() == ["", "File", "Category"]


def test_page_exists():
    client, session = _client(
        [
            {"query": {"pages": [{"title": "Show", "missing": True}]}},
            {"query": {"pages": [{"title": "Show", "pageid": 3}]}},
        ]
    )
    assert client.page_exists("Show") is False
    assert client.page_exists("Show") is True
    assert session.requests[0][2]["titles"] == "Show"


def test_page_categories_follows_continuation():
    client, session = _client(
        [
            {
                "query": {"pages": [{"title": "Show", "categories": [{"title": "Category:Videos"}]}]},
                "continue": {"clcontinue": "3|Music"},
            },
            {"query": {"pages": [{"title": "Show", "categories": [{"title": "Category:Music"}]}]}},
        ]
    )
    assert client.page_categories("Show") == ["Category:Videos", "Category:Music"]
    assert session.requests[1][2]["clcontinue"] == "3|Music"


def test_create_page_requires_login():
    client, _ = _client([])
    with pytest.raises(MediaWikiError):
        client.create_page("Show", "text", "summary")


def test_create_page_posts_createonly_edit():
    client, session = _client([{"edit": {"result": "Success", "newrevid": 42}}])
    client.csrf_token = "CSRF"

    assert client.create_page("Show", "text", "summary") == 42
    method, _, data = session.requests[0]
    assert method == "POST"
    assert data["action"] == "edit"
    assert data["createonly"] == 1
    assert data["token"] == "CSRF"


def test_upload_file(tmp_path):
    path = tmp_path / "thumb.jpg"
    path.write_bytes(b"jpeg")
    client, session = _client([{"upload": {"result": "Success", "filename": "Show.jpg"}}])
    client.csrf_token = "CSRF"

    assert client.upload_file(str(path), "Show.jpg", "{{Media thumbnail}}", "upload") == "Show.jpg"
    assert session.requests[0][2]["action"] == "upload"
    assert session.requests[0][2]["filename"] == "Show.jpg"


def test_unread_notification_count():
    client, _ = _client([{"query": {"notifications": {"rawcount": 2, "count": "2"}}}])
    assert client.unread_notification_count() == 2


def test_upload_retry_resends_file_content(tmp_path, monkeypatch):
    monkeypatch.setattr("videobot.mediawiki.time.sleep", lambda s: None)
    path = tmp_path / "thumb.jpg"
    path.write_bytes(b"jpeg-bytes")
    client, session = _client(
        [
            {"error": {"code": "ratelimited", "info": "rate limit"}},
            {"upload": {"result": "Success", "filename": "Show.jpg"}},
        ]
    )
    client.csrf_token = "CSRF"

    client.upload_file(str(path), "Show.jpg", "{{Media thumbnail}}", "upload")

    assert session.uploaded == [b"jpeg-bytes", b"jpeg-bytes"]
