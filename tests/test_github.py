import json
from unittest import mock
from urllib.parse import parse_qs, urlsplit

import pytest

from groupbot.github import (
    PREVIEW_BASE,
    SEARCH_API,
    fetch,
    format_repo,
    notnull,
    preview_url,
    search,
    search_url,
)

REPO = {
    "full_name": "someone/project",
    "description": "A project",
    "watchers": 12,
    "forks": 3,
    "open_issues": 4,
    "language": "Go",
    "license": {"key": "mit"},
    "pushed_at": "2022-05-01T00:00:00Z",
    "html_url": "https://example.com/someone/project",
}


def _response(status, payload):
    response = mock.Mock()
    response.status_code = status
    response.content = json.dumps(payload).encode()
    return response


def test_notnull():
    assert notnull("", "None") == "None"
    assert notnull("Go", "None") == "Go"


def test_search_url_round_trip():
    url = search_url("zero bot&x")
    parts = urlsplit(url)
    assert url.startswith(SEARCH_API + "?")
    assert parse_qs(parts.query) == {"q": ["zero bot&x"]}


def test_format_repo_lines():
    lines = format_repo(REPO).splitlines()
    assert lines[0] == "someone/project"
    assert lines[1] == "Description: A project"
    assert lines[2] == "Star/Fork/Issue: 12/3/4"
    assert lines[3] == "Language: Go"
    assert lines[4] == "License: MIT"
    assert lines[6] == "Jump: https://example.com/someone/project"


def test_format_repo_missing_fields_default_to_none():
    text = format_repo({"full_name": "a/b", "license": None, "language": None})
    assert "Language: None\n" in text
    assert "License: None\n" in text
    assert "Star/Fork/Issue: 0/0/0\n" in text


def test_preview_url():
    assert preview_url(REPO) == PREVIEW_BASE + "someone/project"


def test_fetch_raises_on_bad_status():
    with mock.patch("groupbot.github.requests.get", return_value=_response(403, {})):
        with pytest.raises(RuntimeError, match="code 403"):
            fetch("https://example.com", {})


def test_search_returns_first_item():
    payload = {"total_count": 2, "items": [REPO, {"full_name": "other/x"}]}
    with mock.patch("groupbot.github.requests.get", return_value=_response(200, payload)) as get:
        repo = search("project")
    assert repo == REPO
    assert get.call_args.args[0] == search_url("project")


def test_search_without_results():
    payload = {"total_count": 0, "items": []}
    with mock.patch("groupbot.github.requests.get", return_value=_response(200, payload)):
        with pytest.raises(LookupError):
            search("nothing")