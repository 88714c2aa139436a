"""Search GitHub repositories and describe the best match."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlencode

import requests

SEARCH_API = "https://api.github.com/search/repositories"
PREVIEW_BASE = "https://opengraph.githubassets.com/0/"
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/88.0.4324.182 Safari/537.36"
)


def notnull(text: str, default: str) -> str:
    """``text``, or ``default`` when it is empty."""
    return text if text else default


def search_url(query: str) -> str:
    """The repository search URL for ``query``."""
    return f"{SEARCH_API}?{urlencode({'q': query})}"


def fetch(url: str, headers: Mapping[str, str]) -> bytes:
    """GET ``url``; raises RuntimeError unless the status is 200."""
    response = requests.get(url, headers=dict(headers), timeout=30)
    if response.status_code != 200:
        raise RuntimeError(f"code {response.status_code}")
    return response.content


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def format_repo(repo: Mapping[str, Any]) -> str:
    """A multi-line summary of a repository search item."""
    license_info = repo.get("license") or {}
    license_key = _text(license_info.get("key")).upper()
    return (
        f"{_text(repo.get('full_name'))}\n"
        f"Description: {_text(repo.get('description'))}\n"
        f"Star/Fork/Issue: {_int(repo.get('watchers'))}/{_int(repo.get('forks'))}"
        f"/{_int(repo.get('open_issues'))}\n"
        f"Language: {notnull(_text(repo.get('language')), 'None')}\n"
        f"License: {notnull(license_key, 'None')}\n"
        f"Last pushed: {_text(repo.get('pushed_at'))}\n"
        f"Jump: {_text(repo.get('html_url'))}\n"
    )


def preview_url(repo: Mapping[str, Any]) -> str:
    """The social preview image of a repository."""
    return PREVIEW_BASE + _text(repo.get("full_name"))


def search(query: str) -> dict[str, Any]:
    """The first repository matching ``query``; LookupError when there is none."""
    body = fetch(search_url(query), {"User-Agent": USER_AGENT})
    info = json.loads(body)
    if _int(info.get("total_count")) == 0 or not info.get("items"):
        raise LookupError("没有找到这样的仓库")
    return info["items"][0]