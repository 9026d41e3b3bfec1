"""Pure extraction helpers over episode, iframe and player markup.

Every function takes raw HTML/JS text and returns the located value or
``None``. Nothing here raises on malformed markup and nothing touches the
network: absence of a match is a normal branch condition for the caller,
and ``None`` is always distinguishable from an empty string.
"""

from __future__ import annotations

import re
from typing import Mapping
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

# Episode pages embed the player in one of these two containers.
_IFRAME_SELECTORS = ("div.iframe-16x9 iframe", "iframe#cizgi-js-0")

# The extension must end the URL path; a query or fragment may follow.
_MEDIA_URL_RE = re.compile(
    r"""["'](https?://[^"'?#\s]+\.(?:mp4|m3u8|flv)(?:[?#][^"']*)?)["']"""
)
_PLAYER_FILE_RE = re.compile(r"""(?<![\w$])["']?file["']?\s*:\s*["']([^"']+)["']""")
_GET_JSON_RE = re.compile(r"""\$\.getJSON\(\s*["']([^"']+)["']""")


def parse_html(html: str) -> BeautifulSoup:
    """Parse an HTML string into a BeautifulSoup tree (lxml parser)."""
    return BeautifulSoup(html or "", "lxml")


def normalize_url(src: str, base_url: str | None = None) -> str:
    """Make an extracted ``src`` absolute.

    Protocol-relative values (``//host/path``) become ``https://host/path``.
    Path-relative values are joined against *base_url* when one is given.
    """
    src = src.strip()
    if src.startswith("//"):
        return f"https:{src}"
    if src.startswith(("http://", "https://")):
        return src
    if base_url:
        return urljoin(base_url, src)
    return src


def _first_attr(soup: BeautifulSoup, selector: str, attr: str) -> str | None:
    for tag in soup.select(selector):
        value = tag.get(attr)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def find_iframe_src(html: str, base_url: str | None = None) -> str | None:
    """Locate the embedded player iframe URL.

    Tries the 16:9 player container first, then the legacy
    ``iframe#cizgi-js-0`` element.
    """
    soup = parse_html(html)
    for selector in _IFRAME_SELECTORS:
        src = _first_attr(soup, selector, "src")
        if src:
            return normalize_url(src, base_url)
    return None


def find_direct_video_src(html: str, base_url: str | None = None) -> str | None:
    """Return the ``<video>`` source: ``<source src>`` child first, then ``src``."""
    soup = parse_html(html)
    src = _first_attr(soup, "video source", "src") or _first_attr(
        soup, "video", "src"
    )
    if src is None:
        return None
    return normalize_url(src, base_url)


def find_script_srcs(html: str, base_url: str | None = None) -> list[str]:
    """List the ``src`` URLs of referenced ``<script>`` elements in document order."""
    soup = parse_html(html)
    srcs: list[str] = []
    for script in soup.find_all("script"):
        if not isinstance(script, Tag):
            continue
        src = script.get("src")
        if isinstance(src, str) and src.strip():
            srcs.append(normalize_url(src, base_url))
    return srcs


def _match_script_text(text: str) -> str | None:
    m = _MEDIA_URL_RE.search(text)
    if m:
        return m.group(1)
    m = _PLAYER_FILE_RE.search(text)
    if m:
        return m.group(1)
    return None


def find_scripted_video_url(
    html: str,
    script_bodies: Mapping[str, str] | None = None,
    base_url: str | None = None,
) -> str | None:
    """Search script text for a media URL or a player ``file: "..."`` entry.

    Scripts are scanned in document order. Inline scripts contribute their
    own text; a referenced script contributes its body when the caller
    supplied it in *script_bodies* (keyed by the normalized ``src``).
    Within one script a quoted ``.mp4``/``.m3u8``/``.flv`` URL wins over a
    ``file:`` assignment.
    """
    soup = parse_html(html)
    bodies = script_bodies or {}
    for script in soup.find_all("script"):
        if not isinstance(script, Tag):
            continue
        src = script.get("src")
        if isinstance(src, str) and src.strip():
            text = bodies.get(normalize_url(src, base_url), "")
        else:
            text = script.string or ""
        if not text:
            continue
        found = _match_script_text(str(text))
        if found:
            return found
    return None


def find_video_source(html: str, base_url: str | None = None) -> str | None:
    """Direct ``<video>`` source, falling back to the scripted player config."""
    return find_direct_video_src(html, base_url) or find_scripted_video_url(
        html, base_url=base_url
    )


def find_api_call_path(html: str) -> str | None:
    """Extract the first argument of the loader's ``$.getJSON("...")`` call.

    The value is the token endpoint path relative to the iframe host,
    e.g. ``/inc/embed/getvidlink.php?v=...``.
    """
    m = _GET_JSON_RE.search(html or "")
    if m:
        return m.group(1)
    return None
