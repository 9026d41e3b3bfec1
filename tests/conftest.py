"""Shared test fixtures for the wcoresolver test suite."""

from __future__ import annotations

import json
from dataclasses import dataclass

import pytest

from wcoresolver.domain.entities.resolution import EpisodeRef


@dataclass(frozen=True)
class FakeSite:
    """URLs and markup of a minimal origin: episode page -> iframe -> token API."""

    base_domain: str = "https://www.wcoflix.tv"
    iframe_host: str = "embed.example"
    api_path: str = "/inc/embed/getvidlink.php?v=ep1&embed=neptun"

    @property
    def episode_url(self) -> str:
        return f"{self.base_domain}/some-show-episode-1"

    @property
    def iframe_url(self) -> str:
        return f"https://{self.iframe_host}/inc/embed/video-js.php?file=ep1"

    @property
    def api_url(self) -> str:
        return f"https://{self.iframe_host}{self.api_path}"

    @property
    def video_referer(self) -> str:
        return f"https://{self.iframe_host}/"

    def episode_html(self, iframe_src: str | None = None) -> str:
        if iframe_src is None:
            iframe_src = f"//{self.iframe_host}/inc/embed/video-js.php?file=ep1"
        return f"""
        <html><body>
          <div class="ddmcc"><h1>Some Show Episode 1</h1></div>
          <div class="iframe-16x9">
            <iframe src="{iframe_src}" width="530" height="440"></iframe>
          </div>
        </body></html>
        """

    def iframe_html(self, api_path: str | None = None) -> str:
        return f"""
        <html><head>
          <script>
            $.getJSON("{api_path or self.api_path}", function(response){{
              var vsd = response.enc;
              var server = response.server;
            }});
          </script>
        </head><body><div id="video-js"></div></body></html>
        """

    @staticmethod
    def token_body(**fields: str) -> str:
        return json.dumps(fields)


@pytest.fixture()
def site() -> FakeSite:
    return FakeSite()


@pytest.fixture()
def episode_ref(site: FakeSite) -> EpisodeRef:
    return EpisodeRef(page_url=site.episode_url, base_domain=site.base_domain)
