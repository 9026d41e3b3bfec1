"""Tests for resolution value objects."""

from __future__ import annotations

import pytest

from wcoresolver.domain.entities.resolution import (
    EpisodeRef,
    FailureCategory,
    QualityTier,
    ResolutionFailure,
    ResolutionStage,
    ResolutionSuccess,
    VideoQuality,
)


def _quality(tier: QualityTier, url: str = "https://cdn/x.mp4") -> VideoQuality:
    return VideoQuality(
        label=tier.label, url=url, headers={"Referer": "https://h/"}, tier=tier
    )


class TestEpisodeRef:
    def test_absolute_url_kept(self) -> None:
        ref = EpisodeRef("https://other.tv/ep-1", "https://www.wcoflix.tv")
        assert ref.absolute_url == "https://other.tv/ep-1"

    def test_relative_url_joined_to_base(self) -> None:
        ref = EpisodeRef("/ep-1", "https://www.wcoflix.tv/")
        assert ref.absolute_url == "https://www.wcoflix.tv/ep-1"

    def test_relative_url_without_leading_slash(self) -> None:
        ref = EpisodeRef("ep-1", "https://www.wcoflix.tv")
        assert ref.absolute_url == "https://www.wcoflix.tv/ep-1"

    def test_bare_base_domain_gets_https(self) -> None:
        ref = EpisodeRef("/ep-1", "www.wcoflix.tv")
        assert ref.base_url == "https://www.wcoflix.tv"
        assert ref.absolute_url == "https://www.wcoflix.tv/ep-1"

    def test_protocol_relative_page_url(self) -> None:
        ref = EpisodeRef("//www.wcoflix.tv/ep-1", "https://www.wcoflix.tv")
        assert ref.absolute_url == "https://www.wcoflix.tv/ep-1"

    def test_site_referer(self) -> None:
        ref = EpisodeRef("/ep-1", "https://www.wcoflix.tv")
        assert ref.site_referer == "https://www.wcoflix.tv/"


class TestVideoQuality:
    def test_headers_are_read_only(self) -> None:
        q = _quality(QualityTier.SD)
        with pytest.raises(TypeError):
            q.headers["Referer"] = "x"  # type: ignore[index]

    def test_headers_copied_from_input(self) -> None:
        headers = {"Referer": "https://h/"}
        q = VideoQuality(label="SD", url="https://cdn/x.mp4", headers=headers)
        headers["Referer"] = "changed"
        assert q.headers["Referer"] == "https://h/"

    def test_to_dict(self) -> None:
        assert _quality(QualityTier.HD_720P).to_dict() == {
            "label": "720p",
            "url": "https://cdn/x.mp4",
            "headers": {"Referer": "https://h/"},
        }


class TestResolutionSuccess:
    def test_empty_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            ResolutionSuccess(qualities=())

    def test_orders_by_descending_preference(self) -> None:
        outcome = ResolutionSuccess(
            qualities=(
                _quality(QualityTier.SD),
                _quality(QualityTier.FHD_1080P),
                _quality(QualityTier.HD_720P),
            )
        )
        assert outcome.labels == ["1080p", "720p", "SD"]
        assert outcome.best.label == "1080p"
        assert outcome.ok is True

    def test_to_dict(self) -> None:
        outcome = ResolutionSuccess(qualities=(_quality(QualityTier.SD),))
        assert outcome.to_dict()["status"] == "ok"
        assert outcome.to_dict()["qualities"][0]["label"] == "SD"


class TestResolutionFailure:
    def test_not_found_message(self) -> None:
        failure = ResolutionFailure(ResolutionStage.FIND_IFRAME, "no iframe")
        assert failure.ok is False
        assert failure.user_message == "Could not find video source for this episode."

    def test_network_message(self) -> None:
        failure = ResolutionFailure(
            ResolutionStage.FETCH_EPISODE, "boom", FailureCategory.NETWORK
        )
        assert "Network error" in failure.user_message

    @pytest.mark.parametrize(
        ("stage", "category", "expected"),
        [
            (ResolutionStage.FIND_IFRAME, FailureCategory.NOT_FOUND, True),
            (ResolutionStage.FIND_API_PATH, FailureCategory.NOT_FOUND, True),
            (ResolutionStage.FETCH_EPISODE, FailureCategory.NOT_FOUND, False),
            (ResolutionStage.FIND_IFRAME, FailureCategory.NETWORK, False),
            (ResolutionStage.REDIRECT_RESOLVE, FailureCategory.NOT_FOUND, False),
        ],
    )
    def test_is_absence(
        self, stage: ResolutionStage, category: FailureCategory, expected: bool
    ) -> None:
        assert ResolutionFailure(stage, "x", category).is_absence is expected

    def test_to_dict(self) -> None:
        d = ResolutionFailure(ResolutionStage.TIMEOUT, "slow").to_dict()
        assert d["status"] == "failed"
        assert d["stage"] == "Timeout"
        assert d["category"] == "not_found"
        assert d["detail"] == "slow"
