"""Tests for the category attachment policy."""

import pytest
from types import SimpleNamespace
from mediahub.core.exceptions import PolicyViolationError
from mediahub.services import attachment_policy
from mediahub.services.attachment_policy import (
    PolicyOk,
    PolicyViolation,
    RULE_EMPTY,
    RULE_FIRST_ATTACHMENT,
    evaluate,
    enforce,
    media_affinity,
)


def category(name, slug=None):
    return SimpleNamespace(name=name, slug=slug or name.lower())


def files(*mime_types):
    return [SimpleNamespace(mime_type=m) for m in mime_types]


@pytest.mark.unit
class TestMediaAffinity:
    """Test detection of audio/video categories."""

    def test_no_affinity(self):
        """Plain categories have no media affinity."""
        assert media_affinity(category("News")) is None

    def test_video_by_name(self):
        """'video' anywhere in the name, any case."""
        assert media_affinity(category("Music VIDEOS", "music")) == "video"

    def test_audio_by_slug(self):
        """The slug is searched too."""
        assert media_affinity(category("Podcasts", "audio-shows")) == "audio"

    def test_audio_checked_first(self):
        """A category mentioning both is treated as audio."""
        assert media_affinity(category("Audio and Video")) == "audio"


@pytest.mark.unit
class TestEvaluate:
    """Test policy evaluation."""

    def test_no_affinity_always_ok(self):
        """Categories without affinity accept anything, including nothing."""
        assert isinstance(evaluate(category("News"), []), PolicyOk)
        assert isinstance(evaluate(category("News"), files("image/png")), PolicyOk)

    def test_video_requires_attachments(self):
        """An empty list violates the video policy."""
        result = evaluate(category("Videos"), [])
        assert isinstance(result, PolicyViolation)
        assert result.rule == RULE_EMPTY
        assert "video" in result.reason

    def test_video_first_attachment_must_be_video(self):
        """A leading image fails even when a video follows."""
        result = evaluate(category("Videos"), files("image/png", "video/mp4"))
        assert isinstance(result, PolicyViolation)
        assert result.rule == RULE_FIRST_ATTACHMENT
        assert "video" in result.reason

    def test_video_first_attachment_ok(self):
        """A leading video passes; later attachments can be anything."""
        result = evaluate(category("Videos"), files("video/mp4", "image/png"))
        assert result.ok
        assert result.family == "video"

    def test_audio_policy(self):
        """Audio mirrors the video rules."""
        assert not evaluate(category("Audio"), files("video/mp4")).ok
        assert evaluate(category("Audio"), files("audio/mpeg")).ok

    def test_mime_type_case_insensitive(self):
        """MIME types are compared case-insensitively."""
        assert evaluate(category("Audio"), files("Audio/MPEG")).ok

    def test_accepts_mime_strings(self):
        """Bare MIME type strings work as attachments."""
        assert evaluate(category("Videos"), ["video/webm"]).ok


@pytest.mark.unit
class TestEnforce:
    """Test the raising variant."""

    def test_raises_policy_violation(self):
        """Violations surface as PolicyViolationError carrying the rule."""
        with pytest.raises(PolicyViolationError) as exc_info:
            enforce(category("Videos"), files("image/png"))

        error = exc_info.value
        assert error.rule == RULE_FIRST_ATTACHMENT
        assert error.code == 400
        assert error.to_dict()["field"] == "attachments"
        assert error.to_dict()["rule"] == RULE_FIRST_ATTACHMENT

    def test_returns_ok(self):
        """Passing lists return the PolicyOk result."""
        assert isinstance(attachment_policy.enforce(category("News"), []), PolicyOk)
