"""Tests for application settings."""

import pytest
from pydantic import ValidationError

from models.config import Settings


class TestSettings:
    """Tests for Settings defaults and validation."""

    def test_defaults(self) -> None:
        s = Settings(_env_file=None)

        assert s.MESSAGE_ABUSE_THRESHOLD == 3
        assert s.ATTACHMENT_MAX_BYTES == 5 * 1024 * 1024
        assert s.RECENT_CONVERSATIONS_LIMIT == 10
        assert s.PUBSUB_TOPIC_PREFIX == "parley"

    def test_pubsub_url_trailing_slash_stripped(self) -> None:
        s = Settings(_env_file=None, PUBSUB_URL=" http://pubsub:80/ ")
        assert s.PUBSUB_URL == "http://pubsub:80"

    def test_negative_threshold_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, MESSAGE_ABUSE_THRESHOLD=-1)

    def test_threshold_from_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("MESSAGE_ABUSE_THRESHOLD", "5")
        assert Settings(_env_file=None).MESSAGE_ABUSE_THRESHOLD == 5
