"""Tests du décodage des réponses du backend."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from cyclechat.models import AuthResult, Message, User, parse_timestamp


def test_user_from_payload() -> None:
    user = User.from_payload(
        {"id": 3, "username": "alice", "role": "ADMIN", "createdAt": "2024-02-01T10:00:00"}
    )
    assert user == User(id=3, username="alice", role="ADMIN", created_at="2024-02-01T10:00:00")


def test_auth_result_requires_token() -> None:
    with pytest.raises(ValueError):
        AuthResult.from_payload({"accessToken": "", "username": "alice"})


def test_auth_result_defaults_token_type() -> None:
    result = AuthResult.from_payload({"accessToken": "t", "expiresIn": 60})
    assert result.token_type == "Bearer"
    assert result.expires_in == 60


class TestMessage:
    def test_without_author(self) -> None:
        message = Message.from_payload(
            {"id": 1, "content": "hello", "timestamp": "2024-01-01T00:00:00Z"}
        )
        assert message.author is None
        assert message.sent_at is not None
        assert message.sent_at.tzinfo == timezone.utc
        assert message.display_text() == "[00:00] hello"

    def test_with_author(self) -> None:
        message = Message.from_payload(
            {
                "id": 2,
                "content": "salut",
                "timestamp": "2024-01-01T09:30:00",
                "author": {"id": 1, "username": "testuser", "role": "USER"},
            }
        )
        assert message.author is not None
        assert message.author.username == "testuser"
        assert message.display_text() == "[09:30] testuser : salut"

    def test_unreadable_timestamp(self) -> None:
        message = Message(id=1, content="x", timestamp="hier")
        assert message.sent_at is None
        assert message.display_text() == "x"

    def test_missing_field(self) -> None:
        with pytest.raises(KeyError):
            Message.from_payload({"id": 1, "content": "x"})


class TestParseTimestamp:
    @pytest.mark.parametrize(
        "value, microsecond",
        [
            ("2024-01-01T09:30:00.1", 100000),
            ("2024-01-01T09:30:00.12345", 123450),
            ("2024-01-01T09:30:00.123456789", 123456),
            ("2024-01-01T09:30:00", 0),
        ],
    )
    def test_any_fraction_length(self, value: str, microsecond: int) -> None:
        parsed = parse_timestamp(value)
        assert parsed == datetime(2024, 1, 1, 9, 30, 0, microsecond)

    def test_utc_suffix(self) -> None:
        parsed = parse_timestamp("2024-01-01T09:30:00.5Z")
        assert parsed.tzinfo == timezone.utc
        assert parsed.microsecond == 500000

    def test_odd_fraction_in_display(self) -> None:
        message = Message(id=1, content="salut", timestamp="2024-01-01T09:30:00.1234")
        assert message.display_text().startswith("[09:30]")
