"""Tests for the password reset token broker."""

from datetime import UTC, datetime, timedelta
from unittest.mock import patch

from sqlalchemy.ext.asyncio import AsyncSession

from account_auth.core.auth import verify_password
from account_auth.models.user import User
from account_auth.repositories.password_reset_token_repository import (
    PasswordResetTokenRepository,
)
from account_auth.services import password_reset
from account_auth.services.password_reset import ResetLinkStatus, ResetOutcome
from tests.conftest import TEST_EMAIL, TEST_PASSWORD

_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
_NEW_PASSWORD = "BrandNewP@ss1"  # nosec B105


async def _complete(db: AsyncSession, token: str, now: datetime) -> ResetOutcome:
    return await password_reset.complete_reset(
        db,
        email=TEST_EMAIL,
        token=token,
        new_password=_NEW_PASSWORD,
        now=now,
    )


class TestRequestReset:
    """Tests for request_reset()."""

    async def test_known_email_gets_token(
        self, db_session: AsyncSession, test_user: User  # noqa: ARG002
    ):
        result = await password_reset.request_reset(db_session, TEST_EMAIL, _NOW)

        assert result.status is ResetLinkStatus.SENT
        assert result.token is not None
        assert len(result.token) == 64

    async def test_only_hash_is_stored(
        self, db_session: AsyncSession, test_user: User  # noqa: ARG002
    ):
        result = await password_reset.request_reset(db_session, TEST_EMAIL, _NOW)

        record = await PasswordResetTokenRepository.get(db_session, email=TEST_EMAIL)
        assert record is not None
        assert record.token != result.token
        assert verify_password(result.token, record.token)

    async def test_unknown_email_has_no_token(self, db_session: AsyncSession):
        result = await password_reset.request_reset(
            db_session, "nobody@example.com", _NOW
        )

        assert result.status is ResetLinkStatus.UNKNOWN_USER
        assert result.token is None

    async def test_email_is_normalized(
        self, db_session: AsyncSession, test_user: User  # noqa: ARG002
    ):
        result = await password_reset.request_reset(
            db_session, "  TEST@Example.com ", _NOW
        )
        assert result.status is ResetLinkStatus.SENT
        assert result.email == TEST_EMAIL

    async def test_second_request_within_window_is_throttled(
        self, db_session: AsyncSession, test_user: User  # noqa: ARG002
    ):
        await password_reset.request_reset(db_session, TEST_EMAIL, _NOW)
        result = await password_reset.request_reset(
            db_session, TEST_EMAIL, _NOW + timedelta(seconds=30)
        )
        assert result.status is ResetLinkStatus.THROTTLED
        assert result.token is None

    async def test_request_after_throttle_replaces_token(
        self, db_session: AsyncSession, test_user: User  # noqa: ARG002
    ):
        first = await password_reset.request_reset(db_session, TEST_EMAIL, _NOW)
        second = await password_reset.request_reset(
            db_session, TEST_EMAIL, _NOW + timedelta(seconds=61)
        )

        assert second.status is ResetLinkStatus.SENT
        # Latest request supersedes the earlier one
        outcome = await _complete(db_session, first.token, _NOW + timedelta(minutes=2))
        assert outcome is ResetOutcome.INVALID_TOKEN
        outcome = await _complete(
            db_session, second.token, _NOW + timedelta(minutes=2)
        )
        assert outcome is ResetOutcome.SUCCESS


class TestRequestResetTiming:
    """Every request_reset() branch pays for one bcrypt hash."""

    async def test_sent_branch_hashes_once(
        self, db_session: AsyncSession, test_user: User  # noqa: ARG002
    ):
        with patch(
            "account_auth.services.password_reset.hash_password",
            wraps=password_reset.hash_password,
        ) as hashed:
            result = await password_reset.request_reset(db_session, TEST_EMAIL, _NOW)

        assert result.status is ResetLinkStatus.SENT
        assert hashed.call_count == 1

    async def test_unknown_email_hashes_once(self, db_session: AsyncSession):
        with patch(
            "account_auth.services.password_reset.hash_password",
            wraps=password_reset.hash_password,
        ) as hashed:
            result = await password_reset.request_reset(
                db_session, "nobody@example.com", _NOW
            )

        assert result.status is ResetLinkStatus.UNKNOWN_USER
        assert hashed.call_count == 1

    async def test_throttled_request_hashes_once(
        self, db_session: AsyncSession, test_user: User  # noqa: ARG002
    ):
        await password_reset.request_reset(db_session, TEST_EMAIL, _NOW)

        with patch(
            "account_auth.services.password_reset.hash_password",
            wraps=password_reset.hash_password,
        ) as hashed:
            result = await password_reset.request_reset(
                db_session, TEST_EMAIL, _NOW + timedelta(seconds=30)
            )

        assert result.status is ResetLinkStatus.THROTTLED
        assert hashed.call_count == 1


class TestCompleteReset:
    """Tests for complete_reset()."""

    async def test_valid_token_resets_password(
        self, db_session: AsyncSession, test_user: User
    ):
        requested = await password_reset.request_reset(db_session, TEST_EMAIL, _NOW)

        outcome = await _complete(
            db_session, requested.token, _NOW + timedelta(minutes=59)
        )

        assert outcome is ResetOutcome.SUCCESS
        await db_session.refresh(test_user)
        assert verify_password(_NEW_PASSWORD, test_user.password_hash)
        assert not verify_password(TEST_PASSWORD, test_user.password_hash)

    async def test_success_rotates_remember_token(
        self, db_session: AsyncSession, test_user: User
    ):
        before = test_user.remember_token
        requested = await password_reset.request_reset(db_session, TEST_EMAIL, _NOW)

        await _complete(db_session, requested.token, _NOW)

        await db_session.refresh(test_user)
        assert test_user.remember_token
        assert test_user.remember_token != before
        assert len(test_user.remember_token) == 60

    async def test_success_fires_event(
        self, db_session: AsyncSession, test_user: User
    ):
        requested = await password_reset.request_reset(db_session, TEST_EMAIL, _NOW)

        with patch("account_auth.services.password_reset.events") as events:
            await _complete(db_session, requested.token, _NOW)

        events.password_reset.assert_called_once_with(test_user.id)

    async def test_token_rejected_at_sixty_minutes(
        self, db_session: AsyncSession, test_user: User  # noqa: ARG002
    ):
        requested = await password_reset.request_reset(db_session, TEST_EMAIL, _NOW)

        outcome = await _complete(
            db_session, requested.token, _NOW + timedelta(minutes=60)
        )

        assert outcome is ResetOutcome.INVALID_TOKEN

    async def test_replay_after_success_is_invalid(
        self, db_session: AsyncSession, test_user: User  # noqa: ARG002
    ):
        requested = await password_reset.request_reset(db_session, TEST_EMAIL, _NOW)

        first = await _complete(db_session, requested.token, _NOW)
        second = await _complete(db_session, requested.token, _NOW)

        assert first is ResetOutcome.SUCCESS
        assert second is ResetOutcome.INVALID_TOKEN

    async def test_wrong_token_is_invalid(
        self, db_session: AsyncSession, test_user: User  # noqa: ARG002
    ):
        await password_reset.request_reset(db_session, TEST_EMAIL, _NOW)

        outcome = await _complete(db_session, "0" * 64, _NOW)

        assert outcome is ResetOutcome.INVALID_TOKEN

    async def test_no_token_requested_is_invalid(
        self, db_session: AsyncSession, test_user: User  # noqa: ARG002
    ):
        outcome = await _complete(db_session, "0" * 64, _NOW)
        assert outcome is ResetOutcome.INVALID_TOKEN

    async def test_unknown_user(self, db_session: AsyncSession):
        outcome = await _complete(db_session, "0" * 64, _NOW)
        assert outcome is ResetOutcome.INVALID_USER


class TestPurgeExpired:
    """Tests for purge_expired()."""

    async def test_removes_only_expired_rows(
        self, db_session: AsyncSession, test_user: User  # noqa: ARG002
    ):
        await PasswordResetTokenRepository.replace(
            db_session,
            email="old@example.com",
            token_hash="x",
            created_at=_NOW - timedelta(hours=2),
        )
        await PasswordResetTokenRepository.replace(
            db_session,
            email="fresh@example.com",
            token_hash="y",
            created_at=_NOW - timedelta(minutes=5),
        )

        deleted = await password_reset.purge_expired(db_session, _NOW)

        assert deleted == 1
        assert (
            await PasswordResetTokenRepository.get(db_session, email="old@example.com")
        ) is None
        assert (
            await PasswordResetTokenRepository.get(
                db_session, email="fresh@example.com"
            )
        ) is not None
