"""Tests for signed email verification links and the confirm flow."""

import hashlib
import uuid
from datetime import UTC, datetime, timedelta
from unittest.mock import patch
from urllib.parse import parse_qs, urlsplit

from hypothesis import given, settings
from hypothesis import strategies as st
from sqlalchemy.ext.asyncio import AsyncSession

from account_auth.core.config import settings as app_settings
from account_auth.models.user import User
from account_auth.repositories.user_repository import UserRepository
from account_auth.services import email_verification, signed_links
from account_auth.services.signed_links import VerificationOutcome

_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


async def _verify(db: AsyncSession, link, now: datetime = _NOW):
    return await signed_links.verify(
        db,
        user_id=link.user_id,
        email_hash=link.email_hash,
        expires=link.expires,
        signature=link.signature,
        now=now,
    )


class TestLinkConstruction:
    """Tests for generate() and build_url()."""

    def test_hash_is_sha1_of_email(self):
        expected = hashlib.sha1(b"test@example.com").hexdigest()  # nosec B324
        assert signed_links.email_digest("Test@Example.com ") == expected

    async def test_expires_after_configured_window(self, test_user: User):
        link = signed_links.generate(test_user, _NOW)
        window = timedelta(minutes=app_settings.verification_link_ttl_minutes)
        assert link.expires == int((_NOW + window).timestamp())

    async def test_url_shape(self, test_user: User):
        link = signed_links.generate(test_user, _NOW)
        url = urlsplit(signed_links.build_url(link))

        assert url.path == (
            f"{app_settings.api_prefix}/email/verify/{test_user.id}/"
            f"{link.email_hash}"
        )
        query = parse_qs(url.query)
        assert query["expires"] == [str(link.expires)]
        assert query["signature"] == [link.signature]

    @given(
        st.uuids(),
        st.text(alphabet="0123456789abcdef", min_size=40, max_size=40),
        st.integers(min_value=0, max_value=2**40),
    )
    @settings(max_examples=200)
    def test_signature_binds_expiry(
        self, user_id: uuid.UUID, email_hash: str, expires: int
    ) -> None:
        """Changing the expiry always changes the signature."""
        key = "k" * 32
        assert signed_links.sign(user_id, email_hash, expires, key) != (
            signed_links.sign(user_id, email_hash, expires + 1, key)
        )


class TestVerify:
    """Tests for verify() outcome ordering."""

    async def test_fresh_link_verifies(self, db_session: AsyncSession, test_user: User):
        link = signed_links.generate(test_user, _NOW)
        outcome, user = await _verify(db_session, link)
        assert outcome is VerificationOutcome.VERIFIED
        assert user is not None and user.id == test_user.id

    async def test_unknown_user(self, db_session: AsyncSession, test_user: User):
        link = signed_links.generate(test_user, _NOW)
        outcome, user = await signed_links.verify(
            db_session,
            user_id=uuid.uuid4(),
            email_hash=link.email_hash,
            expires=link.expires,
            signature=link.signature,
            now=_NOW,
        )
        assert outcome is VerificationOutcome.USER_NOT_FOUND
        assert user is None

    async def test_tampered_signature(self, db_session: AsyncSession, test_user: User):
        link = signed_links.generate(test_user, _NOW)
        outcome, _ = await signed_links.verify(
            db_session,
            user_id=link.user_id,
            email_hash=link.email_hash,
            expires=link.expires,
            signature="0" * 64,
            now=_NOW,
        )
        assert outcome is VerificationOutcome.MISMATCH

    async def test_extended_expiry_breaks_signature(
        self, db_session: AsyncSession, test_user: User
    ):
        link = signed_links.generate(test_user, _NOW)
        outcome, _ = await signed_links.verify(
            db_session,
            user_id=link.user_id,
            email_hash=link.email_hash,
            expires=link.expires + 3600,
            signature=link.signature,
            now=_NOW,
        )
        assert outcome is VerificationOutcome.MISMATCH

    async def test_link_void_after_email_change(
        self, db_session: AsyncSession, test_user: User
    ):
        """A link bound to the old address fails before it expires."""
        link = signed_links.generate(test_user, _NOW)
        test_user.email = "changed@example.com"
        await db_session.flush()

        outcome, _ = await _verify(db_session, link, _NOW + timedelta(minutes=1))

        assert outcome is VerificationOutcome.MISMATCH

    async def test_expired_at_exact_expiry(
        self, db_session: AsyncSession, test_user: User
    ):
        link = signed_links.generate(test_user, _NOW)
        at_expiry = datetime.fromtimestamp(link.expires, tz=UTC)

        outcome, _ = await _verify(db_session, link, at_expiry)

        assert outcome is VerificationOutcome.EXPIRED

    async def test_valid_just_before_expiry(
        self, db_session: AsyncSession, test_user: User
    ):
        link = signed_links.generate(test_user, _NOW)
        before = datetime.fromtimestamp(link.expires - 1, tz=UTC)

        outcome, _ = await _verify(db_session, link, before)

        assert outcome is VerificationOutcome.VERIFIED

    async def test_already_verified_wins_over_mismatch(
        self, db_session: AsyncSession, test_user: User
    ):
        link = signed_links.generate(test_user, _NOW)
        await UserRepository.update(db_session, test_user.id, email_verified=_NOW)

        outcome, _ = await signed_links.verify(
            db_session,
            user_id=link.user_id,
            email_hash="bogus",
            expires=0,
            signature="bogus",
            now=_NOW,
        )

        assert outcome is VerificationOutcome.ALREADY_VERIFIED


class TestConfirm:
    """Tests for email_verification.confirm()."""

    async def _confirm(self, db: AsyncSession, link, now: datetime = _NOW):
        return await email_verification.confirm(
            db,
            user_id=link.user_id,
            email_hash=link.email_hash,
            expires=link.expires,
            signature=link.signature,
            now=now,
        )

    async def test_marks_email_verified(self, db_session: AsyncSession, test_user: User):
        link = signed_links.generate(test_user, _NOW)

        outcome, _ = await self._confirm(db_session, link)

        assert outcome is VerificationOutcome.VERIFIED
        await db_session.refresh(test_user)
        assert test_user.has_verified_email

    async def test_second_visit_is_already_verified_without_event(
        self, db_session: AsyncSession, test_user: User
    ):
        link = signed_links.generate(test_user, _NOW)

        with patch("account_auth.services.email_verification.events") as events:
            first, _ = await self._confirm(db_session, link)
            second, _ = await self._confirm(db_session, link)

        assert first is VerificationOutcome.VERIFIED
        assert second is VerificationOutcome.ALREADY_VERIFIED
        events.email_verified.assert_called_once_with(test_user.id)

    async def test_lost_race_reports_already_verified(
        self, db_session: AsyncSession, test_user: User
    ):
        """If another request set the timestamp first, no event fires."""
        link = signed_links.generate(test_user, _NOW)

        with (
            patch.object(
                UserRepository, "mark_email_verified", return_value=False
            ),
            patch("account_auth.services.email_verification.events") as events,
        ):
            outcome, _ = await self._confirm(db_session, link)

        assert outcome is VerificationOutcome.ALREADY_VERIFIED
        events.email_verified.assert_not_called()

    async def test_expired_link_does_not_mark(
        self, db_session: AsyncSession, test_user: User
    ):
        link = signed_links.generate(test_user, _NOW)

        outcome, _ = await self._confirm(db_session, link, _NOW + timedelta(hours=2))

        assert outcome is VerificationOutcome.EXPIRED
        await db_session.refresh(test_user)
        assert not test_user.has_verified_email
