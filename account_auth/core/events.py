"""Account lifecycle events.

Each function is the single emission point for its event. They log a
structured record today; listeners (welcome mail, audit trail) hook in
here.
"""

import uuid

import structlog

logger = structlog.get_logger()


def email_verified(user_id: uuid.UUID) -> None:
    """A user proved ownership of their email address."""
    logger.info("account.email_verified", user_id=str(user_id))


def password_reset(user_id: uuid.UUID) -> None:
    """A user replaced their password through the reset flow."""
    logger.info("account.password_reset", user_id=str(user_id))


def registered(user_id: uuid.UUID) -> None:
    """A new account was created."""
    logger.info("account.registered", user_id=str(user_id))
