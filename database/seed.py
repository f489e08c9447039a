"""
Provision the well-known demo account on startup (idempotent).
"""

from __future__ import annotations

import logging

from auth.errors import ConflictError
from auth.service import register_user
from config.settings import config
from database.session import async_session_factory

logger = logging.getLogger(__name__)


async def seed_demo_account() -> None:
    async with async_session_factory() as session:
        try:
            user = await register_user(
                session,
                config.demo_email,
                config.demo_password,
                config.demo_first_name,
                config.demo_last_name,
            )
        except ConflictError:
            logger.info("Demo account already exists: %s", config.demo_email)
            return
    logger.info("Demo account created: %s (%s)", user.email, user.user_id)
