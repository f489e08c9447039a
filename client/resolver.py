"""
SessionResolver: turn one login attempt into one session or one failure.

Strategies run in a fixed order and the first one that applies decides
the outcome:

  1. ``seed_identity_strategy``        the well-known demo account
  2. ``pending_registration_strategy`` a sign-up cached on this client
  3. ``remote_strategy``               plain server login

A strategy returns ``None`` when it does not apply, a ``StrategyOutcome``
when it produced a session, and raises an ``AuthError`` to fail the run.
Strategies never write to the store; the resolver persists the outcome
once the run is ``AUTHENTICATED``.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Sequence

from auth.errors import AuthError, ConflictError, ConnectivityError, PersistenceError, ValidationError
from auth.password import MAX_PASSWORD_BYTES
from client.api import AuthApiClient
from client.models import (
    AccountProfile,
    Credentials,
    PendingLocalRegistration,
    ResolutionResult,
    ResolutionState,
    Session,
)
from client.session_store import SessionStore
from config.settings import config

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

# Server failures after which a cached registration may still sign in locally.
LOCAL_FALLBACK_ERRORS = (ConnectivityError, PersistenceError)


@dataclass(frozen=True)
class SeedIdentity:
    email: str
    password: str
    first_name: str
    last_name: str

    @classmethod
    def from_config(cls) -> "SeedIdentity":
        return cls(
            email=config.demo_email.strip().lower(),
            password=config.demo_password,
            first_name=config.demo_first_name,
            last_name=config.demo_last_name,
        )


@dataclass
class ResolverEnvironment:
    api: AuthApiClient
    store: SessionStore
    seed: SeedIdentity = field(default_factory=SeedIdentity.from_config)


@dataclass
class StrategyOutcome:
    session: Session
    pending_registration: Optional[PendingLocalRegistration] = None


Strategy = Callable[[Credentials, ResolverEnvironment], Awaitable[Optional[StrategyOutcome]]]


# ── Shared steps ───────────────────────────────────────────────────────


async def create_or_fetch(
    api: AuthApiClient,
    credentials: Credentials,
    first_name: str,
    last_name: str,
) -> AccountProfile:
    """
    Register the account; if it already exists, sign in with the same
    credentials to fetch the server-confirmed identity instead.
    """
    try:
        return await api.register_user(
            credentials.email, credentials.password, first_name, last_name
        )
    except ConflictError:
        logger.debug("Account %s already exists, fetching it", credentials.email)
        return await api.create_session(credentials.email, credentials.password)


def _session_from_profile(profile: AccountProfile, display_name: Optional[str] = None) -> Session:
    return Session(
        user_id=profile.id,
        email=profile.email,
        display_name=display_name or profile.display_name,
        token=profile.token,
    )


# ── Strategies ─────────────────────────────────────────────────────────


async def seed_identity_strategy(
    credentials: Credentials, env: ResolverEnvironment
) -> Optional[StrategyOutcome]:
    seed = env.seed
    if credentials.email != seed.email or credentials.password != seed.password:
        return None

    profile = await create_or_fetch(env.api, credentials, seed.first_name, seed.last_name)
    display_name = (
        f"{profile.first_name or seed.first_name} {profile.last_name or seed.last_name}"
    ).strip()
    return StrategyOutcome(session=_session_from_profile(profile, display_name))


async def pending_registration_strategy(
    credentials: Credentials, env: ResolverEnvironment
) -> Optional[StrategyOutcome]:
    pending = env.store.load_pending_registration()
    if pending is None:
        return None
    if pending.email != credentials.email or pending.password != credentials.password:
        return None

    first_name, last_name = pending.split_name()
    try:
        profile = await create_or_fetch(env.api, credentials, first_name, last_name)
    except LOCAL_FALLBACK_ERRORS as exc:
        # Offline usability trade-off: this session is NOT verified by the
        # server and must not be treated as a security boundary.
        user_id = pending.user_id or str(uuid.uuid4())
        logger.warning(
            "Server unavailable (%s); signing in %s from the local registration "
            "without server verification",
            exc.message,
            credentials.email,
        )
        return StrategyOutcome(
            session=Session(
                user_id=user_id,
                email=credentials.email,
                display_name=pending.display_name,
            ),
            pending_registration=pending.model_copy(update={"user_id": user_id}),
        )

    return StrategyOutcome(
        session=_session_from_profile(profile, pending.display_name),
        pending_registration=pending.model_copy(update={"user_id": profile.id}),
    )


async def remote_strategy(
    credentials: Credentials, env: ResolverEnvironment
) -> Optional[StrategyOutcome]:
    profile = await env.api.create_session(credentials.email, credentials.password)
    session = _session_from_profile(profile)
    return StrategyOutcome(
        session=session,
        pending_registration=PendingLocalRegistration(
            email=session.email.strip().lower(),
            password=credentials.password,
            display_name=session.display_name,
            user_id=session.user_id,
        ),
    )


DEFAULT_STRATEGIES: List[Strategy] = [
    seed_identity_strategy,
    pending_registration_strategy,
    remote_strategy,
]


# ── Resolver ───────────────────────────────────────────────────────────


class SessionResolver:
    """
    Client-side login orchestration.

    State goes ``IDLE → RESOLVING → AUTHENTICATED | FAILED`` once per
    ``resolve()`` call.  Runs are sequential within themselves; callers
    guard against duplicate submits.
    """

    def __init__(
        self,
        api: AuthApiClient,
        store: SessionStore,
        *,
        seed: Optional[SeedIdentity] = None,
        strategies: Optional[Sequence[Strategy]] = None,
    ) -> None:
        self.env = ResolverEnvironment(api=api, store=store, seed=seed or SeedIdentity.from_config())
        self.strategies = list(strategies or DEFAULT_STRATEGIES)
        self.state = ResolutionState.IDLE

    async def resolve(self, email: str, password: str) -> ResolutionResult:
        """Run the strategies for one submitted email/password pair."""
        self.state = ResolutionState.RESOLVING

        if not email or not email.strip() or not password:
            return self._fail("Please fill in all fields.")

        credentials = Credentials(email=email.strip().lower(), password=password)

        for strategy in self.strategies:
            name = strategy.__name__
            try:
                outcome = await strategy(credentials, self.env)
            except AuthError as exc:
                logger.info("Login via %s failed for %s: %s", name, credentials.email, exc.message)
                return self._fail(exc.message, name)
            except Exception:
                logger.exception("Unexpected error in %s", name)
                return self._fail("An error occurred. Please try again.", name)

            if outcome is None:
                continue

            # Session last: a failed write leaves no new session cached.
            try:
                if outcome.pending_registration is not None:
                    self.env.store.save_pending_registration(outcome.pending_registration)
                self.env.store.save_session(outcome.session)
            except OSError:
                logger.exception("Could not cache the session from %s", name)
                return self._fail("An error occurred. Please try again.", name)

            self.state = ResolutionState.AUTHENTICATED
            logger.info("Signed in %s via %s (%s)", credentials.email, name, outcome.session.user_id)
            return ResolutionResult(
                state=self.state, session=outcome.session, strategy=name
            )

        return self._fail("Invalid email or password. Please try again.")

    async def sign_up(
        self, email: str, password: str, display_name: str
    ) -> Optional[AccountProfile]:
        """
        Register on the server, or remember the sign-up locally.

        Returns the server profile, or ``None`` when the server could not
        be reached and a ``PendingLocalRegistration`` was stored instead.
        Conflicts and validation failures are raised.
        """
        if not email or not email.strip():
            raise ValidationError("Email is required")
        if not password:
            raise ValidationError("Password is required")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )
        if len(password.encode()) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

        pending = PendingLocalRegistration(
            email=email.strip().lower(),
            password=password,
            display_name=display_name.strip() or "User",
        )
        first_name, last_name = pending.split_name()
        try:
            return await self.env.api.register_user(
                pending.email, password, first_name, last_name
            )
        except LOCAL_FALLBACK_ERRORS as exc:
            logger.warning(
                "Could not confirm sign-up for %s (%s); keeping it locally",
                pending.email,
                exc.message,
            )
            self.env.store.save_pending_registration(pending)
            return None

    async def logout(self) -> None:
        """Drop the cached session. Always succeeds."""
        user_id = self.env.store.current_user_id()
        try:
            await self.env.api.end_session(user_id)
        except AuthError as exc:
            logger.warning("Logout not acknowledged by server: %s", exc.message)
        self.env.store.clear_session()
        self.state = ResolutionState.IDLE

    def _fail(self, message: str, strategy: Optional[str] = None) -> ResolutionResult:
        self.state = ResolutionState.FAILED
        return ResolutionResult(state=self.state, error=message, strategy=strategy)
