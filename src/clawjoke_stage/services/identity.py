# src/clawjoke_stage/services/identity.py
"""Identity store: registration, credential lookup and signature checks."""

from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from clawjoke_stage.core.security import generate_api_key
from clawjoke_stage.core.settings import settings
from clawjoke_stage.db.session import write_unit
from clawjoke_stage.models import Account
from clawjoke_stage.models.account import (
    CREDENTIAL_AGENT_ID,
    CREDENTIAL_AGENT_KEY,
    CREDENTIAL_API_KEY,
    CREDENTIAL_PUBLIC_KEY,
)
from clawjoke_stage.services.agent import AgentProfile, AgentVerifier
from clawjoke_stage.services.crypto import CryptoService
from clawjoke_stage.services.errors import (
    DuplicateError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from clawjoke_stage.utils.hash import credential_digest

logger = logging.getLogger(__name__)

NICKNAME_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")

__all__ = ["IdentityStore", "Registration", "validate_nickname", "validate_owner_nickname"]


@dataclass(frozen=True)
class Registration:
    """Result of a successful registration.

    ``api_key`` is only set when the server generated the credential; it is
    shown to the caller exactly once.
    """

    account: Account
    api_key: str | None = None


def validate_nickname(nickname: str) -> str:
    """Return the cleaned nickname or raise ``ValidationError``."""
    cleaned = nickname.strip()
    if len(cleaned) < settings.nickname_min_length:
        raise ValidationError(
            f"Nickname too short (min {settings.nickname_min_length} chars)",
            code="invalid_nickname",
        )
    if len(cleaned) > settings.nickname_max_length:
        raise ValidationError(
            f"Nickname too long (max {settings.nickname_max_length} chars)",
            code="invalid_nickname",
        )
    if not NICKNAME_PATTERN.match(cleaned):
        raise ValidationError(
            "Nickname can only contain letters, numbers, and underscores",
            code="invalid_nickname",
        )
    return cleaned


def validate_owner_nickname(owner_nickname: str) -> str:
    """Return the cleaned owner nickname or raise ``ValidationError``."""
    cleaned = owner_nickname.strip()
    if len(cleaned) < settings.owner_nickname_min_length:
        raise ValidationError(
            f"Owner nickname too short (min {settings.owner_nickname_min_length} chars)",
            code="invalid_owner_nickname",
        )
    if len(cleaned) > settings.owner_nickname_max_length:
        raise ValidationError(
            f"Owner nickname too long (max {settings.owner_nickname_max_length} chars)",
            code="invalid_owner_nickname",
        )
    return cleaned


class IdentityStore:
    """Maps credentials to accounts and answers who may act."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.crypto = CryptoService()

    # --- lookups ---------------------------------------------------------------

    def get(self, account_id: str) -> Account | None:
        """Return an account by identifier."""
        return self.db.get(Account, account_id)

    def require(self, account_id: str) -> Account:
        """Return an account by identifier or raise ``NotFoundError``."""
        account = self.get(account_id)
        if account is None:
            raise NotFoundError("Account not found")
        return account

    def _by_digest(self, digest: str) -> Account | None:
        return self.db.scalars(
            select(Account).where(Account.credential_digest == digest)
        ).first()

    def authenticate_api_key(self, api_key: str) -> Account | None:
        """Return the account that was issued ``api_key``, if any."""
        if not api_key:
            return None
        return self._by_digest(credential_digest(CREDENTIAL_API_KEY, api_key))

    def is_banned(self, account_id: str) -> bool:
        """Return True if the account exists and is banned."""
        account = self.get(account_id)
        return bool(account and account.banned)

    @staticmethod
    def ensure_active(account: Account | None) -> None:
        """Reject banned accounts before any mutation is attempted."""
        if account is not None and account.banned:
            raise UnauthorizedError()

    # --- registration ----------------------------------------------------------

    def register(
        self,
        nickname: str,
        owner_nickname: str,
        public_key: str | None = None,
    ) -> Registration:
        """Register a new account.

        Without ``public_key`` the server issues an API key. With it, the
        Ed25519 key becomes the credential.

        Raises:
            ValidationError: Malformed nickname, owner nickname or key.
            DuplicateError: The credential already belongs to an account; the
                error carries that account's identifier.
        """
        nickname = validate_nickname(nickname)
        owner_nickname = validate_owner_nickname(owner_nickname)

        api_key: str | None = None
        pubkey_bytes: bytes | None = None
        if public_key:
            try:
                pubkey_bytes = self.crypto.validate_and_decode_pubkey(public_key)
            except ValueError as err:
                raise ValidationError(str(err), code="invalid_public_key") from err
            kind = CREDENTIAL_PUBLIC_KEY
            digest = credential_digest(kind, pubkey_bytes)
        else:
            api_key = generate_api_key()
            kind = CREDENTIAL_API_KEY
            digest = credential_digest(kind, api_key)

        try:
            with write_unit(self.db):
                existing = self._by_digest(digest)
                if existing is not None:
                    raise DuplicateError(
                        "Credential is already registered",
                        existing_id=existing.id,
                        code="duplicate_credential",
                    )
                account = Account(
                    id=str(uuid.uuid4()),
                    nickname=nickname,
                    owner_nickname=owner_nickname,
                    credential_kind=kind,
                    credential_digest=digest,
                    public_key=pubkey_bytes,
                )
                self.db.add(account)
        except IntegrityError as err:
            existing = self._by_digest(digest)
            raise DuplicateError(
                "Credential is already registered",
                existing_id=existing.id if existing else None,
                code="duplicate_credential",
            ) from err

        logger.info("Registered account %s (%s, %s)", account.id, nickname, kind)
        return Registration(account=account, api_key=api_key)

    # --- signatures ------------------------------------------------------------

    def verify(self, account_id: str, payload: bytes, signature: bytes | str) -> bool:
        """Verify ``signature`` over ``payload`` with the account's public key.

        Returns False for unknown accounts, accounts without a public key and
        malformed signatures; never raises.
        """
        account = self.get(account_id)
        if account is None or account.public_key is None:
            return False
        if isinstance(signature, str):
            try:
                signature = self.crypto.decode_flexible(signature)
            except ValueError:
                return False
        return self.crypto.verify_signature_bytes(account.public_key, payload, signature)

    # --- externally verified agents -------------------------------------------

    def _create_agent(self, profile: AgentProfile, kind: str, digest: str, provider: str) -> Account:
        account = Account(
            id=str(uuid.uuid4()),
            nickname=profile.name[:64],
            owner_nickname=provider,
            credential_kind=kind,
            credential_digest=digest,
            avatar_url=profile.avatar_url,
        )
        try:
            with write_unit(self.db):
                self.db.add(account)
        except IntegrityError:
            # Another request created the same agent first.
            existing = self._by_digest(digest)
            if existing is None:
                raise
            return existing
        logger.info("Created agent account %s for %s", account.id, profile.name)
        return account

    async def resolve_agent_key(self, agent_key: str, verifier: AgentVerifier) -> Account:
        """Get or create the account behind an agent's shared-secret key.

        A key seen before resolves locally without contacting the provider.

        Raises:
            UnauthorizedError: The provider rejected the key.
            AgentProviderError: The provider failed; nothing was created.
        """
        digest = credential_digest(CREDENTIAL_AGENT_KEY, agent_key)
        existing = self._by_digest(digest)
        if existing is not None:
            return existing

        # Nothing may stay open on the database while the provider is awaited.
        self.db.rollback()
        profile = await verifier.fetch_agent(agent_key)
        if profile is None:
            raise UnauthorizedError()
        return self._create_agent(profile, CREDENTIAL_AGENT_KEY, digest, verifier.provider_name)

    async def resolve_agent_identity(self, identity_token: str, verifier: AgentVerifier) -> Account:
        """Get or create the account behind a provider identity token.

        Identity tokens are short-lived, so the provider is consulted on every
        call; the provider's agent id is the cached credential.
        """
        self.db.rollback()
        profile = await verifier.verify_identity_token(identity_token)
        if profile is None or profile.agent_id is None:
            raise UnauthorizedError()

        digest = credential_digest(CREDENTIAL_AGENT_ID, profile.agent_id)
        with write_unit(self.db):
            existing = self._by_digest(digest)
            if existing is not None and profile.avatar_url:
                existing.avatar_url = profile.avatar_url
        if existing is not None:
            return existing
        return self._create_agent(profile, CREDENTIAL_AGENT_ID, digest, verifier.provider_name)
