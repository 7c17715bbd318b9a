"""
Document service — the versioned store behind the HTTP handlers.

Every mutating call runs in the same order:
    authorization gate → rate limiter → content checks → repository

Reads are never rate limited and never gated; knowing a document ID is
enough to read every version of it.
"""

from __future__ import annotations

from typing import Iterable, Optional

from errors import ValidationError, document_not_found
from infrastructure.highlighting import detect_language
from repositories.document_repository import DocumentRepository
from schemas.models.document import DocumentDoc
from schemas.models.token import Permission, TokenClaims
from services import rate_limiter
from services.authorization import authorize, authorize_share, parse_permissions
from services.token_service import TokenService
from services.version_clock import VersionClock
from shared.logging import get_logger
from shared.validators import (
    LATEST_VERSION,
    exceeds_max_document_size,
    is_valid_document_id,
)

log = get_logger(__name__)


class DocumentService:
    def __init__(
        self,
        repository: DocumentRepository,
        tokens: TokenService,
        limiter: rate_limiter.RateLimiter,
        *,
        max_document_size: int = 0,
        clock: Optional[VersionClock] = None,
    ) -> None:
        self.repository = repository
        self.tokens = tokens
        self.limiter = limiter
        self.max_document_size = max_document_size
        self.clock = clock or VersionClock()

    # ── Reads ────────────────────────────────────────────────────────────────

    async def get_document(
        self, document_id: str, version: Optional[int] = LATEST_VERSION
    ) -> DocumentDoc:
        """Fetch one version, or the latest when *version* is 0.

        ``None`` stands for an unparseable version segment and is reported
        as not found.
        """
        if version is None or not is_valid_document_id(document_id):
            raise document_not_found()
        if version == LATEST_VERSION:
            return await self.repository.get_latest(document_id)
        return await self.repository.get_version(document_id, version)

    async def list_versions(
        self, document_id: str, include_content: bool = False
    ) -> list[DocumentDoc]:
        if not is_valid_document_id(document_id):
            raise document_not_found()
        versions = await self.repository.list_versions(document_id, include_content)
        if not versions:
            raise document_not_found()
        return versions

    # ── Mutations ────────────────────────────────────────────────────────────

    async def create_document(
        self, content: str, language: Optional[str], client_key: str
    ) -> tuple[DocumentDoc, str]:
        """Store a new document and mint its all-permissions token."""
        await self.limiter.hit(client_key, rate_limiter.CREATE)
        self._check_content(content)

        document = await self.repository.create(
            content, detect_language(content, language)
        )
        token = self.tokens.issue(document.document_id, Permission.all())
        log.info(
            "document_created",
            document_id=document.document_id,
            version=document.version,
            language=document.language,
            size=len(content),
        )
        return document, token

    async def update_document(
        self,
        document_id: str,
        content: str,
        language: Optional[str],
        claims: TokenClaims,
        client_key: str,
    ) -> DocumentDoc:
        authorize(claims, document_id, Permission.WRITE)
        await self.limiter.hit(client_key, rate_limiter.UPDATE)
        self._check_content(content)

        document = await self.repository.update(
            document_id, content, detect_language(content, language)
        )
        log.info(
            "document_updated",
            document_id=document_id,
            version=document.version,
            language=document.language,
            size=len(content),
        )
        return document

    async def delete_document(
        self, document_id: str, claims: TokenClaims, client_key: str
    ) -> None:
        authorize(claims, document_id, Permission.DELETE)
        await self.limiter.hit(client_key, rate_limiter.DELETE)

        await self.repository.delete_all(document_id)
        log.info("document_deleted", document_id=document_id)

    async def delete_version(
        self,
        document_id: str,
        version: Optional[int],
        claims: TokenClaims,
        client_key: str,
    ) -> int:
        """Delete one version and return how many versions remain.

        A remaining count of 0 means the document no longer exists.
        """
        authorize(claims, document_id, Permission.DELETE)
        if not version:
            # Unparseable or the "latest" sentinel: neither names a stored row
            raise document_not_found()
        await self.limiter.hit(client_key, rate_limiter.DELETE_VERSION)

        await self.repository.delete_version(document_id, version)
        remaining = await self.repository.count_versions(document_id)
        log.info(
            "document_version_deleted",
            document_id=document_id,
            version=version,
            remaining=remaining,
        )
        return remaining

    async def share_document(
        self,
        document_id: str,
        permission_names: Iterable[str],
        claims: TokenClaims,
        client_key: str,
    ) -> str:
        """Mint a token for a subset of the caller's own permissions."""
        requested = parse_permissions(permission_names)
        authorize_share(claims, document_id, requested)
        await self.limiter.hit(client_key, rate_limiter.SHARE)

        token = self.tokens.issue(document_id, requested)
        log.info(
            "document_shared",
            document_id=document_id,
            permissions=sorted(p.value for p in requested),
        )
        return token

    # ── Maintenance ──────────────────────────────────────────────────────────

    async def remove_expired(self, expire_after_seconds: int) -> int:
        """Drop versions older than *expire_after_seconds*; 0 disables expiry."""
        if expire_after_seconds <= 0:
            return 0
        cutoff = self.clock.now() - expire_after_seconds
        removed = await self.repository.delete_expired(cutoff)
        if removed:
            log.info("expired_documents_removed", rows=removed, cutoff=cutoff)
        return removed

    def _check_content(self, content: str) -> None:
        if not content:
            raise ValidationError("empty request body")
        if exceeds_max_document_size(content, self.max_document_size):
            raise ValidationError(
                f"content too large, must be less than {self.max_document_size} chars",
                details={"max_document_size": self.max_document_size},
            )
