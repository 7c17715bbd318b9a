"""
FastAPI dependency providers.

All injectable dependencies are defined here as plain functions used with
FastAPI's Depends() system. Long-lived objects are built once in the app
lifespan and stored on app.state.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, Request

from config import AppSettings
from schemas.models.token import TokenClaims
from services.document_service import DocumentService
from shared.ip_utils import get_client_ip
from services.token_service import extract_bearer_token


def get_settings(request: Request) -> AppSettings:
    """Return the AppSettings instance stored on app.state."""
    return request.app.state.settings


def get_document_service(request: Request) -> DocumentService:
    """Return the DocumentService built during startup."""
    return request.app.state.document_service


def get_claims(
    authorization: Optional[str] = Header(default=None),
    service: DocumentService = Depends(get_document_service),
) -> TokenClaims:
    """Verify the bearer token, if any; no token yields empty claims."""
    return service.tokens.verify(extract_bearer_token(authorization))


def get_client_key(request: Request) -> str:
    """Client identity used for rate-limit buckets."""
    return get_client_ip(request)
