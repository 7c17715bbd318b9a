"""
Raw document endpoints.

GET|HEAD /raw/{document_id}                     latest version as text/plain
GET|HEAD /raw/{document_id}/versions/{version}  one version as text/plain
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from dependencies import get_document_service
from schemas.dto.responses.common import error_responses
from services.document_service import DocumentService
from shared.validators import parse_version

router = APIRouter(prefix="/raw", tags=["raw"], responses=error_responses(404, 503))

Service = Annotated[DocumentService, Depends(get_document_service)]

TEXT_MEDIA_TYPE = "text/plain; charset=utf-8"


@router.api_route("/{document_id}", methods=["GET", "HEAD"])
async def get_raw_document(document_id: str, service: Service) -> PlainTextResponse:
    document = await service.get_document(document_id)
    return PlainTextResponse(document.content, media_type=TEXT_MEDIA_TYPE)


@router.api_route("/{document_id}/versions/{version}", methods=["GET", "HEAD"])
async def get_raw_document_version(
    document_id: str, version: str, service: Service
) -> PlainTextResponse:
    document = await service.get_document(document_id, parse_version(version))
    return PlainTextResponse(document.content, media_type=TEXT_MEDIA_TYPE)
