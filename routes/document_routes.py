"""
Document endpoints.

POST   /documents                               create (raw text body)
GET    /documents/{document_id}                 latest version
GET    /documents/{document_id}/versions        version history
GET    /documents/{document_id}/versions/{v}    one version
PATCH  /documents/{document_id}                 new version      (write)
DELETE /documents/{document_id}                 every version    (delete)
DELETE /documents/{document_id}/versions/{v}    one version      (delete)
POST   /documents/{document_id}/share           derive a token   (share)

Bodies for create/update are the raw document text; the optional
``Language`` header names its syntax (``auto`` or absent = detect).
Mutations take the capability token from ``Authorization: Bearer``.
"""

from __future__ import annotations

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Header, Query, Request, Response, status

from dependencies import get_claims, get_client_key, get_document_service
from errors import ValidationError
from infrastructure.highlighting import RenderedDocument, render
from schemas.dto.requests.document import RenderQuery, ShareRequest, VersionsQuery
from schemas.dto.responses.common import error_responses
from schemas.dto.responses.document import (
    DeleteResponse,
    DocumentResponse,
    ShareResponse,
    VersionResponse,
)
from schemas.models.document import DocumentDoc
from schemas.models.token import TokenClaims
from services.document_service import DocumentService
from shared.datetime_utils import format_version
from shared.validators import parse_version

router = APIRouter(
    prefix="/documents",
    tags=["documents"],
    responses=error_responses(400, 401, 403, 404, 409, 429, 503),
)

Service = Annotated[DocumentService, Depends(get_document_service)]
Claims = Annotated[TokenClaims, Depends(get_claims)]
ClientKey = Annotated[str, Depends(get_client_key)]
Render = Annotated[RenderQuery, Query()]


async def read_text_body(request: Request) -> str:
    """Return the request body as text; bodies must be UTF-8."""
    raw = await request.body()
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        raise ValidationError("request body must be UTF-8 text") from None


def render_document(
    request: Request, document: DocumentDoc, query: RenderQuery
) -> Optional[RenderedDocument]:
    """Highlight *document* when ``?render=`` was given.

    ``?language=`` overrides the stored language for this rendering only;
    the style comes from ``?style=`` or the ``style`` cookie.
    """
    if not query.render:
        return None
    return render(
        document.content or "",
        query.language or document.language,
        query.render,
        query.style or request.cookies.get("style"),
    )


def to_response(
    document: DocumentDoc,
    rendered: Optional[RenderedDocument] = None,
    *,
    include_data: bool = True,
    with_label: bool = False,
    token: Optional[str] = None,
) -> DocumentResponse:
    response = DocumentResponse(
        key=document.document_id,
        version=document.version,
        data=document.content if include_data or rendered else None,
        language=document.language,
        token=token,
    )
    if rendered is not None:
        response.formatted = rendered.formatted
        response.css = rendered.css
        response.language = rendered.language
    if with_label:
        response.version_label, response.version_time = format_version(document.version)
    return response


@router.post(
    "",
    response_model=DocumentResponse,
    response_model_exclude_none=True,
)
async def create_document(
    request: Request,
    service: Service,
    client_key: ClientKey,
    query: Render,
    language: Optional[str] = Header(default=None),
) -> DocumentResponse:
    content = await read_text_body(request)
    document, token = await service.create_document(content, language, client_key)
    return to_response(
        document,
        render_document(request, document, query),
        include_data=False,
        with_label=True,
        token=token,
    )


@router.get(
    "/{document_id}",
    response_model=DocumentResponse,
    response_model_exclude_none=True,
)
async def get_document(
    request: Request, document_id: str, service: Service, query: Render
) -> DocumentResponse:
    document = await service.get_document(document_id)
    return to_response(document, render_document(request, document, query))


@router.get(
    "/{document_id}/versions",
    response_model=list[VersionResponse],
    response_model_exclude_none=True,
)
async def list_document_versions(
    document_id: str,
    service: Service,
    query: Annotated[VersionsQuery, Query()],
) -> list[VersionResponse]:
    versions = await service.list_versions(document_id, include_content=query.with_data)
    return [
        VersionResponse(version=v.version, data=v.content, language=v.language)
        for v in versions
    ]


@router.get(
    "/{document_id}/versions/{version}",
    response_model=DocumentResponse,
    response_model_exclude_none=True,
)
async def get_document_version(
    request: Request,
    document_id: str,
    version: str,
    service: Service,
    query: Render,
) -> DocumentResponse:
    document = await service.get_document(document_id, parse_version(version))
    return to_response(document, render_document(request, document, query))


@router.patch(
    "/{document_id}",
    response_model=DocumentResponse,
    response_model_exclude_none=True,
)
async def update_document(
    request: Request,
    document_id: str,
    service: Service,
    claims: Claims,
    client_key: ClientKey,
    query: Render,
    language: Optional[str] = Header(default=None),
) -> DocumentResponse:
    content = await read_text_body(request)
    document = await service.update_document(
        document_id, content, language, claims, client_key
    )
    return to_response(
        document,
        render_document(request, document, query),
        include_data=False,
        with_label=True,
    )


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    document_id: str, service: Service, claims: Claims, client_key: ClientKey
) -> Response:
    await service.delete_document(document_id, claims, client_key)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{document_id}/versions/{version}", response_model=DeleteResponse)
async def delete_document_version(
    document_id: str,
    version: str,
    service: Service,
    claims: Claims,
    client_key: ClientKey,
) -> DeleteResponse:
    remaining = await service.delete_version(
        document_id, parse_version(version), claims, client_key
    )
    return DeleteResponse(versions=remaining)


@router.post("/{document_id}/share", response_model=ShareResponse)
async def share_document(
    document_id: str,
    body: ShareRequest,
    service: Service,
    claims: Claims,
    client_key: ClientKey,
) -> ShareResponse:
    token = await service.share_document(
        document_id, body.permissions, claims, client_key
    )
    return ShareResponse(token=token)
