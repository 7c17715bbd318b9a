"""
Authorization gate for mutating document operations.

Decisions are pure functions of the verified token claims. A caller that
lacks the required permission gets NotFoundError, exactly as if the
document did not exist. The one exception is a share request asking for
permissions the caller does not hold: at that point the caller has proven
share access to the document, so the refusal is a ForbiddenError.
"""

from __future__ import annotations

from typing import Iterable

from errors import ForbiddenError, ValidationError, document_not_found
from schemas.models.token import Permission, TokenClaims


def authorize(claims: TokenClaims, document_id: str, permission: Permission) -> None:
    """Allow the operation or raise NotFoundError."""
    if not claims.grants(document_id, permission):
        raise document_not_found()


def authorize_share(
    claims: TokenClaims, document_id: str, requested: frozenset[Permission]
) -> None:
    """Gate a share request.

    Raises:
        NotFoundError: the caller has no share permission on the document.
        ForbiddenError: the caller asks to delegate a permission it lacks.
    """
    authorize(claims, document_id, Permission.SHARE)

    missing = requested - claims.permissions
    if missing:
        names = sorted(p.value for p in missing)
        raise ForbiddenError(
            f"permission denied: {', '.join(names)}",
            field="permissions",
            details={"missing": names},
        )


def parse_permissions(names: Iterable[str]) -> frozenset[Permission]:
    """Validate permission names from a share request.

    Raises:
        ValidationError: the list is empty or names an unknown permission.
    """
    names = list(names)
    if not names:
        raise ValidationError("no permissions provided", field="permissions")

    permissions = set()
    for name in names:
        try:
            permissions.add(Permission(name))
        except ValueError:
            raise ValidationError(
                f"unknown permission: {name}",
                field="permissions",
                details={"allowed": [p.value for p in Permission]},
            ) from None
    return frozenset(permissions)
