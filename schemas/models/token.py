"""
Capability token claims.

A token is not stored anywhere; these models describe what a verified
token asserts: the document it is bound to and the permissions it grants.
Reading is never gated, so there is no read permission.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Permission(str, Enum):
    WRITE = "write"
    DELETE = "delete"
    SHARE = "share"

    @classmethod
    def all(cls) -> frozenset["Permission"]:
        return frozenset(cls)


class TokenClaims(BaseModel):
    """Verified claims of a capability token.

    The empty instance (no subject, no permissions) represents a request
    that carried no token at all.
    """

    model_config = ConfigDict(frozen=True)

    subject: Optional[str] = None
    permissions: frozenset[Permission] = frozenset()
    issued_at: Optional[int] = None
    expires_at: Optional[int] = None

    @classmethod
    def empty(cls) -> "TokenClaims":
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.subject is None and not self.permissions

    def grants(self, document_id: str, permission: Permission) -> bool:
        return self.subject == document_id and permission in self.permissions
