"""
Append-only document store backed by the `documents` MongoDB collection.

Every create or update inserts a new row keyed by (document_id, version);
rows are never modified in place. "Latest" is a query (highest version,
then newest ObjectId), not a stored pointer.

Error contract:
- missing documents/versions raise NotFoundError
- a racing duplicate (document_id, version) on update is retried once
  against the re-read latest version, then raises ConflictError
- any other pymongo failure raises StorageError and is never retried
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from pymongo import ASCENDING, DESCENDING
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import DuplicateKeyError, PyMongoError

from errors import ConflictError, StorageError, document_not_found
from schemas.models.document import DocumentDoc
from services.version_clock import VersionClock
from shared.generators import generate_document_id
from shared.logging import get_logger

log = get_logger(__name__)

VERSION_INDEX_NAME = "document_id_version_unique"
# Attempts at finding an unused ID before giving up on a create
MAX_ID_ATTEMPTS = 5
# A racing writer took our version stamp: re-read the latest and try once more
MAX_UPDATE_ATTEMPTS = 2

_LATEST_FIRST = [("version", DESCENDING), ("_id", DESCENDING)]
_OLDEST_FIRST = [("version", ASCENDING), ("_id", ASCENDING)]


@contextmanager
def _storage_errors(operation: str) -> Iterator[None]:
    """Translate pymongo failures into StorageError, keeping the cause."""
    try:
        yield
    except DuplicateKeyError:
        raise
    except PyMongoError as exc:
        log.error("storage_error", operation=operation, error=str(exc))
        raise StorageError(f"storage failure during {operation}") from exc


class DocumentRepository:
    def __init__(
        self,
        collection: AsyncCollection,
        clock: Optional[VersionClock] = None,
        id_generator: Callable[[], str] = generate_document_id,
    ) -> None:
        self._collection = collection
        self._clock = clock or VersionClock()
        self._generate_id = id_generator

    async def ensure_indexes(self) -> None:
        with _storage_errors("ensure_indexes"):
            await self._collection.create_index(
                [("document_id", ASCENDING), ("version", ASCENDING)],
                unique=True,
                name=VERSION_INDEX_NAME,
            )

    async def create(self, content: str, language: str) -> DocumentDoc:
        """Insert the first version of a new document under a fresh ID.

        The unique index only rejects a reused ID written in the same
        second, so existing IDs are looked up before inserting.
        """
        for attempt in range(1, MAX_ID_ATTEMPTS + 1):
            document = DocumentDoc(
                document_id=self._generate_id(),
                version=self._clock.next_version(),
                content=content,
                language=language,
            )
            if not await self._exists(document.document_id):
                try:
                    return await self._insert(document, "create")
                except DuplicateKeyError:
                    pass
            log.warning(
                "document_id_collision",
                document_id=document.document_id,
                attempt=attempt,
            )
        raise StorageError("could not allocate a unique document id")

    async def update(self, document_id: str, content: str, language: str) -> DocumentDoc:
        """Append a new version to an existing document.

        Raises:
            NotFoundError: the document has no versions left.
            ConflictError: concurrent writes claimed the version stamp on
                every attempt.
        """
        for attempt in range(1, MAX_UPDATE_ATTEMPTS + 1):
            latest = await self._find_latest(document_id)
            if latest is None:
                raise document_not_found()

            document = DocumentDoc(
                document_id=document_id,
                version=self._clock.next_version(floor=latest.version),
                content=content,
                language=language,
            )
            try:
                return await self._insert(document, "update")
            except DuplicateKeyError as exc:
                if attempt == MAX_UPDATE_ATTEMPTS:
                    raise ConflictError(
                        "document was modified concurrently, retry the update"
                    ) from exc
                log.info(
                    "document_version_race",
                    document_id=document_id,
                    version=document.version,
                )

    async def get_latest(self, document_id: str) -> DocumentDoc:
        document = await self._find_latest(document_id)
        if document is None:
            raise document_not_found()
        return document

    async def get_version(self, document_id: str, version: int) -> DocumentDoc:
        with _storage_errors("get_version"):
            raw = await self._collection.find_one(
                {"document_id": document_id, "version": version}
            )
        if raw is None:
            raise document_not_found()
        return DocumentDoc.from_mongo(raw)

    async def list_versions(
        self, document_id: str, include_content: bool = False
    ) -> list[DocumentDoc]:
        """Return every version of *document_id*, oldest first.

        Unknown IDs give an empty list rather than an error.
        """
        projection = None if include_content else {"content": 0}
        with _storage_errors("list_versions"):
            cursor = self._collection.find(
                {"document_id": document_id}, projection, sort=_OLDEST_FIRST
            )
            rows = await cursor.to_list(length=None)
        return [DocumentDoc.from_mongo(row) for row in rows]

    async def count_versions(self, document_id: str) -> int:
        with _storage_errors("count_versions"):
            return await self._collection.count_documents({"document_id": document_id})

    async def delete_all(self, document_id: str) -> None:
        with _storage_errors("delete_all"):
            result = await self._collection.delete_many({"document_id": document_id})
        if result.deleted_count == 0:
            raise document_not_found()

    async def delete_version(self, document_id: str, version: int) -> None:
        with _storage_errors("delete_version"):
            result = await self._collection.delete_one(
                {"document_id": document_id, "version": version}
            )
        if result.deleted_count == 0:
            raise document_not_found()

    async def delete_expired(self, cutoff: int) -> int:
        """Remove every version stamped before *cutoff*; returns the row count."""
        with _storage_errors("delete_expired"):
            result = await self._collection.delete_many({"version": {"$lt": cutoff}})
        return result.deleted_count

    async def _find_latest(self, document_id: str) -> Optional[DocumentDoc]:
        with _storage_errors("get_latest"):
            cursor = self._collection.find(
                {"document_id": document_id}, sort=_LATEST_FIRST, limit=1
            )
            rows = await cursor.to_list(length=1)
        return DocumentDoc.from_mongo(rows[0]) if rows else None

    async def _exists(self, document_id: str) -> bool:
        with _storage_errors("create"):
            raw = await self._collection.find_one(
                {"document_id": document_id}, {"_id": 1}
            )
        return raw is not None

    async def _insert(self, document: DocumentDoc, operation: str) -> DocumentDoc:
        data = document.to_mongo()
        with _storage_errors(operation):
            result = await self._collection.insert_one(data)
        document.id = result.inserted_id
        return document
