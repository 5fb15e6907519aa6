"""Storage repositories for product documents.

Each repository performs one storage operation per call, assigns ids on
insert, and reports absence with ``None`` / ``False`` instead of raising,
leaving the translation to ``ProductNotFoundError`` to the service layer.

- SqliteProductRepository: local development and tests
- MongoProductRepository: MongoDB via Motor

Both use 24-character hex ObjectId strings as product ids. A string that is
not a valid ObjectId is rejected with StorageError(400).
"""

import json
import logging
import re
import sqlite3
from typing import Any, Optional

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from ..clients import MongoDBClient, SqliteClient
from .exceptions import StorageError

logger = logging.getLogger(__name__)

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS products (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    document TEXT NOT NULL
)
"""

CREATE_INDEX_SQL = """
CREATE INDEX IF NOT EXISTS idx_products_name ON products(name)
"""


def _casefold(value: Optional[str]) -> Optional[str]:
    return value.casefold() if value is not None else None


def _parse_object_id(product_id: str) -> ObjectId:
    if not ObjectId.is_valid(product_id):
        raise StorageError(f"Invalid product id: {product_id!r}", status_code=400)
    return ObjectId(product_id)


class SqliteProductRepository:
    """Product documents stored as JSON rows in a SQLite table.

    The methods are coroutines so the repository can stand in for
    MongoProductRepository, but every call runs synchronously on the event
    loop. Meant for local development and tests, not concurrent traffic.

    SQLite's built-in ``lower()`` only folds ASCII letters, so connect()
    registers a ``casefold`` SQL function and search matches on it.
    """

    def __init__(self, db_path: str = "products.db"):
        """Initialize the repository.

        Args:
            db_path: Path to the SQLite database file.
        """
        self._db_path = db_path
        self._sqlite_client: Optional[SqliteClient] = None

    async def connect(self) -> None:
        """Open the database file and create the products table if needed."""
        self._sqlite_client = SqliteClient(self._db_path)
        self._sqlite_client.connection.create_function("casefold", 1, _casefold, deterministic=True)
        self._sqlite_client.execute_write(CREATE_TABLE_SQL)
        self._sqlite_client.execute_write(CREATE_INDEX_SQL)
        logger.debug(f"SQLite product store ready at {self._db_path}")

    async def close(self) -> None:
        if self._sqlite_client:
            self._sqlite_client.close()
            self._sqlite_client = None

    def _require_client(self) -> SqliteClient:
        if self._sqlite_client is None:
            raise RuntimeError("SQLite product store not connected. Call connect() first.")
        return self._sqlite_client

    async def insert(self, fields: dict[str, Any]) -> dict[str, Any]:
        """Store a new product and return it with its generated id."""
        client = self._require_client()
        document = {"id": str(ObjectId()), **fields}
        try:
            client.execute_write(
                "INSERT INTO products (id, name, document) VALUES (?, ?, ?)",
                (document["id"], document["name"], json.dumps(document)),
            )
        except sqlite3.IntegrityError as e:
            raise StorageError(f"Product {document['id']} already exists", status_code=409) from e
        except sqlite3.Error as e:
            raise StorageError(f"SQLite insert failed: {e}") from e
        return document

    async def find(self, search: Optional[str] = None) -> list[dict[str, Any]]:
        client = self._require_client()
        try:
            if search:
                rows = client.execute_query(
                    "SELECT document FROM products WHERE instr(casefold(name), ?) > 0",
                    (search.casefold(),),
                )
            else:
                rows = client.execute_query("SELECT document FROM products")
        except sqlite3.Error as e:
            raise StorageError(f"SQLite query failed: {e}") from e
        return [json.loads(row[0]) for row in rows]

    async def find_by_id(self, product_id: str) -> Optional[dict[str, Any]]:
        _parse_object_id(product_id)
        client = self._require_client()
        try:
            rows = client.execute_query(
                "SELECT document FROM products WHERE id = ?",
                (product_id,),
            )
        except sqlite3.Error as e:
            raise StorageError(f"SQLite query failed: {e}") from e

        if not rows:
            return None
        return json.loads(rows[0][0])

    async def update_by_id(
        self,
        product_id: str,
        fields: dict[str, Any],
    ) -> Optional[dict[str, Any]]:
        """Merge ``fields`` into the stored document.

        Returns:
            The updated document, or None if no product has that id.
        """
        _parse_object_id(product_id)
        client = self._require_client()
        connection = client.connection
        try:
            # Read and write inside one transaction so the merge is atomic per document
            with connection:
                row = connection.execute(
                    "SELECT document FROM products WHERE id = ?",
                    (product_id,),
                ).fetchone()
                if row is None:
                    return None

                document = json.loads(row[0])
                document.update(fields)
                document["id"] = product_id

                connection.execute(
                    "UPDATE products SET name = ?, document = ? WHERE id = ?",
                    (document["name"], json.dumps(document), product_id),
                )
        except sqlite3.Error as e:
            raise StorageError(f"SQLite update failed: {e}") from e
        return document

    async def delete_by_id(self, product_id: str) -> bool:
        _parse_object_id(product_id)
        client = self._require_client()
        try:
            deleted = client.execute_write(
                "DELETE FROM products WHERE id = ?",
                (product_id,),
            )
        except sqlite3.Error as e:
            raise StorageError(f"SQLite delete failed: {e}") from e
        return deleted > 0


def _from_mongo(document: dict[str, Any]) -> dict[str, Any]:
    """Replace Mongo's ``_id`` ObjectId with a string ``id``."""
    result = {k: v for k, v in document.items() if k != "_id"}
    result["id"] = str(document["_id"])
    return result


class MongoProductRepository:
    """Product documents stored in a MongoDB collection."""

    def __init__(self, client: MongoDBClient):
        """Initialize the repository.

        Args:
            client: MongoDB client for the products collection. Ownership of
                the connection passes to the repository.
        """
        self._client = client

    async def connect(self) -> None:
        await self._client.connect()
        logger.debug("MongoDB product store connected")

    async def close(self) -> None:
        await self._client.close()

    async def insert(self, fields: dict[str, Any]) -> dict[str, Any]:
        """Store a new product and return it with the id MongoDB assigned."""
        document = dict(fields)
        try:
            result = await self._client.collection.insert_one(document)
        except DuplicateKeyError as e:
            raise StorageError(f"MongoDB insert rejected: {e}", status_code=409) from e
        except PyMongoError as e:
            raise StorageError(f"MongoDB insert failed: {e}") from e

        document["_id"] = result.inserted_id
        return _from_mongo(document)

    async def find(self, search: Optional[str] = None) -> list[dict[str, Any]]:
        query: dict[str, Any] = {}
        if search:
            query["name"] = {"$regex": re.escape(search), "$options": "i"}

        try:
            documents = await self._client.collection.find(query).to_list(length=None)
        except PyMongoError as e:
            raise StorageError(f"MongoDB query failed: {e}") from e
        return [_from_mongo(doc) for doc in documents]

    async def find_by_id(self, product_id: str) -> Optional[dict[str, Any]]:
        object_id = _parse_object_id(product_id)
        try:
            document = await self._client.collection.find_one({"_id": object_id})
        except PyMongoError as e:
            raise StorageError(f"MongoDB read failed: {e}") from e

        if document is None:
            return None
        return _from_mongo(document)

    async def update_by_id(
        self,
        product_id: str,
        fields: dict[str, Any],
    ) -> Optional[dict[str, Any]]:
        """Merge ``fields`` into the stored document with a single atomic $set.

        Returns:
            The updated document, or None if no product has that id.
        """
        object_id = _parse_object_id(product_id)
        collection = self._client.collection
        try:
            if fields:
                document = await collection.find_one_and_update(
                    {"_id": object_id},
                    {"$set": fields},
                    return_document=ReturnDocument.AFTER,
                )
            else:
                # $set rejects an empty document
                document = await collection.find_one({"_id": object_id})
        except PyMongoError as e:
            raise StorageError(f"MongoDB update failed: {e}") from e

        if document is None:
            return None
        return _from_mongo(document)

    async def delete_by_id(self, product_id: str) -> bool:
        object_id = _parse_object_id(product_id)
        try:
            result = await self._client.collection.delete_one({"_id": object_id})
        except PyMongoError as e:
            raise StorageError(f"MongoDB delete failed: {e}") from e
        return result.deleted_count > 0
