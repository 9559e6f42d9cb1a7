"""
Database helpers

A Store wraps one pymongo client (itself a connection pool) and one database
on it. The application creates the Store at startup, hands it to request
handlers through a dependency and closes it at shutdown.

Documents leave the Store already serialized: the native ``_id`` is exposed
as a string ``id`` and internal versioning metadata is dropped.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Union, List

from bson import ObjectId
from pydantic import BaseModel
from pymongo import MongoClient, ReturnDocument
from pymongo.errors import DuplicateKeyError

from errors import MalformedId, UniquenessViolation

logger = logging.getLogger(__name__)

# Declared-unique field per collection
UNIQUE_FIELDS = {
    "user": "username",
    "person": "name",
}

HIDDEN_FIELDS = ("__v",)


def to_object_id(value: Union[str, ObjectId]) -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str) or not ObjectId.is_valid(value):
        raise MalformedId(str(value))
    return ObjectId(value)


def serialize_doc(doc: dict) -> dict:
    d = {**doc}
    if d.get("_id") is not None:
        d["id"] = str(d.pop("_id"))
    for key in HIDDEN_FIELDS:
        d.pop(key, None)
    # Convert datetime to isoformat if present
    for key in ["created_at", "updated_at"]:
        if key in d and hasattr(d[key], "isoformat"):
            d[key] = d[key].isoformat()
    return d


class Store:
    def __init__(self, client: MongoClient, name: str):
        self.client = client
        self.db = client[name]
        self.name = name

    def ensure_indexes(self) -> None:
        for collection_name, field in UNIQUE_FIELDS.items():
            self.db[collection_name].create_index(field, unique=True)
            logger.info("Unique index ensured on %s.%s", collection_name, field)

    def collection_names(self) -> List[str]:
        return self.db.list_collection_names()

    def close(self) -> None:
        self.client.close()
        logger.info("Database connections closed")

    def _check_unique(self, collection_name: str, data: dict, exclude: Optional[ObjectId] = None) -> None:
        field = UNIQUE_FIELDS.get(collection_name)
        if field is None or field not in data:
            return
        filters = {field: data[field]}
        if exclude is not None:
            filters["_id"] = {"$ne": exclude}
        if self.db[collection_name].find_one(filters) is not None:
            raise UniquenessViolation(field)

    def create_document(self, collection_name: str, data: Union[BaseModel, dict]) -> dict:
        """Insert a document and return it as stored."""
        if isinstance(data, BaseModel):
            data_dict = data.model_dump()
        else:
            data_dict = data.copy()

        self._check_unique(collection_name, data_dict)

        now = datetime.now(timezone.utc)
        data_dict["created_at"] = now
        data_dict["updated_at"] = now
        try:
            result = self.db[collection_name].insert_one(data_dict)
        except DuplicateKeyError:
            raise UniquenessViolation(UNIQUE_FIELDS.get(collection_name, "id"))
        doc = self.db[collection_name].find_one({"_id": result.inserted_id})
        return serialize_doc(doc)

    def get_documents(self, collection_name: str, filter_dict: Optional[dict] = None, limit: Optional[int] = None) -> List[dict]:
        cursor = self.db[collection_name].find(filter_dict or {})
        if limit:
            cursor = cursor.limit(limit)
        return [serialize_doc(d) for d in cursor]

    def get_document(self, collection_name: str, doc_id: str) -> Optional[dict]:
        doc = self.db[collection_name].find_one({"_id": to_object_id(doc_id)})
        return serialize_doc(doc) if doc else None

    def update_document(self, collection_name: str, doc_id: str, patch: dict) -> Optional[dict]:
        """Apply ``patch`` and return the document as it is after the write.

        Returns None when no document has the given id.
        """
        oid = to_object_id(doc_id)
        self._check_unique(collection_name, patch, exclude=oid)
        update = {**patch, "updated_at": datetime.now(timezone.utc)}
        try:
            doc = self.db[collection_name].find_one_and_update(
                {"_id": oid},
                {"$set": update},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            raise UniquenessViolation(UNIQUE_FIELDS.get(collection_name, "id"))
        return serialize_doc(doc) if doc else None

    def delete_document(self, collection_name: str, doc_id: str) -> bool:
        res = self.db[collection_name].delete_one({"_id": to_object_id(doc_id)})
        return res.deleted_count > 0

    def delete_documents(self, collection_name: str) -> int:
        res = self.db[collection_name].delete_many({})
        return res.deleted_count


def connect(url: str, name: str) -> Store:
    store = Store(MongoClient(url), name)
    logger.info("Connected to database %s", name)
    return store
