"""
Record plumbing shared by the itinerary and library stores.

Both stores come in two flavours with the same behaviour: a process-local
dict (MemoryRecordStore) and a SQLAlchemy table (SqlRecordStore). Records are
validated with the store's write schema and handed back as read schemas, so
no ORM objects leave the store.
"""
import copy
import logging
from collections.abc import Mapping
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple, Type
from uuid import UUID, uuid4

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from services.errors import InvalidArgument, NotFound, StoreUnavailable

logger = logging.getLogger("traveldesk.stores")

READ_ONLY_FIELDS = ("id", "created_at", "updated_at")


def new_id() -> str:
    return uuid4().hex


def parse_id(value: Any, entity: str) -> str:
    """Normalize an identifier to 32 lowercase hex characters."""
    try:
        return UUID(str(value)).hex
    except (TypeError, ValueError):
        raise InvalidArgument(f"Invalid {entity.lower()} id: {value!r}")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def next_timestamp(previous: Optional[datetime]) -> datetime:
    """Current UTC time, nudged forward so it is strictly after `previous`."""
    now = utcnow()
    if previous is not None:
        if previous.tzinfo is None:
            previous = previous.replace(tzinfo=timezone.utc)
        if now <= previous:
            now = previous + timedelta(microseconds=1)
    return now


def _describe(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or 'body'}: {err['msg']}"
        for err in exc.errors()
    )


def split_extras(data: Mapping, schema: Type[BaseModel]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Split a payload into schema fields and unknown keys. Read-only keys are dropped."""
    known, extras = {}, {}
    for key, value in data.items():
        if key in READ_ONLY_FIELDS:
            continue
        if key in schema.model_fields:
            known[key] = value
        else:
            extras[key] = value
    return known, extras


def _validated(schema: Type[BaseModel], fields: Dict[str, Any], entity: str) -> Dict[str, Any]:
    try:
        data = schema.model_validate(fields).model_dump()
    except ValidationError as exc:
        raise InvalidArgument(f"Invalid {entity.lower()}: {_describe(exc)}")
    # list and dict fields live in JSON columns; both backends keep the JSON form
    try:
        return {k: jsonable_encoder(v) if isinstance(v, (list, dict)) else v for k, v in data.items()}
    except (TypeError, ValueError) as exc:
        raise InvalidArgument(f"Invalid {entity.lower()}: {exc}")


def _merged_extra_fields(base: Any, *updates: Any) -> Dict[str, Any]:
    merged = {}
    for part in (base, *updates):
        if part is None:
            continue
        if not isinstance(part, Mapping):
            raise InvalidArgument("extra_fields must be an object")
        merged.update(part)
    return merged


def prepare_create(data: Any, schema: Type[BaseModel], entity: str) -> Dict[str, Any]:
    if not isinstance(data, Mapping):
        raise InvalidArgument(f"{entity} data must be an object")
    known, extras = split_extras(data, schema)
    known["extra_fields"] = _merged_extra_fields(known.get("extra_fields"), extras)
    return _validated(schema, known, entity)


def prepare_update(current: Dict[str, Any], patch: Any, schema: Type[BaseModel], entity: str) -> Dict[str, Any]:
    """Merge `patch` over `current` (top-level keys only) and validate the result."""
    if not isinstance(patch, Mapping):
        raise InvalidArgument(f"{entity} patch must be an object")
    known, extras = split_extras(patch, schema)
    merged = {k: v for k, v in current.items() if k not in READ_ONLY_FIELDS}
    extra_fields = _merged_extra_fields(current.get("extra_fields"), known.pop("extra_fields", None), extras)
    merged.update(known)
    merged["extra_fields"] = extra_fields
    return _validated(schema, merged, entity)


def parse_sort(sort: Optional[str], sortable: Tuple[str, ...]) -> Optional[Tuple[str, bool]]:
    """"-created_at" -> ("created_at", True). None means insertion order."""
    if not sort:
        return None
    descending = sort.startswith("-")
    field = sort[1:] if descending else sort
    if field not in sortable:
        raise InvalidArgument(f"Cannot sort by {field!r}")
    return field, descending


class MemoryRecordStore:
    """Process-local records keyed by id; dict order is insertion order."""

    entity = "Record"
    write_schema: Type[BaseModel]
    read_schema: Type[BaseModel]
    sortable: Tuple[str, ...] = ("created_at", "updated_at")

    def __init__(self):
        self._records: Dict[str, Dict[str, Any]] = {}

    def _read(self, record: Dict[str, Any]):
        return self.read_schema.model_validate(copy.deepcopy(record))

    def _lookup(self, record_id: Any) -> Dict[str, Any]:
        key = parse_id(record_id, self.entity)
        record = self._records.get(key)
        if record is None:
            raise NotFound(self.entity, key)
        return record

    def get(self, record_id):
        return self._read(self._lookup(record_id))

    def create(self, data):
        fields = prepare_create(data, self.write_schema, self.entity)
        now = utcnow()
        record = {**fields, "id": new_id(), "created_at": now, "updated_at": now}
        self._records[record["id"]] = record
        logger.info("Created %s %s", self.entity.lower(), record["id"])
        return self._read(record)

    def update(self, record_id, patch):
        record = self._lookup(record_id)
        fields = prepare_update(record, patch, self.write_schema, self.entity)
        record.update(fields)
        record["updated_at"] = next_timestamp(record["updated_at"])
        logger.info("Updated %s %s", self.entity.lower(), record["id"])
        return self._read(record)

    def delete(self, record_id) -> bool:
        record = self._lookup(record_id)
        del self._records[record["id"]]
        logger.info("Deleted %s %s", self.entity.lower(), record["id"])
        return True

    def _list(self, records: Optional[List[Dict[str, Any]]] = None, sort: Optional[str] = None):
        order = parse_sort(sort, self.sortable)
        if records is None:
            records = list(self._records.values())
        if order:
            field, descending = order
            present = [r for r in records if r.get(field) is not None]
            missing = [r for r in records if r.get(field) is None]
            records = sorted(present, key=lambda r: r[field], reverse=descending) + missing
        return [self._read(r) for r in records]


class SqlRecordStore:
    """Records in a SQLAlchemy table; one session and one commit per operation."""

    entity = "Record"
    model: Any
    write_schema: Type[BaseModel]
    read_schema: Type[BaseModel]
    sortable: Tuple[str, ...] = ("created_at", "updated_at")

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @contextmanager
    def _session(self, operation: str):
        db = self._session_factory()
        try:
            yield db
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("%s store failed during %s: %s", self.entity, operation, exc)
            raise StoreUnavailable(f"{self.entity} store unavailable") from exc
        finally:
            db.close()

    def _find(self, db, key: str):
        row = db.query(self.model).filter(self.model.id == key).first()
        if not row:
            raise NotFound(self.entity, key)
        return row

    def get(self, record_id):
        key = parse_id(record_id, self.entity)
        with self._session("get") as db:
            return self.read_schema.model_validate(self._find(db, key))

    def create(self, data):
        fields = prepare_create(data, self.write_schema, self.entity)
        now = utcnow()
        with self._session("create") as db:
            row = self.model(id=new_id(), created_at=now, updated_at=now, **fields)
            db.add(row)
            db.commit()
            db.refresh(row)
            logger.info("Created %s %s", self.entity.lower(), row.id)
            return self.read_schema.model_validate(row)

    def update(self, record_id, patch):
        key = parse_id(record_id, self.entity)
        with self._session("update") as db:
            row = self._find(db, key)
            current = self.read_schema.model_validate(row).model_dump()
            fields = prepare_update(current, patch, self.write_schema, self.entity)
            for k, v in fields.items():
                setattr(row, k, v)
            row.updated_at = next_timestamp(row.updated_at)
            db.commit()
            db.refresh(row)
            logger.info("Updated %s %s", self.entity.lower(), key)
            return self.read_schema.model_validate(row)

    def delete(self, record_id) -> bool:
        key = parse_id(record_id, self.entity)
        with self._session("delete") as db:
            row = self._find(db, key)
            db.delete(row)
            db.commit()
            logger.info("Deleted %s %s", self.entity.lower(), key)
            return True

    def _ordered(self, query, sort: Optional[str]):
        order = parse_sort(sort, self.sortable)
        if order:
            field, descending = order
            column = getattr(self.model, field)
            query = query.order_by(column.desc() if descending else column.asc())
        return query.order_by(self.model.pk)
