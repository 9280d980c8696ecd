"""Concrete CacheStore implementation backed by SQLAlchemy (SQLite via aiosqlite)."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, AsyncSession

from vhc_offline.application.interfaces import CacheKey, CacheRecord, CacheStore
from vhc_offline.domain.entities import (
    Partition,
    PartitionSpec,
    capture_timestamp,
    get_partition_spec,
)
from vhc_offline.domain.exceptions import StorageUnavailableError
from vhc_offline.infrastructure.database.base import Base
from vhc_offline.infrastructure.database.models import (
    CacheRecordModel,
    PendingOperationModel,
    StoreMetadataModel,
)
from vhc_offline.infrastructure.database.session import (
    create_cache_engine,
    create_session_factory,
    sqlite_database_path,
)

logger = logging.getLogger(__name__)

_PENDING_COLUMNS = {
    "type": PendingOperationModel.type,
    "timestamp": PendingOperationModel.timestamp,
}


class SQLAlchemyCacheStore(CacheStore):
    """Implements the CacheStore port on a local SQL database.

    Keyed partitions share the ``cache_records`` table; the auto-keyed
    pendingOps partition has its own table so ids increase monotonically.
    Every public method opens the store on first use.
    """

    def __init__(
        self,
        database_url: str,
        *,
        store_name: str = "WrenchdIVHC",
        schema_version: int = 1,
        engine: AsyncEngine | None = None,
    ):
        self._database_url = database_url
        self._store_name = store_name
        self._schema_version = schema_version
        self._engine = engine or create_cache_engine(database_url)
        self._session_factory = create_session_factory(self._engine)
        self._init_lock = asyncio.Lock()
        self._initialized = False

    @property
    def store_name(self) -> str:
        return self._store_name

    # ── Lifecycle ───────────────────────────────────────────────────

    async def initialize(self) -> None:
        if self._initialized:
            return
        async with self._init_lock:
            if self._initialized:
                return
            try:
                db_path = sqlite_database_path(self._database_url)
                if db_path is not None:
                    db_path.parent.mkdir(parents=True, exist_ok=True)
                async with self._engine.begin() as conn:
                    await conn.run_sync(Base.metadata.create_all)
                    await self._check_schema_version(conn)
            except (SQLAlchemyError, OSError) as exc:
                raise StorageUnavailableError(self._store_name, str(exc)) from exc
            self._initialized = True
            logger.info(
                "Cache store '%s' opened (schema v%d)", self._store_name, self._schema_version
            )

    async def _check_schema_version(self, conn: AsyncConnection) -> None:
        """Record the schema version, treating a bump as an upgrade."""
        result = await conn.execute(
            select(StoreMetadataModel.schema_version).where(
                StoreMetadataModel.name == self._store_name
            )
        )
        stored_version = result.scalar_one_or_none()

        if stored_version is None:
            await conn.execute(
                StoreMetadataModel.__table__.insert().values(
                    name=self._store_name,
                    schema_version=self._schema_version,
                    created_at=datetime.now(timezone.utc),
                )
            )
            return

        if stored_version > self._schema_version:
            raise StorageUnavailableError(
                self._store_name,
                f"stored schema v{stored_version} is newer than supported v{self._schema_version}",
            )

        if stored_version < self._schema_version:
            # create_all above has already added any new partition tables
            await conn.execute(
                StoreMetadataModel.__table__.update()
                .where(StoreMetadataModel.name == self._store_name)
                .values(
                    schema_version=self._schema_version,
                    upgraded_at=datetime.now(timezone.utc),
                )
            )
            logger.info(
                "Cache store '%s' upgraded v%d → v%d",
                self._store_name,
                stored_version,
                self._schema_version,
            )

    async def close(self) -> None:
        await self._engine.dispose()
        self._initialized = False

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncSession]:
        """Open the store if needed and yield a session inside one transaction."""
        await self.initialize()
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    yield session
        except SQLAlchemyError as exc:
            raise StorageUnavailableError(self._store_name, str(exc)) from exc

    # ── Reads ───────────────────────────────────────────────────────

    async def get(self, partition: Partition | str, key: CacheKey) -> CacheRecord | None:
        spec = get_partition_spec(partition)
        async with self._transaction() as session:
            if spec.auto_increment:
                op_id = _as_int_key(key)
                model = await session.get(PendingOperationModel, op_id) if op_id is not None else None
                return _pending_to_record(model) if model else None
            model = await session.get(CacheRecordModel, (spec.partition.value, str(key)))
            return dict(model.data) if model else None

    async def get_all(self, partition: Partition | str) -> list[CacheRecord]:
        spec = get_partition_spec(partition)
        async with self._transaction() as session:
            if spec.auto_increment:
                result = await session.execute(
                    select(PendingOperationModel).order_by(PendingOperationModel.id)
                )
                return [_pending_to_record(m) for m in result.scalars().all()]
            result = await session.execute(
                select(CacheRecordModel)
                .where(CacheRecordModel.partition == spec.partition.value)
                .order_by(CacheRecordModel.key)
            )
            return [dict(m.data) for m in result.scalars().all()]

    async def get_all_by_index(
        self, partition: Partition | str, index_name: str, value: Any
    ) -> list[CacheRecord]:
        spec = get_partition_spec(partition)
        if index_name not in spec.indexes:
            raise ValueError(
                f"Partition '{spec.partition.value}' has no index '{index_name}'"
            )
        if isinstance(value, Enum):
            value = value.value

        async with self._transaction() as session:
            if spec.auto_increment:
                result = await session.execute(
                    select(PendingOperationModel)
                    .where(_PENDING_COLUMNS[index_name] == value)
                    .order_by(PendingOperationModel.id)
                )
                return [_pending_to_record(m) for m in result.scalars().all()]

            result = await session.execute(
                select(CacheRecordModel)
                .where(CacheRecordModel.partition == spec.partition.value)
                .where(_json_field_equals(index_name, value))
                .order_by(CacheRecordModel.key)
            )
            return [dict(m.data) for m in result.scalars().all()]

    # ── Writes ──────────────────────────────────────────────────────

    async def put(self, partition: Partition | str, record: CacheRecord) -> CacheKey:
        spec = get_partition_spec(partition)
        stored = {**record, "timestamp": capture_timestamp()}
        captured_at = datetime.now(timezone.utc)

        if spec.auto_increment:
            return await self._put_pending(stored, captured_at)

        key = _require_key(spec, stored)
        # Single-statement upsert: concurrent puts on one key are last-write-wins
        statement = sqlite_insert(CacheRecordModel).values(
            partition=spec.partition.value,
            key=str(key),
            data=stored,
            captured_at=captured_at,
        )
        statement = statement.on_conflict_do_update(
            index_elements=[CacheRecordModel.partition, CacheRecordModel.key],
            set_={
                "data": statement.excluded.data,
                "captured_at": statement.excluded.captured_at,
            },
        )
        async with self._transaction() as session:
            await session.execute(statement)
        logger.debug("Cached %s/%s", spec.partition.value, key)
        return key

    async def _put_pending(self, stored: CacheRecord, captured_at: datetime) -> int:
        if not stored.get("endpoint") or not stored.get("method"):
            raise ValueError("Pending operations need an 'endpoint' and a 'method'")
        op_id = None
        if stored.get("id") is not None:
            op_id = _as_int_key(stored["id"])
            if op_id is None:
                raise ValueError(f"Pending operation ids are integers, got {stored['id']!r}")

        async with self._transaction() as session:
            model = await session.get(PendingOperationModel, op_id) if op_id is not None else None
            # timestamp is the enqueue time; updates leave it alone
            if model is None:
                model = PendingOperationModel(id=op_id, timestamp=stored["timestamp"])
                session.add(model)

            model.type = str(stored.get("type") or "UNKNOWN")
            model.endpoint = stored["endpoint"]
            model.method = str(stored["method"]).upper()
            model.data = stored.get("data")
            model.attempts = stored.get("attempts") or 0
            model.last_error = stored.get("lastError")
            model.captured_at = captured_at
            await session.flush()
            return model.id

    async def delete(self, partition: Partition | str, key: CacheKey) -> None:
        spec = get_partition_spec(partition)
        async with self._transaction() as session:
            if spec.auto_increment:
                op_id = _as_int_key(key)
                if op_id is not None:
                    await session.execute(
                        delete(PendingOperationModel).where(PendingOperationModel.id == op_id)
                    )
            else:
                await session.execute(
                    delete(CacheRecordModel)
                    .where(CacheRecordModel.partition == spec.partition.value)
                    .where(CacheRecordModel.key == str(key))
                )

    async def clear_all(self) -> None:
        async with self._transaction() as session:
            await session.execute(delete(CacheRecordModel))
            await session.execute(delete(PendingOperationModel))
        logger.info("Cache store '%s' cleared", self._store_name)


def _require_key(spec: PartitionSpec, record: CacheRecord) -> CacheKey:
    key = record.get(spec.key_path)
    if key is None or key == "":
        raise ValueError(
            f"Record for partition '{spec.partition.value}' is missing key '{spec.key_path}'"
        )
    return key


def _as_int_key(key: CacheKey) -> int | None:
    """Pending operation ids are integers; anything else cannot match a row."""
    try:
        return int(key)
    except (TypeError, ValueError):
        return None


def _json_field_equals(field_name: str, value: Any):
    """SQL expression comparing a top-level JSON field of the record to value."""
    column = CacheRecordModel.data[field_name]
    if isinstance(value, bool):
        return column.as_boolean() == value
    if isinstance(value, int):
        return column.as_integer() == value
    if isinstance(value, float):
        return column.as_float() == value
    return column.as_string() == str(value)


def _pending_to_record(model: PendingOperationModel) -> CacheRecord:
    """Map ORM model → pendingOps record."""
    return {
        "id": model.id,
        "type": model.type,
        "data": model.data,
        "endpoint": model.endpoint,
        "method": model.method,
        "timestamp": model.timestamp,
        "attempts": model.attempts,
        "lastError": model.last_error,
    }
