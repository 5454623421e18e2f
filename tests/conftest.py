import os

os.environ.setdefault("PAWLINK_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from pawlink.db.store import RecordStore
from pawlink.errors import StoreError, StoreErrorKind
from pawlink.models import Base


class FlakyStore(RecordStore):
    """RecordStore that fails chosen (operation, entity) pairs on demand."""

    def __init__(self, session_factory):
        super().__init__(session_factory)
        self.failures: dict[tuple[str, str], StoreErrorKind] = {}

    def fail_on(self, op: str, entity: str, kind: StoreErrorKind = StoreErrorKind.CONNECTION_FAILURE):
        self.failures[(op, entity)] = kind

    def heal(self):
        self.failures.clear()

    def _maybe_fail(self, op: str, entity: str):
        kind = self.failures.get((op, entity))
        if kind is not None:
            raise StoreError(f"simulated {op} failure on {entity}", kind=kind)

    async def insert(self, entity, records):
        self._maybe_fail("insert", entity)
        return await super().insert(entity, records)

    async def select(self, entity, filters=None, order_by=None, descending=False, limit=None):
        self._maybe_fail("select", entity)
        return await super().select(entity, filters, order_by, descending, limit)

    async def update(self, entity, id_filter, fields):
        self._maybe_fail("update", entity)
        return await super().update(entity, id_filter, fields)

    async def delete(self, entity, id_filter):
        self._maybe_fail("delete", entity)
        return await super().delete(entity, id_filter)


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    yield factory
    await engine.dispose()


@pytest.fixture
def store(session_factory):
    return FlakyStore(session_factory)


@pytest_asyncio.fixture
async def profiles(store):
    """Seed one actor per role plus a second rescuer and a shelter."""
    rows = await store.insert("profiles", [
        {"id": "citizen-1", "full_name": "Nimali Perera", "avatar_url": "https://img.example/nimali.png", "role": "user"},
        {"id": "citizen-2", "full_name": "Kasun Silva", "role": "citizen"},
        {"id": "rescuer-1", "full_name": "Paws Rescue Team", "role": "rescuer"},
        {"id": "rescuer-2", "full_name": "Street Dog Aid", "role": "rescuer"},
        {"id": "shelter-1", "full_name": "Happy Tails Shelter", "role": "shelter"},
        {"id": "vet-1", "full_name": "Dr. Fernando", "role": "vet"},
        {"id": "admin-1", "full_name": "Admin", "role": "admin"},
    ])
    return {r["id"]: r for r in rows}


@pytest.fixture
def make_report(store):
    """Insert a report with an explicit created_at offset (minutes ago)."""
    base = datetime(2025, 5, 30, 12, 0, tzinfo=timezone.utc)

    async def _make(
        report_id: str,
        assigned_to: str | None = "rescuer-1",
        minutes_ago: int = 0,
        reporter: str = "citizen-1",
        **fields,
    ):
        record = {
            "id": report_id,
            "user_id": reporter,
            "description": fields.pop("description", f"Injured dog ({report_id})"),
            "location": fields.pop("location", "Galle Face Green"),
            "urgency": fields.pop("urgency", "high"),
            "status": fields.pop("status", "pending"),
            "assigned_rescuer_id": assigned_to,
            "created_at": base - timedelta(minutes=minutes_ago),
            **fields,
        }
        rows = await store.insert("reports", [record])
        return rows[0]

    return _make
