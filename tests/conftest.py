from __future__ import annotations

import copy
import re
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, Callable

import pytest

_BASE_CREATED_AT = datetime(2024, 1, 1, tzinfo=timezone.utc)


class FakeQuery:
    """Minimal PostgREST query builder over in-memory rows."""

    def __init__(self, db: "FakeSupabase", table: str) -> None:
        self.db = db
        self.table = table
        self.filters: list[Callable[[dict], bool]] = []
        self.operation = "select"
        self.payload: Any = None
        self.ordering: tuple[str, bool] | None = None
        self.row_limit: int | None = None

    def select(self, columns: str = "*", count: str | None = None) -> "FakeQuery":
        self.operation = "select"
        return self

    def insert(self, payload: Any) -> "FakeQuery":
        self.operation = "insert"
        self.payload = payload
        return self

    def update(self, payload: dict) -> "FakeQuery":
        self.operation = "update"
        self.payload = payload
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def gt(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(lambda row: row.get(column) is not None and str(row[column]) > str(value))
        return self

    def ilike(self, column: str, pattern: str) -> "FakeQuery":
        regex = re.compile("^" + ".*".join(re.escape(part) for part in pattern.split("%")) + "$", re.IGNORECASE)
        self.filters.append(lambda row: bool(regex.match(str(row.get(column) or ""))))
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self.ordering = (column, desc)
        return self

    def limit(self, count: int) -> "FakeQuery":
        self.row_limit = count
        return self

    def _matching(self) -> list[dict]:
        return [row for row in self.db.rows(self.table) if all(check(row) for check in self.filters)]

    def execute(self) -> SimpleNamespace:
        if self.table in self.db.failing_tables:
            raise RuntimeError(f"connection to {self.table} failed")
        if self.operation == "insert":
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            return SimpleNamespace(data=[copy.deepcopy(self.db.add(self.table, item)) for item in items])
        if self.operation == "update":
            matched = self._matching()
            for row in matched:
                row.update(copy.deepcopy(self.payload))
            self.db.updates.append((self.table, copy.deepcopy(self.payload)))
            return SimpleNamespace(data=copy.deepcopy(matched))

        rows = self._matching()
        if self.ordering:
            column, desc = self.ordering
            rows = sorted(rows, key=lambda row: str(row.get(column) or ""), reverse=desc)
        if self.row_limit is not None:
            rows = rows[: self.row_limit]
        return SimpleNamespace(data=copy.deepcopy(rows))


class FakeBucket:
    def __init__(self, storage: "FakeStorage", name: str) -> None:
        self.storage = storage
        self.name = name

    def upload(self, path: str, payload: bytes, options: dict | None = None) -> dict:
        self.storage.objects[(self.name, path)] = payload
        return {"path": path}

    def get_public_url(self, path: str) -> str:
        return f"https://example.supabase.co/storage/v1/object/public/{self.name}/{path}"

    def remove(self, paths: list[str]) -> list[dict]:
        for path in paths:
            self.storage.objects.pop((self.name, path), None)
        return [{"name": path} for path in paths]


class FakeStorage:
    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], bytes] = {}

    def from_(self, bucket: str) -> FakeBucket:
        return FakeBucket(self, bucket)


class FakeSupabase:
    """In-memory stand-in for the supabase-py client."""

    def __init__(self, tables: dict[str, list[dict]] | None = None, rpc_results: dict[str, Any] | None = None) -> None:
        self.tables: dict[str, list[dict]] = {}
        self.rpc_results = rpc_results or {}
        self.rpc_calls: list[str] = []
        self.updates: list[tuple[str, dict]] = []
        self.failing_tables: set[str] = set()
        self.storage = FakeStorage()
        self._sequence = 0
        for name, rows in (tables or {}).items():
            for row in rows:
                self.add(name, row)

    def rows(self, table: str) -> list[dict]:
        return self.tables.setdefault(table, [])

    def add(self, table: str, row: dict) -> dict:
        self._sequence += 1
        stored = copy.deepcopy(row)
        stored.setdefault("id", f"{table}-{self._sequence}")
        stored.setdefault("created_at", (_BASE_CREATED_AT + timedelta(seconds=self._sequence)).isoformat())
        self.rows(table).append(stored)
        return stored

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, name: str, params: dict | None = None) -> SimpleNamespace:
        self.rpc_calls.append(name)
        result = self.rpc_results.get(name)
        return SimpleNamespace(execute=lambda: SimpleNamespace(data=result))


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


def make_order_row(**overrides: Any) -> dict:
    row = {
        "id": "order-1",
        "no_tempahan": "010524-00001",
        "id_sale": "SALE001",
        "marketer_name": "Ali Bin Abu",
        "no_phone": "0123456789",
        "alamat": "No 1, Jalan Mawar, Taman Bunga",
        "poskod": "50000",
        "bandar": "Kuala Lumpur",
        "negeri": "WP Kuala Lumpur",
        "harga_jualan_sebenar": 99.9,
        "cara_bayaran": "COD",
        "produk": "Bundle A",
        "marketer_id": "user-1",
        "marketer_id_staff": "ST01",
        "no_tracking": None,
        "delivery_status": "Pending",
        "tarikh_tempahan": "1/5/2024",
    }
    row.update(overrides)
    return row


COURIER_CONFIG_ROW = {
    "client_id": "client-abc",
    "client_secret": "secret-xyz",
    "sender_name": "Kedai Kita",
    "sender_phone": "0311112222",
    "sender_email": "ops@kedai.test",
    "sender_address1": "Lot 5, Jalan Industri",
    "sender_address2": "",
    "sender_postcode": "40000",
    "sender_city": "Shah Alam",
    "sender_state": "Selangor",
}
