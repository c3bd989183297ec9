"""
In-memory stand-in for the Supabase async query builder, used only by the tests.

Supports the subset the app uses: table().select/insert/update/delete, eq, is_ and execute.
Unique indexes raise postgrest's APIError with code 23505 like the real store does.
"""
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from postgrest.exceptions import APIError

TABLE_DEFAULTS = {
    "habits": {"description": None, "time_of_day": "anytime", "streak": 0, "last_completed": None},
    "users": {"timezone": "UTC"},
}

UNIQUE_INDEXES = {
    "habits": [("user_id", "name")],
    "users": [("email",)],
    "blacklisted_tokens": [("token",)],
}

def _norm(value):
    return None if value is None else str(value)

class FakeResponse:
    def __init__(self, data):
        self.data = data

class FakeQuery:
    def __init__(self, client: "FakeAsyncClient", table: str):
        self._client = client
        self._table = table
        self._op = "select"
        self._payload = None
        self._filters: List[Callable[[dict], bool]] = []

    def select(self, *columns, **kwargs):
        return self

    def insert(self, payload):
        self._op = "insert"
        self._payload = payload
        return self

    def update(self, payload):
        self._op = "update"
        self._payload = payload
        return self

    def delete(self):
        self._op = "delete"
        return self

    def eq(self, column, value):
        self._filters.append(lambda row: _norm(row.get(column)) == _norm(value))
        return self

    def is_(self, column, value):
        if value not in ("null", None):
            raise NotImplementedError("only IS NULL is supported")
        self._filters.append(lambda row: row.get(column) is None)
        return self

    def _matches(self, row: dict) -> bool:
        return all(check(row) for check in self._filters)

    def _check_unique(self, rows: List[dict], candidate: dict, ignore: Optional[dict] = None):
        for columns in UNIQUE_INDEXES.get(self._table, []):
            key = tuple(_norm(candidate.get(c)) for c in columns)
            for row in rows:
                if row is ignore:
                    continue
                if tuple(_norm(row.get(c)) for c in columns) == key:
                    raise APIError({
                        "message": f'duplicate key value violates unique constraint "{self._table}_{"_".join(columns)}_key"',
                        "code": "23505",
                        "hint": None,
                        "details": f"Key {columns}={key} already exists.",
                    })

    async def execute(self) -> FakeResponse:
        self._client.calls.append((self._table, self._op))
        hook = self._client.hooks.pop((self._table, self._op), None)
        if hook is not None:
            hook(self._client)

        rows = self._client.tables.setdefault(self._table, [])

        if self._op == "select":
            return FakeResponse([dict(row) for row in rows if self._matches(row)])

        self._client.writes += 1

        if self._op == "insert":
            payloads = self._payload if isinstance(self._payload, list) else [self._payload]
            inserted = []
            for payload in payloads:
                row = {
                    "id": str(uuid.uuid4()),
                    "created_at": datetime.now(timezone.utc).isoformat(),
                    **TABLE_DEFAULTS.get(self._table, {}),
                    **payload,
                }
                self._check_unique(rows, row)
                rows.append(row)
                inserted.append(dict(row))
            return FakeResponse(inserted)

        if self._op == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    self._check_unique(rows, {**row, **self._payload}, ignore=row)
                    row.update(self._payload)
                    updated.append(dict(row))
            return FakeResponse(updated)

        if self._op == "delete":
            deleted = [row for row in rows if self._matches(row)]
            self._client.tables[self._table] = [row for row in rows if not self._matches(row)]
            return FakeResponse([dict(row) for row in deleted])

        raise NotImplementedError(self._op)

class FakeAsyncClient:
    def __init__(self):
        self.tables: Dict[str, List[dict]] = {}
        self.calls = []
        self.writes = 0
        # (table, op) -> callable run once right before that kind of query executes
        self.hooks: Dict[tuple, Callable[["FakeAsyncClient"], None]] = {}

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rows(self, name: str) -> List[dict]:
        return self.tables.setdefault(name, [])
