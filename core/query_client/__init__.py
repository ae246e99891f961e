"""
GuestDesk Query Client - Data-Access Boundary
=============================================
The hotel backend is reached through a generic relational query/RPC
client. GuestDesk only depends on this protocol; the concrete client
(PostgREST, SQL, HTTP) is an external collaborator.

Rows come back as plain dicts. They are converted into typed records
(core.primitives.stay) by the services, never passed further untyped.
"""

from __future__ import annotations

import copy
import threading
from typing import Any, Callable, Iterable, Mapping, Protocol, Sequence

OrderBy = Sequence[tuple[str, bool]]  # (column, ascending)
RpcHandler = Callable[[dict[str, Any]], dict[str, Any]]


class QueryClientError(Exception):
    """The backend refused or failed a query or RPC call."""

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(f"{operation} failed: {detail}")


class QueryClient(Protocol):
    def select(
        self,
        relation: str,
        *,
        eq: Mapping[str, Any] | None = None,
        in_: Mapping[str, Iterable[Any]] | None = None,
        order: OrderBy = (),
    ) -> list[dict[str, Any]]:
        ...

    def rpc(self, function: str, params: Mapping[str, Any]) -> dict[str, Any]:
        ...


def _order_key(column: str):
    def key(row: Mapping[str, Any]):
        value = row.get(column)
        return (value is None, "" if value is None else value)
    return key


class InMemoryQueryClient:
    """
    Deterministic in-memory backend used for local wiring and tests.

    RPC functions are plain callables registered by name; a handler
    signals a backend refusal by raising QueryClientError.
    """

    def __init__(
        self,
        tables: Mapping[str, Iterable[Mapping[str, Any]]] | None = None,
        rpc_handlers: Mapping[str, RpcHandler] | None = None,
    ):
        self._tables: dict[str, list[dict[str, Any]]] = {
            name: [dict(row) for row in rows]
            for name, rows in (tables or {}).items()
        }
        self._rpc_handlers: dict[str, RpcHandler] = dict(rpc_handlers or {})
        self._rpc_calls: list[tuple[str, dict[str, Any]]] = []
        self._lock = threading.Lock()

    def insert(self, relation: str, row: Mapping[str, Any]) -> None:
        with self._lock:
            self._tables.setdefault(relation, []).append(dict(row))

    def update(
        self, relation: str, eq: Mapping[str, Any], values: Mapping[str, Any]
    ) -> int:
        """Used by in-process RPC handlers; returns the number of rows changed."""
        changed = 0
        with self._lock:
            for row in self._tables.get(relation, []):
                if all(row.get(column) == expected for column, expected in eq.items()):
                    row.update(values)
                    changed += 1
        return changed

    def register_rpc(self, function: str, handler: RpcHandler) -> None:
        with self._lock:
            self._rpc_handlers[function] = handler

    @property
    def rpc_calls(self) -> tuple[tuple[str, dict[str, Any]], ...]:
        with self._lock:
            return tuple(copy.deepcopy(self._rpc_calls))

    def select(
        self,
        relation: str,
        *,
        eq: Mapping[str, Any] | None = None,
        in_: Mapping[str, Iterable[Any]] | None = None,
        order: OrderBy = (),
    ) -> list[dict[str, Any]]:
        with self._lock:
            rows = [dict(row) for row in self._tables.get(relation, [])]

        for column, expected in (eq or {}).items():
            rows = [row for row in rows if row.get(column) == expected]
        for column, allowed in (in_ or {}).items():
            allowed_set = set(allowed)
            rows = [row for row in rows if row.get(column) in allowed_set]

        # Stable sorts applied last-key-first give a multi-column order.
        for column, ascending in reversed(list(order)):
            rows.sort(key=_order_key(column), reverse=not ascending)
        return rows

    def rpc(self, function: str, params: Mapping[str, Any]) -> dict[str, Any]:
        with self._lock:
            handler = self._rpc_handlers.get(function)
            self._rpc_calls.append((function, dict(params)))
        if handler is None:
            raise QueryClientError(f"rpc {function}", "function does not exist")
        return handler(dict(params))
