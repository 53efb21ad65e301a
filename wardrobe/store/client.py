"""Record store client.

``RecordStore`` is the domain-facing contract (find, query, create, update,
delete, plus a batched multi-id lookup built on query). ``AirtableStore``
implements it against the Airtable REST API with an ``httpx.AsyncClient``.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Optional
from urllib.parse import quote as url_quote

import httpx

from wardrobe.logging import get_logger
from wardrobe.store.formula import Expr, RecordIdIn, chunk_ids, render

logger = get_logger(__name__)

# Store-side maximum for a single page
MAX_PAGE_SIZE = 100


@dataclass
class Record:
    """A raw store record: id, creation time and untyped fields."""

    id: str
    fields: dict[str, Any] = field(default_factory=dict)
    created_time: Optional[datetime] = None

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "Record":
        created = payload.get("createdTime")
        created_time = None
        if created:
            created_time = datetime.fromisoformat(created.replace("Z", "+00:00"))
        return cls(
            id=payload["id"],
            fields=dict(payload.get("fields") or {}),
            created_time=created_time,
        )


class StoreError(Exception):
    """Raised when the record store rejects or fails a request.

    Attributes:
        message: Human-readable description
        status_code: HTTP status to surface to the gateway's client
        error_code: Machine-readable code
        details: Extra context (never includes credentials)
    """

    error_code = "STORE_ERROR"
    status_code = 502

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}


class RecordNotFoundError(StoreError):
    """The store reports no record with the requested id."""

    error_code = "NOT_FOUND"
    status_code = 404

    def __init__(self, table: str, record_id: str):
        super().__init__(
            f"Record {record_id} not found in {table}",
            details={"table": table, "id": record_id},
        )
        self.table = table
        self.record_id = record_id


class RecordStore(ABC):
    """Domain operations against a table-oriented record store."""

    @abstractmethod
    async def find(self, table: str, record_id: str) -> Record:
        """Fetch one record. Raises RecordNotFoundError if absent."""

    @abstractmethod
    async def query(
        self,
        table: str,
        filter_expr: Optional[Expr] = None,
        page_size: int = MAX_PAGE_SIZE,
        max_records: Optional[int] = None,
    ) -> list[Record]:
        """Return records matching the filter, following pagination."""

    @abstractmethod
    async def create(self, table: str, fields: dict[str, Any]) -> Record:
        """Create a record and return it as stored."""

    @abstractmethod
    async def update(self, table: str, record_id: str, fields: dict[str, Any]) -> Record:
        """Patch the given fields on a record and return it as stored."""

    @abstractmethod
    async def delete(self, table: str, record_id: str) -> None:
        """Delete a record. Raises RecordNotFoundError if absent."""

    async def find_many(self, table: str, record_ids: Iterable[str]) -> list[Record]:
        """Resolve many ids with chunked OR-clauses issued concurrently.

        Ids are de-duplicated. Output order is not tied to input order and
        ids that do not resolve are simply absent from the result.
        """
        chunks = list(chunk_ids(record_ids))
        if not chunks:
            return []
        results = await asyncio.gather(
            *(
                self.query(table, RecordIdIn(chunk), page_size=len(chunk))
                for chunk in chunks
            )
        )
        return [record for batch in results for record in batch]

    async def close(self) -> None:
        """Release transport resources."""


class AirtableStore(RecordStore):
    """RecordStore backed by the Airtable REST API."""

    def __init__(
        self,
        api_key: str,
        base_id: str,
        api_url: str = "https://api.airtable.com/v0",
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        self.base_id = base_id
        self.api_url = api_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    def _table_url(self, table: str, record_id: Optional[str] = None) -> str:
        url = f"{self.api_url}/{url_quote(self.base_id, safe='')}/{url_quote(table, safe='')}"
        if record_id:
            url += f"/{url_quote(record_id, safe='')}"
        return url

    async def _request(
        self,
        method: str,
        table: str,
        record_id: Optional[str] = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        url = self._table_url(table, record_id)
        try:
            response = await self._client.request(
                method, url, headers=self._headers, **kwargs
            )
        except httpx.HTTPError as e:
            logger.error("store_transport_error", method=method, table=table, error=str(e))
            raise StoreError(
                "Record store unreachable",
                details={"table": table, "reason": type(e).__name__},
            ) from e

        if response.status_code == 404 and record_id:
            raise RecordNotFoundError(table, record_id)

        if response.status_code >= 400:
            detail = _error_detail(response)
            logger.warning(
                "store_request_failed",
                method=method,
                table=table,
                status=response.status_code,
                detail=detail,
            )
            raise StoreError(
                f"Record store returned {response.status_code}",
                details={"table": table, "status": response.status_code, "detail": detail},
            )

        return response.json()

    async def find(self, table: str, record_id: str) -> Record:
        payload = await self._request("GET", table, record_id)
        return Record.from_api(payload)

    async def query(
        self,
        table: str,
        filter_expr: Optional[Expr] = None,
        page_size: int = MAX_PAGE_SIZE,
        max_records: Optional[int] = None,
    ) -> list[Record]:
        params: dict[str, Any] = {"pageSize": max(1, min(page_size, MAX_PAGE_SIZE))}
        formula = render(filter_expr)
        if formula:
            params["filterByFormula"] = formula
        if max_records:
            params["maxRecords"] = max_records

        records: list[Record] = []
        while True:
            payload = await self._request("GET", table, params=params)
            records.extend(Record.from_api(item) for item in payload.get("records", []))
            offset = payload.get("offset")
            if not offset or (max_records and len(records) >= max_records):
                break
            params["offset"] = offset

        if max_records:
            records = records[:max_records]
        return records

    async def create(self, table: str, fields: dict[str, Any]) -> Record:
        payload = await self._request(
            "POST", table, json={"fields": fields, "typecast": True}
        )
        return Record.from_api(payload)

    async def update(self, table: str, record_id: str, fields: dict[str, Any]) -> Record:
        payload = await self._request(
            "PATCH", table, record_id, json={"fields": fields, "typecast": True}
        )
        return Record.from_api(payload)

    async def delete(self, table: str, record_id: str) -> None:
        await self._request("DELETE", table, record_id)

    async def close(self) -> None:
        await self._client.aclose()


def _error_detail(response: httpx.Response) -> str:
    """Short description of a store error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return str(error.get("message") or error.get("type") or error)[:200]
    if error:
        return str(error)[:200]
    return str(body)[:200]
