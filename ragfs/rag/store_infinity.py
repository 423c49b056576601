"""Infinity vector/fulltext store client.

Handles:
- Row insertion (text + dense vector + source metadata)
- Text, dense and hybrid (fused) search requests
- Normalizing Infinity's per-row column lists into VectorRow objects
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional, Sequence, Union

import httpx
from pydantic import BaseModel, ConfigDict, Field

from ragfs import config
from ragfs.errors import ContractViolationError, StoreError, TransportError

NAME_COLUMN = "name"
INDEX_COLUMN = "index"
TEXT_COLUMN = "fulltext_column"
VECTOR_COLUMN = "dense_column"

DEFAULT_OUTPUT = [NAME_COLUMN, INDEX_COLUMN, TEXT_COLUMN]
SEARCH_METHODS = ("text", "dense", "hybrid")


@dataclass(frozen=True)
class VectorRow:
    """One stored chunk: source name, chunk index, text and embedding."""

    name: str
    index: int
    text: str
    vector: Optional[List[float]] = None

    def to_payload(self) -> Dict[str, Any]:
        """Serialize for the insert endpoint."""
        if self.vector is None:
            raise ValueError(f"Row {self.name}#{self.index} has no vector to insert")
        return {
            NAME_COLUMN: self.name,
            TEXT_COLUMN: self.text,
            INDEX_COLUMN: self.index,
            VECTOR_COLUMN: list(self.vector),
        }


class _Clause(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class TextMatch(_Clause):
    """Full-text match over a text column."""

    match_method: Literal["text"] = "text"
    field: str = Field(default=TEXT_COLUMN, serialization_alias="fields")
    matching_text: str
    topn: int
    params: Dict[str, str] = Field(default_factory=dict)


class DenseMatch(_Clause):
    """Vector similarity match over a dense column."""

    match_method: Literal["dense"] = "dense"
    field: str = Field(default=VECTOR_COLUMN, serialization_alias="fields")
    query_vector: List[float]
    element_type: Literal["float", "int8", "uint8"] = "float"
    metric_type: Literal["l2", "ip", "cosine"] = "l2"
    topn: int
    params: Dict[str, str] = Field(default_factory=dict)


class FusionMatch(_Clause):
    """Fuses the results of the preceding match clauses."""

    fusion_method: Literal["rrf", "weighted_sum"] = "rrf"
    topn: int
    params: Dict[str, str] = Field(default_factory=dict)


MatchClause = Union[TextMatch, DenseMatch, FusionMatch]


class SearchRequest(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    output: List[str] = Field(default_factory=lambda: list(DEFAULT_OUTPUT))
    search: List[MatchClause]
    filter: Optional[str] = None
    highlight: Optional[List[str]] = None

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class StoreResponse(BaseModel):
    error_code: int
    error_msg: Optional[str] = None


class SearchResponse(StoreResponse):
    output: Optional[List[Any]] = None
    total_hits_count: int = 0


def build_search_request(
    method: str = "text",
    query_vector: Optional[Sequence[float]] = None,
    query_text: Optional[str] = None,
    top_n: int = 2,
    output: Optional[List[str]] = None,
    filter: Optional[str] = None,
    highlight: Optional[List[str]] = None,
) -> SearchRequest:
    """Build the match clauses for a search method.

    Args:
        method: "text", "dense" or "hybrid" (text + dense fused with RRF)
        query_vector: Query embedding (dense and hybrid)
        query_text: Query text (text and hybrid)
        top_n: Maximum rows per clause
        output: Columns to return (default name, index, fulltext_column)
        filter: Optional Infinity filter expression
        highlight: Optional columns to highlight

    Raises:
        ValueError: On unknown method or missing query input
    """
    if method not in SEARCH_METHODS:
        raise ValueError(f"Unknown search method '{method}', expected one of {SEARCH_METHODS}")
    if method in ("text", "hybrid") and query_text is None:
        raise ValueError(f"Search method '{method}' requires query_text")
    if method in ("dense", "hybrid") and query_vector is None:
        raise ValueError(f"Search method '{method}' requires query_vector")

    clauses: List[MatchClause] = []
    if method in ("text", "hybrid"):
        clauses.append(TextMatch(matching_text=query_text, topn=top_n))
    if method in ("dense", "hybrid"):
        clauses.append(DenseMatch(query_vector=list(query_vector), topn=top_n))
    if method == "hybrid":
        clauses.append(FusionMatch(topn=top_n))

    return SearchRequest(
        output=output or list(DEFAULT_OUTPUT),
        search=clauses,
        filter=filter,
        highlight=highlight,
    )


def flatten_columns(columns: Any) -> Dict[str, Any]:
    """Merge one output row, a list of single-key column mappings, into a dict.

    Infinity returns rows as ``[{"name": ...}, {"index": ...}, {"fulltext_column": ...}]``.
    """
    if not isinstance(columns, list):
        raise ContractViolationError(
            f"Search row must be a list of columns, got {type(columns).__name__}"
        )
    merged: Dict[str, Any] = {}
    for column in columns:
        if not isinstance(column, dict):
            raise ContractViolationError(
                f"Search column must be a mapping, got {type(column).__name__}"
            )
        merged.update(column)
    return merged


def _require(row: Dict[str, Any], key: str, kinds: tuple, expected: str) -> Any:
    if key not in row:
        raise ContractViolationError(f"Search row is missing column '{key}'")
    value = row[key]
    if not isinstance(value, kinds) or isinstance(value, bool):
        raise ContractViolationError(
            f"Search column '{key}' must be {expected}, got {type(value).__name__}"
        )
    return value


def row_from_columns(columns: Any) -> VectorRow:
    """Turn one raw output row into a VectorRow, validating every field."""
    row = flatten_columns(columns)

    index = _require(row, INDEX_COLUMN, (int, float), "an integer")
    if isinstance(index, float):
        if not index.is_integer():
            raise ContractViolationError(f"Search column '{INDEX_COLUMN}' is not integral: {index}")
        index = int(index)

    return VectorRow(
        name=_require(row, NAME_COLUMN, (str,), "a string"),
        index=index,
        text=_require(row, TEXT_COLUMN, (str,), "a string"),
    )


class InfinityStore:
    """Client for one Infinity table accessed over the HTTP API."""

    def __init__(
        self,
        base_url: str = None,
        database: str = None,
        table: str = None,
        timeout: float = None,
        http_client: Optional[httpx.Client] = None,
    ):
        """Initialize the store client.

        Args:
            base_url: Infinity HTTP base URL (default from config)
            database: Database name (default from config)
            table: Table name (default from config)
            timeout: Request timeout in seconds
            http_client: Optional shared httpx client
        """
        self.base_url = (base_url or config.INFINITY_BASE_URL).rstrip("/")
        self.database = database or config.INFINITY_DATABASE
        self.table = table or config.INFINITY_TABLE
        self.timeout = config.HTTP_TIMEOUT if timeout is None else timeout
        self._http = http_client

    @property
    def docs_url(self) -> str:
        return f"{self.base_url}/databases/{self.database}/tables/{self.table}/docs"

    def _request(self, method: str, payload: Any) -> httpx.Response:
        try:
            if self._http is not None:
                return self._http.request(method, self.docs_url, json=payload)
            with httpx.Client(timeout=self.timeout) as client:
                return client.request(method, self.docs_url, json=payload)
        except httpx.HTTPError as e:
            raise TransportError(f"Store request failed: {e}") from e

    def _parse(self, response: httpx.Response, model: type, operation: str):
        """Validate the body and surface store-reported errors.

        A non-zero error_code wins over the HTTP status, since Infinity
        reports application errors with 4xx/5xx statuses as well.
        """
        try:
            parsed = model.model_validate(response.json())
        except ValueError as e:
            if response.is_error:
                raise TransportError(
                    f"Store returned status {response.status_code}",
                    status_code=response.status_code,
                ) from e
            raise ContractViolationError(f"Malformed store response: {e}") from e

        if parsed.error_code != 0:
            raise StoreError(operation, parsed.error_code, parsed.error_msg)
        if response.is_error:
            raise TransportError(
                f"Store returned status {response.status_code}",
                status_code=response.status_code,
            )
        return parsed

    def insert(self, rows: Sequence[VectorRow]) -> None:
        """Insert rows in one request.

        Raises:
            StoreError: If the store reports a non-zero error code
            TransportError: On connection failure or non-2xx status
            ContractViolationError: If the response body is malformed
        """
        if not rows:
            return
        payload = [row.to_payload() for row in rows]
        response = self._request("POST", payload)
        self._parse(response, StoreResponse, "inserting embeddings")

    def search(
        self,
        query_vector: Optional[Sequence[float]] = None,
        query_text: Optional[str] = None,
        top_n: int = 2,
        method: str = "text",
        output: Optional[List[str]] = None,
        filter: Optional[str] = None,
        highlight: Optional[List[str]] = None,
    ) -> List[VectorRow]:
        """Search the table and return rows in the store's ranking order.

        Raises:
            ValueError: If the method's query input is missing
            StoreError: If the store reports a non-zero error code
            TransportError: On connection failure or non-2xx status
            ContractViolationError: If a row is missing or mistypes a field
        """
        request = build_search_request(
            method=method,
            query_vector=query_vector,
            query_text=query_text,
            top_n=top_n,
            output=output,
            filter=filter,
            highlight=highlight,
        )
        response = self._request("GET", request.to_payload())
        parsed = self._parse(response, SearchResponse, "searching")
        if parsed.output is None:
            raise ContractViolationError("Search response has no output field")

        return [row_from_columns(columns) for columns in parsed.output]
