"""Embedding service client (OpenAI-compatible /embeddings endpoint)."""
from typing import List, Optional

import httpx
from pydantic import BaseModel

from ragfs import config
from ragfs.errors import ContractViolationError, TransportError


class EmbeddingData(BaseModel):
    object: str = "embedding"
    embedding: List[float]


class EmbeddingResponse(BaseModel):
    object: str = "list"
    data: List[EmbeddingData]


class EmbeddingClient:
    """Sync client for an embedding server such as infinity-emb."""

    def __init__(
        self,
        base_url: str = None,
        model: str = None,
        timeout: float = None,
        http_client: Optional[httpx.Client] = None,
    ):
        """Initialize the embedding client.

        Args:
            base_url: Embedding API base URL (defaults to config.EMBEDDING_BASE_URL)
            model: Model identifier sent with every request (defaults to config.EMBEDDING_MODEL)
            timeout: Request timeout in seconds
            http_client: Optional shared httpx client; a short-lived one is used otherwise
        """
        self.base_url = (base_url or config.EMBEDDING_BASE_URL).rstrip("/")
        self.model = model or config.EMBEDDING_MODEL
        self.timeout = config.HTTP_TIMEOUT if timeout is None else timeout
        self._http = http_client

    def _post(self, payload: dict) -> httpx.Response:
        url = f"{self.base_url}/embeddings"
        if self._http is not None:
            return self._http.post(url, json=payload)
        with httpx.Client(timeout=self.timeout) as client:
            return client.post(url, json=payload)

    def embed_batch(self, texts: List[str]) -> List[List[float]]:
        """Embed a batch of texts in a single request.

        Args:
            texts: Strings to embed

        Returns:
            One vector per input, in input order

        Raises:
            TransportError: On connection failure or non-2xx status
            ContractViolationError: If the body is malformed or the vector
                count differs from the input count
        """
        if not texts:
            return []

        payload = {"model": self.model, "input": list(texts)}

        try:
            response = self._post(payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"Embedding request failed with status {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"Embedding request failed: {e}") from e

        try:
            parsed = EmbeddingResponse.model_validate(response.json())
        except ValueError as e:
            # ValidationError subclasses ValueError, as does JSONDecodeError
            raise ContractViolationError(f"Malformed embedding response: {e}") from e

        if len(parsed.data) != len(texts):
            raise ContractViolationError(
                f"Embedding response has {len(parsed.data)} vectors "
                f"for {len(texts)} inputs"
            )

        return [item.embedding for item in parsed.data]

    def embed_one(self, text: str) -> List[float]:
        """Embed a single query string."""
        return self.embed_batch([text])[0]
