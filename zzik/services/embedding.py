"""
Embedding Provider - ZZIK Scoring Service
zzik/services/embedding.py

Turns popup descriptions into vibe vectors when the feed has none.
HttpEmbeddingProvider POSTs {"input": text} and reads "embedding" from the
JSON response. Every failure is raised as EmbeddingProviderError so the
caller can score without an AI boost.
"""

from typing import List, Optional, Protocol

import httpx
import structlog

from zzik.core.exceptions import EmbeddingProviderError

logger = structlog.get_logger(__name__)


class EmbeddingProvider(Protocol):
    def embed(self, text: str) -> List[float]:
        ...


class HttpEmbeddingProvider:
    """Embedding client over httpx."""

    def __init__(
        self,
        url: str,
        api_key: Optional[str] = None,
        timeout: float = 5.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.url = url
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._client = client or httpx.Client(timeout=timeout)
        self._headers = headers

    def embed(self, text: str) -> List[float]:
        if not text or not text.strip():
            raise EmbeddingProviderError("Cannot embed empty text")

        try:
            resp = self._client.post(self.url, json={"input": text}, headers=self._headers)
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPStatusError as e:
            raise EmbeddingProviderError(
                f"Embedding API returned {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise EmbeddingProviderError(f"Embedding API request failed: {e}") from e
        except ValueError as e:
            raise EmbeddingProviderError("Embedding API returned invalid JSON") from e

        embedding = payload.get("embedding") if isinstance(payload, dict) else None
        if not isinstance(embedding, list) or not embedding:
            raise EmbeddingProviderError("Embedding API response has no 'embedding' list")

        try:
            vector = [float(v) for v in embedding]
        except (TypeError, ValueError) as e:
            raise EmbeddingProviderError("Embedding values must be numeric") from e

        logger.debug("embedding_fetched", dimensions=len(vector))
        return vector

    def close(self) -> None:
        self._client.close()
