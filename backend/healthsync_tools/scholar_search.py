from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass, field
from typing import Any

import httpx

from healthsync_core.errors import InvalidInput, ServiceUnavailable, UpstreamError

logger = logging.getLogger(__name__)

SERPAPI_SEARCH_URL = "https://serpapi.com/search.json"

_YEAR_RE = re.compile(r"\d{4}")


@dataclass
class ResearchPaper:
    title: str | None
    link: str | None
    snippet: str | None
    publication: str = ""
    citedBy: int = 0
    authors: list[dict[str, Any]] = field(default_factory=list)
    year: str = ""


def _safe_int(value: Any) -> int:
    try:
        if value is None:
            return 0
        return int(value)
    except (TypeError, ValueError):
        return 0


def _paper_from_result(result: dict[str, Any]) -> ResearchPaper:
    publication_info = result.get("publication_info") if isinstance(result.get("publication_info"), dict) else {}
    summary = publication_info.get("summary") or ""
    inline_links = result.get("inline_links") if isinstance(result.get("inline_links"), dict) else {}
    cited_by = inline_links.get("cited_by") if isinstance(inline_links.get("cited_by"), dict) else {}
    year_match = _YEAR_RE.search(summary) if isinstance(summary, str) else None
    authors = publication_info.get("authors")
    return ResearchPaper(
        title=result.get("title"),
        link=result.get("link"),
        snippet=result.get("snippet"),
        publication=summary if isinstance(summary, str) else "",
        citedBy=_safe_int(cited_by.get("total")),
        authors=authors if isinstance(authors, list) else [],
        year=year_match.group(0) if year_match else "",
    )


class ScholarSearch:
    """Google Scholar search through SerpAPI."""

    def __init__(
        self,
        *,
        api_key: str | None,
        timeout_seconds: float = 15.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._api_key = (api_key or "").strip()
        self._client = httpx.Client(
            timeout=httpx.Timeout(timeout_seconds, connect=8.0),
            transport=transport,
        )

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def search(self, query: Any, *, num: int = 100) -> list[dict[str, Any]]:
        cleaned = query.strip() if isinstance(query, str) else ""
        if not cleaned:
            raise InvalidInput("Search query is required")
        if not self.configured:
            raise ServiceUnavailable("SerpAPI key not configured")

        params = {"engine": "google_scholar", "q": cleaned, "api_key": self._api_key, "num": num}
        try:
            response = self._client.get(SERPAPI_SEARCH_URL, params=params)
        except httpx.HTTPError as exc:
            logger.warning("scholar search unreachable: %s", exc.__class__.__name__)
            raise UpstreamError("Failed to fetch research papers") from exc
        if response.status_code >= 400:
            logger.warning("scholar search error status=%s", response.status_code)
            raise UpstreamError("Failed to fetch research papers")
        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError("Failed to fetch research papers") from exc

        results = data.get("organic_results") if isinstance(data, dict) else None
        papers = [
            asdict(_paper_from_result(result))
            for result in (results if isinstance(results, list) else [])
            if isinstance(result, dict)
        ]
        logger.info("scholar search returned %d papers", len(papers))
        return papers

    def close(self) -> None:
        self._client.close()
