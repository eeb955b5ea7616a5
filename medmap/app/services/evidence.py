import logging
from typing import List

import requests
from duckduckgo_search import DDGS

from .. import config
from ..schemas.verification import EvidenceResult, Source

logger = logging.getLogger("medmap.evidence")


def build_search_query(query: str, domains=None) -> str:
    domains = config.TRUSTED_DOMAINS if domains is None else domains
    site_clause = " OR ".join(f"site:{d}" for d in domains)
    return f"{query} {site_clause}"


class EvidenceFetcher:
    """
    Looks up supporting snippets on a small allow-list of medical sites.

    search() never raises: a failing search service yields an empty result
    whose status says why, so callers can carry on without evidence.
    """

    def __init__(self, provider=None, api_key=None, engine_id=None,
                 timeout=None, limit=None, session=None):
        self.provider = (provider or config.SEARCH_PROVIDER).lower()
        self.api_key = api_key if api_key is not None else config.GOOGLE_API_KEY
        self.engine_id = engine_id if engine_id is not None else config.GOOGLE_SEARCH_ENGINE_ID
        self.timeout = timeout or config.SEARCH_TIMEOUT
        self.limit = limit or config.SEARCH_RESULT_LIMIT
        self.session = session or requests.Session()

    def search(self, query: str) -> EvidenceResult:
        if self.provider == "google" and not (self.api_key and self.engine_id):
            logger.info("Google search is not configured, skipping evidence lookup")
            return EvidenceResult(sources=[], status="disabled")

        search_query = build_search_query(query)
        try:
            if self.provider == "duckduckgo":
                sources = self._search_duckduckgo(search_query)
            elif self.provider == "google":
                sources = self._search_google(search_query)
            else:
                raise ValueError(f"Unknown search provider: {self.provider}")
        except Exception as e:
            logger.warning("Search error for %r: %s", query, e)
            return EvidenceResult(sources=[], status="unavailable")

        return EvidenceResult(sources=sources, status="ok" if sources else "empty")

    def _search_google(self, search_query: str) -> List[Source]:
        response = self.session.get(
            config.GOOGLE_SEARCH_URL,
            params={
                "key": self.api_key,
                "cx": self.engine_id,
                "q": search_query,
                "num": self.limit,
            },
            timeout=self.timeout,
        )
        response.raise_for_status()
        items = response.json().get("items") or []
        return [
            Source(
                title=item.get("title") or "",
                url=item.get("link") or "",
                snippet=item.get("snippet") or "",
            )
            for item in items[: self.limit]
        ]

    def _search_duckduckgo(self, search_query: str) -> List[Source]:
        results = DDGS().text(search_query, max_results=self.limit) or []
        return [
            Source(
                title=r.get("title") or "",
                url=r.get("href") or "",
                snippet=r.get("body") or "",
            )
            for r in results[: self.limit]
        ]
