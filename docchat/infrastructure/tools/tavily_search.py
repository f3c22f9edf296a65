import json
import logging
from typing import Any

import httpx
from pydantic import BaseModel, Field, ValidationError

from docchat.core.exceptions import ToolExecutionError

logger = logging.getLogger(__name__)

TAVILY_SEARCH_URL = "https://api.tavily.com/search"


class TavilySearchArgs(BaseModel):
    """Arguments for the web search tool."""

    query: str = Field(..., min_length=1, description="Search query")


class TavilySearchTool:
    """Web search through the Tavily API."""

    name = "tavily_search_results_json"
    description = (
        "A search engine optimized for comprehensive, accurate, and trusted results. "
        "Useful for when you need to answer questions about current events. "
        "Input should be a search query."
    )

    def __init__(
        self,
        api_key: str,
        max_results: int = 1,
        timeout: float = 30.0,
        base_url: str = TAVILY_SEARCH_URL,
    ):
        self._api_key = api_key
        self._max_results = max_results
        self._timeout = timeout
        self._base_url = base_url

    @property
    def arguments_schema(self) -> dict[str, Any]:
        return TavilySearchArgs.model_json_schema()

    async def invoke(self, arguments: dict[str, Any]) -> str:
        """Run the search and return results as JSON text for the model."""
        try:
            args = TavilySearchArgs.model_validate(arguments)
        except ValidationError as e:
            # Bad arguments come from the model; tell it instead of failing the run
            return f"Invalid arguments for {self.name}: {e.errors(include_url=False)}"

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(
                    self._base_url,
                    json={
                        "api_key": self._api_key,
                        "query": args.query,
                        "max_results": self._max_results,
                    },
                )
                resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Tavily search failed for '{args.query[:50]}': {e}")
            raise ToolExecutionError(self.name) from e

        results = [
            {
                "title": r.get("title"),
                "url": r.get("url"),
                "content": r.get("content"),
                "score": r.get("score"),
            }
            for r in resp.json().get("results", [])
        ]
        logger.info(f"Tavily returned {len(results)} results for '{args.query[:50]}'")
        return json.dumps(results, ensure_ascii=False)
