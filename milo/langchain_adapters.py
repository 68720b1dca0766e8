from __future__ import annotations

import asyncio
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Awaitable, List, TypeVar

from langchain_core.callbacks import AsyncCallbackManagerForRetrieverRun, CallbackManagerForRetrieverRun
from langchain_core.documents import Document
from langchain_core.retrievers import BaseRetriever
from pydantic import ConfigDict

from app.schemas import AlumniResult
from app.services.formulate import formulate

T = TypeVar("T")


def run_sync(coro: Awaitable[T]) -> T:
    """Run a coroutine from sync code, on a worker thread when this thread already has a running loop."""
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    with ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(asyncio.run, coro).result()


def to_document(result: AlumniResult) -> Document:
    """One alumnus as a Document: the snippet as content, the rest of the record as metadata."""
    metadata = result.model_dump()
    content = metadata.pop("text_snippet") or result.career_trajectory
    return Document(page_content=content, metadata=metadata)


class AlumniRetriever(BaseRetriever):
    """
    LangChain retriever over AlumniSearch, so alumni lookup composes into LCEL chains.
    The query is formulated with the optional profile first, exactly like the /api/search route.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    search: Any
    call_site: str = "alumni"
    profile: Any = None

    async def _search(self, query: str) -> List[Document]:
        results = await self.search.search(formulate(query, self.profile), self.profile, call_site=self.call_site)
        return [to_document(r) for r in results]

    async def _aget_relevant_documents(
        self, query: str, *, run_manager: AsyncCallbackManagerForRetrieverRun
    ) -> List[Document]:
        return await self._search(query)

    def _get_relevant_documents(
        self, query: str, *, run_manager: CallbackManagerForRetrieverRun
    ) -> List[Document]:
        return run_sync(self._search(query))
