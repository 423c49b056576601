"""Retriever that turns a user query into a context-filled prompt.

Handles:
- Query embedding generation
- Infinity search (text, dense or hybrid)
- Optional relevance filtering of retrieved rows
- Context assembly and prompt rendering
"""
from typing import Callable, List, Optional

import structlog

from ragfs import config
from ragfs.embedding_client import EmbeddingClient
from ragfs.rag.prompt import PromptTemplate, load_prompt_template
from ragfs.rag.store_infinity import InfinityStore, VectorRow

logger = structlog.get_logger()

RowFilter = Callable[[VectorRow], bool]


class Retriever:
    """Query pipeline: embed, search, assemble context, render prompt."""

    def __init__(
        self,
        embedder: EmbeddingClient,
        store: InfinityStore,
        prompt: PromptTemplate,
        top_n: int = None,
        method: str = None,
        row_filter: Optional[RowFilter] = None,
    ):
        """Initialize the retriever.

        Args:
            embedder: Embedding client used in single-query mode
            store: Store to search
            prompt: Parsed prompt template, reused for every query
            top_n: Rows to retrieve (default from config)
            method: Search method, text | dense | hybrid (default from config)
            row_filter: Optional predicate; rows it rejects are left out of the context
        """
        self.embedder = embedder
        self.store = store
        self.prompt = prompt
        self.top_n = config.SEARCH_TOP_N if top_n is None else top_n
        self.method = method or config.SEARCH_METHOD
        self.row_filter = row_filter

        logger.info("retriever_initialized", top_n=self.top_n, method=self.method)

    def retrieve(self, user_query: str) -> List[VectorRow]:
        """Embed the query and return matching rows in store ranking order."""
        logger.info("retrieval_started", query_length=len(user_query), top_n=self.top_n)

        vector = self.embedder.embed_one(user_query)
        logger.debug("query_embedded", dimension=len(vector))

        rows = self.store.search(
            query_vector=vector,
            query_text=user_query,
            top_n=self.top_n,
            method=self.method,
        )

        if self.row_filter is not None:
            kept = [row for row in rows if self.row_filter(row)]
            logger.debug("rows_filtered", before=len(rows), after=len(kept))
            rows = kept

        logger.info("retrieval_completed", results_returned=len(rows))
        return rows

    def answer_prompt(self, user_query: str) -> str:
        """Build the final LLM prompt for a user query.

        Retrieved texts are concatenated in result order with no separator.
        """
        rows = self.retrieve(user_query)
        context = "".join(row.text for row in rows)

        logger.debug("context_formatted", num_rows=len(rows), total_chars=len(context))

        return self.prompt.render(context=context, user_query=user_query)


def build_retriever(prompt: Optional[PromptTemplate] = None) -> Retriever:
    """Create a retriever wired to the configured services.

    Raises:
        PromptTemplateError: If the configured template is malformed
    """
    return Retriever(
        embedder=EmbeddingClient(),
        store=InfinityStore(),
        prompt=prompt or load_prompt_template(),
    )
