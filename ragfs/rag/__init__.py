"""RAG (Retrieval-Augmented Generation) pipeline components.

This package contains modules for:
- Sentence chunking with neighbor overlap
- Infinity vector/fulltext storage
- Text file ingestion
- Query retrieval and prompt assembly
"""
