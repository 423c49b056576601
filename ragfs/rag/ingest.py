"""Ingest pipeline for indexing plain-text files.

Orchestrates:
- File discovery (hidden entries skipped)
- Sentence chunking
- Batch embedding generation
- Row insertion into Infinity
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import structlog

from ragfs import config
from ragfs.embedding_client import EmbeddingClient
from ragfs.errors import (
    ContractViolationError,
    DocumentReadError,
    UnsupportedFileTypeError,
)
from ragfs.rag.chunker import SentenceChunker
from ragfs.rag.store_infinity import InfinityStore, VectorRow

logger = structlog.get_logger()

ProgressCallback = Callable[[int, int, Path], None]


@dataclass
class IngestStats:
    """Counters for one directory ingestion run."""

    files_processed: int = 0
    files_failed: int = 0
    chunks_created: int = 0
    embeddings_generated: int = 0
    failures: List[Tuple[Path, Exception]] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "files_processed": self.files_processed,
            "files_failed": self.files_failed,
            "chunks_created": self.chunks_created,
            "embeddings_generated": self.embeddings_generated,
        }


def is_hidden(name: str) -> bool:
    return name.startswith(".")


def discover_files(root: Path) -> List[Path]:
    """List regular files under root in sorted walk order.

    Hidden files are skipped and hidden directories are not descended into.

    Raises:
        FileNotFoundError: If root does not exist
    """
    root = Path(root)
    if not root.exists():
        raise FileNotFoundError(f"Directory not found: {root}")

    files = []
    for dirpath, dirnames, filenames in os.walk(root):
        # Prune in place so os.walk never enters hidden directories
        dirnames[:] = sorted(d for d in dirnames if not is_hidden(d))
        for name in sorted(filenames):
            if is_hidden(name):
                continue
            path = Path(dirpath) / name
            if path.is_file():
                files.append(path)
    return files


class IngestPipeline:
    """Pipeline for ingesting text files into the retrieval store."""

    def __init__(
        self,
        chunker: SentenceChunker = None,
        embedder: EmbeddingClient = None,
        store: InfinityStore = None,
        supported_extensions: Tuple[str, ...] = None,
    ):
        """Initialize the ingest pipeline.

        Args:
            chunker: Sentence chunker (default: Punkt English)
            embedder: Embedding client (default from config)
            store: Store client (default from config)
            supported_extensions: File suffixes accepted for ingestion

        Raises:
            ChunkingError: If the default sentence tokenizer cannot be loaded
        """
        self.chunker = chunker or SentenceChunker()
        self.embedder = embedder or EmbeddingClient()
        self.store = store or InfinityStore()
        self.supported_extensions = supported_extensions or config.SUPPORTED_EXTENSIONS

        logger.info(
            "ingest_pipeline_initialized",
            embedding_model=self.embedder.model,
            store_url=self.store.docs_url,
            supported_extensions=list(self.supported_extensions),
        )

    def ingest_file(self, file_path: Path) -> Dict[str, Any]:
        """Chunk, embed and insert a single text file.

        Args:
            file_path: Path to a .txt file

        Returns:
            Dictionary with ingestion results (chunks_created, etc.)

        Raises:
            UnsupportedFileTypeError: If the extension is not supported
            DocumentReadError: If the file cannot be read as UTF-8 text
            RagError: On any chunking, embedding or store failure
        """
        file_path = Path(file_path)
        extension = file_path.suffix
        if extension not in self.supported_extensions:
            raise UnsupportedFileTypeError(str(file_path), extension)

        logger.info("ingesting_file", path=str(file_path))

        try:
            contents = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentReadError(str(file_path), e) from e
        chunks = self.chunker.chunk(contents)

        if not chunks:
            logger.warning("no_chunks_created", path=str(file_path))
            return {"file_path": str(file_path), "chunks_created": 0, "embeddings_generated": 0}

        embeddings = self.embedder.embed_batch(chunks)
        if len(embeddings) != len(chunks):
            raise ContractViolationError(
                f"Got {len(embeddings)} embeddings for {len(chunks)} chunks"
            )

        rows = [
            VectorRow(name=str(file_path), index=i, text=chunk, vector=embedding)
            for i, (chunk, embedding) in enumerate(zip(chunks, embeddings))
        ]
        self.store.insert(rows)

        logger.info("file_ingested", path=str(file_path), chunks_created=len(chunks))

        return {
            "file_path": str(file_path),
            "chunks_created": len(chunks),
            "embeddings_generated": len(embeddings),
        }

    def ingest_directory(
        self, root: Path, progress_callback: Optional[ProgressCallback] = None
    ) -> IngestStats:
        """Ingest every visible file under root, continuing past failures.

        Args:
            root: Directory to walk
            progress_callback: Optional callback function(current, total, file_path)

        Returns:
            IngestStats, including each failed path and its error

        Raises:
            FileNotFoundError: If root does not exist
        """
        logger.info("starting_ingest_directory", root=str(root))

        files = discover_files(root)
        stats = IngestStats()

        if not files:
            logger.warning("no_files_found", root=str(root))
            return stats

        for idx, file_path in enumerate(files, 1):
            if progress_callback:
                progress_callback(idx, len(files), file_path)

            try:
                result = self.ingest_file(file_path)
            except Exception as e:
                logger.error(
                    "file_ingestion_failed",
                    path=str(file_path),
                    error=str(e),
                    error_type=type(e).__name__,
                )
                stats.files_failed += 1
                stats.failures.append((file_path, e))
                # Continue with next file instead of failing entirely
                continue

            stats.files_processed += 1
            stats.chunks_created += result["chunks_created"]
            stats.embeddings_generated += result["embeddings_generated"]

        logger.info("ingest_directory_completed", **stats.as_dict())

        return stats

    def ingest_path(
        self, path: Path, progress_callback: Optional[ProgressCallback] = None
    ) -> IngestStats:
        """Ingest a single file or a whole directory tree.

        A single file fails fast: its error propagates to the caller.
        """
        path = Path(path)
        if path.is_dir():
            return self.ingest_directory(path, progress_callback=progress_callback)
        if not path.exists():
            raise FileNotFoundError(f"Path not found: {path}")

        if progress_callback:
            progress_callback(1, 1, path)
        result = self.ingest_file(path)
        return IngestStats(
            files_processed=1,
            chunks_created=result["chunks_created"],
            embeddings_generated=result["embeddings_generated"],
        )
