"""Command line entry point.

Usage:
    ragfs ingest notes/            # Index every visible file under notes/
    ragfs ingest notes/today.txt   # Index a single file
    ragfs query "What day is it?"  # Print the prompt built for a question
    ragfs embed-test               # Embed and insert two test strings
"""
import argparse
import logging
import sys
from pathlib import Path

import structlog

from ragfs import config
from ragfs.embedding_client import EmbeddingClient
from ragfs.errors import RagError
from ragfs.rag.ingest import IngestPipeline, IngestStats
from ragfs.rag.retriever import build_retriever
from ragfs.rag.store_infinity import InfinityStore, VectorRow

logger = structlog.get_logger()


def configure_logging(level: str = None) -> None:
    """Configure structured JSON logging on stderr."""
    level = (level or config.LOG_LEVEL).upper()
    logging.basicConfig(level=level, format="%(message)s", stream=sys.stderr)
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
    )


class ProgressReporter:
    """Per-file progress line and a closing summary for `ragfs ingest`."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def update(self, current: int, total: int, file_path: Path):
        end = "\n" if self.verbose else ""
        print(f"\r  ({current}/{total}) {file_path}", end=end, flush=True)

    def finish(self, stats: IngestStats):
        print("\n")
        print(f"  Files processed:      {stats.files_processed}")
        print(f"  Files failed:         {stats.files_failed}")
        print(f"  Chunks created:       {stats.chunks_created}")

        for path, error in stats.failures:
            print(f"  ! {path}: {error}")


def run_ingest(args: argparse.Namespace) -> int:
    print("\nConfiguration:")
    print(f"   Path:             {args.path}")
    print(f"   Embedding model:  {config.EMBEDDING_MODEL}")
    print(f"   Embedding server: {config.EMBEDDING_BASE_URL}")
    print(f"   Infinity table:   {config.INFINITY_DATABASE}/{config.INFINITY_TABLE}")

    progress = ProgressReporter(verbose=args.verbose)

    pipeline = IngestPipeline()
    stats = pipeline.ingest_path(args.path, progress_callback=progress.update)
    progress.finish(stats)

    return 1 if stats.files_failed > 0 else 0


def run_query(args: argparse.Namespace) -> int:
    retriever = build_retriever()
    print(retriever.answer_prompt(args.question))
    return 0


def run_embed_test(args: argparse.Namespace) -> int:
    texts = ["Test embedding", "Saturday"]
    embeddings = EmbeddingClient().embed_batch(texts)
    logger.info("embed_test_embedded", count=len(embeddings), dimension=len(embeddings[0]))

    rows = [
        VectorRow(name="embed-test", index=i, text=text, vector=vector)
        for i, (text, vector) in enumerate(zip(texts, embeddings))
    ]
    InfinityStore().insert(rows)
    logger.info("embed_test_inserted", count=len(rows))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ragfs",
        description="Index text files into Infinity and build retrieval prompts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--log-level", default=None, help=f"Log level (default: {config.LOG_LEVEL})")
    subparsers = parser.add_subparsers(dest="command", required=True)

    ingest = subparsers.add_parser("ingest", help="Index a file or directory")
    ingest.add_argument("path", type=Path, help="Text file or directory to index")
    ingest.add_argument("--verbose", "-v", action="store_true", help="Show verbose progress output")
    ingest.set_defaults(handler=run_ingest)

    query = subparsers.add_parser("query", help="Print the prompt built for a question")
    query.add_argument("question", help="User question")
    query.set_defaults(handler=run_query)

    embed_test = subparsers.add_parser("embed-test", help="Embed and insert two test strings")
    embed_test.set_defaults(handler=run_embed_test)

    return parser


def main(argv=None) -> int:
    """Main entry point for the ragfs command."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        return args.handler(args)

    except KeyboardInterrupt:
        print("\n\nCancelled by user.\n")
        return 1

    except (RagError, FileNotFoundError) as e:
        print(f"\nError: {e}\n")
        logger.error("command_failed", command=args.command, error=str(e), error_type=type(e).__name__)
        return 1


if __name__ == "__main__":
    sys.exit(main())
