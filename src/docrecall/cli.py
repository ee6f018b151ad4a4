"""CLI entry point for DocRecall."""

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

from docrecall.chunkers import ChunkingConfig, ParagraphChunker
from docrecall.exceptions import RetrievalError
from docrecall.ingesters import get_ingester
from docrecall.retrieval import RetrieverConfig
from docrecall.service import RetrievalService

logger = logging.getLogger(__name__)


def build_service(args: argparse.Namespace) -> RetrievalService:
    """Create a service for the source named on the command line."""
    source = get_ingester(Path(args.source))
    if source is None:
        logger.error(f"Cannot process: {args.source}")
        logger.error("Supported inputs: folders, .zip files")
        sys.exit(1)

    chunking = ChunkingConfig(
        chunk_size=args.chunk_size,
        overlap_size=args.overlap,
        split_on_sentences=not args.no_sentence_split,
    )
    retrieval = RetrieverConfig(
        top_k=args.top_k,
        relevance_threshold=args.threshold,
        min_chunk_length=args.min_chunk_length,
    )
    return RetrievalService(
        source,
        chunker=ParagraphChunker(chunking),
        retriever_config=retrieval,
        ready_timeout=args.ready_timeout,
    )


async def search(service: RetrievalService, query: str, as_json: bool = False) -> None:
    """Run one query and print the results.

    Args:
        service: Service over the document source
        query: Free-text query
        as_json: Print structured results instead of formatted text
    """
    if not as_json:
        print(await service.search(query))
        return

    results = await service.search_raw(query)
    payload = [
        {
            "source": r.chunk.document_name,
            "chunk_id": r.chunk.id,
            "page": r.chunk.start_page,
            "score": round(r.relevance_score, 4),
            "matched_terms": r.matched_terms,
            "content": r.chunk.content,
        }
        for r in results
    ]
    print(json.dumps(payload, ensure_ascii=False, indent=2))


async def stats(service: RetrievalService) -> None:
    """Print statistics about the built index."""
    index_stats = await service.stats()

    print(f"Source: {service.source.source_type}")
    print(f"")
    print(f"Documents:")
    for doc in service.documents:
        print(f"  {doc.filename}: {len(doc.text)} chars")
    print(f"")
    print(f"Index:")
    for key, value in asdict(index_stats).items():
        print(f"  {key}: {value}")


def serve(service: RetrievalService, transport: str = "stdio") -> None:
    """Start MCP server over the service.

    Args:
        service: Service over the document source
        transport: Transport protocol (stdio or sse)
    """
    # Import here to avoid loading MCP unless needed
    from docrecall.server import create_mcp_server

    from typing import cast, Literal

    logger.info(f"Serving via {transport}")
    mcp = create_mcp_server(service)
    mcp.run(transport=cast(Literal["stdio", "sse", "streamable-http"], transport))


def _add_tuning_arguments(parser: argparse.ArgumentParser) -> None:
    chunking = ChunkingConfig()
    retrieval = RetrieverConfig()

    parser.add_argument("source", help="Documents folder or zip file path")
    parser.add_argument("--chunk-size", type=int, default=chunking.chunk_size)
    parser.add_argument("--overlap", type=int, default=chunking.overlap_size)
    parser.add_argument(
        "--no-sentence-split",
        action="store_true",
        help="Keep long paragraphs whole instead of splitting on sentences",
    )
    parser.add_argument("--top-k", type=int, default=retrieval.top_k)
    parser.add_argument("--threshold", type=float, default=retrieval.relevance_threshold)
    parser.add_argument("--min-chunk-length", type=int, default=retrieval.min_chunk_length)
    parser.add_argument(
        "--ready-timeout",
        type=float,
        default=None,
        help="Seconds to wait for the index before failing (default: wait)",
    )


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="docrecall",
        description="DocRecall - lexical passage retrieval for grounded agents",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # serve command
    serve_parser = subparsers.add_parser(
        "serve",
        help="Start MCP server over a document collection",
    )
    _add_tuning_arguments(serve_parser)
    serve_parser.add_argument(
        "--transport",
        choices=["stdio", "sse"],
        default="stdio",
        help="Transport protocol (default: stdio)",
    )

    # search command
    search_parser = subparsers.add_parser(
        "search",
        help="Search a document collection once",
    )
    _add_tuning_arguments(search_parser)
    search_parser.add_argument("query", help="Free-text query")
    search_parser.add_argument("--json", action="store_true", help="Print JSON results")

    # stats command
    stats_parser = subparsers.add_parser(
        "stats",
        help="Show index statistics for a document collection",
    )
    _add_tuning_arguments(stats_parser)

    args = parser.parse_args()

    # stderr keeps the stdio transport clean
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
        stream=sys.stderr,
    )

    try:
        service = build_service(args)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(2)

    try:
        if args.command == "serve":
            serve(service, args.transport)
        elif args.command == "search":
            asyncio.run(search(service, args.query, args.json))
        elif args.command == "stats":
            asyncio.run(stats(service))
    except RetrievalError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
