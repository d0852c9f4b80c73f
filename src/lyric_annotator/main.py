"""
Main entry point for the Lyric Annotator server.

Usage:
    python -m src.lyric_annotator.main --data-dir ./data
    python -m src.lyric_annotator.main --data-dir ./data --port 8080
"""

import argparse
import logging
import os
import sys
from pathlib import Path

import uvicorn

from .api import app, init_app
from .config import DEFAULT_PORT, AnnotatorConfig

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def main():
    config = AnnotatorConfig.from_env()

    parser = argparse.ArgumentParser(
        description="Lyric Annotator - tag song lyrics across four facets"
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        default=str(config.data_dir),
        help=f"Directory holding the vocabulary, corpus and annotations (default: {config.data_dir})"
    )
    parser.add_argument(
        "--public-dir",
        type=str,
        default=str(config.public_dir) if config.public_dir else None,
        help="Directory of static client files to serve at /"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.environ.get("PORT", DEFAULT_PORT)),
        help=f"Port to run server on (default: $PORT or {DEFAULT_PORT})"
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)"
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development"
    )

    args = parser.parse_args()

    data_dir = Path(args.data_dir)
    if not data_dir.is_dir():
        logger.error(f"Data directory not found: {data_dir}")
        sys.exit(1)

    config.data_dir = data_dir
    config.public_dir = Path(args.public_dir) if args.public_dir else None

    for path in (config.tags_path, config.tracks_path):
        if not path.exists():
            logger.warning(f"Missing data file: {path} (its endpoint will return 500)")

    try:
        init_app(config)
    except OSError as e:
        logger.error(f"Failed to initialize: {e}")
        sys.exit(1)

    print(f"\n{'='*60}")
    print("Lyric Annotator")
    print(f"{'='*60}")
    print(f"Data directory: {data_dir.resolve()}")
    print(f"Annotations:    {config.annotations_dir.resolve()}/")
    if config.public_dir:
        print(f"Static files:   {config.public_dir.resolve()}")
    print(f"Server:         http://{args.host}:{args.port}/")
    print(f"{'='*60}\n")

    uvicorn.run(
        app,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="info"
    )


if __name__ == "__main__":
    main()
