#!/usr/bin/env python3
"""
Lyric Annotator - Main Entry Point

Starts the annotation server: serves the tag vocabulary and the track
corpus, and stores per-track annotations under <data-dir>/annotations/.

Usage:
    python main.py --data-dir ./data
    python main.py --data-dir ./data --public-dir ./public --port 8080

The terminal client is started separately:
    python -m src.lyric_annotator.cli --server http://127.0.0.1:3000
"""

if __name__ == "__main__":
    from src.lyric_annotator.main import main
    main()
