#!/usr/bin/env python3
"""
Debug script to see what's being extracted from a PDF or PPTX and how it is chunked
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent))

from src.studylens.document_parser import DocumentParser
from src.studylens.chunker import chunk_text
from src.studylens.settings import get_settings
import logging

logging.basicConfig(level=logging.INFO)


def debug_document(document_path):
    print("="*60)
    print("DEBUG: Extraction")
    print("="*60)

    parser = DocumentParser()
    parsed = parser.extract(document_path)

    print(f"\n1. FORMAT: {parsed.source_format}")
    print(f"2. PAGES/SLIDES: {parsed.page_count}")
    print(f"3. TEXT LENGTH: {len(parsed.text)} chars")

    print("\n" + "="*60)
    print("IMAGES PER PAGE:")
    print("="*60)
    for page_number in sorted(parsed.image_index):
        images = parsed.image_index[page_number]
        kinds = ", ".join(image.split(";")[0][len("data:"):] for image in images)
        print(f"   Page {page_number}: {len(images)} ({kinds})")

    print("\n" + "="*60)
    print("CHUNKING:")
    print("="*60)

    chunks = chunk_text(parsed.text, get_settings().chunk_size)

    print(f"Total chunks: {len(chunks)}")
    for i, chunk in enumerate(chunks[:3], 1):
        first_marker = next((line for line in chunk.split("\n") if line.startswith("---")), "")
        print(f"\n{i}. Length: {len(chunk)} chars")
        print(f"   Starts at: {first_marker}")
        print(f"   Text preview: {chunk[:150]!r}...")

    print("\n" + "="*60)


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("usage: python debug_extraction.py <file.pdf|file.pptx>")
        sys.exit(1)

    debug_document(sys.argv[1])
