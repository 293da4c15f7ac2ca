#!/usr/bin/env python3
"""
studylens

A FastAPI application that turns slide decks and PDFs into bilingual study guides:
detailed English/Chinese notes, the images of each source slide or page, and
practice exam questions, generated part by part with an LLM.

To start the server:
    python main.py
"""

import sys
from pathlib import Path

# add project root to python path so we can import the studylens package
sys.path.insert(0, str(Path(__file__).parent))

# start the fastapi server when this file is run
if __name__ == "__main__":
    import uvicorn
    # run the api app on port 8000 with auto-reload for development
    uvicorn.run("src.studylens.api:app", host="0.0.0.0", port=8000, reload=True)
