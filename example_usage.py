#!/usr/bin/env python3
"""
Example usage of the study guide generator
"""

import asyncio
import os
import sys
from pathlib import Path

# add project root to python path
sys.path.insert(0, str(Path(__file__).parent))

from src.studylens.processing_service import StudyGuideService
from src.studylens.models import StudyGuideRequest


def main():
    """Example of how to use the processing service directly"""

    print("This example uses a local LLM (Llama 3 via Ollama) by default")
    print("Make sure Ollama is installed and running:")
    print("1. Install Ollama: https://ollama.ai/")
    print("2. Start Ollama: ollama serve")
    print("3. Pull model: ollama pull llama3")
    print("Or set STUDYLENS_LLM_PROVIDER=gemini and STUDYLENS_GEMINI_API_KEY")
    print()

    # Example document path (replace with your actual PDF or PPTX)
    document_path = "example.pptx"

    if not os.path.exists(document_path):
        print(f"Please place a file named '{document_path}' in the current directory")
        return

    print("Processing document...")

    service = StudyGuideService()
    request = StudyGuideRequest(document_path=document_path, chunk_size=4000)
    response = asyncio.run(service.process_document(request))

    if not response.success:
        print(f"✗ Error: {response.message}")
        return

    document = response.study_document
    print(f"✓ Success! Processing took {response.processing_time:.2f} seconds")
    print(f"✓ Generated {len(document.sections)} sections")
    print(f"✓ Study guide saved to: {service.output_dir / (Path(document_path).stem + '.json')}")

    # Display first few sections
    print("\nFirst few sections:")
    for i, section in enumerate(document.sections[:3], 1):
        print(f"\n{i}. {section.topic} ({len(section.images)} images)")
        for point in section.content[:2]:
            print(f"   • {point.english[:100]}...")
            print(f"     {point.chinese[:50]}...")
        for question in section.questions[:1]:
            print(f"   ? {question.question}")


if __name__ == "__main__":
    main()
