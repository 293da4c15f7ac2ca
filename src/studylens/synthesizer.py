# drives the generation service through every chunk with retries and pacing
import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from pydantic import ValidationError

from .models import PipelineOutcome, RawSection, SectionBatch
from .exceptions import EmptyDocumentError, GenerationExhaustedError

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = """
Act as a bilingual academic expert.
Analyze the provided raw text (from PDF/PPTX) and generate a comprehensive study guide.

The input text contains markers like "--- Slide X ---" or "--- Page X ---".

RULES:
1. Content: Deep-dive academic notes in English with a matching Chinese version. No simple summaries. Include examples.
2. Topic: Must include the source marker (e.g., "Slide 5: Title").
3. Output: JSON format matching the schema.
4. Exam: Generate 2 MCQs per section, each with exactly 4 options and the index (0-3) of the correct one.
5. Visuals: Describe expected diagrams in 'visualSummary'.
"""


class ChunkAttemptError(Exception):
    """One generation attempt returned nothing usable"""


# turn raw response text into validated sections
def parse_sections(response_text: Optional[str]) -> List[RawSection]:
    """Parse a generation response into sections, raising ChunkAttemptError if unusable"""
    if not response_text or not response_text.strip():
        raise ChunkAttemptError("Empty response")

    text = response_text.strip()
    # some models wrap json in markdown code fences
    if text.startswith("```"):
        text = text.split("```")[1]
        if text.startswith("json"):
            text = text[4:]
        text = text.strip()

    try:
        batch = SectionBatch.model_validate_json(text)
    except ValidationError as e:
        raise ChunkAttemptError(f"Invalid JSON structure: {e.error_count()} error(s), first: {e.errors()[0]['msg']}")
    return batch.sections


class SynthesisOrchestrator:
    """Runs chunks through the generation service one at a time"""

    def __init__(
        self,
        llm_service,
        max_attempts: int = 3,
        request_interval: float = 1.0,
        retry_backoff: float = 2.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        system_instruction: str = SYSTEM_INSTRUCTION
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.llm_service = llm_service
        self.max_attempts = max_attempts
        self.request_interval = request_interval  # pacing between any two requests
        self.retry_backoff = retry_backoff  # added per failed attempt on the same chunk
        self.sleep = sleep
        self.system_instruction = system_instruction

    def delay_before(self, is_first_request: bool, failed_attempts: int) -> float:
        """Seconds to wait before the next request"""
        if is_first_request:
            return 0.0
        return self.request_interval + self.retry_backoff * failed_attempts

    @staticmethod
    def build_prompt(chunk: str, position: int, total: int) -> str:
        return f"Analyze Part {position}/{total}:\n\n{chunk}"

    async def _attempt(self, prompt: str) -> List[RawSection]:
        try:
            response_text = await asyncio.to_thread(
                self.llm_service.complete,
                prompt,
                SectionBatch,
                self.system_instruction
            )
        except Exception as e:
            # any backend failure (network, timeout, quota) is retryable
            raise ChunkAttemptError(f"{type(e).__name__}: {e}") from e
        return parse_sections(response_text)

    async def synthesize(self, chunks: List[str]) -> PipelineOutcome:
        """Generate sections for every chunk, in order, tolerating failed chunks"""
        total = len(chunks)
        if total == 0:
            raise EmptyDocumentError()

        logger.info(f"Processing document in {total} parts...")

        all_sections: List[RawSection] = []
        chunks_failed = 0
        requests_sent = 0

        for index, chunk in enumerate(chunks):
            position = index + 1
            prompt = self.build_prompt(chunk, position, total)
            succeeded = False
            failed_attempts = 0

            while failed_attempts < self.max_attempts and not succeeded:
                delay = self.delay_before(requests_sent == 0, failed_attempts)
                if delay > 0:
                    await self.sleep(delay)

                requests_sent += 1
                try:
                    sections = await self._attempt(prompt)
                except ChunkAttemptError as e:
                    failed_attempts += 1
                    logger.warning(f"Chunk {position}/{total} failed (attempt {failed_attempts}/{self.max_attempts}): {e}")
                    continue

                all_sections.extend(sections)
                succeeded = True
                logger.info(f"  ✓ Chunk {position}/{total}: {len(sections)} sections")

            if not succeeded:
                chunks_failed += 1
                logger.error(f"  ✗ Chunk {position}/{total} gave up after {self.max_attempts} attempts")

        if not all_sections:
            if chunks_failed > 0:
                raise GenerationExhaustedError(chunks_total=total, chunks_failed=chunks_failed)
            raise EmptyDocumentError()

        if chunks_failed:
            logger.warning(f"  ! {chunks_failed}/{total} chunks failed; returning partial study guide")

        return PipelineOutcome(
            sections=all_sections,
            chunks_attempted=total,
            chunks_failed=chunks_failed
        )
