import time
import shutil
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple
from pathlib import Path

from .document_parser import DocumentParser
from .chunker import chunk_text
from .synthesizer import SynthesisOrchestrator
from .reconciler import reconcile_images
from .exporter import StudyGuideExporter
from .llm_service import create_llm_service
from .settings import StudyLensSettings, get_settings
from .exceptions import InsufficientContentError, StudyGuideError
from .models import (
    PipelineOutcome, ProcessingStep, StudyDocument, StudyGuideRequest, StudyGuideResponse, StudySection
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProcessingStep, str], None]


# study guide service orchestrates extraction, chunking, generation, image matching and saving
class StudyGuideService:
    def __init__(
        self,
        orchestrator: Optional[SynthesisOrchestrator] = None,
        parser: Optional[DocumentParser] = None,
        settings: Optional[StudyLensSettings] = None
    ):
        self.settings = settings or get_settings()
        self.parser = parser or DocumentParser()
        self.orchestrator = orchestrator or SynthesisOrchestrator(
            create_llm_service(self.settings),
            max_attempts=self.settings.max_attempts,
            request_interval=self.settings.request_interval,
            retry_backoff=self.settings.retry_backoff
        )
        self.exporter = StudyGuideExporter()

        # Create output directory
        self.output_dir = Path(self.settings.output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    async def _run_pipeline(
        self,
        full_text: str,
        image_index: Optional[Dict[int, List[str]]],
        chunk_size: Optional[int]
    ) -> Tuple[List[StudySection], PipelineOutcome]:
        chunks = chunk_text(full_text, chunk_size or self.settings.chunk_size)
        outcome = await self.orchestrator.synthesize(chunks)
        return reconcile_images(outcome.sections, image_index or {}), outcome

    async def generate_study_guide(
        self,
        full_text: str,
        image_index: Optional[Dict[int, List[str]]] = None,
        chunk_size: Optional[int] = None
    ) -> List[StudySection]:
        """Turn page-annotated text into ordered study sections"""
        sections, _ = await self._run_pipeline(full_text, image_index, chunk_size)
        return sections

    async def process_document(
        self,
        request: StudyGuideRequest,
        progress: Optional[ProgressCallback] = None
    ) -> StudyGuideResponse:
        """Main processing pipeline"""
        start_time = time.time()

        def report(step: ProcessingStep, message: str = ""):
            if progress is not None:
                progress(step, message)

        try:
            logger.info(f"Starting study guide generation: {request.document_path}")
            logger.info("=" * 60)

            # Step 1: Extract text and images
            logger.info("Step 1: Extracting text and images...")
            report(ProcessingStep.PARSING, "Extracting text and images from document...")
            parsed = self.parser.extract(request.document_path)
            metadata = self.parser.extract_metadata(request.document_path)

            logger.info(f"  ✓ Pages/slides: {parsed.page_count}")
            logger.info(f"  ✓ Pages with images: {len(parsed.image_index)}")

            # reject near-empty documents before spending any generation calls
            if len(parsed.text) < self.settings.min_text_length:
                raise InsufficientContentError()

            # Step 2: Generate sections and attach images
            logger.info("\nStep 2: Generating study notes and exam questions...")
            report(ProcessingStep.GENERATING, "Analyzing text, generating detailed notes, and creating exam questions...")
            sections, outcome = await self._run_pipeline(parsed.text, parsed.image_index, request.chunk_size)

            logger.info(f"  ✓ Generated {len(sections)} sections")

            # Step 3: Build and save the study document
            metadata.update({
                "source_format": parsed.source_format,
                "chunks_attempted": outcome.chunks_attempted,
                "chunks_failed": outcome.chunks_failed,
            })
            document = self.exporter.build_document(request.document_path, sections, metadata)
            self._save_outputs(document, request.document_path)

            processing_time = time.time() - start_time

            logger.info("=" * 60)
            logger.info(f"✓ SUCCESS! Completed in {processing_time:.2f} seconds")
            logger.info(f"  - Total sections: {len(sections)}")
            if outcome.chunks_failed:
                logger.info(f"  - Parts skipped: {outcome.chunks_failed}/{outcome.chunks_attempted}")
            logger.info("=" * 60)

            report(ProcessingStep.COMPLETE)
            message = "Study guide generated successfully"
            if outcome.chunks_failed:
                message += f" ({outcome.chunks_failed}/{outcome.chunks_attempted} parts could not be processed)"

            return StudyGuideResponse(
                success=True,
                message=message,
                study_document=document,
                chunks_attempted=outcome.chunks_attempted,
                chunks_failed=outcome.chunks_failed,
                processing_time=processing_time
            )

        except StudyGuideError as e:
            logger.error(f"✗ ERROR: {str(e)}")
            report(ProcessingStep.ERROR, str(e))
            return StudyGuideResponse(
                success=False,
                message=str(e),
                processing_time=time.time() - start_time
            )
        except Exception as e:
            logger.error(f"✗ ERROR: {str(e)}", exc_info=True)
            report(ProcessingStep.ERROR, str(e))
            return StudyGuideResponse(
                success=False,
                message=f"Something went wrong: {str(e)}",
                processing_time=time.time() - start_time
            )

    def _save_outputs(self, document: StudyDocument, document_path: str):
        """Save the study guide JSON and refresh latest.json"""
        name = Path(document_path).stem

        json_path = self.output_dir / f"{name}.json"
        self.exporter.export_to_json(document, str(json_path))
        logger.info(f"\n  ✓ Saved: {json_path}")

        try:
            latest_path = self.output_dir / "latest.json"
            shutil.copyfile(str(json_path), str(latest_path))
        except OSError as e:
            logger.warning(f"  ! Could not update latest.json: {e}")

    def load_existing_study_guide(self, name: str) -> Optional[StudyDocument]:
        """Load a previously generated study guide if available"""
        json_path = self.output_dir / f"{name}.json"

        if json_path.exists():
            try:
                return self.exporter.load_from_json(str(json_path))
            except Exception as e:
                logger.error(f"Error loading existing study guide: {str(e)}")

        return None

    def get_processing_status(self, name: str) -> Dict[str, Any]:
        """Get processing status for a document"""
        json_path = self.output_dir / f"{name}.json"

        return {
            "study_guide_exists": json_path.exists(),
            "study_guide_path": str(json_path) if json_path.exists() else None
        }
