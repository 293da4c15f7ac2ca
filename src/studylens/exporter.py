# builds, saves, loads and summarises finished study guides
from typing import Any, Dict, List, Optional
from datetime import datetime
from pathlib import Path
import json
import logging

from .models import StudyDocument, StudySection

logger = logging.getLogger(__name__)


class StudyGuideExporter:

    # wrap generated sections into a study document
    def build_document(
        self,
        source_document: str,
        sections: List[StudySection],
        metadata: Optional[Dict[str, Any]] = None
    ) -> StudyDocument:
        """Create the study document for a source file"""
        document = StudyDocument(
            title=Path(source_document).stem,
            source_document=source_document,
            created_at=datetime.now().isoformat(),
            sections=sections,
            metadata=metadata or {}
        )
        logger.info(f"Built study guide '{document.title}' with {len(sections)} sections")
        return document

    # save study document to a json file
    def export_to_json(self, document: StudyDocument, filepath: str):
        """Export study document to JSON file"""
        try:
            with open(filepath, 'w', encoding='utf-8') as f:
                json.dump(document.model_dump(by_alias=True), f, indent=2, ensure_ascii=False)

            logger.info(f"Study guide exported to {filepath}")

        except Exception as e:
            logger.error(f"Error exporting study guide: {str(e)}")
            raise

    # load study document from a json file
    def load_from_json(self, filepath: str) -> StudyDocument:
        """Load study document from JSON file"""
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                data = json.load(f)

            return StudyDocument.model_validate(data)

        except Exception as e:
            logger.error(f"Error loading study guide: {str(e)}")
            raise

    def get_statistics(self, document: StudyDocument) -> Dict[str, Any]:
        """Get statistics about the study guide"""
        total_sections = len(document.sections)
        total_points = sum(len(section.content) for section in document.sections)

        return {
            "total_sections": total_sections,
            "total_points": total_points,
            "key_terms": sum(1 for section in document.sections for point in section.content if point.key_term),
            "total_questions": sum(len(section.questions) for section in document.sections),
            "sections_with_images": len([s for s in document.sections if s.images]),
            "total_images": sum(len(section.images) for section in document.sections),
            "average_points_per_section": total_points / total_sections if total_sections > 0 else 0
        }
