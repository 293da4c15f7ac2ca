# attaches extracted page/slide images to generated sections
import re
import logging
from typing import Dict, List, Optional

from .models import RawSection, StudySection

logger = logging.getLogger(__name__)

# "Slide 4", "page12", "SLIDE 7: ..." -> first number wins
PAGE_REFERENCE_PATTERN = re.compile(r"(?:Slide|Page)\s?(\d+)", re.IGNORECASE)


def parse_page_reference(topic: str) -> Optional[int]:
    """Return the first slide/page number mentioned in a topic, if any"""
    match = PAGE_REFERENCE_PATTERN.search(topic or "")
    if match is None:
        return None
    return int(match.group(1))


def reconcile_images(raw_sections: List[RawSection], image_index: Dict[int, List[str]]) -> List[StudySection]:
    """Build study sections in input order, each carrying the images of the page its topic names.

    Topics without a marker, ranges like "Slides 3-5" and pages without images all
    get an empty image list.
    """
    study_sections = []
    matched = 0

    for section in raw_sections:
        images: List[str] = []
        page_number = parse_page_reference(section.topic)
        if page_number is not None and image_index.get(page_number):
            images = list(image_index[page_number])
            matched += 1

        study_sections.append(StudySection(**section.model_dump(), images=images))

    logger.info(f"Attached images to {matched}/{len(study_sections)} sections")
    return study_sections
