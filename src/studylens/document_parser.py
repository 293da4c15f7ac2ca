# text and image extraction from pdf (pymupdf) and pptx (python-pptx)
import fitz  # PyMuPDF
import base64
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List

from pptx import Presentation
from pptx.shapes.base import BaseShape
from pptx.shapes.group import GroupShape
from pptx.shapes.picture import Picture

from .models import ParsedDocument
from .exceptions import ExtractionError, UnsupportedFormatError

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = {".pdf", ".pptx"}

# vector formats browsers can't show
SKIPPED_IMAGE_EXTENSIONS = {"wmf", "emf"}


# encode raw image bytes as a data uri so handles stay plain strings
def to_data_uri(image_bytes: bytes, ext: str) -> str:
    mime = "image/jpeg" if ext.lower() in ("jpg", "jpeg") else f"image/{ext.lower()}"
    return f"data:{mime};base64,{base64.b64encode(image_bytes).decode('ascii')}"


def page_marker(label: str, number: int) -> str:
    return f"--- {label} {number} ---\n"


# every shape on a slide in document order, including shapes nested in groups
def _iter_shapes(shapes) -> Iterator[BaseShape]:
    for shape in shapes:
        if isinstance(shape, GroupShape):
            yield from _iter_shapes(shape.shapes)
        else:
            yield shape


def _table_text(table) -> List[str]:
    return [
        cell.text.strip().replace("\n", " ")
        for row in table.rows
        for cell in row.cells
        if cell.text.strip()
    ]


# class for extracting page-annotated text and per-page images
class DocumentParser:

    def is_supported(self, path: str) -> bool:
        return Path(path).suffix.lower() in SUPPORTED_EXTENSIONS

    def extract(self, path: str) -> ParsedDocument:
        """Extract text with page/slide markers and an image index from a PDF or PPTX"""
        suffix = Path(path).suffix.lower()
        if suffix not in SUPPORTED_EXTENSIONS:
            raise UnsupportedFormatError()

        try:
            if suffix == ".pdf":
                parsed = self._extract_pdf(path)
            else:
                parsed = self._extract_pptx(path)
        except Exception as e:
            logger.error(f"Error parsing {path}: {str(e)}")
            raise ExtractionError(f"Could not read {Path(path).name}: {e}") from e

        image_count = sum(len(images) for images in parsed.image_index.values())
        logger.info(f"Extracted {len(parsed.text)} chars and {image_count} images from {parsed.page_count} pages")
        return parsed

    def _extract_pdf(self, path: str) -> ParsedDocument:
        doc = fitz.open(path)
        try:
            full_text = ""
            image_index: Dict[int, List[str]] = {}

            for page_num in range(doc.page_count):
                page = doc[page_num]
                number = page_num + 1

                # pdf text comes back with hard wraps; join them like the slide text
                page_text = " ".join(line.strip() for line in page.get_text().split("\n") if line.strip())
                full_text += page_marker("Page", number) + page_text + "\n\n"

                images = []
                for image_info in page.get_images(full=True):
                    xref = image_info[0]
                    extracted = doc.extract_image(xref)
                    if not extracted or extracted.get("ext", "").lower() in SKIPPED_IMAGE_EXTENSIONS:
                        continue
                    images.append(to_data_uri(extracted["image"], extracted["ext"]))
                if images:
                    image_index[number] = images

            return ParsedDocument(
                text=full_text,
                image_index=image_index,
                page_count=doc.page_count,
                source_format="pdf"
            )
        finally:
            doc.close()

    def _extract_pptx(self, path: str) -> ParsedDocument:
        prs = Presentation(path)
        full_text = ""
        image_index: Dict[int, List[str]] = {}

        for i, slide in enumerate(prs.slides):
            number = i + 1
            parts = []
            images = []

            for shape in _iter_shapes(slide.shapes):
                if shape.has_text_frame and shape.text_frame.text.strip():
                    parts.append(shape.text_frame.text.strip().replace("\n", " "))

                if shape.has_table:
                    parts.extend(_table_text(shape.table))

                if isinstance(shape, Picture):
                    picture = shape.image
                    if picture.ext.lower() in SKIPPED_IMAGE_EXTENSIONS:
                        logger.debug(f"Skipping {picture.ext} image on slide {number}")
                        continue
                    images.append(to_data_uri(picture.blob, picture.ext))

            full_text += page_marker("Slide", number) + " ".join(parts) + "\n\n"
            if images:
                image_index[number] = images

        return ParsedDocument(
            text=full_text,
            image_index=image_index,
            page_count=len(prs.slides),
            source_format="pptx"
        )

    # extract metadata like author, creation date, etc
    def extract_metadata(self, path: str) -> Dict[str, Any]:
        """Extract document metadata"""
        suffix = Path(path).suffix.lower()
        try:
            if suffix == ".pdf":
                doc = fitz.open(path)
                metadata = doc.metadata or {}
                page_count = doc.page_count
                doc.close()
                return {
                    'title': metadata.get('title', ''),
                    'author': metadata.get('author', ''),
                    'subject': metadata.get('subject', ''),
                    'creation_date': metadata.get('creationDate', ''),
                    'page_count': page_count
                }
            if suffix == ".pptx":
                prs = Presentation(path)
                props = prs.core_properties
                return {
                    'title': props.title or '',
                    'author': props.author or '',
                    'subject': props.subject or '',
                    'creation_date': props.created.isoformat() if props.created else '',
                    'page_count': len(prs.slides)
                }
        except Exception as e:
            logger.error(f"Error extracting metadata from {path}: {str(e)}")
        return {}
