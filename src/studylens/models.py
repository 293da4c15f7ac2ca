# pydantic models for data validation and structure
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field
from enum import Enum


# processing steps reported while a document moves through the pipeline
class ProcessingStep(str, Enum):
    IDLE = "idle"
    PARSING = "parsing"
    GENERATING = "generating"
    COMPLETE = "complete"
    ERROR = "error"


# text and images pulled out of a pdf or pptx
@dataclass
class ParsedDocument:
    text: str
    image_index: Dict[int, List[str]] = field(default_factory=dict)  # page/slide number -> image handles
    page_count: int = 0
    source_format: str = ""


# shared config: python names on the model, camelCase on the wire
class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# one bilingual note inside a section
class StudyPoint(WireModel):
    english: str
    chinese: str
    key_term: Optional[str] = Field(default=None, alias="keyTerm")


# multiple choice question with exactly four options
class ExamQuestion(WireModel):
    question: str
    options: List[str]
    correct_index: int = Field(alias="correctIndex", ge=0, le=3)
    explanation: str

    @field_validator("options")
    @classmethod
    def check_four_options(cls, options: List[str]) -> List[str]:
        if len(options) != 4:
            raise ValueError(f"expected 4 options, got {len(options)}")
        return options


# a section exactly as the model returns it
class RawSection(WireModel):
    topic: str  # expected to embed "Slide N" or "Page N"
    content: List[StudyPoint]
    visual_summary: Optional[str] = Field(default=None, alias="visualSummary")
    questions: List[ExamQuestion] = []


# a section after images from the source document have been attached
class StudySection(RawSection):
    images: List[str] = []


# structured schema every generation call is constrained to
class SectionBatch(WireModel):
    sections: List[RawSection]


# result of running every chunk through the generation service
class PipelineOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    sections: List[RawSection]
    chunks_attempted: int
    chunks_failed: int


# the finished study guide
class StudyDocument(WireModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    title: str
    source_document: str = Field(alias="sourceDocument")
    created_at: str = Field(alias="createdAt")
    sections: List[StudySection]
    metadata: Dict[str, Any] = {}


# request model for processing a document
class StudyGuideRequest(BaseModel):
    document_path: str
    chunk_size: int = Field(default=4000, gt=0)


# response model for document processing
class StudyGuideResponse(BaseModel):
    success: bool
    message: str
    study_document: Optional[StudyDocument] = None
    chunks_attempted: int = 0
    chunks_failed: int = 0
    processing_time: float = 0.0
