# errors that reach the caller of the study guide pipeline
# transient generation failures never leave the synthesizer, so they have no class here


class StudyGuideError(Exception):
    """Base class for user-facing pipeline failures"""


class UnsupportedFormatError(StudyGuideError):
    def __init__(self, message: str = "Unsupported file format. Please upload a PDF or PPTX."):
        super().__init__(message)


class ExtractionError(StudyGuideError):
    """A supported document could not be opened or read"""


class InsufficientContentError(StudyGuideError):
    def __init__(self, message: str = "Could not extract enough text. The file might be empty or image-based."):
        super().__init__(message)


class GenerationExhaustedError(StudyGuideError):
    """Nothing was generated and at least one chunk ran out of attempts.

    Chunks that answered with an empty section list do not count as processed:
    no part produced content, so the message always reports 0 of the total.
    """

    def __init__(self, chunks_total: int, chunks_failed: int):
        self.chunks_total = chunks_total
        self.chunks_failed = chunks_failed
        super().__init__(
            f"Connection failed. Processed 0/{chunks_total} parts. "
            "Please try a smaller file."
        )


class EmptyDocumentError(StudyGuideError):
    def __init__(self, message: str = "No content generated. The document might be empty or unreadable."):
        super().__init__(message)
