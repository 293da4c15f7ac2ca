"""
shared fixtures for the studylens tests
no test talks to a real llm: generation is replaced by scripted fakes
"""

import io
import json

import fitz  # PyMuPDF
import pytest
from pptx import Presentation
from pptx.util import Inches

from src.studylens.settings import StudyLensSettings
from src.studylens.synthesizer import SynthesisOrchestrator


def section(topic, points=1, questions=0):
    """build one section dict the way the model returns it"""
    return {
        "topic": topic,
        "content": [
            {"english": f"{topic} note {i}", "chinese": f"{topic} 笔记 {i}", "keyTerm": f"term{i}"}
            for i in range(points)
        ],
        "visualSummary": f"diagram for {topic}",
        "questions": [
            {
                "question": f"{topic} question {i}?",
                "options": ["a", "b", "c", "d"],
                "correctIndex": i % 4,
                "explanation": "because"
            }
            for i in range(questions)
        ]
    }


def batch(*topics):
    """json body with one section per topic"""
    return json.dumps({"sections": [section(topic) for topic in topics]})


class FakeLLMService:
    """replays scripted responses; an Exception in the script is raised instead of returned"""

    def __init__(self, script=None, responder=None):
        self.script = list(script or [])
        self.responder = responder
        self.prompts = []
        self.schemas = []

    def complete(self, prompt, schema, system_instruction=None):
        self.prompts.append(prompt)
        self.schemas.append(schema)
        if self.responder is not None:
            result = self.responder(prompt)
        else:
            result = self.script.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


class SleepRecorder:
    """async stand-in for asyncio.sleep that only records the requested delays"""

    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


@pytest.fixture
def sleep_recorder():
    return SleepRecorder()


@pytest.fixture
def make_orchestrator(sleep_recorder):
    def factory(llm_service, **kwargs):
        return SynthesisOrchestrator(llm_service, sleep=sleep_recorder, **kwargs)
    return factory


@pytest.fixture
def test_settings(tmp_path):
    return StudyLensSettings(
        output_dir=str(tmp_path / "outputs"),
        upload_dir=str(tmp_path / "uploads"),
        min_text_length=10,
        _env_file=None
    )


def make_png(width=4, height=4):
    pix = fitz.Pixmap(fitz.csRGB, fitz.IRect(0, 0, width, height), False)
    pix.clear_with(200)
    return pix.tobytes("png")


@pytest.fixture
def sample_pdf(tmp_path):
    """two pages: page 1 has text and an image, page 2 only text"""
    path = tmp_path / "lecture.pdf"
    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((72, 72), "Cell biology basics")
    page.insert_image(fitz.Rect(100, 100, 200, 200), stream=make_png())
    page = doc.new_page()
    page.insert_text((72, 72), "Membrane transport")
    doc.save(str(path))
    doc.close()
    return path


@pytest.fixture
def sample_pptx(tmp_path):
    """three slides: slide 1 title + picture, slide 2 text box, slide 3 two pictures"""
    path = tmp_path / "mitosis.pptx"
    prs = Presentation()
    title_only = prs.slide_layouts[5]
    blank = prs.slide_layouts[6]

    slide = prs.slides.add_slide(title_only)
    slide.shapes.title.text = "Mitosis overview"
    slide.shapes.add_picture(io.BytesIO(make_png()), Inches(1), Inches(2))

    slide = prs.slides.add_slide(blank)
    box = slide.shapes.add_textbox(Inches(1), Inches(1), Inches(4), Inches(2))
    box.text_frame.text = "Anaphase\nTelophase"

    slide = prs.slides.add_slide(blank)
    slide.shapes.add_picture(io.BytesIO(make_png()), Inches(1), Inches(1))
    slide.shapes.add_picture(io.BytesIO(make_png(8, 8)), Inches(4), Inches(1))

    prs.save(str(path))
    return path
