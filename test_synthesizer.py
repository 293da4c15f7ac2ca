"""
tests for the chunk-by-chunk generation loop: retries, pacing, partial results
"""

import asyncio
import json

import pytest

from conftest import FakeLLMService, batch, section
from src.studylens.exceptions import EmptyDocumentError, GenerationExhaustedError
from src.studylens.models import SectionBatch
from src.studylens.synthesizer import ChunkAttemptError, parse_sections


def run(coro):
    return asyncio.run(coro)


def part_number(prompt):
    # "Analyze Part 2/3:..." -> 2
    return int(prompt.split("Part ", 1)[1].split("/", 1)[0])


def test_failing_chunk_is_tried_exactly_three_times(make_orchestrator):
    llm = FakeLLMService(responder=lambda prompt: ConnectionError("offline"))

    with pytest.raises(GenerationExhaustedError) as exc_info:
        run(make_orchestrator(llm).synthesize(["only chunk\n"]))

    assert len(llm.prompts) == 3
    assert exc_info.value.chunks_failed == 1


def test_all_chunks_failing_reports_zero_of_three(make_orchestrator):
    llm = FakeLLMService(responder=lambda prompt: "not json at all")

    with pytest.raises(GenerationExhaustedError) as exc_info:
        run(make_orchestrator(llm).synthesize(["a\n", "b\n", "c\n"]))

    assert "0/3" in str(exc_info.value)
    assert exc_info.value.chunks_total == 3
    assert len(llm.prompts) == 9


def test_empty_sections_is_an_unreadable_document(make_orchestrator):
    llm = FakeLLMService(script=[json.dumps({"sections": []})])

    with pytest.raises(EmptyDocumentError) as exc_info:
        run(make_orchestrator(llm).synthesize(["blank slide\n"]))

    assert "unreadable" in str(exc_info.value)
    assert len(llm.prompts) == 1


def test_no_chunks_is_an_unreadable_document(make_orchestrator):
    llm = FakeLLMService()

    with pytest.raises(EmptyDocumentError):
        run(make_orchestrator(llm).synthesize([]))

    assert llm.prompts == []


def test_partial_failure_keeps_successful_chunks(make_orchestrator):
    def responder(prompt):
        n = part_number(prompt)
        if n == 2:
            return TimeoutError("slow")
        return batch(f"Slide {n}: ok")

    llm = FakeLLMService(responder=responder)
    outcome = run(make_orchestrator(llm).synthesize(["one\n", "two\n", "three\n"]))

    assert [s.topic for s in outcome.sections] == ["Slide 1: ok", "Slide 3: ok"]
    assert outcome.chunks_attempted == 3
    assert outcome.chunks_failed == 1
    assert len(llm.prompts) == 1 + 3 + 1


def test_sections_keep_chunk_order_then_model_order(make_orchestrator):
    def responder(prompt):
        n = part_number(prompt)
        return batch(f"Slide {n}: first", f"Slide {n}: second")

    llm = FakeLLMService(responder=responder)
    outcome = run(make_orchestrator(llm).synthesize(["x\n", "y\n", "z\n"]))

    assert [s.topic for s in outcome.sections] == [
        "Slide 1: first", "Slide 1: second",
        "Slide 2: first", "Slide 2: second",
        "Slide 3: first", "Slide 3: second",
    ]
    assert outcome.chunks_failed == 0


def test_duplicate_topics_across_chunks_are_kept(make_orchestrator):
    llm = FakeLLMService(responder=lambda prompt: batch("Slide 3: Overview"))
    outcome = run(make_orchestrator(llm).synthesize(["x\n", "y\n"]))
    assert [s.topic for s in outcome.sections] == ["Slide 3: Overview", "Slide 3: Overview"]


def test_retry_then_success(make_orchestrator):
    llm = FakeLLMService(script=[
        "",
        json.dumps({"pages": []}),
        batch("Page 1: Intro"),
    ])

    outcome = run(make_orchestrator(llm).synthesize(["intro\n"]))

    assert [s.topic for s in outcome.sections] == ["Page 1: Intro"]
    assert outcome.chunks_failed == 0
    assert len(llm.prompts) == 3


def test_delays_separate_pacing_from_backoff(make_orchestrator, sleep_recorder):
    llm = FakeLLMService(script=[
        RuntimeError("429"),
        batch("Slide 1: a"),
        batch("Slide 2: b"),
    ])

    run(make_orchestrator(llm, request_interval=1.0, retry_backoff=2.0).synthesize(["a\n", "b\n"]))

    # no wait before the first call, pacing + one backoff step before the retry,
    # plain pacing before the next chunk
    assert sleep_recorder.delays == [3.0, 1.0]


def test_default_schedule_for_a_failing_chunk(make_orchestrator, sleep_recorder):
    llm = FakeLLMService(responder=lambda prompt: ValueError("bad"))

    with pytest.raises(GenerationExhaustedError):
        run(make_orchestrator(llm).synthesize(["a\n"]))

    assert sleep_recorder.delays == [3.0, 5.0]


def test_zero_delays_skip_sleeping(make_orchestrator, sleep_recorder):
    llm = FakeLLMService(responder=lambda prompt: batch("Slide 1: a"))
    run(make_orchestrator(llm, request_interval=0, retry_backoff=0).synthesize(["a\n", "b\n"]))
    assert sleep_recorder.delays == []


def test_prompt_names_part_position_and_schema(make_orchestrator):
    llm = FakeLLMService(responder=lambda prompt: batch("Slide 1: a"))

    run(make_orchestrator(llm).synthesize(["first\n", "second\n"]))

    assert llm.prompts[0] == "Analyze Part 1/2:\n\nfirst\n"
    assert llm.prompts[1].startswith("Analyze Part 2/2:")
    assert llm.schemas == [SectionBatch, SectionBatch]


def test_custom_attempt_cap(make_orchestrator):
    llm = FakeLLMService(responder=lambda prompt: "{}")
    with pytest.raises(GenerationExhaustedError):
        run(make_orchestrator(llm, max_attempts=5).synthesize(["a\n"]))
    assert len(llm.prompts) == 5


def test_parse_sections_accepts_code_fences():
    body = "```json\n" + batch("Slide 2: Fenced") + "\n```"
    sections = parse_sections(body)
    assert [s.topic for s in sections] == ["Slide 2: Fenced"]


def test_parse_sections_reads_camel_case_fields():
    body = json.dumps({"sections": [section("Slide 1: Cells", points=2, questions=1)]})
    parsed = parse_sections(body)[0]
    assert parsed.content[1].key_term == "term1"
    assert parsed.visual_summary == "diagram for Slide 1: Cells"
    assert parsed.questions[0].correct_index == 0


def test_optional_fields_may_be_missing():
    body = json.dumps({"sections": [{"topic": "Intro", "content": [{"english": "hi", "chinese": "你好"}]}]})
    parsed = parse_sections(body)[0]
    assert parsed.questions == []
    assert parsed.visual_summary is None
    assert parsed.content[0].key_term is None


@pytest.mark.parametrize("body", [
    None,
    "",
    "   ",
    "[1, 2, 3]",
    '{"sections": "none"}',
    '{"sections": [{"content": []}]}',
    '{"sections": [{"topic": "x", "content": [{"english": "only english"}]}]}',
])
def test_parse_sections_rejects_bad_bodies(body):
    with pytest.raises(ChunkAttemptError):
        parse_sections(body)


def test_questions_need_four_options_and_a_valid_index():
    bad_options = section("Slide 1: a", questions=1)
    bad_options["questions"][0]["options"] = ["a", "b", "c"]
    bad_index = section("Slide 1: a", questions=1)
    bad_index["questions"][0]["correctIndex"] = 4

    for body in (bad_options, bad_index):
        with pytest.raises(ChunkAttemptError):
            parse_sections(json.dumps({"sections": [body]}))


def test_empty_answers_mixed_with_failures_report_nothing_processed(make_orchestrator):
    def responder(prompt):
        if part_number(prompt) == 1:
            return json.dumps({"sections": []})
        return ConnectionError("reset")

    llm = FakeLLMService(responder=responder)

    with pytest.raises(GenerationExhaustedError) as exc_info:
        run(make_orchestrator(llm).synthesize(["a\n", "b\n"]))

    assert "Processed 0/2 parts" in str(exc_info.value)
    assert exc_info.value.chunks_failed == 1
