"""Unit tests for question generation and formatting."""

import json
import random
import sys
from pathlib import Path

import httpx
import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from quizaudio.story.questions import (
    OPENROUTER_URL,
    GeneratedQuestion,
    QuestionGenerator,
    apply_answer_shuffle,
    build_fallback_questions,
    format_question_text,
    normalize_question,
)

STORY = "The fox ran to the river. It jumped high over the rocks."


def _model_questions(count: int) -> list[dict]:
    return [
        {
            "questionText": f"Question number {i}?",
            "correctAnswer": f"Right {i}",
            "distractors": [f"Wrong {i}a", f"Wrong {i}b"],
        }
        for i in range(count)
    ]


def _openrouter(content, status_code: int = 200, seen: list | None = None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        body = {"choices": [{"message": {"content": content}}]}
        return httpx.Response(status_code, json=body)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestFormatting:
    def test_spoken_question_text(self) -> None:
        text = format_question_text(0, "Who ran?", "The fox", "The cat", "The dog")

        assert text == "Question 1: Who ran? A: The fox B: The cat C: The dog"

    def test_normalize_question(self) -> None:
        raw = {
            "questionText": "  Who ran? ",
            "correctAnswer": "The fox ",
            "distractors": [" The cat", "", "The dog", "The owl"],
        }

        assert normalize_question(raw) == GeneratedQuestion(
            "Who ran?", "The fox", ("The cat", "The dog")
        )

    @pytest.mark.parametrize(
        "raw",
        [
            "not a dict",
            {"questionText": "", "correctAnswer": "a", "distractors": ["b", "c"]},
            {"questionText": "q", "correctAnswer": "", "distractors": ["b", "c"]},
            {"questionText": "q", "correctAnswer": "a", "distractors": ["b"]},
            {"questionText": "q", "correctAnswer": "a", "distractors": "b, c"},
        ],
    )
    def test_unusable_questions_dropped(self, raw) -> None:
        assert normalize_question(raw) is None

    def test_shuffle_keeps_all_choices(self) -> None:
        question = GeneratedQuestion("Who ran?", "The fox", ("The cat", "The dog"))

        shuffled = apply_answer_shuffle(question, random.Random(7))

        assert shuffled.correct_answer == "The fox"
        assert sorted([shuffled.answer_a, shuffled.answer_b, shuffled.answer_c]) == [
            "The cat",
            "The dog",
            "The fox",
        ]

    def test_shuffle_deterministic_with_seed(self) -> None:
        question = GeneratedQuestion("Who ran?", "The fox", ("The cat", "The dog"))

        assert apply_answer_shuffle(question, random.Random(3)) == apply_answer_shuffle(
            question, random.Random(3)
        )

    def test_fallback_questions(self) -> None:
        questions = build_fallback_questions(STORY, 3)

        assert len(questions) == 3
        assert questions[0].correct_answer == "The fox ran to the river"
        assert len(build_fallback_questions(STORY, 10)) == 5

    def test_fallback_summary_for_blank_story(self) -> None:
        assert build_fallback_questions("", 1)[0].correct_answer == "the story"


class TestQuestionGenerator:
    """Test model-backed generation and its fallbacks."""

    @pytest.mark.asyncio
    async def test_no_api_key_uses_fallback(self) -> None:
        generator = QuestionGenerator(httpx.AsyncClient(), api_key="")

        questions = await generator.generate(STORY, segment_count=2)

        assert len(questions) == 2
        assert questions[0].question_text == "What is this story mostly about?"

    @pytest.mark.asyncio
    async def test_model_questions_used(self) -> None:
        seen: list[httpx.Request] = []
        content = "Here you go:\n" + json.dumps(_model_questions(6))
        generator = QuestionGenerator(_openrouter(content, seen=seen), api_key="or-key")

        questions = await generator.generate(STORY, segment_count=10)

        assert [q.question_text for q in questions] == [
            f"Question number {i}?" for i in range(6)
        ]
        assert str(seen[0].url) == OPENROUTER_URL
        assert seen[0].headers["Authorization"] == "Bearer or-key"
        payload = json.loads(seen[0].content)
        assert payload["model"] == "anthropic/claude-3-haiku"
        assert payload["max_tokens"] == 700

    @pytest.mark.asyncio
    async def test_question_count_clipped_to_segments(self) -> None:
        content = json.dumps(_model_questions(6))
        generator = QuestionGenerator(_openrouter(content), api_key="or-key")

        questions = await generator.generate(STORY, segment_count=3)

        assert len(questions) == 3

    @pytest.mark.asyncio
    async def test_content_parts_list_supported(self) -> None:
        parts = [{"type": "text", "text": json.dumps(_model_questions(4))}]
        generator = QuestionGenerator(_openrouter(parts), api_key="or-key")

        questions = await generator.generate(STORY, segment_count=8)

        assert len(questions) == 4

    @pytest.mark.asyncio
    async def test_too_few_questions_falls_back(self) -> None:
        content = json.dumps(_model_questions(2))
        generator = QuestionGenerator(_openrouter(content), api_key="or-key")

        questions = await generator.generate(STORY, segment_count=8)

        assert questions[0].question_text == "What is this story mostly about?"

    @pytest.mark.asyncio
    async def test_http_error_falls_back(self, caplog) -> None:
        generator = QuestionGenerator(_openrouter("", status_code=500), api_key="or-key")

        questions = await generator.generate(STORY, segment_count=8)

        assert len(questions) == 5
        assert "Question generation failed" in caplog.text

    @pytest.mark.asyncio
    async def test_missing_json_falls_back(self) -> None:
        generator = QuestionGenerator(_openrouter("I cannot help"), api_key="or-key")

        questions = await generator.generate(STORY, segment_count=8)

        assert len(questions) == 5

    @pytest.mark.asyncio
    async def test_story_clipped_in_prompt(self) -> None:
        seen: list[httpx.Request] = []
        content = json.dumps(_model_questions(4))
        generator = QuestionGenerator(_openrouter(content, seen=seen), api_key="or-key")

        await generator.generate("x" * 9000, segment_count=8)

        prompt = json.loads(seen[0].content)["messages"][1]["content"]
        assert prompt.endswith("Story:\n" + "x" * 6000)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"choices": [{"message": "oops"}]},
            {"choices": ["x"]},
            {"choices": {"a": 1}},
            {"choices": []},
        ],
    )
    async def test_malformed_reply_falls_back(self, body) -> None:
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json=body))
        )
        generator = QuestionGenerator(client, api_key="or-key")

        questions = await generator.generate(STORY, segment_count=4)

        assert len(questions) == 4
        assert questions[0].question_text == "What is this story mostly about?"
