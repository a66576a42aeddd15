"""Comprehension questions for audio quizzes.

Questions come from an OpenRouter chat model when a key is configured and
fall back to a fixed set of kid-friendly questions otherwise.
"""

import json
import logging
import os
import random
import re
from dataclasses import dataclass

import httpx

logger = logging.getLogger(__name__)

OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_QUESTION_MODEL = "anthropic/claude-3-haiku"
DEFAULT_MIN_QUESTIONS = 4
DEFAULT_MAX_QUESTIONS = 6
MAX_PROMPT_STORY_CHARS = 6000

_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")


@dataclass(frozen=True)
class GeneratedQuestion:
    """A question with its correct answer and two distractors."""

    question_text: str
    correct_answer: str
    distractors: tuple[str, str]


@dataclass(frozen=True)
class QuizQuestion:
    """A question with its three choices in spoken order."""

    question_text: str
    correct_answer: str
    answer_a: str
    answer_b: str
    answer_c: str


def format_question_text(
    order_index: int, question_text: str, answer_a: str, answer_b: str, answer_c: str
) -> str:
    """Spoken prompt for a question; its fingerprint addresses the clip."""
    return (
        f"Question {order_index + 1}: {question_text} "
        f"A: {answer_a} B: {answer_b} C: {answer_c}"
    )


def normalize_question(raw: object) -> GeneratedQuestion | None:
    """Clean one model-produced question, or None if it is unusable."""
    if not isinstance(raw, dict):
        return None
    question_text = str(raw.get("questionText") or "").strip()
    correct_answer = str(raw.get("correctAnswer") or "").strip()
    distractors = raw.get("distractors")
    if not isinstance(distractors, list):
        distractors = []
    cleaned = [str(d).strip() for d in distractors if str(d).strip()]

    if not question_text or not correct_answer or len(cleaned) < 2:
        return None
    return GeneratedQuestion(question_text, correct_answer, (cleaned[0], cleaned[1]))


def apply_answer_shuffle(
    question: GeneratedQuestion, rng: random.Random | None = None
) -> QuizQuestion:
    choices = [question.correct_answer, *question.distractors]
    (rng or random.Random()).shuffle(choices)
    return QuizQuestion(
        question_text=question.question_text,
        correct_answer=question.correct_answer,
        answer_a=choices[0],
        answer_b=choices[1],
        answer_c=choices[2],
    )


def build_fallback_questions(story_text: str, count: int) -> list[GeneratedQuestion]:
    summary = re.split(r"\n|\.", story_text)[0][:80].strip() or "the story"
    prompts = [
        GeneratedQuestion(
            "What is this story mostly about?",
            summary,
            ("A math puzzle", "A weather report"),
        ),
        GeneratedQuestion(
            "How does the story make you feel?", "Curious", ("Confused", "Bored")
        ),
        GeneratedQuestion(
            "What should you do after hearing the story?",
            "Think about what happened",
            ("Forget it", "Yell loudly"),
        ),
        GeneratedQuestion(
            "Why did the characters keep going?",
            "They wanted to finish their adventure",
            ("They were lost", "They were asleep"),
        ),
        GeneratedQuestion(
            "What is one good lesson from the story?",
            "Be kind and keep trying",
            ("Give up quickly", "Never listen"),
        ),
    ]
    return prompts[:count]


def _question_prompt(story_text: str, min_questions: int, max_questions: int) -> str:
    return (
        "You are writing comprehension questions for a children's audiobook.\n\n"
        "Rules:\n"
        f"- Write {min_questions}-{max_questions} questions.\n"
        "- Each question must be multiple-choice with exactly 1 correct answer "
        "and 2 plausible distractors.\n"
        "- Keep language simple and kid-friendly.\n"
        "- Do NOT reveal the answer in the question.\n"
        "- Return JSON only (no markdown).\n\n"
        "Return JSON array with objects shaped like:\n"
        '[{"questionText":"...","correctAnswer":"...","distractors":["...","..."]}]\n\n'
        f"Story:\n{story_text}"
    )


class QuestionGenerator:
    """Produces comprehension questions for a story."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str | None = None,
        model: str = DEFAULT_QUESTION_MODEL,
        min_questions: int = DEFAULT_MIN_QUESTIONS,
        max_questions: int = DEFAULT_MAX_QUESTIONS,
    ) -> None:
        self._client = client
        self._api_key = api_key if api_key is not None else os.getenv("OPENROUTER_API_KEY")
        self.model = model
        self.min_questions = min_questions
        self.max_questions = max_questions

    async def generate(self, story_text: str, segment_count: int) -> list[GeneratedQuestion]:
        """Generate questions, never more than there are segments.

        Falls back to fixed questions when the model is unavailable or
        returns fewer than the minimum.
        """
        max_possible = min(self.max_questions, segment_count)
        min_questions = min(self.min_questions, max_possible or 1)
        adjusted_max = max(min_questions, max_possible)
        target = max(1, adjusted_max)

        clipped = story_text[:MAX_PROMPT_STORY_CHARS]

        if self._api_key:
            try:
                questions = await self._fetch(clipped, min_questions, adjusted_max)
                if len(questions) >= min_questions:
                    return questions[:target]
                logger.warning(
                    f"Question model returned {len(questions)} usable questions, "
                    f"need {min_questions}; using fallback"
                )
            except (httpx.HTTPError, ValueError) as e:
                logger.warning(f"Question generation failed, using fallback: {e}")
        else:
            logger.info("OPENROUTER_API_KEY not configured, using fallback questions")

        return build_fallback_questions(clipped, target)

    async def _fetch(
        self, story_text: str, min_questions: int, max_questions: int
    ) -> list[GeneratedQuestion]:
        response = await self._client.post(
            OPENROUTER_URL,
            headers={"Authorization": f"Bearer {self._api_key}"},
            json={
                "model": self.model,
                "messages": [
                    {
                        "role": "system",
                        "content": "You create safe, kid-friendly comprehension questions.",
                    },
                    {
                        "role": "user",
                        "content": _question_prompt(story_text, min_questions, max_questions),
                    },
                ],
                "max_tokens": 700,
            },
        )
        response.raise_for_status()

        data = response.json()
        if not isinstance(data, dict):
            raise ValueError("Question model response is not an object")
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            raise ValueError("Question model response has no choices")
        message = choices[0].get("message")
        if not isinstance(message, dict):
            raise ValueError("Question model response has no message")
        content = message.get("content")
        if isinstance(content, list):
            content = " ".join(
                part.get("text", "") for part in content if isinstance(part, dict)
            )
        if not isinstance(content, str):
            content = ""

        match = _JSON_ARRAY.search(content)
        if not match:
            raise ValueError("Question model response missing JSON array")

        parsed = json.loads(match.group(0))
        if not isinstance(parsed, list):
            raise ValueError("Question model response not an array")

        questions = (normalize_question(item) for item in parsed)
        return [q for q in questions if q is not None]
