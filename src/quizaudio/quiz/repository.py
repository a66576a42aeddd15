"""SQLite storage for stories, quizzes, questions and timelines."""

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path

from ..db import get_connection, placeholders
from ..errors import NotFound
from ..story.questions import QuizQuestion
from ..story.segmenter import StorySegmentDraft
from ..story.timeline import TimelineItem
from ..tts.fingerprint import text_checksum
from .models import QuestionRecord, Quiz, QuizStatus, StorySegment, StorySource

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS story_sources (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    source_text TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS story_segments (
    id TEXT PRIMARY KEY,
    story_source_id TEXT NOT NULL REFERENCES story_sources(id),
    segment_index INTEGER NOT NULL,
    segment_text TEXT NOT NULL,
    pause_ms INTEGER NOT NULL,
    checksum TEXT NOT NULL,
    UNIQUE(story_source_id, segment_index)
);

CREATE TABLE IF NOT EXISTS quizzes (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    story_source_id TEXT NOT NULL REFERENCES story_sources(id),
    title TEXT NOT NULL,
    provider TEXT NOT NULL,
    voice TEXT NOT NULL,
    status TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS quiz_questions (
    id TEXT PRIMARY KEY,
    quiz_id TEXT NOT NULL REFERENCES quizzes(id),
    order_index INTEGER NOT NULL,
    question_text TEXT NOT NULL,
    correct_answer TEXT NOT NULL,
    answer_a TEXT NOT NULL,
    answer_b TEXT NOT NULL,
    answer_c TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS quiz_timeline (
    quiz_id TEXT NOT NULL REFERENCES quizzes(id),
    order_index INTEGER NOT NULL,
    item_type TEXT NOT NULL,
    item_ref_id TEXT NOT NULL,
    pause_ms INTEGER,
    PRIMARY KEY (quiz_id, order_index)
);
"""


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class QuizRepository:
    """SQLite-backed quiz store.

    Every method opens its own connection, matching ClipStorage, so the
    repository can share a database file with it.
    """

    def __init__(self, db_path: Path):
        self.db_path = db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = get_connection(db_path)
        try:
            conn.executescript(_SCHEMA)
            conn.commit()
        finally:
            conn.close()

    # Story sources and segments

    def create_story_source(self, title: str, source_text: str) -> StorySource:
        source = StorySource(id=_new_id(), title=title, source_text=source_text)
        conn = get_connection(self.db_path)
        try:
            conn.execute(
                "INSERT INTO story_sources (id, title, source_text, created_at) "
                "VALUES (?, ?, ?, ?)",
                (source.id, source.title, source.source_text, _now()),
            )
            conn.commit()
        finally:
            conn.close()
        return source

    def get_story_source(self, story_source_id: str) -> StorySource:
        conn = get_connection(self.db_path)
        try:
            row = conn.execute(
                "SELECT id, title, source_text FROM story_sources WHERE id = ?",
                (story_source_id,),
            ).fetchone()
        finally:
            conn.close()
        if row is None:
            raise NotFound(f"Story source '{story_source_id}' not found")
        return StorySource(id=row["id"], title=row["title"], source_text=row["source_text"])

    def list_segments(self, story_source_id: str) -> list[StorySegment]:
        conn = get_connection(self.db_path)
        try:
            rows = conn.execute(
                "SELECT * FROM story_segments WHERE story_source_id = ? "
                "ORDER BY segment_index",
                (story_source_id,),
            ).fetchall()
        finally:
            conn.close()
        return [self._row_to_segment(row) for row in rows]

    def insert_segments(
        self, story_source_id: str, drafts: list[StorySegmentDraft]
    ) -> list[StorySegment]:
        """Persist drafts by index; rows already present are kept as they are.

        Returns:
            All segments of the story, ordered by segment_index
        """
        conn = get_connection(self.db_path)
        try:
            conn.executemany(
                """
                INSERT INTO story_segments
                    (id, story_source_id, segment_index, segment_text, pause_ms, checksum)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(story_source_id, segment_index) DO NOTHING
            """,
                [
                    (
                        _new_id(),
                        story_source_id,
                        index,
                        draft.segment_text,
                        draft.pause_ms,
                        text_checksum(draft.segment_text),
                    )
                    for index, draft in enumerate(drafts)
                ],
            )
            conn.commit()
        finally:
            conn.close()
        return self.list_segments(story_source_id)

    def get_segments(self, segment_ids: list[str]) -> dict[str, StorySegment]:
        rows = self._select_in("story_segments", "id", segment_ids)
        return {row["id"]: self._row_to_segment(row) for row in rows}

    # Quizzes

    def create_quiz(
        self,
        user_id: str,
        story_source_id: str,
        title: str,
        provider: str,
        voice: str,
    ) -> Quiz:
        quiz = Quiz(
            id=_new_id(),
            user_id=user_id,
            story_source_id=story_source_id,
            title=title,
            provider=provider,
            voice=voice,
            status="generating",
        )
        conn = get_connection(self.db_path)
        try:
            conn.execute(
                "INSERT INTO quizzes (id, user_id, story_source_id, title, provider, "
                "voice, status, created_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    quiz.id,
                    quiz.user_id,
                    quiz.story_source_id,
                    quiz.title,
                    quiz.provider,
                    quiz.voice,
                    quiz.status,
                    _now(),
                ),
            )
            conn.commit()
        finally:
            conn.close()
        return quiz

    def get_quiz(self, quiz_id: str) -> Quiz:
        conn = get_connection(self.db_path)
        try:
            row = conn.execute(
                "SELECT id, user_id, story_source_id, title, provider, voice, status "
                "FROM quizzes WHERE id = ?",
                (quiz_id,),
            ).fetchone()
        finally:
            conn.close()
        if row is None:
            raise NotFound(f"Quiz '{quiz_id}' not found")
        return Quiz(**dict(row))

    def list_quizzes(self, user_id: str) -> list[Quiz]:
        """Quizzes owned by a user, newest first."""
        conn = get_connection(self.db_path)
        try:
            rows = conn.execute(
                "SELECT id, user_id, story_source_id, title, provider, voice, status "
                "FROM quizzes WHERE user_id = ? ORDER BY created_at DESC, rowid DESC",
                (user_id,),
            ).fetchall()
        finally:
            conn.close()
        return [Quiz(**dict(row)) for row in rows]

    def set_quiz_status(self, quiz_id: str, status: QuizStatus) -> None:
        conn = get_connection(self.db_path)
        try:
            conn.execute("UPDATE quizzes SET status = ? WHERE id = ?", (status, quiz_id))
            conn.commit()
        finally:
            conn.close()
        logger.debug(f"Quiz {quiz_id} status -> {status}")

    # Questions

    def insert_questions(
        self, quiz_id: str, questions: list[QuizQuestion]
    ) -> list[QuestionRecord]:
        records = [
            QuestionRecord(
                id=_new_id(),
                quiz_id=quiz_id,
                order_index=index,
                question_text=q.question_text,
                correct_answer=q.correct_answer,
                answer_a=q.answer_a,
                answer_b=q.answer_b,
                answer_c=q.answer_c,
            )
            for index, q in enumerate(questions)
        ]
        conn = get_connection(self.db_path)
        try:
            conn.executemany(
                "INSERT INTO quiz_questions (id, quiz_id, order_index, question_text, "
                "correct_answer, answer_a, answer_b, answer_c) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                [
                    (
                        r.id,
                        r.quiz_id,
                        r.order_index,
                        r.question_text,
                        r.correct_answer,
                        r.answer_a,
                        r.answer_b,
                        r.answer_c,
                    )
                    for r in records
                ],
            )
            conn.commit()
        finally:
            conn.close()
        return records

    def get_questions(self, question_ids: list[str]) -> dict[str, QuestionRecord]:
        rows = self._select_in("quiz_questions", "id", question_ids)
        return {row["id"]: QuestionRecord(**dict(row)) for row in rows}

    # Timeline

    def save_timeline(self, quiz_id: str, items: list[TimelineItem]) -> None:
        conn = get_connection(self.db_path)
        try:
            conn.executemany(
                "INSERT INTO quiz_timeline (quiz_id, order_index, item_type, "
                "item_ref_id, pause_ms) VALUES (?, ?, ?, ?, ?)",
                [
                    (quiz_id, i.order_index, i.item_type, i.item_ref_id, i.pause_ms)
                    for i in items
                ],
            )
            conn.commit()
        finally:
            conn.close()

    def list_timeline(self, quiz_id: str) -> list[TimelineItem]:
        conn = get_connection(self.db_path)
        try:
            rows = conn.execute(
                "SELECT item_type, item_ref_id, order_index, pause_ms "
                "FROM quiz_timeline WHERE quiz_id = ? ORDER BY order_index",
                (quiz_id,),
            ).fetchall()
        finally:
            conn.close()
        return [
            TimelineItem(
                item_type=row["item_type"],
                item_ref_id=row["item_ref_id"],
                order_index=row["order_index"],
                pause_ms=row["pause_ms"] or 0,
            )
            for row in rows
        ]

    def _select_in(self, table: str, column: str, values: list[str]) -> list:
        unique = list(dict.fromkeys(values))
        if not unique:
            return []
        conn = get_connection(self.db_path)
        try:
            return conn.execute(
                f"SELECT * FROM {table} WHERE {column} IN ({placeholders(len(unique))})",
                unique,
            ).fetchall()
        finally:
            conn.close()

    @staticmethod
    def _row_to_segment(row) -> StorySegment:
        return StorySegment(
            id=row["id"],
            story_source_id=row["story_source_id"],
            segment_index=row["segment_index"],
            segment_text=row["segment_text"],
            pause_ms=row["pause_ms"],
            checksum=row["checksum"],
        )
