"""Generation domain types and prompt builders."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sumvid.domains.generation.exceptions import TranscriptTooShortError
from sumvid.domains.usage.types import UsageSnapshot

MIN_TRANSCRIPT_CHARS = 10
QUIZ_QUESTION_COUNT = 3

_TIMESTAMP = re.compile(r"\[\d+:\d+\]")
_WHITESPACE = re.compile(r"\s+")


class GenerationKind(str, Enum):
    """What a generation request produces."""

    SUMMARY = "summary"
    QUIZ = "quiz"
    QA = "qa"


@dataclass(frozen=True)
class GenerationResult:
    """Generated text plus the usage after the unit was consumed."""

    kind: GenerationKind
    content: str
    usage: UsageSnapshot


def clean_transcript(transcript: Optional[str]) -> str:
    """Strip ``[mm:ss]`` markers and collapse whitespace.

    Raises:
        TranscriptTooShortError: If fewer than MIN_TRANSCRIPT_CHARS remain.
    """
    cleaned = _WHITESPACE.sub(" ", _TIMESTAMP.sub("", transcript or "")).strip()
    if len(cleaned) < MIN_TRANSCRIPT_CHARS:
        raise TranscriptTooShortError()
    return cleaned


def summary_budget(transcript: str) -> tuple[int, int]:
    """Return (target words, max tokens) for a summary.

    Aims at a tenth of the video's speaking time at 150 words per minute,
    clamped to 300-2000 words.
    """
    words = len(transcript.split())
    target_words = round(words / 10)
    target_words = max(300, min(2000, target_words))
    return target_words, round(target_words * 1.2)


def build_summary_messages(
    transcript: str, title: Optional[str], context: Optional[str]
) -> tuple[list[dict[str, str]], int]:
    """Messages and token budget for a summary."""
    target_words, max_tokens = summary_budget(transcript)
    extra = f"\n\nAdditional context: {context}" if context else ""
    system = (
        f"Summarize this video about {title or 'the topic'} for a 5th grader, aiming for "
        f"about {target_words} words. Use <h4> for headings and <strong> for important "
        f"terms.{extra}"
    )
    messages = [
        {"role": "system", "content": system},
        {"role": "user", "content": transcript},
    ]
    return messages, max_tokens


_QUIZ_RULES = """Follow these rules:
1. Make EXACTLY 3 questions
2. Use simple words and short sentences
3. Ask about the main ideas from the video
4. Each question needs 3 choices (A, B, C) and only one right answer
5. Wrong answers should make sense but be clearly wrong
6. Use this exact format for each question:
<div class="question">
  <p class="question-text">1. Your question text here?</p>
  <div class="answers">
    <label class="answer"><input type="radio" name="q1" value="a"><span>Answer A</span></label>
    <label class="answer"><input type="radio" name="q1" value="b"><span>Answer B</span></label>
    <label class="answer"><input type="radio" name="q1" value="c"><span>Answer C</span></label>
  </div>
  <div class="correct-answer" style="display: none;">a</div>
</div>
Use q1, q2, q3 for the radio names and a, b, c for the values."""


def build_quiz_messages(
    transcript: Optional[str],
    summary: Optional[str],
    title: Optional[str],
    difficulty: Optional[str],
) -> list[dict[str, str]]:
    """Messages for a three-question multiple-choice quiz."""
    extra = f"\n\nThe user requests: {difficulty} difficulty" if difficulty else ""
    system = (
        "You are making a quiz about a YouTube video. Create EXACTLY 3 multiple-choice "
        f"questions that a 5th grader can understand.{extra}\n"
        f"Topic: {title or 'unknown topic'}\n{_QUIZ_RULES}"
    )
    content = f"Transcript: {transcript or ''}"
    if summary:
        content += f"\n\nSummary: {summary}"
    return [{"role": "system", "content": system}, {"role": "user", "content": content + extra}]


def count_quiz_questions(quiz: str) -> int:
    """Number of question blocks in a generated quiz."""
    return quiz.count('<div class="question">')


def build_qa_messages(
    question: str,
    transcript: Optional[str],
    summary: Optional[str],
    title: Optional[str],
    chat_history: Optional[list[dict[str, str]]],
) -> list[dict[str, str]]:
    """Messages for answering a question about the video, with prior turns."""
    video_title = title or "unknown video"
    system = (
        f'You are helping a 5th grader understand a YouTube video titled "{video_title}". '
        "Give short, simple answers (2-3 sentences if possible) using basic words. "
        "If you're not sure about something, just say so in a simple way."
    )
    messages = [{"role": "system", "content": system}]
    for turn in chat_history or []:
        if turn.get("role") in ("user", "assistant") and turn.get("content"):
            messages.append({"role": turn["role"], "content": turn["content"]})

    content = f"Video transcript: {transcript or ''}"
    if summary:
        content += f"\n\nVideo summary: {summary}"
    messages.append({"role": "user", "content": f"{content}\n\nQuestion: {question}"})
    return messages
