import json
import logging
import re
from typing import Any

from exam_bot.quiz.exceptions import MalformedQuizError
from exam_bot.quiz.models import Question
from exam_bot.quiz.question_set import question_from_dict, validate_question

logger = logging.getLogger(__name__)

_LETTER_RE = re.compile(r"^[A-Ea-e][).:]\s*")


def parse_quiz(raw_text: str) -> dict | None:
    """
    Parse LLM output into quiz metadata and valid questions.

    Returns:
        {"title": str, "description": str, "questions": list[Question]}, or
        None if nothing usable was found
    """
    if not raw_text:
        return None

    data = _extract_json(raw_text)
    if data is None:
        logger.error("Failed to parse LLM response as JSON")
        return None

    if isinstance(data, list):
        data = {"questions": data}

    raw_questions = data.get("questions")
    if not isinstance(raw_questions, list):
        logger.error("LLM response has no question list")
        return None

    questions = []
    for raw in raw_questions:
        question = _parse_question(raw)
        if question is not None:
            questions.append(question)

    if not questions:
        return None

    return {
        "title": data.get("title") if isinstance(data.get("title"), str) else "",
        "description": data.get("description") if isinstance(data.get("description"), str) else "",
        "questions": questions,
    }


def _extract_json(raw_text: str) -> Any:
    # Try direct JSON parse
    data = _try_parse_json(raw_text)

    # Try extracting from markdown code block
    if data is None:
        match = re.search(r"```(?:json)?\s*([\[{].*?[\]}])\s*```", raw_text, re.DOTALL)
        if match:
            data = _try_parse_json(match.group(1))

    # Try finding an object or array in the text
    if data is None:
        match = re.search(r"(\{.*\})", raw_text, re.DOTALL)
        if match:
            data = _try_parse_json(match.group(1))
    if data is None:
        match = re.search(r"(\[\s*\{.*\}\s*\])", raw_text, re.DOTALL)
        if match:
            data = _try_parse_json(match.group(1))

    return data


def _try_parse_json(text: str) -> Any:
    try:
        data = json.loads(text)
        if isinstance(data, (list, dict)):
            return data
    except (json.JSONDecodeError, TypeError):
        pass
    return None


def _parse_question(raw: Any) -> Question | None:
    if not isinstance(raw, dict):
        logger.warning(f"Skipping non-object question: {raw!r}")
        return None

    try:
        question = question_from_dict(_normalize_options(raw))
        return validate_question(question)
    except MalformedQuizError as e:
        logger.warning(f"Skipping invalid question ({e}): {raw}")
        return None


def _normalize_options(q: dict) -> dict:
    """Strip letter prefixes from options and resolve letter-based answers."""
    options = q.get("options")
    if not isinstance(options, list) or not all(isinstance(opt, str) for opt in options):
        return q
    if q.get("isMatching") or q.get("kind") == "matching":
        return q

    # Strip letter prefixes like "A) ", "a. ", "B: " from options
    cleaned = [_LETTER_RE.sub("", opt).strip() for opt in options]

    def resolve(value):
        if not isinstance(value, str):
            return value
        value = value.strip()
        if value in cleaned:
            return value
        # A single letter (A/B/C/D/E) refers to an option by position
        if re.match(r"^[A-Ea-e]$", value):
            idx = ord(value.upper()) - ord("A")
            if 0 <= idx < len(cleaned):
                return cleaned[idx]
        return _LETTER_RE.sub("", value).strip()

    answer = q.get("answer", q.get("correct_answer"))
    if isinstance(answer, list):
        answer = [resolve(value) for value in answer]
    else:
        answer = resolve(answer)

    q = dict(q)
    q["options"] = cleaned
    q["answer"] = answer
    q.pop("correct_answer", None)
    return q
