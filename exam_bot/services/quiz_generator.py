import logging
import uuid

from exam_bot.config import settings
from exam_bot.llm.client import chat_completion
from exam_bot.llm.parser import parse_quiz
from exam_bot.llm.prompts import build_quiz_prompt, build_retry_prompt
from exam_bot.quiz.exceptions import GenerationFailure, MalformedQuizError
from exam_bot.quiz.models import Quiz
from exam_bot.quiz.question_set import validate_quiz

logger = logging.getLogger(__name__)


def new_quiz_id() -> str:
    return f"generated-{uuid.uuid4().hex[:12]}"


async def generate_quiz(topic: str, count: int) -> Quiz:
    """
    Generate a validated quiz about a topic.

    Args:
        topic: Subject of the quiz, surrounding whitespace ignored
        count: Number of questions, MIN_QUESTIONS..MAX_QUESTIONS

    Returns:
        A quiz with exactly `count` questions and a fresh id

    Raises:
        ValueError: If the topic is blank or the count out of range
        GenerationFailure: If the LLM gave no usable quiz after a retry
    """
    topic = (topic or "").strip()
    if not topic:
        raise ValueError("Topic must not be empty")
    if not settings.MIN_QUESTIONS <= count <= settings.MAX_QUESTIONS:
        raise ValueError(
            f"Question count must be between {settings.MIN_QUESTIONS} and {settings.MAX_QUESTIONS}"
        )

    # First attempt
    raw = await chat_completion(build_quiz_prompt(topic, count))
    parsed = parse_quiz(raw) if raw else None

    if not parsed or len(parsed["questions"]) < count:
        # Retry once with a stricter prompt
        logger.info("First attempt didn't produce enough questions, retrying...")
        raw = await chat_completion(build_retry_prompt(topic, count))
        retry_parsed = parse_quiz(raw) if raw else None
        if retry_parsed and (
            not parsed or len(retry_parsed["questions"]) > len(parsed["questions"])
        ):
            parsed = retry_parsed

    if not parsed:
        logger.error("Failed to generate quiz after 2 attempts")
        raise GenerationFailure(f"Could not generate a quiz about {topic!r}")

    questions = parsed["questions"][:count]
    if len(questions) < settings.MIN_QUESTIONS:
        logger.error("Generated quiz has only %d valid questions", len(questions))
        raise GenerationFailure(f"Could not generate enough questions about {topic!r}")

    quiz = Quiz(
        id=new_quiz_id(),
        title=parsed["title"] or f"AI Quiz: {topic}",
        description=parsed["description"] or f"A practice quiz about {topic}.",
        questions=tuple(questions),
    )
    try:
        validate_quiz(quiz)
    except MalformedQuizError as e:
        raise GenerationFailure(f"Generated quiz is malformed: {e}")

    logger.info("Generated quiz %s with %d questions on %r", quiz.id, quiz.question_count, topic)
    return quiz
