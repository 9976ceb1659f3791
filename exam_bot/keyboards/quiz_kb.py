from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton

from exam_bot.quiz.answers import is_correct
from exam_bot.quiz.models import QuestionKind
from exam_bot.quiz.navigation import QuizSession

_BUTTON_TEXT_LIMIT = 40


def _short(text: str) -> str:
    if len(text) <= _BUTTON_TEXT_LIMIT:
        return text
    return text[:_BUTTON_TEXT_LIMIT - 1] + "…"


def _option_marker(session: QuizSession, index: int, option: str) -> str:
    question = session.quiz.questions[index]
    answer = session.answer_for(index)
    revealed = session.is_revealed(index)

    if question.kind == QuestionKind.MULTIPLE_CHOICE:
        selected = answer is not None and option in answer
        is_right = option in question.correct_answer
    else:
        selected = answer == option
        is_right = option == question.correct_answer

    if revealed:
        if is_right:
            return "✅"
        if selected:
            return "❌"
        return "▫️"
    if question.kind == QuestionKind.MULTIPLE_CHOICE:
        return "☑️" if selected else "⬜"
    return "🔘" if selected else "⚪"


def _matching_marker(session: QuizSession, index: int, label: str) -> str:
    question = session.quiz.questions[index]
    answer = session.answer_for(index) or {}
    if session.is_revealed(index):
        return "✅" if answer.get(label) == question.correct_answer[label] else "❌"
    return "🔗" if answer.get(label) else "▫️"


def _navigation_row(session: QuizSession) -> list[InlineKeyboardButton]:
    row = []
    index = session.current_index
    if index > 0:
        row.append(InlineKeyboardButton(text="◀ Previous", callback_data="nav:-1"))
    if index == session.question_count - 1:
        row.append(InlineKeyboardButton(text="🏁 Finish", callback_data="finish"))
    else:
        row.append(InlineKeyboardButton(text="Next ▶", callback_data="nav:1"))
    return row


def question_keyboard(session: QuizSession) -> InlineKeyboardMarkup:
    """Answer controls for the current question, plus navigation."""
    index = session.current_index
    question = session.current_question
    buttons = []

    if question.kind == QuestionKind.MATCHING:
        answer = session.answer_for(index) or {}
        for i, label in enumerate(question.options):
            chosen = answer.get(label) or "…"
            buttons.append([InlineKeyboardButton(
                text=f"{_matching_marker(session, index, label)} {i + 1} → {_short(chosen)}",
                callback_data=f"match:{i}",
            )])
    else:
        for i, option in enumerate(question.options):
            buttons.append([InlineKeyboardButton(
                text=f"{_option_marker(session, index, option)} {_short(option)}",
                callback_data=f"opt:{i}",
            )])

    if not session.is_revealed(index):
        buttons.append([InlineKeyboardButton(text="🔍 Check answer", callback_data="reveal")])

    buttons.append(_navigation_row(session))
    buttons.append([InlineKeyboardButton(text="🏠 Home", callback_data="go_home")])
    return InlineKeyboardMarkup(inline_keyboard=buttons)


def matching_terms_keyboard(session: QuizSession, option_index: int) -> InlineKeyboardMarkup:
    """Term choices for one row of a matching question, in the session's pinned order."""
    index = session.current_index
    pool = session.term_pool(index)
    buttons = []
    for j, term in enumerate(pool):
        buttons.append([InlineKeyboardButton(
            text=_short(term),
            callback_data=f"term:{option_index}:{j}",
        )])
    buttons.append([InlineKeyboardButton(text="🔙 Back", callback_data="back_to_question")])
    return InlineKeyboardMarkup(inline_keyboard=buttons)


def results_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text="🔁 Retake quiz", callback_data="restart")],
        [InlineKeyboardButton(text="🏠 Home", callback_data="go_home")],
    ])


def question_result_markers(session: QuizSession) -> list[str]:
    """✅/❌/▫️ per question for the results summary."""
    markers = []
    for i, question in enumerate(session.quiz.questions):
        answer = session.answer_for(i)
        if answer is None:
            markers.append("▫️")
        elif is_correct(question.kind, question.correct_answer, answer):
            markers.append("✅")
        else:
            markers.append("❌")
    return markers
