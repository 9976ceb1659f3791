from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton

from exam_bot.quiz.models import Quiz


def main_menu_keyboard(mock_exams: list[Quiz], last_generated: Quiz | None = None) -> InlineKeyboardMarkup:
    buttons = []
    for quiz in mock_exams:
        star = "⭐ " if quiz.is_important else ""
        buttons.append([InlineKeyboardButton(
            text=f"{star}{quiz.title} ({quiz.question_count} questions)",
            callback_data=f"exam:{quiz.id}",
        )])
    if last_generated is not None:
        buttons.append([InlineKeyboardButton(
            text=f"🤖 {last_generated.title}",
            callback_data=f"exam:{last_generated.id}",
        )])
    buttons.append([InlineKeyboardButton(text="✨ Generate a quiz", callback_data="generate")])
    return InlineKeyboardMarkup(inline_keyboard=buttons)
