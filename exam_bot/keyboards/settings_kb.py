from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton

from exam_bot.config import settings


def question_count_keyboard() -> InlineKeyboardMarkup:
    buttons = []
    for count in settings.QUESTION_COUNTS:
        buttons.append([InlineKeyboardButton(
            text=f"{count} questions",
            callback_data=f"count:{count}",
        )])
    buttons.append([InlineKeyboardButton(text="🏠 Home", callback_data="go_home")])
    return InlineKeyboardMarkup(inline_keyboard=buttons)


def generation_failed_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text="🔁 Try again", callback_data="retry_generate")],
        [InlineKeyboardButton(text="✏️ Change topic", callback_data="generate")],
        [InlineKeyboardButton(text="🏠 Home", callback_data="go_home")],
    ])


def cancel_keyboard() -> InlineKeyboardMarkup:
    """Keyboard shown while the user types a topic."""
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text="🏠 Home", callback_data="go_home")],
    ])
