from aiogram.fsm.state import StatesGroup, State


class QuizFlow(StatesGroup):
    entering_topic = State()
    choosing_question_count = State()
    generating = State()
    taking_quiz = State()
