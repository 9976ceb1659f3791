"""Exam Coach: practice exams and AI-generated quizzes in Telegram."""
