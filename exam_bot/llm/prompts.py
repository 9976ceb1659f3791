EXAMPLES = """Single choice (exactly one correct option, "answer" is the EXACT option text):
{"question": "Which document formally authorizes a project?", "options": ["Project charter", "Scope statement", "Business case", "WBS"], "answer": "Project charter", "explanation": "..."}

Multiple choice (two or more correct options, "answer" is a list of EXACT option texts):
{"question": "Which are outputs of Identify Risks? (Select all that apply)", "options": ["Risk register", "Risk report", "Risk management plan", "Issue log"], "answer": ["Risk register", "Risk report"], "explanation": "...", "isMultipleChoice": true}

Matching ("options" are descriptions, "answer" maps EVERY description to its term):
{"question": "Match each estimating technique with its description.", "options": ["Uses historical data from a similar project", "Uses a statistical relationship between variables"], "answer": {"Uses historical data from a similar project": "Analogous", "Uses a statistical relationship between variables": "Parametric"}, "explanation": "...", "isMatching": true}"""


def build_quiz_prompt(topic: str, count: int) -> str:
    return f"""You are an exam preparation assistant that writes practice test questions.

Topic: {topic}
Number of questions: {count}

Generate exactly {count} exam-style questions about the topic. Mix question types for variety:
- single choice: 4 options, exactly one is correct.
- multiple choice: 4-5 options, two or more are correct.
- matching: 3-4 descriptions, each matched to one distinct term.

Rules:
1. All content must be related to the topic "{topic}".
2. "options" must contain the actual answer TEXT, NOT letters like A, B, C, D. Do NOT prefix options with "A)", "B)" etc.
3. Options within one question must be unique.
4. Make distractors plausible but clearly wrong.
5. For each question, provide a brief explanation (1-2 sentences) of why the correct answer is correct.
6. Output ONLY valid JSON, no extra text before or after.

Output format — a JSON object:
{{"title": "<short quiz title>", "description": "<one sentence>", "questions": [<question objects>]}}

Question object examples:

{EXAMPLES}

Generate exactly {count} questions. Output ONLY the JSON object:"""


def build_retry_prompt(topic: str, count: int) -> str:
    return (
        build_quiz_prompt(topic, count)
        + "\n\nIMPORTANT: Output ONLY a valid JSON object. No markdown, no extra text."
    )
