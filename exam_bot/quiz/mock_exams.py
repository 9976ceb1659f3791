"""Curated mock exams available on the home screen."""

MOCK_EXAMS = [
    {
        "id": "pmp-mock-1",
        "title": "PMP Mock Exam: Fundamentals",
        "description": "Core project management concepts across people, process and business environment.",
        "isImportant": True,
        "questions": [
            {
                "question": "Which document formally authorizes the existence of a project?",
                "options": [
                    "Project management plan",
                    "Project charter",
                    "Business case",
                    "Stakeholder register",
                ],
                "answer": "Project charter",
                "explanation": "The project charter is issued by the sponsor and gives the project manager authority to apply organizational resources.",
            },
            {
                "question": "Which of the following are <b>outputs</b> of the Identify Risks process? (Select all that apply)",
                "options": [
                    "Risk register",
                    "Risk report",
                    "Risk management plan",
                    "Issue log",
                ],
                "answer": ["Risk register", "Risk report"],
                "explanation": "Identify Risks produces the risk register and the risk report. The risk management plan is an input.",
                "isMultipleChoice": True,
            },
            {
                "question": "Match each estimating technique with its description.",
                "options": [
                    "Uses historical data from a similar project",
                    "Uses a statistical relationship between variables",
                    "Uses optimistic, most likely and pessimistic estimates",
                ],
                "answer": {
                    "Uses historical data from a similar project": "Analogous",
                    "Uses a statistical relationship between variables": "Parametric",
                    "Uses optimistic, most likely and pessimistic estimates": "Three-point",
                },
                "explanation": "Analogous relies on similar past projects, parametric scales a unit rate, three-point averages a range of estimates.",
                "isMatching": True,
            },
            {
                "question": "A project has CPI = 0.8 and SPI = 1.1. What is the project's status?",
                "options": [
                    "Under budget and behind schedule",
                    "Over budget and ahead of schedule",
                    "Over budget and behind schedule",
                    "Under budget and ahead of schedule",
                ],
                "answer": "Over budget and ahead of schedule",
                "explanation": "CPI below 1 means cost overrun; SPI above 1 means more work was done than planned.",
            },
            {
                "question": "Which conflict resolution technique usually leads to a lasting win-win outcome?",
                "options": [
                    "Smoothing",
                    "Forcing",
                    "Collaborating / problem solving",
                    "Withdrawing",
                ],
                "answer": "Collaborating / problem solving",
                "explanation": "Collaborating incorporates multiple viewpoints and leads to consensus and commitment.",
            },
        ],
    },
    {
        "id": "pmp-agile-1",
        "title": "Agile and Hybrid Practices",
        "description": "Scrum roles, events and artifacts plus hybrid delivery.",
        "questions": [
            {
                "question": "Who is responsible for maximizing the value of the product in Scrum?",
                "options": ["Scrum Master", "Product Owner", "Developers", "Project sponsor"],
                "answer": "Product Owner",
                "explanation": "The Product Owner orders the Product Backlog to maximize value.",
            },
            {
                "question": "Which of these are Scrum events? (Select all that apply)",
                "options": [
                    "Sprint Review",
                    "Daily Scrum",
                    "Stage Gate Review",
                    "Sprint Retrospective",
                ],
                "answer": ["Sprint Review", "Daily Scrum", "Sprint Retrospective"],
                "explanation": "Stage gates belong to predictive life cycles, not Scrum.",
                "isMultipleChoice": True,
            },
            {
                "question": "Match each artifact with its commitment.",
                "options": ["Product Backlog", "Sprint Backlog", "Increment"],
                "answer": {
                    "Product Backlog": "Product Goal",
                    "Sprint Backlog": "Sprint Goal",
                    "Increment": "Definition of Done",
                },
                "explanation": "Each Scrum artifact carries a commitment that provides focus and transparency.",
                "isMatching": True,
            },
        ],
    },
]
