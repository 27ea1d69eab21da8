class StubModelClient:
    """Records prompts and plays back canned replies (or raises)."""

    def __init__(self, replies=None, error=None):
        self.replies = list(replies or [])
        self.error = error
        self.prompts = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        if len(self.replies) > 1:
            return self.replies.pop(0)
        return self.replies[0]


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def make_questions(count: int = 5):
    return [
        {
            "question": f"Which statement about photosynthesis is true? ({i + 1})",
            "options": ["It releases oxygen", "It consumes oxygen only", "It happens in roots", "It needs no light"],
            "correct": 0,
            "explanation": "Plants release oxygen as a by-product of splitting water."
        }
        for i in range(count)
    ]


def make_schedule():
    return {
        "blocks": [
            {
                "date": "2026-11-02",
                "timeSlot": "Morning",
                "topic": "Linear Algebra",
                "activity": "Review eigenvalues",
                "duration": "2 hours"
            },
            {
                "date": "2026-11-03",
                "timeSlot": "Evening",
                "topic": "Organic Chemistry",
                "activity": "Practice reaction mechanisms",
                "duration": 1.5
            }
        ],
        "summary": {"totalHours": 3.5, "topicsPerWeek": 2, "suggestedPace": "Two short sessions a week"},
        "recommendations": ["Start with the earliest deadline"]
    }

