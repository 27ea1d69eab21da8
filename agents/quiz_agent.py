import json
from typing import List

from langchain_core.prompts import PromptTemplate

from agents.base_agent import BaseAgent
from models.quiz_models import AnsweredQuestion, QuizFeedback, QuizQuestion
from utils.response_parsing import QUIZ_FEEDBACK, QUIZ_QUESTION_COUNT, QUIZ_QUESTIONS, normalize, validate


QUIZ_GENERATION_PROMPT = PromptTemplate.from_template(
    "Generate a new and unique quiz about {topic} with difficulty level {difficulty}.\n"
    "Create exactly {count} multiple choice questions with varying complexity and structure "
    "to test different aspects of the topic.\n"
    "Each question should have 4 options with only one correct answer.\n"
    "Add a brief explanation for each correct answer to help with learning.\n"
    "Format as clean JSON without any markdown:\n"
    "{{\n"
    '  "questions": [\n'
    "    {{\n"
    '      "question": "question text",\n'
    '      "options": ["option1", "option2", "option3", "option4"],\n'
    '      "correct": 0,\n'
    '      "explanation": "Brief explanation why this answer is correct"\n'
    "    }}\n"
    "  ]\n"
    "}}\n"
    "\n"
    "To ensure uniqueness:\n"
    "1. Vary question types (mix of factual, conceptual, and applied knowledge)\n"
    "2. Use different question structures (what, how, why, which, etc.)\n"
    "3. Include some scenario-based questions when appropriate\n"
    "4. Ensure options are distinct and plausible\n"
    "5. Make sure questions build on different aspects of {topic}"
)

QUIZ_FEEDBACK_PROMPT = PromptTemplate.from_template(
    "Given these quiz answers about {topic}, provide detailed feedback for each answer.\n"
    "Questions and answers: {answers}\n"
    "Provide feedback in this JSON format:\n"
    "{{\n"
    '  "feedback": [\n'
    "    {{\n"
    '      "questionIndex": 0,\n'
    '      "isCorrect": true/false,\n'
    '      "explanation": "Detailed explanation why this answer is correct/incorrect and what the correct answer is"\n'
    "    }}\n"
    "  ],\n"
    '  "totalScore": "x/y",\n'
    '  "suggestions": "Overall suggestions for improvement"\n'
    "}}"
)


def build_quiz_prompt(topic: str, difficulty: str) -> str:
    return QUIZ_GENERATION_PROMPT.format(topic=topic, difficulty=difficulty, count=QUIZ_QUESTION_COUNT)


def build_feedback_prompt(topic: str, answers: List[AnsweredQuestion]) -> str:
    answers_json = json.dumps([answer.model_dump() for answer in answers], ensure_ascii=False)
    return QUIZ_FEEDBACK_PROMPT.format(topic=topic, answers=answers_json)


class QuizAgent(BaseAgent):
    agent_type = "quiz_agent"

    async def generate_quiz(self, topic: str, difficulty: str) -> List[QuizQuestion]:
        """
        Generates a five-question multiple choice quiz on a topic.

        Returns a list of QuizQuestion objects, each with exactly four options
        and ``correct`` pointing at one of them.

        Raises:
            ParseError: the model did not return JSON.
            ShapeError: the JSON has the wrong number or shape of questions.
        """
        raw = await self._complete(build_quiz_prompt(topic, difficulty), topic)
        return validate(normalize(raw), QUIZ_QUESTIONS).unwrap()

    async def give_feedback(self, topic: str, answers: List[AnsweredQuestion]) -> QuizFeedback:
        """Explains each graded answer and suggests what to review."""
        raw = await self._complete(build_feedback_prompt(topic, answers), topic)
        return validate(normalize(raw), QUIZ_FEEDBACK).unwrap()
