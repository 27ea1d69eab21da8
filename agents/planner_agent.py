import json
from typing import List, Literal

from langchain_core.prompts import PromptTemplate

from agents.base_agent import BaseAgent
from models.schedule_models import Schedule, StudyTopic
from utils.response_parsing import SCHEDULE, normalize, validate


SCHEDULE_PROMPT = PromptTemplate.from_template(
    "Create a detailed {schedule_type} study schedule for the following topics:\n"
    "{topics}\n"
    "\n"
    "Consider these factors when creating the schedule:\n"
    "1. Deadline priorities\n"
    "2. Topic difficulties\n"
    "3. Estimated study hours\n"
    "4. Balanced distribution of study sessions\n"
    "5. Regular breaks and review sessions\n"
    "6. Progressive learning approach\n"
    "\n"
    "Return the schedule in this JSON format:\n"
    "{{\n"
    '  "blocks": [\n'
    "    {{\n"
    '      "date": "YYYY-MM-DD",\n'
    '      "timeSlot": "Morning/Afternoon/Evening",\n'
    '      "topic": "Topic name",\n'
    '      "activity": "Specific study activity or goal",\n'
    '      "duration": "X hours"\n'
    "    }}\n"
    "  ],\n"
    '  "summary": {{\n'
    '    "totalHours": number,\n'
    '    "topicsPerWeek": number,\n'
    '    "suggestedPace": "Description of recommended study pace"\n'
    "  }},\n"
    '  "recommendations": [\n'
    '    "Specific study tips and recommendations"\n'
    "  ]\n"
    "}}\n"
    "\n"
    "Important guidelines:\n"
    "1. Create a realistic and achievable schedule\n"
    "2. Include variety in study activities\n"
    "3. Account for topic dependencies\n"
    "4. Include review sessions\n"
    "5. Distribute difficult topics across different days\n"
    "6. Consider optimal study times based on topic complexity"
)


def build_schedule_prompt(topics: List[StudyTopic], schedule_type: Literal["weekly", "monthly"]) -> str:
    topics_json = json.dumps([topic.model_dump(mode="json") for topic in topics], indent=2, ensure_ascii=False)
    return SCHEDULE_PROMPT.format(schedule_type=schedule_type, topics=topics_json)


class PlannerAgent(BaseAgent):
    agent_type = "planner_agent"

    async def generate_schedule(
        self,
        topics: List[StudyTopic],
        schedule_type: Literal["weekly", "monthly"] = "weekly"
    ) -> Schedule:
        """
        Returns a study schedule spreading the topics over dated time slots.

        Args:
            topics (List[StudyTopic]): Subjects with deadlines, difficulty and hours
            schedule_type (str): weekly or monthly

        Returns:
            Schedule: blocks, summary and recommendations from the model
        """
        subjects = ", ".join(topic.subject for topic in topics)
        raw = await self._complete(build_schedule_prompt(topics, schedule_type), subjects)
        return validate(normalize(raw), SCHEDULE).unwrap()
