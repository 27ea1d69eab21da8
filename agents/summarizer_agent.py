from langchain_core.prompts import PromptTemplate

from agents.base_agent import BaseAgent
from utils.response_parsing import clean_summary


SUMMARY_PROMPT = PromptTemplate.from_template(
    "Summarize the following text concisely (aim for about 25% of the original length). "
    "Focus on key points and main ideas.\n"
    "\n"
    "Text to summarize:\n"
    '"""\n'
    "{text}\n"
    '"""\n'
    "\n"
    "Requirements:\n"
    "1. Clear and concise language\n"
    "2. Key information only\n"
    "3. Maintain core message\n"
    "4. No explanatory phrases or meta-text"
)


def build_summary_prompt(text: str) -> str:
    return SUMMARY_PROMPT.format(text=text)


class SummarizerAgent(BaseAgent):
    agent_type = "summarizer_agent"

    async def summarize(self, text: str) -> str:
        raw = await self._complete(build_summary_prompt(text), text[:50])
        return clean_summary(raw)
