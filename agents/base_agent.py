import time

from llm.vertex_client import ModelClient
from utils.logging import log_ai_request


class BaseAgent:
    agent_type = "agent"

    def __init__(self, client: ModelClient):
        self.client = client

    async def _complete(self, prompt: str, topic: str) -> str:
        """Run one model call and log how long it took."""
        start_time = time.time()
        try:
            text = await self.client.generate(prompt)
        except Exception:
            log_ai_request(self.agent_type, topic, (time.time() - start_time) * 1000, success=False)
            raise
        log_ai_request(self.agent_type, topic, (time.time() - start_time) * 1000)
        return text
