"""
Claude API service wrapper - completion collaborator for the assistant chat
"""
from anthropic import AsyncAnthropic
from dataclasses import dataclass
from typing import Dict, List, Optional

from focuslist.config import get_settings

settings = get_settings()


class AssistantUnavailableError(RuntimeError):
    """Raised when no completion provider is configured"""


@dataclass
class AssistantReply:
    content: str
    model: str
    input_tokens: int = 0
    output_tokens: int = 0


class ClaudeService:
    def __init__(self):
        api_key = settings.ANTHROPIC_API_KEY or None
        self.model = settings.CLAUDE_MODEL
        self.max_tokens = settings.CLAUDE_MAX_TOKENS
        self._available = bool(api_key)
        if self._available:
            # The client enforces the per-request timeout and retry budget
            self.client = AsyncAnthropic(
                api_key=api_key,
                timeout=settings.ASSISTANT_TIMEOUT_SECONDS,
                max_retries=settings.ASSISTANT_MAX_RETRIES,
            )
        else:
            self.client = None

    @property
    def is_available(self) -> bool:
        return self._available

    async def generate_reply(
        self,
        history: List[Dict[str, str]],
        system_prompt: Optional[str] = None,
        max_tokens: Optional[int] = None
    ) -> AssistantReply:
        """
        Generate the next assistant turn for a conversation.

        history is a list of {"role": "user" | "assistant", "content": str}
        in chronological order and must end with a user turn.
        """
        if not self._available or self.client is None:
            raise AssistantUnavailableError("AI service not configured: ANTHROPIC_API_KEY is not set")

        response = await self.client.messages.create(
            model=self.model,
            max_tokens=max_tokens or self.max_tokens,
            system=system_prompt if system_prompt else "",
            messages=history
        )

        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        return AssistantReply(
            content=text,
            model=response.model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )


# Singleton instance
claude_service = ClaudeService()
