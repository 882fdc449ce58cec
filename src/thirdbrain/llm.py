"""Chat model selection and client for Third Brain."""

import logging
from typing import Any, Optional

import openai

from .errors import ExternalProviderError

logger = logging.getLogger(__name__)

# Model alias -> OpenAI model name
MODELS = {
    "gpt-4-turbo": "gpt-4-1106-preview",
    "gpt-4": "gpt-4",
    "gpt-4o": "gpt-4o",
    "gpt-4o-mini": "gpt-4o-mini",
    "gpt-3.5-turbo": "gpt-3.5-turbo",
}

DEFAULT_MODEL = "gpt-4-turbo"


def resolve_model_name(model: str) -> str:
    """Map an alias to its OpenAI model name; other names pass through unchanged."""
    return MODELS.get(model, model)


class ChatClient:
    """Chat completions through the OpenAI API.

    Transient failures are retried by the OpenAI SDK with exponential
    backoff, up to max_retries times.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        max_retries: int = 6,
        client: Optional[Any] = None,
    ):
        self.model = resolve_model_name(model)
        self._client = client or openai.OpenAI(api_key=api_key, max_retries=max_retries)

    def complete(self, messages: list[dict[str, str]]) -> str:
        """Send a conversation and return the first reply.

        Args:
            messages: Chat messages as {"role": ..., "content": ...} dicts.

        Raises:
            ExternalProviderError: If the request fails or the reply is empty.
        """
        try:
            response = self._client.chat.completions.create(model=self.model, messages=messages)
        except openai.OpenAIError as e:
            logger.error("Chat request failed (%s): %s", type(e).__name__, e)
            raise ExternalProviderError(f"Failed to generate answer from OpenAI: {e}") from e

        if not response.choices or not response.choices[0].message.content:
            raise ExternalProviderError("OpenAI responded, but did not include a response message.")

        return response.choices[0].message.content
