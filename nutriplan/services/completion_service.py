"""
Completion service client (OpenAI).

One CompletionClient is built at startup and handed to the router; nothing in
this module holds a global client.
"""
import asyncio
import logging
from typing import AsyncIterator

import openai
from openai import AsyncOpenAI
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)

from nutriplan.core.config import settings
from nutriplan.core.errors import AIResponseError, AITimeoutError
from nutriplan.core.logger import logger, log_ai_call
from nutriplan.models.diet import ChatTurn
from nutriplan.services.image_payload import MultimodalPrompt


# Per-call timeout: 10s to connect, 90s for everything else.
# The total bound across retries is enforced separately with AI_TOTAL_TIMEOUT.
OPENAI_TIMEOUT = openai.Timeout(90.0, connect=10.0)

# Tenacity retry policy: 3 total attempts, exponential backoff 2s→10s
# Only retries transient errors: rate limits and connection failures
_openai_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type((openai.RateLimitError, openai.APIConnectionError)),
    before_sleep=before_sleep_log(logging.getLogger(__name__), logging.WARNING),
    reraise=True,
)

# Chat turn roles map onto OpenAI message roles
_ROLES = {"user": "user", "model": "assistant"}

Prompt = str | MultimodalPrompt


def build_messages(prompt: Prompt) -> list[dict]:
    """Convert a text or text+image prompt into chat messages."""
    if isinstance(prompt, MultimodalPrompt):
        image_url = f"data:{prompt.image.mimeType};base64,{prompt.image.data}"
        return [{
            "role": "user",
            "content": [
                {"type": "text", "text": prompt.text},
                {"type": "image_url", "image_url": {"url": image_url}},
            ]
        }]
    return [{"role": "user", "content": prompt}]


class CompletionClient:
    """
    Thin async wrapper over the OpenAI SDK.

    Exposes the three calls the router needs: single-shot text (optionally
    JSON), streamed chat text, and image generation.
    """

    def __init__(
        self,
        api_key: str,
        model: str = settings.OPENAI_MODEL,
        image_model: str = settings.OPENAI_IMAGE_MODEL,
        total_timeout: float = settings.AI_TOTAL_TIMEOUT,
        client: AsyncOpenAI | None = None,
    ):
        self.model = model
        self.image_model = image_model
        self.total_timeout = total_timeout
        self._client = client or AsyncOpenAI(api_key=api_key)

    @classmethod
    def from_settings(cls) -> "CompletionClient":
        return cls(api_key=settings.OPENAI_API_KEY)

    async def close(self) -> None:
        await self._client.close()

    async def _bounded(self, coro):
        try:
            return await asyncio.wait_for(coro, timeout=self.total_timeout)
        except asyncio.TimeoutError:
            raise AITimeoutError(self.total_timeout)

    async def generate_text(
        self,
        prompt: Prompt,
        json_output: bool = False,
        temperature: float = settings.TEMPERATURE_CREATIVE,
    ) -> str:
        """
        Run one completion and return the raw text.

        Args:
            prompt: Instruction text, or text plus inline image
            json_output: Ask the model for a JSON object
            temperature: Model temperature

        Returns:
            Message content, "" when the model returned nothing
        """
        log_ai_call("Chat API" + (" (JSON)" if json_output else ""), self.model)
        return await self._bounded(
            self._create_completion(build_messages(prompt), json_output, temperature)
        )

    @_openai_retry
    async def _create_completion(self, messages: list[dict], json_output: bool, temperature: float) -> str:
        kwargs = {}
        if json_output:
            kwargs["response_format"] = {"type": "json_object"}

        response = await self._client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=temperature,
            timeout=OPENAI_TIMEOUT,
            **kwargs,
        )
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    async def stream_text(
        self,
        turns: list[ChatTurn],
        temperature: float = settings.TEMPERATURE_CREATIVE,
    ) -> AsyncIterator[str]:
        """
        Stream a chat completion as text fragments, in arrival order.

        The upstream stream is closed when the consumer stops iterating,
        including on cancellation.
        """
        log_ai_call("Chat API (stream)", self.model)
        messages = [{"role": _ROLES[t.role], "content": t.text} for t in turns]

        stream = await self._bounded(self._open_stream(messages, temperature))
        try:
            async for chunk in stream:
                if not chunk.choices:
                    continue
                fragment = chunk.choices[0].delta.content
                if fragment:
                    yield fragment
        finally:
            await stream.close()

    @_openai_retry
    async def _open_stream(self, messages: list[dict], temperature: float):
        return await self._client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=temperature,
            stream=True,
            timeout=OPENAI_TIMEOUT,
        )

    async def generate_image(self, prompt: str) -> str:
        """
        Generate one JPEG image.

        Returns:
            Base64-encoded image bytes

        Raises:
            AIResponseError: If no image, or an image without data, came back
        """
        log_ai_call("Images API", self.image_model)
        response = await self._bounded(self._create_image(prompt))

        if not response.data:
            raise AIResponseError("AI failed to generate an image")
        image_b64 = response.data[0].b64_json
        if not image_b64:
            raise AIResponseError("Generated image contains no data")

        logger.info("Images API call successful")
        return image_b64

    @_openai_retry
    async def _create_image(self, prompt: str):
        return await self._client.images.generate(
            model=self.image_model,
            prompt=prompt,
            n=1,
            size=settings.IMAGE_SIZE,
            output_format="jpeg",
            timeout=OPENAI_TIMEOUT,
        )
