"""
Clients for the external completion and speech-synthesis services.

Both gateways speak the OpenAI-compatible REST API over a shared
``httpx.AsyncClient``. Any transport error, error status or unexpected payload
is raised as ``GatewayError``; there are no retries.
"""

import base64
import logging
from collections.abc import Sequence

import httpx

from .config import Settings
from .errors import GatewayError
from .models import DomainTag

logger = logging.getLogger(__name__)

SYSTEM_PROMPT_TEMPLATE = """
あなたは「寄り添い型AIパートナー」です。
・診断・指示命令・否定・価値観押しつけは禁止
・専門的判断（医療・法律）はしない
・子どもの気持ちを大切にし、安心感を優先
・ゆっくり優しく、相手の言葉を繰り返しながら共感する
・ICF情報があれば参考にしつつ、軽く触れる程度に
・emotionScoreが50未満のときは、落ち着かせる言葉を少し多めに入れる

【ICFヒント】
{icf_hints}

【emotionScore】
{score}
"""


def build_system_prompt(tags: Sequence[DomainTag], score: int) -> str:
    """Render the instruction prompt with the tag hints and current score."""
    icf_hints = ", ".join(f"{tag.code}:{tag.label}" for tag in tags)
    return SYSTEM_PROMPT_TEMPLATE.format(icf_hints=icf_hints, score=score)


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    """Build the shared HTTP client used by both gateways."""
    return httpx.AsyncClient(
        base_url=settings.openai_base_url.rstrip("/"),
        timeout=httpx.Timeout(settings.request_timeout, connect=8.0),
    )


class _OpenAIGateway:
    def __init__(self, client: httpx.AsyncClient, api_key: str) -> None:
        self._client = client
        self._api_key = api_key

    async def _post(self, path: str, payload: dict) -> httpx.Response:
        if not self._api_key:
            raise GatewayError("OpenAI API key is not configured")
        try:
            response = await self._client.post(
                path,
                json=payload,
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise GatewayError(
                f"{path} returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise GatewayError(f"{path} request failed: {e}") from e
        return response


class CompletionGateway(_OpenAIGateway):
    """Generates the empathetic reply text."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        model: str = "gpt-4o-mini",
        max_tokens: int = 200,
    ) -> None:
        super().__init__(client, api_key)
        self.model = model
        self.max_tokens = max_tokens

    async def complete(self, user_text: str, tags: Sequence[DomainTag], score: int) -> str:
        """
        Ask the completion service for a reply to the user's message.

        Args:
            user_text: The user's message, sent verbatim
            tags: ICF tags detected in the message, used as hints
            score: Current sentiment score, used as a hint

        Returns:
            The generated reply text

        Raises:
            GatewayError: If the call fails or the payload has no message
        """
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": build_system_prompt(tags, score)},
                {"role": "user", "content": user_text},
            ],
            "max_tokens": self.max_tokens,
        }
        response = await self._post("/chat/completions", payload)
        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise GatewayError("Completion response has no message content") from e
        if not isinstance(content, str):
            raise GatewayError("Completion response has no message content")
        logger.debug("Completion returned %d characters", len(content))
        return content


class SpeechGateway(_OpenAIGateway):
    """Turns reply text into base64 encoded audio."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        model: str = "gpt-4o-mini-tts",
        voice: str = "alloy",
    ) -> None:
        super().__init__(client, api_key)
        self.model = model
        self.voice = voice

    async def synthesize(self, text: str) -> str:
        """Synthesize the full text in one call and return the audio as base64."""
        payload = {"model": self.model, "voice": self.voice, "input": text}
        response = await self._post("/audio/speech", payload)
        logger.debug("Speech returned %d bytes", len(response.content))
        return base64.b64encode(response.content).decode("ascii")
