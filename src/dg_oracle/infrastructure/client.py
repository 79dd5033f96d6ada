"""OracleClient — asks a language model to resolve a market question.

Talks to any OpenAI-compatible chat-completions endpoint (ORACLE_BASE_URL).
Every failure mode returns an ERROR decision instead of raising:
  - no ORACLE_API_KEY configured
  - API error / connection error / timeout
  - empty or unparsable response
ERROR never defaults to yes/no/void; the market simply stays open.
"""

import asyncio
import logging

from openai import AsyncOpenAI, OpenAIError

from config.settings import settings
from src.dg_common.errors import OracleError
from src.dg_oracle.domain.models import Decision
from src.dg_oracle.domain.parsing import parse_decision
from src.dg_oracle.domain.prompts import SYSTEM_PROMPT, build_user_prompt

logger = logging.getLogger(__name__)


class OracleClient:
    def __init__(
        self,
        client: AsyncOpenAI | None = None,
        model: str | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        self._model = model or settings.ORACLE_MODEL
        self._timeout = timeout_seconds or settings.ORACLE_TIMEOUT_SECONDS
        if client is None and settings.ORACLE_API_KEY:
            client = AsyncOpenAI(
                api_key=settings.ORACLE_API_KEY,
                base_url=settings.ORACLE_BASE_URL,
                timeout=self._timeout,
                max_retries=1,
            )
        self._client = client

    async def decide(self, question: str, source_url: str, source_text: str) -> Decision:
        if self._client is None:
            return Decision.error("ORACLE_API_KEY not configured")

        try:
            text = await self._complete(build_user_prompt(question, source_url, source_text))
        except OracleError as e:
            logger.warning("Oracle call failed: %s", e.message)
            return Decision.error(e.message)

        decision = parse_decision(text)
        logger.info(
            "Oracle decision=%s confidence=%.2f", decision.decision.value, decision.confidence
        )
        return decision

    async def _complete(self, user_prompt: str) -> str:
        assert self._client is not None
        try:
            response = await asyncio.wait_for(
                self._client.chat.completions.create(
                    model=self._model,
                    max_tokens=settings.ORACLE_MAX_TOKENS,
                    temperature=0,
                    response_format={"type": "json_object"},
                    messages=[
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": user_prompt},
                    ],
                ),
                timeout=self._timeout,
            )
        except TimeoutError:
            raise OracleError(f"AI API timeout after {self._timeout:.0f}s") from None
        except OpenAIError as e:
            raise OracleError(f"AI API error: {e}") from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError) as e:
            raise OracleError(f"AI API returned malformed response: {e}") from e
        if not content:
            raise OracleError("AI API returned empty response")
        return content

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()


_oracle: OracleClient | None = None


def get_oracle_client() -> OracleClient:
    """Process-wide oracle client sharing one HTTP connection pool."""
    global _oracle  # noqa: PLW0603
    if _oracle is None:
        _oracle = OracleClient()
    return _oracle


async def close_oracle_client() -> None:
    global _oracle  # noqa: PLW0603
    if _oracle is not None:
        await _oracle.close()
        _oracle = None
