# services/llm.py
import json
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from mindful.core.config import settings
from mindful.schemas.journal_entry import EntryAnalysis
from mindful.schemas.challenge import GeneratedChallenge

logger = logging.getLogger(__name__)


FALLBACK_AFFIRMATION = "I am worthy of peace and happiness."
FALLBACK_INSIGHT = (
    "Thank you for taking a moment to reflect today. "
    "Writing regularly helps you notice patterns in how you feel."
)
FALLBACK_CHALLENGE = {
    "challenge": "Take five slow, deep breaths and write down one thing you are grateful for.",
    "category": "mindfulness",
    "difficulty": "easy",
}

ANALYSIS_PROMPT = (
    "You are an empathetic wellness assistant analysing a private journal entry. "
    "Respond with JSON only, using this shape: "
    '{"sentiment": {"score": <1-5>, "label": "<very negative|negative|neutral|positive|very positive>"}, '
    '"themes": ["..."], "insights": "<one or two supportive sentences>", '
    '"recommendations": [{"activity": "...", "reason": "...", "duration": "...", "benefit": "..."}]}'
)
AFFIRMATION_PROMPT = (
    "You are a mindfulness coach creating daily affirmations. Generate a single, powerful, "
    "and uplifting affirmation that encourages self-reflection and personal growth. "
    "The affirmation should be concise (1-2 sentences) and in the present tense. "
    "Focus on themes of gratitude, self-acceptance, or personal growth."
)
CHALLENGE_PROMPT = (
    "You are a wellness coach. Based on the user's recent journal entries and goals, create one "
    "small, achievable wellness challenge for today. Respond with JSON only: "
    '{"challenge": "...", "category": "<mindfulness|physical|social|creative|self-care>", '
    '"difficulty": "<easy|medium|hard>"}'
)


class LLMUnavailableError(Exception):
    """Raised when the provider cannot be called or returns nothing usable."""
    pass


def neutral_analysis() -> Dict[str, Any]:
    """Default analysis payload used whenever the provider call fails."""
    return {
        "sentiment": {"score": 3, "label": "neutral"},
        "themes": [],
        "insights": FALLBACK_INSIGHT,
        "recommendations": [],
    }


class LLMClient:
    """Thin client for an OpenAI-compatible chat completions endpoint."""

    def __init__(
        self,
        api_url: str,
        api_key: Optional[str],
        model: str,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.transport = transport

    # =====================================================================
    # TRANSPORT
    # =====================================================================

    def _chat(
        self,
        messages: List[Dict[str, str]],
        *,
        temperature: float = 0.7,
        max_tokens: int = 500,
        json_mode: bool = False,
    ) -> str:
        if not self.api_key:
            raise LLMUnavailableError("LLM_API_KEY is not configured")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        body: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_mode:
            body["response_format"] = {"type": "json_object"}

        with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
            response = client.post(self.api_url, headers=headers, json=body)
            response.raise_for_status()
            data = response.json()

        if not isinstance(data, dict):
            raise LLMUnavailableError("Unexpected provider response format")

        choices = data.get("choices") or []
        if not isinstance(choices, list) or not choices:
            raise LLMUnavailableError("Provider returned no choices")

        choice = choices[0]
        message = choice.get("message") if isinstance(choice, dict) else None
        if not isinstance(message, dict):
            raise LLMUnavailableError("Provider returned a malformed choice")

        content = message.get("content") or ""
        if not isinstance(content, str):
            raise LLMUnavailableError("Provider returned non-text content")
        content = content.strip()
        if not content:
            raise LLMUnavailableError("Provider returned an empty message")
        return content

    # =====================================================================
    # OPERATIONS
    # =====================================================================

    def analyze_entry(self, content: str, mood: int) -> Dict[str, Any]:
        """
        Score a journal entry. Never raises: any failure yields the neutral payload.

        Args:
            content: Entry text
            mood: Self-reported mood 1-5

        Returns:
            Dict matching ``EntryAnalysis``
        """
        messages = [
            {"role": "system", "content": ANALYSIS_PROMPT},
            {"role": "user", "content": f"Mood rating (1-5): {mood}\n\nEntry:\n{content}"},
        ]
        try:
            raw = self._chat(messages, temperature=0.3, max_tokens=600, json_mode=True)
            return EntryAnalysis.model_validate_json(raw).model_dump()
        except (httpx.HTTPError, LLMUnavailableError, PydanticValidationError, ValueError) as exc:
            logger.warning(f"Sentiment analysis unavailable, using neutral fallback: {exc}")
            return neutral_analysis()

    def generate_affirmation(self) -> str:
        messages = [
            {"role": "system", "content": AFFIRMATION_PROMPT},
            {"role": "user", "content": "Generate an affirmation for today."},
        ]
        try:
            return self._chat(messages, temperature=0.7, max_tokens=100)
        except (httpx.HTTPError, LLMUnavailableError, ValueError) as exc:
            logger.warning(f"Affirmation generation unavailable, using fallback: {exc}")
            return FALLBACK_AFFIRMATION

    def generate_challenge(self, recent_entries: List[str], goals: List[str]) -> GeneratedChallenge:
        context = {
            "recent_entries": [entry[:500] for entry in recent_entries],
            "goals": goals,
        }
        messages = [
            {"role": "system", "content": CHALLENGE_PROMPT},
            {"role": "user", "content": json.dumps(context)},
        ]
        try:
            raw = self._chat(messages, temperature=0.8, max_tokens=200, json_mode=True)
            return GeneratedChallenge.model_validate_json(raw)
        except (httpx.HTTPError, LLMUnavailableError, PydanticValidationError, ValueError) as exc:
            logger.warning(f"Challenge generation unavailable, using fallback: {exc}")
            return GeneratedChallenge(**FALLBACK_CHALLENGE)


llm_client = LLMClient(
    api_url=settings.LLM_API_URL,
    api_key=settings.LLM_API_KEY,
    model=settings.LLM_MODEL,
    timeout=settings.LLM_TIMEOUT_SECONDS,
)
