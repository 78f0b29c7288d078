"""Chat-completion proxy for AI support bots.

One outbound call per message, no retries or streaming. Anything that goes
wrong (no API key, transport error, bad status, malformed body) yields the
canned fallback reply instead of an error.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from backend.app.core.settings import Settings, get_settings

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-3.5-turbo"
DEFAULT_TEMPERATURE = 0.7
MAX_PROMPT_FAQS = 20
FALLBACK_SUGGESTIONS = ["Would you like to book a demo?", "Can I share our pricing plans?"]


@dataclass
class ChatReply:
    text: str
    confidence: float
    resolved: bool
    suggestions: List[str] = field(default_factory=list)
    escalation_requested: bool = False


def build_system_prompt(training_data: Optional[Dict[str, Any]]) -> str:
    training_data = training_data or {}
    business = training_data.get("business_info") or {}
    faqs = (training_data.get("faqs") or [])[:MAX_PROMPT_FAQS]

    lines = [f"You are an AI customer support assistant for {business.get('name') or 'a small business'}."]
    if business.get("description"):
        lines.append(f"About the business: {business['description']}")
    lines.append("Be concise, friendly, and helpful. Use the following FAQs when relevant:")
    lines.extend(f"Q: {faq.get('question', '')}\nA: {faq.get('answer', '')}" for faq in faqs)
    return "\n".join(lines)


def fallback_reply(bot_name: Optional[str]) -> ChatReply:
    return ChatReply(
        text=f"Thanks for your question about {bot_name or 'our services'}. Our team will follow up shortly.",
        confidence=0.5,
        resolved=False,
        suggestions=list(FALLBACK_SUGGESTIONS),
        escalation_requested=False,
    )


class ChatCompletionClient:
    def __init__(
        self,
        api_key: str = "",
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ChatCompletionClient":
        settings = settings or get_settings()
        return cls(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            timeout=settings.openai_timeout_seconds,
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def build_payload(self, message: str, bot) -> Dict[str, Any]:
        ai_model = bot.ai_model or {}
        temperature = ai_model.get("temperature")
        payload = {
            "model": ai_model.get("model") or DEFAULT_MODEL,
            "temperature": DEFAULT_TEMPERATURE if temperature is None else temperature,
            "messages": [
                {"role": "system", "content": build_system_prompt(bot.training_data)},
                {"role": "user", "content": message},
            ],
        }
        if ai_model.get("max_tokens"):
            payload["max_tokens"] = ai_model["max_tokens"]
        return payload

    async def respond(self, message: str, bot, context: Optional[Dict[str, Any]] = None) -> ChatReply:
        """Answer ``message`` as ``bot``. ``context`` is accepted but not forwarded upstream."""
        if not self.configured:
            return fallback_reply(bot.name)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    json=self.build_payload(message, bot),
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
                response.raise_for_status()
                data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as exc:
            logger.warning("Chat completion failed for bot %s: %s", bot.id, exc)
            return fallback_reply(bot.name)

        if not isinstance(content, str) or not content.strip():
            logger.warning("Chat completion for bot %s returned no text", bot.id)
            return fallback_reply(bot.name)
        return ChatReply(text=content, confidence=0.8, resolved=True)
