"""
AI mediator adapter.
Drafts mediator replies, welcome messages and session summaries through an
ordered chain of LLM providers (OpenAI, then Groq). The first provider that
answers wins; when none does, AdapterUnavailableError is raised and the
caller decides on a fallback.
"""

import json
from typing import Any, Callable, Dict, List, Optional, TypeVar

import structlog
from groq import Groq
from openai import OpenAI
from pydantic import ValidationError

from odr_api.config.settings import Settings
from odr_api.errors import AdapterUnavailableError
from odr_api.models.ai import ConversationTurn, DisputeContext, MediationSummary, MediatorReply
from odr_api.services.mediator_prompts import (
    build_reply_instruction,
    build_summary_prompt,
    build_system_prompt,
    build_welcome_prompt,
)

logger = structlog.get_logger()

T = TypeVar("T")


def extract_json(text: str) -> Dict[str, Any]:
    """
    Parse a JSON object out of an LLM response.
    Tolerates ```json fenced blocks and surrounding prose.

    Raises:
        ValueError: If no JSON object can be parsed
    """
    if "```json" in text:
        candidate = text.split("```json")[1].split("```")[0]
    elif "```" in text:
        candidate = text.split("```")[1].split("```")[0]
    else:
        candidate = text

    candidate = candidate.strip()
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError:
        start, end = candidate.find("{"), candidate.rfind("}")
        if start == -1 or end <= start:
            raise ValueError("No JSON object in response")
        try:
            data = json.loads(candidate[start:end + 1])
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in response: {e}")

    if not isinstance(data, dict):
        raise ValueError("Expected a JSON object")
    return data


def to_chat_messages(history: List[ConversationTurn]) -> List[Dict[str, str]]:
    """Map stored mediation turns onto chat-completion roles."""
    messages = []
    for turn in history:
        if turn.role == "ai":
            messages.append({"role": "assistant", "content": turn.content})
        elif turn.role == "mediator":
            messages.append({"role": "user", "content": f"[Human mediator]: {turn.content}"})
        else:
            messages.append({"role": "user", "content": turn.content})
    return messages


class MediatorProvider:
    """One LLM backend. Subclasses implement complete()."""

    name = "base"

    def complete(
        self,
        messages: List[Dict[str, str]],
        max_tokens: int = 1000,
        json_mode: bool = False,
    ) -> str:
        raise NotImplementedError


class OpenAIMediatorProvider(MediatorProvider):
    """OpenAI chat completions."""

    name = "openai"

    def __init__(self, api_key: str, model: str = "gpt-4o-mini", timeout: float = 20.0):
        self.client = OpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        self.model = model

    def complete(self, messages, max_tokens=1000, json_mode=False):
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": 0.4,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        response = self.client.chat.completions.create(**kwargs)
        return response.choices[0].message.content or ""


class GroqMediatorProvider(MediatorProvider):
    """Groq chat completions."""

    name = "groq"

    def __init__(self, api_key: str, model: str = "llama-3.3-70b-versatile", timeout: float = 20.0):
        self.client = Groq(api_key=api_key, timeout=timeout, max_retries=0)
        self.model = model

    def complete(self, messages, max_tokens=1000, json_mode=False):
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": 0.4,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        response = self.client.chat.completions.create(**kwargs)
        return response.choices[0].message.content or ""


class MediatorAdapter:
    """
    Ordered provider chain behind a narrow mediator interface.
    Callers never learn which provider produced an answer.
    """

    def __init__(self, providers: Optional[List[MediatorProvider]] = None):
        self.providers = list(providers or [])

    @classmethod
    def from_settings(cls, settings: Settings) -> "MediatorAdapter":
        """Build the provider chain in the order given by AI_PROVIDERS, skipping unkeyed ones."""
        providers: List[MediatorProvider] = []
        for name in settings.ai_providers:
            if name == "openai" and settings.openai_api_key:
                providers.append(
                    OpenAIMediatorProvider(
                        settings.openai_api_key,
                        model=settings.openai_model,
                        timeout=settings.ai_timeout_seconds,
                    )
                )
            elif name == "groq" and settings.groq_api_key:
                providers.append(
                    GroqMediatorProvider(
                        settings.groq_api_key,
                        model=settings.groq_model,
                        timeout=settings.ai_timeout_seconds,
                    )
                )
            else:
                logger.info("mediator_provider_skipped", provider=name)
        return cls(providers)

    def _run(self, operation: str, call: Callable[[MediatorProvider], T]) -> T:
        if not self.providers:
            raise AdapterUnavailableError("No AI mediator provider is configured")

        for provider in self.providers:
            try:
                result = call(provider)
                logger.info("mediator_provider_succeeded", provider=provider.name, operation=operation)
                return result
            except Exception as e:
                logger.warning(
                    "mediator_provider_failed",
                    provider=provider.name,
                    operation=operation,
                    error=str(e),
                )

        raise AdapterUnavailableError(f"All AI mediator providers failed for {operation}")

    def generate_reply(
        self,
        context: DisputeContext,
        history: List[ConversationTurn],
        new_message: ConversationTurn,
    ) -> MediatorReply:
        """
        Draft the mediator's answer to new_message.

        Args:
            context: Dispute being mediated
            history: Earlier turns of the session, oldest first
            new_message: The turn that triggered the reply

        Returns:
            MediatorReply with the reply text and the sentiment of new_message
        """
        messages = [{"role": "system", "content": build_system_prompt(context)}]
        messages.extend(to_chat_messages(history + [new_message]))
        messages.append({"role": "system", "content": build_reply_instruction()})

        def call(provider: MediatorProvider) -> MediatorReply:
            raw = provider.complete(messages, max_tokens=1000, json_mode=True)
            try:
                data = extract_json(raw)
                return MediatorReply(text=data.get("response"), sentiment=data.get("sentiment"))
            except (ValueError, ValidationError):
                # Plain text answers are still usable as a reply
                return MediatorReply(text=raw)

        return self._run("generate_reply", call)

    def summarize(self, context: DisputeContext, history: List[ConversationTurn]) -> MediationSummary:
        prompt = build_summary_prompt(context, history)
        messages = [{"role": "user", "content": prompt}]

        def call(provider: MediatorProvider) -> MediationSummary:
            data = extract_json(provider.complete(messages, max_tokens=1500, json_mode=True))
            return MediationSummary(
                summary=data.get("summary"),
                recommendations=data.get("recommendations"),
            )

        return self._run("summarize", call)

    def welcome_message(self, context: DisputeContext) -> str:
        messages = [
            {"role": "system", "content": build_system_prompt(context)},
            {"role": "user", "content": build_welcome_prompt(context)},
        ]

        def call(provider: MediatorProvider) -> str:
            return MediatorReply(text=provider.complete(messages, max_tokens=500)).text

        return self._run("welcome_message", call)
