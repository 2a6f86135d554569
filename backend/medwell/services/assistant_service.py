"""
MedWell Backend — Assistant Service (symptom triage and health chat)
=====================================================================

What:  Builds the prompts for the two AI endpoints and relays the provider's
       text back to the route.
How:   One CompletionService.complete() call per request with fixed model
       parameters from settings. Nothing is retried or cached.

Prompts:
    identify_symptoms:
        single user turn → "Given these symptoms: a, b, c, list possible
        medical conditions and advice."
    chat:
        system instruction (informational, not diagnostic, see a doctor)
        + prior turns + the new user message
"""

import logging
from typing import List, Optional, Sequence

from fastapi import Request

from medwell.config import Settings, settings as default_settings
from medwell.exceptions import CompletionServiceError
from medwell.results import Err, Ok, Result
from medwell.schemas.assistant import ChatTurn
from medwell.services.llm_base import CompletionMessage, CompletionService

logger = logging.getLogger(__name__)

CHAT_SYSTEM_INSTRUCTION = (
    "You are a helpful health assistant. Provide general info, do not diagnose. "
    "Suggest users consult a doctor."
)
SYMPTOM_FALLBACK = "No information found."
CHAT_FALLBACK = "No response."


def build_symptom_prompt(symptoms: Sequence[str]) -> str:
    return (
        f"Given these symptoms: {', '.join(symptoms)}, "
        "list possible medical conditions and advice."
    )


def build_chat_messages(message: str, history: Sequence[ChatTurn]) -> List[CompletionMessage]:
    turns = [CompletionMessage(role=turn.role, content=turn.text) for turn in history]
    turns.append(CompletionMessage(role="user", content=message))
    return turns


class AssistantService:
    """Symptom triage and chat on top of a CompletionService."""

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or default_settings

    async def identify_symptoms(
        self, provider: CompletionService, symptoms: Optional[List[str]]
    ) -> Result[dict]:
        if not symptoms:
            return Err.invalid("Symptoms array required")

        try:
            text = await provider.complete(
                [CompletionMessage(role="user", content=build_symptom_prompt(symptoms))],
                temperature=self.config.llm_temperature,
                max_tokens=self.config.symptom_max_tokens,
            )
        except CompletionServiceError as e:
            return Err.from_exception("Symptom checker error", e)

        logger.info("Symptom check answered for %d symptoms", len(symptoms))
        return Ok({"result": text or SYMPTOM_FALLBACK})

    async def chat(
        self,
        provider: CompletionService,
        message: Optional[str],
        history: Optional[Sequence[ChatTurn]] = None,
    ) -> Result[dict]:
        if not message:
            return Err.invalid("Message is required")

        try:
            text = await provider.complete(
                build_chat_messages(message, history or []),
                temperature=self.config.llm_temperature,
                max_tokens=self.config.chat_max_tokens,
                system_instruction=CHAT_SYSTEM_INSTRUCTION,
            )
        except CompletionServiceError as e:
            return Err.from_exception("Chat error", e)

        return Ok({"response": text or CHAT_FALLBACK})


def get_assistant_service(request: Request) -> AssistantService:
    return request.app.state.assistant_service
