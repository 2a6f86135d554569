"""
MedWell Backend — Google Gemini Completion Service
====================================================

What:  CompletionService backed by the Google Gemini API (google-generativeai).
How:   Converts CompletionMessages into Gemini `contents`, passes the system
       instruction to the model, and calls generate_content_async once with
       the requested temperature and output-token limit.
Who:   Constructed once in the application lifespan and shared by all requests
       through the get_completion_service dependency.

Role mapping:
    user / system           → "user"
    assistant / model / bot → "model"

    Gemini rejects conversations that open with a model turn or repeat a role,
    so leading model turns are dropped and consecutive turns of the same role
    are merged into one content with several parts.
"""

import logging
import time
from typing import Any, Dict, List, Optional, Sequence

import google.generativeai as genai

from medwell.config import Settings, settings as default_settings
from medwell.exceptions import CompletionServiceError
from medwell.middleware.request_id import request_id_var
from medwell.services.llm_base import CompletionMessage, CompletionService

logger = logging.getLogger(__name__)

MODEL_ROLES = {"assistant", "model", "bot", "ai"}


def to_gemini_contents(messages: Sequence[CompletionMessage]) -> List[Dict[str, Any]]:
    contents: List[Dict[str, Any]] = []
    for message in messages:
        if not message.content:
            continue
        role = "model" if message.role.lower() in MODEL_ROLES else "user"
        if not contents and role == "model":
            continue
        if contents and contents[-1]["role"] == role:
            contents[-1]["parts"].append(message.content)
        else:
            contents.append({"role": role, "parts": [message.content]})
    return contents


def response_text(response: Any) -> str:
    """Text of a Gemini response, or "" when it has no usable candidate."""
    try:
        text = response.text
    except ValueError:
        # Raised by the SDK when the candidate was blocked or has no parts
        return ""
    return text.strip() if text else ""


class GeminiCompletionService(CompletionService):
    """
    Google Gemini implementation of CompletionService.

    Error handling:
        Any exception from the SDK call becomes CompletionServiceError with the
        SDK's message. There is no retry; the caller reports a 500.
    """

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or default_settings
        self.model_name = self.config.gemini_model

        if self.is_configured:
            genai.configure(api_key=self.config.gemini_api_key)

        logger.info(
            "GeminiCompletionService initialized with model=%s (configured=%s)",
            self.model_name,
            self.is_configured,
        )

    @property
    def is_configured(self) -> bool:
        key = self.config.gemini_api_key
        return bool(key) and key != "your_gemini_api_key_here"

    def _model(self, system_instruction: Optional[str]) -> "genai.GenerativeModel":
        if system_instruction:
            return genai.GenerativeModel(self.model_name, system_instruction=system_instruction)
        return genai.GenerativeModel(self.model_name)

    async def complete(
        self,
        messages: Sequence[CompletionMessage],
        *,
        temperature: float,
        max_tokens: int,
        system_instruction: Optional[str] = None,
    ) -> str:
        rid = request_id_var.get("")
        contents = to_gemini_contents(messages)
        start_time = time.perf_counter()

        try:
            response = await self._model(system_instruction).generate_content_async(
                contents,
                generation_config=genai.types.GenerationConfig(
                    temperature=temperature,
                    max_output_tokens=max_tokens,
                ),
            )
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                "[%s] Gemini call failed after %.0fms: %s",
                rid,
                duration_ms,
                str(e),
            )
            raise CompletionServiceError(
                message=str(e) or type(e).__name__,
                context={"request_id": rid, "error_type": type(e).__name__},
            ) from e

        text = response_text(response)
        logger.info(
            "[%s] Gemini completion in %.0fms: %d turns in, %d chars out",
            rid,
            (time.perf_counter() - start_time) * 1000,
            len(contents),
            len(text),
        )
        return text
