"""
MedWell Backend — AI Assistant Routes
=======================================

POST /api/symptom-checker/identify   {symptoms: [...]} → {result}
POST /api/chat                       {message, chatHistory?} → {response}

Both forward to the completion provider exactly once. Provider failures are
returned as 500 with the provider's message in `detail`.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from medwell.results import render
from medwell.schemas.assistant import (
    ChatRequest,
    ChatResponse,
    SymptomCheckRequest,
    SymptomCheckResponse,
)
from medwell.schemas.common import ErrorResponse
from medwell.services.assistant_service import AssistantService, get_assistant_service
from medwell.services.llm_base import CompletionService, get_completion_service

router = APIRouter(prefix="/api", tags=["Assistant"])


@router.post(
    "/symptom-checker/identify",
    responses={
        200: {"model": SymptomCheckResponse},
        400: {"description": "Symptoms array required", "model": ErrorResponse},
        500: {"description": "Symptom checker error", "model": ErrorResponse},
    },
    summary="List possible conditions for a set of symptoms",
)
async def identify_symptoms(
    payload: SymptomCheckRequest,
    provider: CompletionService = Depends(get_completion_service),
    assistant: AssistantService = Depends(get_assistant_service),
) -> JSONResponse:
    return render(await assistant.identify_symptoms(provider, payload.symptoms))


@router.post(
    "/chat",
    responses={
        200: {"model": ChatResponse},
        400: {"description": "Message is required", "model": ErrorResponse},
        500: {"description": "Chat error", "model": ErrorResponse},
    },
    summary="Chat with the health assistant",
)
async def chat(
    payload: ChatRequest,
    provider: CompletionService = Depends(get_completion_service),
    assistant: AssistantService = Depends(get_assistant_service),
) -> JSONResponse:
    return render(await assistant.chat(provider, payload.message, payload.chatHistory))
