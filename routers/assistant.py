from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from grievance.assistant import AssistantContext
from routers.auth import Actor, get_current_actor
from routers.deps import get_services
from services.grievance_service import GrievanceServices

# any signed-in actor may ask; nothing here is stored
router = APIRouter(prefix="/api/ai-assistant", tags=["assistant"])


class DraftContext(BaseModel):
    complaint_text: str = ""
    language: str = "en"
    status: Optional[str] = None
    category: Optional[str] = None


class ChatRequest(BaseModel):
    query: str = ""
    context: Optional[DraftContext] = None


class DraftRequest(BaseModel):
    complaint_text: str = ""
    language: str = "en"


# 💬 question about the complaint process / the current draft
@router.post("/chat")
def chat(
    payload: ChatRequest,
    actor: Actor = Depends(get_current_actor),
    services: GrievanceServices = Depends(get_services),
):
    context = AssistantContext(**payload.context.model_dump()) if payload.context else None
    response = services.assistant.chat(payload.query, context)
    return {"success": True, "response": response}


@router.post("/improve")
def improve(
    payload: DraftRequest,
    actor: Actor = Depends(get_current_actor),
    services: GrievanceServices = Depends(get_services),
):
    improved = services.assistant.improve(payload.complaint_text, payload.language)
    return {"success": True, "improved_text": improved}


@router.post("/suggest-category")
def suggest_category(
    payload: DraftRequest,
    actor: Actor = Depends(get_current_actor),
    services: GrievanceServices = Depends(get_services),
):
    suggestion = services.assistant.suggest_category(payload.complaint_text)
    return {"success": True, "suggestion": suggestion.to_dict()}
