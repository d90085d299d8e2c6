import logging
from typing import Optional

from fastapi import Header, HTTPException, Request

from app.services.services import (
    supabase_client,
    knowledge_cache,
    knowledge_store,
    symptom_matcher,
    diagnosis_recorder,
)
from app.services.knowledge_base import CachedKnowledgeStore
from app.services.symptom_matcher import SymptomMatcher
from app.services.diagnosis_recorder import DiagnosisRecorder

logger = logging.getLogger(__name__)


def get_symptom_matcher() -> SymptomMatcher:
    return symptom_matcher


def get_diagnosis_recorder() -> DiagnosisRecorder:
    return diagnosis_recorder


def get_knowledge_store() -> CachedKnowledgeStore:
    return knowledge_store


async def get_current_farmer_id(authorization: Optional[str] = Header(None)) -> str:
    """Resolve the Supabase Auth session token to the farmer's user id"""
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Missing bearer token")

    if not supabase_client:
        raise HTTPException(status_code=503, detail="Authentication service not available")

    token = authorization.split(" ", 1)[1].strip()
    try:
        response = supabase_client.auth.get_user(token)
    except Exception as e:
        logger.warning(f"Token verification failed: {e}")
        raise HTTPException(status_code=401, detail="Invalid or expired session")

    user = getattr(response, "user", None)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid or expired session")
    return user.id


async def get_current_admin(request: Request) -> str:
    user = request.session.get("user")
    if not user or user != "admin":
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user
