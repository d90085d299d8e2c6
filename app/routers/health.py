import logging
from fastapi import APIRouter

from app.dependencies import supabase_client, knowledge_cache

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/")
async def root():
    return {
        "status": "online",
        "service": "Smart Farmer Diagnostics",
        "version": "1.0.0",
        "features": [
            "Symptom-based disease matching",
            "Diagnosis history",
            "Cached knowledge base"
        ]
    }


@router.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "version": "1.0.0",
        "cache_stats": knowledge_cache.stats(),
        "services": {
            "supabase": bool(supabase_client),
            "redis": knowledge_cache.enabled
        }
    }
