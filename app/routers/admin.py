import logging
from typing import Optional
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.config import ADMIN_USERNAME, ADMIN_PASSWORD
from app.dependencies import get_current_admin, get_knowledge_store
from app.services.knowledge_base import CachedKnowledgeStore
from app.services.symptom_matcher import normalize_crop_type

logger = logging.getLogger(__name__)

router = APIRouter()


class LoginRequest(BaseModel):
    username: str
    password: str


class CacheClearRequest(BaseModel):
    crop_type: Optional[str] = None


@router.post("/login")
async def login(request: Request, login_data: LoginRequest):
    if login_data.username == ADMIN_USERNAME and login_data.password == ADMIN_PASSWORD:
        request.session["user"] = "admin"
        return {"status": "success", "message": "Login successful"}
    else:
        return JSONResponse(
            status_code=401,
            content={"status": "error", "message": "Invalid username or password"}
        )


@router.get("/logout")
async def logout(request: Request):
    request.session.clear()
    return {"status": "success", "message": "Logged out"}


@router.post("/admin/knowledge/cache/clear")
async def clear_knowledge_cache(
    body: Optional[CacheClearRequest] = None,
    admin: str = Depends(get_current_admin),
    store: CachedKnowledgeStore = Depends(get_knowledge_store),
):
    """
    Drop cached knowledge after the disease table changes.
    Body (optional): {"crop_type": "maize"}  - one crop only
    Body empty or {}                        - every crop
    """
    crop_type = body.crop_type if body else None
    if crop_type:
        crop_type = normalize_crop_type(crop_type).value
        removed = store.invalidate(crop_type)
    else:
        removed = store.invalidate()

    logger.info(f"Knowledge cache cleared by {admin}: {crop_type or 'all'} ({removed} entries)")
    return {"status": "success", "crop_type": crop_type, "removed": removed}
