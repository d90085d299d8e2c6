import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Request

from app.config import DIAGNOSIS_RATE_LIMIT, DEFAULT_HISTORY_LIMIT
from app.dependencies import (
    get_symptom_matcher,
    get_diagnosis_recorder,
    get_current_farmer_id,
)
from app.errors import KnowledgeStoreError, DiagnosisRecorderError
from app.models import DiagnosisQuery, DiagnosisRecord, DiagnosisRequest, DiagnosisResponse
from app.services.diagnosis_recorder import DiagnosisRecorder
from app.services.symptom_matcher import SymptomMatcher, normalize_crop_type
from app.utils.rate_limiter import limiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/diagnosis")


@router.post("", response_model=DiagnosisResponse)
@limiter.limit(DIAGNOSIS_RATE_LIMIT)
async def create_diagnosis(
    request: Request,
    payload: DiagnosisRequest,
    farmer_id: str = Depends(get_current_farmer_id),
    matcher: SymptomMatcher = Depends(get_symptom_matcher),
    recorder: DiagnosisRecorder = Depends(get_diagnosis_recorder),
):
    query = DiagnosisQuery(
        crop_type=normalize_crop_type(payload.crop_type),
        symptom_text=payload.symptoms or "",
        image_url=payload.image_url,
    )

    try:
        result = await matcher.diagnose(query.crop_type, query.symptom_text)
    except KnowledgeStoreError as e:
        logger.error(f"Diagnosis failed for {farmer_id[:8]}: {e}", exc_info=True)
        raise HTTPException(status_code=503, detail="Disease knowledge base not available")

    # The farmer still gets the diagnosis when saving fails
    try:
        stored = await recorder.record(farmer_id, query, result)
    except DiagnosisRecorderError as e:
        logger.error(f"Diagnosis not saved for {farmer_id[:8]}: {e}")
        return DiagnosisResponse(result=result, record_id=None, saved=False)

    return DiagnosisResponse(result=result, record_id=stored.id, saved=True)


@router.get("/history", response_model=List[DiagnosisRecord])
async def diagnosis_history(
    limit: int = DEFAULT_HISTORY_LIMIT,
    farmer_id: str = Depends(get_current_farmer_id),
    recorder: DiagnosisRecorder = Depends(get_diagnosis_recorder),
):
    try:
        return await recorder.list_history(farmer_id, limit=limit)
    except DiagnosisRecorderError as e:
        logger.error(f"History unavailable for {farmer_id[:8]}: {e}")
        raise HTTPException(status_code=503, detail="Diagnosis history not available")
