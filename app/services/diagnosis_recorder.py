"""
Diagnosis Recorder
Stores each diagnosis alongside the original query (pest_disease_diagnoses)
"""

import logging
from typing import List, Optional

from pydantic import ValidationError
from supabase import Client

from app.config import DIAGNOSES_TABLE, DEFAULT_HISTORY_LIMIT, MAX_HISTORY_LIMIT
from app.errors import DiagnosisRecorderError
from app.models import DiagnosisQuery, DiagnosisRecord, DiagnosisResult

logger = logging.getLogger(__name__)


class DiagnosisRecorder:
    def __init__(self, supabase_client: Optional[Client], table: str = DIAGNOSES_TABLE):
        self.supabase = supabase_client
        self.table = table

    async def record(self, farmer_id: str, query: DiagnosisQuery, result: DiagnosisResult) -> DiagnosisRecord:
        """Insert one immutable diagnosis row and return it as stored"""
        if not self.supabase:
            raise DiagnosisRecorderError("Supabase client not available")

        data = {
            "farmer_id": farmer_id,
            "crop_type": query.crop_type.value,
            "symptoms_description": query.symptom_text,
            "image_url": query.image_url,
            "ai_diagnosis": result.diagnosis,
            "confidence_score": result.confidence,
            "severity": result.severity.value,
            "treatment_recommendations": result.treatment,
            "prevention_advice": result.prevention,
        }

        try:
            response = self.supabase.table(self.table).insert(data).execute()
        except Exception as e:
            logger.error(f"Failed to save diagnosis for {farmer_id[:8]}: {e}", exc_info=True)
            raise DiagnosisRecorderError("Failed to save diagnosis") from e

        stored = response.data[0] if response.data else data
        logger.info(f"✓ Saved diagnosis {stored.get('id')} ({result.disease_name}, {result.severity.value})")
        return DiagnosisRecord(**stored)

    async def list_history(self, farmer_id: str, limit: int = DEFAULT_HISTORY_LIMIT) -> List[DiagnosisRecord]:
        """Farmer's diagnoses, newest first"""
        if not self.supabase:
            raise DiagnosisRecorderError("Supabase client not available")

        limit = max(1, min(limit, MAX_HISTORY_LIMIT))
        try:
            response = self.supabase.table(self.table)\
                .select('*')\
                .eq('farmer_id', farmer_id)\
                .order('created_at', desc=True)\
                .limit(limit)\
                .execute()
        except Exception as e:
            logger.error(f"Failed to load diagnosis history for {farmer_id[:8]}: {e}", exc_info=True)
            raise DiagnosisRecorderError("Failed to load diagnosis history") from e

        records = []
        for row in response.data or []:
            try:
                records.append(DiagnosisRecord(**row))
            except ValidationError as e:
                logger.warning(f"Skipping malformed diagnosis row {row.get('id')}: {e.error_count()} invalid field(s)")
        return records
