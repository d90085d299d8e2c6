from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.config import DEFAULT_CONFIDENCE_THRESHOLD


class CropType(str, Enum):
    MAIZE = "maize"
    BEANS = "beans"
    VEGETABLES = "vegetables"
    CASSAVA = "cassava"
    RICE = "rice"
    TOBACCO = "tobacco"
    GROUNDNUTS = "groundnuts"
    SOYBEAN = "soybean"
    COTTON = "cotton"
    OTHER = "other"


class Severity(str, Enum):
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"
    CRITICAL = "critical"  # only found on stored diagnoses


class DiseaseRecord(BaseModel):
    crop_type: CropType
    disease_name: str
    symptoms: List[str]
    treatment: str
    prevention: Optional[str] = None
    causes: Optional[str] = None
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD

    @field_validator("symptoms")
    @classmethod
    def drop_blank_symptoms(cls, value: List[str]) -> List[str]:
        phrases = [s.strip() for s in value if s and s.strip()]
        if not phrases:
            raise ValueError("a disease record needs at least one symptom phrase")
        return phrases

    @field_validator("confidence_threshold", mode="before")
    @classmethod
    def default_threshold(cls, value):
        return DEFAULT_CONFIDENCE_THRESHOLD if value is None else value


class DiagnosisQuery(BaseModel):
    crop_type: CropType
    symptom_text: str = ""
    image_url: Optional[str] = None


class DiagnosisResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    disease_name: str
    diagnosis: str
    confidence: float = Field(ge=0.0, le=1.0)
    severity: Severity
    treatment: str
    prevention: str


class DiagnosisRecord(BaseModel):
    id: Optional[str] = None
    farmer_id: str
    crop_type: CropType
    symptoms_description: Optional[str] = ""
    image_url: Optional[str] = None
    ai_diagnosis: Optional[str] = ""
    confidence_score: Optional[float] = None
    severity: Optional[Severity] = None
    treatment_recommendations: Optional[str] = ""
    prevention_advice: Optional[str] = ""
    created_at: Optional[str] = None


# ============================================================================#
# API payloads
# ============================================================================#

class DiagnosisRequest(BaseModel):
    crop_type: Optional[str] = "other"  # unknown or null values fall back to "other"
    symptoms: Optional[str] = ""
    image_url: Optional[str] = None


class DiagnosisResponse(BaseModel):
    result: DiagnosisResult
    record_id: Optional[str] = None
    saved: bool = False
