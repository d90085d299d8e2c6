"""
Symptom Matcher
Scores a farmer's symptom description against the disease records of one crop.
"""

import math
import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from app.config import ACCEPTANCE_FLOOR, FALLBACK_CONFIDENCE, PHRASE_BOOST, CRITICAL_BOOST
from app.models import CropType, DiagnosisResult, DiseaseRecord, Severity
from app.services.disease.constants import (
    UNIDENTIFIED,
    CRITICAL_TERMS,
    SEVERE_TERMS,
    MODERATE_TERMS,
    SEVERE_CONFIDENCE,
    MODERATE_CONFIDENCE,
    NO_KNOWLEDGE_DIAGNOSIS,
    NO_KNOWLEDGE_TREATMENT,
    NO_KNOWLEDGE_PREVENTION,
    DEFAULT_PREVENTION,
    MATCH_DIAGNOSIS,
    UNIDENTIFIED_DIAGNOSIS,
    UNIDENTIFIED_TREATMENT,
    UNIDENTIFIED_PREVENTION,
)
from app.services.knowledge_base import KnowledgeStore
from app.utils.text_similarity import calculate_text_similarity

logger = logging.getLogger(__name__)


@dataclass
class ScoredCandidate:
    """Score of one disease record against the description"""
    record: DiseaseRecord
    similarity: float   # raw weighted similarity, shown to the farmer
    confidence: float   # similarity + boosts, clamped to [0, 1]


def normalize_crop_type(crop_type: Union[str, CropType, None]) -> CropType:
    """Map user input to a known crop type, "other" when unrecognized"""
    if isinstance(crop_type, CropType):
        return crop_type
    value = (crop_type or "").strip().lower()
    try:
        return CropType(value)
    except ValueError:
        logger.info(f"Unknown crop type {crop_type!r}, using 'other'")
        return CropType.OTHER


def phrase_boost(record: DiseaseRecord, symptom_text: str) -> float:
    """Boost for symptom phrases that appear verbatim in the description"""
    if not record.symptoms:
        return 0.0
    text = symptom_text.lower()
    matched = sum(1 for phrase in record.symptoms if phrase.lower() in text)
    return (matched / len(record.symptoms)) * PHRASE_BOOST


def has_critical_terms(symptom_text: str) -> bool:
    text = symptom_text.lower()
    return any(term in text for term in CRITICAL_TERMS)


def score_record(record: DiseaseRecord, symptom_text: str) -> ScoredCandidate:
    similarity = calculate_text_similarity(
        symptom_text.lower(),
        " ".join(record.symptoms).lower()
    )

    confidence = similarity + phrase_boost(record, symptom_text)
    if has_critical_terms(symptom_text):
        confidence += CRITICAL_BOOST

    confidence = max(0.0, min(confidence, 1.0))
    return ScoredCandidate(record=record, similarity=similarity, confidence=confidence)


def derive_severity(symptom_text: str, confidence: float) -> Severity:
    text = (symptom_text or "").lower()
    if confidence > SEVERE_CONFIDENCE or any(term in text for term in SEVERE_TERMS):
        return Severity.SEVERE
    if confidence > MODERATE_CONFIDENCE or any(term in text for term in MODERATE_TERMS):
        return Severity.MODERATE
    return Severity.MILD


def select_best(candidates: List[DiseaseRecord], symptom_text: str) -> Optional[ScoredCandidate]:
    """Highest confidence wins; ties keep the earlier record"""
    best: Optional[ScoredCandidate] = None
    for record in candidates:
        if not record.symptoms:
            logger.warning(f"Skipping {record.disease_name}: no symptom phrases")
            continue
        scored = score_record(record, symptom_text)
        if best is None or scored.confidence > best.confidence:
            best = scored
    return best


def _similarity_percent(similarity: float) -> int:
    # Round half up, 0.555 -> 56
    return int(math.floor(similarity * 100 + 0.5))


class SymptomMatcher:
    """
    Maps (crop type, free-text symptoms) to the best matching disease record.
    Holds no state between calls; the knowledge store is injected.
    """

    def __init__(self, knowledge_store: KnowledgeStore, acceptance_floor: float = ACCEPTANCE_FLOOR):
        self.knowledge_store = knowledge_store
        self.acceptance_floor = acceptance_floor

    async def diagnose(self, crop_type: Union[str, CropType, None], symptom_text: Optional[str]) -> DiagnosisResult:
        crop = normalize_crop_type(crop_type)
        symptom_text = symptom_text or ""
        logger.info(f"Diagnosing {crop.value}: '{symptom_text[:50]}'")

        # KnowledgeStoreError propagates to the caller
        candidates = await self.knowledge_store.fetch_disease_records(crop)

        if not candidates:
            logger.info(f"No knowledge for {crop.value}, returning generic advice")
            return DiagnosisResult(
                disease_name=UNIDENTIFIED,
                diagnosis=NO_KNOWLEDGE_DIAGNOSIS.format(crop_type=crop.value),
                confidence=FALLBACK_CONFIDENCE,
                severity=Severity.MODERATE,
                treatment=NO_KNOWLEDGE_TREATMENT,
                prevention=NO_KNOWLEDGE_PREVENTION,
            )

        best = select_best(candidates, symptom_text)
        best_confidence = best.confidence if best else 0.0
        severity = derive_severity(symptom_text, best_confidence)

        if best and best.confidence > self.acceptance_floor:
            record = best.record
            logger.info(
                f"✓ Matched {record.disease_name} "
                f"(confidence={best.confidence:.2f}, similarity={best.similarity:.2f}, severity={severity.value})"
            )
            return DiagnosisResult(
                disease_name=record.disease_name,
                diagnosis=MATCH_DIAGNOSIS.format(
                    disease_name=record.disease_name,
                    similarity_pct=_similarity_percent(best.similarity),
                ),
                confidence=best.confidence,
                severity=severity,
                treatment=record.treatment,
                prevention=record.prevention or DEFAULT_PREVENTION,
            )

        logger.info(f"No candidate above {self.acceptance_floor} (best={best_confidence:.2f})")
        return DiagnosisResult(
            disease_name=UNIDENTIFIED,
            diagnosis=UNIDENTIFIED_DIAGNOSIS.format(crop_type=crop.value),
            confidence=max(best_confidence, FALLBACK_CONFIDENCE),
            severity=severity,
            treatment=UNIDENTIFIED_TREATMENT,
            prevention=UNIDENTIFIED_PREVENTION,
        )
