"""
Tests for SymptomMatcher
Covers: fallbacks, best-match selection, boosts, severity rules, crop type mapping
"""
import asyncio
import os
import sys
from unittest.mock import AsyncMock

import pytest
from pydantic import ValidationError

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.errors import KnowledgeStoreError
from app.models import CropType, DiseaseRecord, Severity
from app.services.disease.constants import UNIDENTIFIED, DEFAULT_PREVENTION
from app.services.knowledge_base import InMemoryKnowledgeStore
from app.services.symptom_matcher import (
    SymptomMatcher,
    normalize_crop_type,
    phrase_boost,
    score_record,
    derive_severity,
    _similarity_percent,
)
from app.utils.text_similarity import calculate_text_similarity


def make_record(name, symptoms, crop=CropType.MAIZE, prevention="Rotate crops."):
    return DiseaseRecord(
        crop_type=crop,
        disease_name=name,
        symptoms=symptoms,
        treatment=f"Treat {name}.",
        prevention=prevention,
    )


def diagnose(records, crop_type, text):
    matcher = SymptomMatcher(InMemoryKnowledgeStore(records))
    return asyncio.run(matcher.diagnose(crop_type, text))


# =============================================================================
# Fallbacks
# =============================================================================
class TestFallbacks:
    def test_empty_knowledge_base(self):
        result = diagnose([], "maize", "yellow leaves")
        assert result.confidence == 0.3
        assert result.severity == Severity.MODERATE
        assert result.disease_name == UNIDENTIFIED
        assert "maize" in result.diagnosis

    def test_empty_knowledge_base_ignores_severe_text(self):
        result = diagnose([], "maize", "severe dying plants")
        assert result.confidence == 0.3
        assert result.severity == Severity.MODERATE

    def test_empty_text_cannot_clear_floor(self):
        records = [make_record("Rice Blast", ["diamond shaped lesions"], crop=CropType.RICE)]
        result = diagnose(records, "rice", "")
        assert result.disease_name == UNIDENTIFIED
        assert result.confidence <= 0.3
        assert result.severity == Severity.MILD

    def test_none_text_treated_as_empty(self):
        records = [make_record("Rice Blast", ["diamond shaped lesions"], crop=CropType.RICE)]
        result = diagnose(records, "rice", None)
        assert result.confidence == pytest.approx(0.3)

    def test_unrelated_text_is_unidentified(self):
        records = [make_record("Bean Rust", ["rusty orange pustules"], crop=CropType.BEANS)]
        result = diagnose(records, "beans", "plants look thirsty")
        assert result.disease_name == UNIDENTIFIED
        assert 0.3 <= result.confidence <= 0.4
        assert result.severity == Severity.MILD
        assert "expert" in result.diagnosis.lower()

    def test_unmatched_severity_follows_text(self):
        records = [make_record("Bean Rust", ["rusty orange pustules"], crop=CropType.BEANS)]
        result = diagnose(records, "beans", "wilting")
        assert result.disease_name == UNIDENTIFIED
        assert result.severity == Severity.MODERATE

    def test_record_without_symptoms_is_skipped(self):
        broken = DiseaseRecord.model_construct(
            crop_type=CropType.MAIZE,
            disease_name="Broken",
            symptoms=[],
            treatment="",
            prevention=None,
        )
        result = diagnose([broken], "maize", "yellow leaves")
        assert result.disease_name == UNIDENTIFIED
        assert result.confidence == pytest.approx(0.3)


# =============================================================================
# Matching
# =============================================================================
class TestMatching:
    def test_yellow_leaves_brown_spots_scenario(self):
        record = make_record("Leaf Blight", ["yellow leaves", "brown spots"])
        text = "yellow leaves with brown spots spreading fast"
        result = diagnose([record], "maize", text)

        assert result.disease_name == "Leaf Blight"
        assert result.confidence > 0.4
        assert result.confidence <= 1.0
        # both phrases match, so the boosted confidence passes 0.8
        assert result.severity == Severity.SEVERE
        assert result.treatment == "Treat Leaf Blight."
        assert result.prevention == "Rotate crops."

        pct = _similarity_percent(calculate_text_similarity(text, "yellow leaves brown spots"))
        assert "Leaf Blight" in result.diagnosis
        assert f"(similarity: {pct}%)" in result.diagnosis

    def test_exact_match_wins(self):
        records = [
            make_record("Fall Armyworm", ["holes in stems"]),
            make_record("Powdery Mildew", ["white powdery coating"]),
        ]
        result = diagnose(records, "maize", "white powdery coating")
        assert result.disease_name == "Powdery Mildew"
        assert result.confidence == pytest.approx(1.0)

    def test_tie_keeps_first_record(self):
        records = [
            make_record("First", ["brown spots"]),
            make_record("Second", ["brown spots"]),
        ]
        result = diagnose(records, "maize", "brown spots on leaves")
        assert result.disease_name == "First"

    def test_severe_keyword_forces_severe(self):
        records = [make_record("Leaf Blight", ["yellow leaves", "brown spots", "stunted growth", "leaf curl"])]
        result = diagnose(records, "maize", "severe yellow leaves")
        assert result.disease_name == "Leaf Blight"
        assert result.severity == Severity.SEVERE

    def test_missing_prevention_uses_default(self):
        records = [make_record("Leaf Blight", ["yellow leaves"], prevention=None)]
        result = diagnose(records, "maize", "yellow leaves")
        assert result.prevention == DEFAULT_PREVENTION

    def test_result_is_frozen(self):
        result = diagnose([make_record("Leaf Blight", ["yellow leaves"])], "maize", "yellow leaves")
        with pytest.raises(ValidationError):
            result.confidence = 0.1

    def test_confidence_threshold_not_consulted(self):
        record = DiseaseRecord(
            crop_type=CropType.MAIZE,
            disease_name="Strict",
            symptoms=["yellow leaves"],
            treatment="t",
            confidence_threshold=0.99,
        )
        result = diagnose([record], "maize", "yellow leaves and some wilting")
        assert result.disease_name == "Strict"
        assert result.confidence < 0.99


# =============================================================================
# Scoring pieces
# =============================================================================
class TestScoring:
    def test_phrase_boost_positive_for_verbatim_phrase(self):
        record = make_record("X", ["Brown Spots", "stunted growth"])
        assert phrase_boost(record, "I see BROWN SPOTS everywhere") == pytest.approx(0.2)

    def test_phrase_boost_zero_without_match(self):
        record = make_record("X", ["brown spots"])
        assert phrase_boost(record, "yellow leaves") == 0.0

    def test_critical_term_adds_flat_boost(self):
        record = make_record("X", ["rusty orange pustules"])
        critical = score_record(record, "plants look thirsty and dead")
        assert critical.confidence - critical.similarity == pytest.approx(0.1)

    @pytest.mark.parametrize("text", [
        "white powdery coating",
        "white powdery coating severe dying widespread dead wilting badly",
        "",
        "!!!",
    ])
    def test_confidence_clamped(self, text):
        record = make_record("X", ["white powdery coating"])
        scored = score_record(record, text)
        assert 0.0 <= scored.confidence <= 1.0

    def test_similarity_percent_rounds_half_up(self):
        assert _similarity_percent(0.125) == 13
        assert _similarity_percent(0.555) == 56
        assert _similarity_percent(0.0) == 0


class TestSeverity:
    @pytest.mark.parametrize("text,confidence,expected", [
        ("", 0.9, Severity.SEVERE),
        ("plants are Dying", 0.1, Severity.SEVERE),
        ("SEVERE damage", 0.0, Severity.SEVERE),
        ("", 0.7, Severity.MODERATE),
        ("rot is spreading", 0.2, Severity.MODERATE),
        ("Wilting in the afternoon", 0.2, Severity.MODERATE),
        ("", 0.8, Severity.MODERATE),
        ("", 0.6, Severity.MILD),
        ("a few spots", 0.5, Severity.MILD),
    ])
    def test_derive_severity(self, text, confidence, expected):
        assert derive_severity(text, confidence) == expected


# =============================================================================
# Crop type handling and store failures
# =============================================================================
class TestCropType:
    @pytest.mark.parametrize("value,expected", [
        ("maize", CropType.MAIZE),
        ("  Rice ", CropType.RICE),
        ("GROUNDNUTS", CropType.GROUNDNUTS),
        ("unknown_value", CropType.OTHER),
        ("", CropType.OTHER),
        (None, CropType.OTHER),
        (CropType.COTTON, CropType.COTTON),
    ])
    def test_normalize(self, value, expected):
        assert normalize_crop_type(value) == expected

    def test_unknown_crop_uses_other_category(self):
        records = [make_record("Powdery Mildew", ["white powdery coating"], crop=CropType.OTHER)]
        result = diagnose(records, "unknown_value", "white powdery coating on leaves")
        assert result.disease_name == "Powdery Mildew"

    def test_store_called_with_other(self):
        store = AsyncMock()
        store.fetch_disease_records.return_value = []
        matcher = SymptomMatcher(store)
        asyncio.run(matcher.diagnose("unknown_value", "anything"))
        store.fetch_disease_records.assert_awaited_once_with(CropType.OTHER)

    def test_store_failure_propagates(self):
        store = AsyncMock()
        store.fetch_disease_records.side_effect = KnowledgeStoreError("down")
        matcher = SymptomMatcher(store)
        with pytest.raises(KnowledgeStoreError):
            asyncio.run(matcher.diagnose("maize", "yellow leaves"))
