"""
Single source of truth for symptom keywords + fallback wording.

Used by: symptom_matcher.py
"""

UNIDENTIFIED = "unidentified"

# Terms in the farmer's description that add a flat boost to every candidate
CRITICAL_TERMS = ['dying', 'dead', 'severe', 'widespread', 'wilting badly']

# Severity indicators, checked as substrings of the lower-cased description
SEVERE_TERMS = ['severe', 'dying']
MODERATE_TERMS = ['spreading', 'wilting']

SEVERE_CONFIDENCE = 0.8
MODERATE_CONFIDENCE = 0.6

# Empty knowledge base for the crop
NO_KNOWLEDGE_DIAGNOSIS = (
    "No specific knowledge available for {crop_type}. "
    "Please consult with a local agricultural expert."
)
NO_KNOWLEDGE_TREATMENT = "Monitor the crop closely and document symptom progression."
NO_KNOWLEDGE_PREVENTION = "Implement good agricultural practices and regular monitoring."

# Matched record without prevention text
DEFAULT_PREVENTION = "Regular monitoring and good agricultural practices recommended."

MATCH_DIAGNOSIS = (
    "{disease_name} - symptom pattern analysis suggests this condition "
    "(similarity: {similarity_pct}%)."
)

# No candidate cleared the acceptance floor
UNIDENTIFIED_DIAGNOSIS = (
    "Unidentified condition requiring expert consultation. Some patterns were "
    "detected but more specific symptom information is needed for {crop_type}."
)
UNIDENTIFIED_TREATMENT = (
    "Recommend consulting with a local agricultural extension officer. "
    "Monitor plant closely and document symptom progression."
)
UNIDENTIFIED_PREVENTION = (
    "Implement integrated pest management, ensure proper nutrition, "
    "and maintain good field hygiene."
)
