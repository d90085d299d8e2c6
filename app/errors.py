class DiagnosticsError(Exception):
    """Base error for the diagnostics service"""


class KnowledgeStoreError(DiagnosticsError):
    """Disease knowledge could not be read"""


class DiagnosisRecorderError(DiagnosticsError):
    """Diagnosis history could not be written or read"""


class AuthError(DiagnosticsError):
    """Session token missing or rejected"""
