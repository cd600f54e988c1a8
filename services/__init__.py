"""
Relief Triage Services
Centralized export of the triage engine and its collaborator services
"""

# Triage engine
from .severity import classify, severity_points, severity_color, severity_label
from .geo import distance, blur, parse_point
from .matcher import match, derive_needs, need_match_ratio, score_match, MAX_MATCHES, NEED_TO_OFFERINGS

# Collaborators
from .exceptions import ReliefTriageError, RecordNotFoundError, IntakeValidationError
from .record_store import RecordStore, InMemoryRecordStore
from .base_service import BaseService
from .geocoding_service import GeocodingService
from .intake_service import IntakeService, AssessmentSubmission, HelperRegistration, GigSubmission
from .match_service import MatchService
from .reconciliation import reconcile_matches
from .stats import DashboardStats, compute_dashboard_stats, summarize_counts, filter_assessments

__all__ = [
    # Engine
    "classify",
    "severity_points",
    "severity_color",
    "severity_label",
    "distance",
    "blur",
    "parse_point",
    "match",
    "derive_needs",
    "need_match_ratio",
    "score_match",
    "MAX_MATCHES",
    "NEED_TO_OFFERINGS",

    # Errors
    "ReliefTriageError",
    "RecordNotFoundError",
    "IntakeValidationError",

    # Services
    "RecordStore",
    "InMemoryRecordStore",
    "BaseService",
    "GeocodingService",
    "IntakeService",
    "AssessmentSubmission",
    "HelperRegistration",
    "GigSubmission",
    "MatchService",
    "reconcile_matches",

    # Dashboard
    "DashboardStats",
    "compute_dashboard_stats",
    "summarize_counts",
    "filter_assessments",
]
