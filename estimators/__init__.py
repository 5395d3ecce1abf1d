"""estimators package — event-study and static TWFE, plus the ground truth."""

from estimators.event_study import EventStudyTWFEEstimator, estimate_event_study
from estimators.ground_truth import true_effects_by_lag
from estimators.twfe import TWFEEstimator, TWFEDiagnostics

__all__ = [
    'EventStudyTWFEEstimator',
    'estimate_event_study',
    'true_effects_by_lag',
    'TWFEEstimator',
    'TWFEDiagnostics',
]
