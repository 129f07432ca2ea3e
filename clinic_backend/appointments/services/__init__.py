"""
Appointments Services Module.

This package contains service-layer logic for the appointments app:
- wallclock: Mapping between clinic wall-clock dates/times and UTC instants
- recurring: Recurring session generation, merge detection, next-session lookup
- merging: Folding a duplicate session into the kept one
"""

from clinic_backend.appointments.services.merging import MergeResult, merge_sessions
from clinic_backend.appointments.services.recurring import (
    DEFAULT_LOOKAHEAD_DAYS,
    MERGE_THRESHOLD_SECONDS,
    MergeSuggestion,
    RecurringPlan,
    create_recurring_sessions,
    detect_potential_merge,
    generate_upcoming_sessions,
    resolve_next_session,
)
from clinic_backend.appointments.services.wallclock import (
    compose_instant,
    local_date_key,
    local_weekday,
)

__all__ = [
    'DEFAULT_LOOKAHEAD_DAYS',
    'MERGE_THRESHOLD_SECONDS',
    'MergeResult',
    'MergeSuggestion',
    'RecurringPlan',
    'compose_instant',
    'create_recurring_sessions',
    'detect_potential_merge',
    'generate_upcoming_sessions',
    'local_date_key',
    'local_weekday',
    'merge_sessions',
    'resolve_next_session',
]
