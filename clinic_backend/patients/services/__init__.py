"""
Patients Services Module.

- lifecycle: ACTIVE/INACTIVE transitions with cascades and the event trail
- connections: Patient connection graph builder
"""

from clinic_backend.patients.services.connections import (
    ConnectionGraph,
    NodeKind,
    PRIORITIES,
    build_graph_for_patient,
    build_patient_connections_graph,
)
from clinic_backend.patients.services.lifecycle import (
    INACTIVE_CANCELLATION_REASON,
    parse_required_date,
    reactivate_patient,
    set_patient_inactive,
)

__all__ = [
    'ConnectionGraph',
    'INACTIVE_CANCELLATION_REASON',
    'NodeKind',
    'PRIORITIES',
    'build_graph_for_patient',
    'build_patient_connections_graph',
    'parse_required_date',
    'reactivate_patient',
    'set_patient_inactive',
]
