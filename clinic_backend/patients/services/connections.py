"""
Patient connections graph.

Folds a patient and its related records (sessions, tasks, guidance, research
notes and documents, receipts, external links) into a deduplicated node/edge
graph for the patient graph view.

Design notes:

- Node ids are ``"<kind>:<source id>"``. The same id can be produced by more
  than one collection (a research document linked directly and cited by a
  note); all versions are collected and resolved at the end so that the
  result does not depend on the order of the inputs.
- ``priority`` is a ranking hint (lower = more central). The builder assigns
  no coordinates; layout belongs to the renderer.
- Every related node gets one ``primary`` edge from the patient. ``secondary``
  edges link related nodes to each other (task -> session, guidance -> session,
  receipt -> session, research note -> research document).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable

from django.db.models import F, Q
from django.utils import timezone

from clinic_backend.appointments.models import SessionStatus, TaskStatus
from clinic_backend.appointments.services.wallclock import to_local
from clinic_backend.records.models import GuidanceStatus, ResearchDocument, ResearchNote


class NodeKind(str, Enum):
    PATIENT = 'patient'
    SESSION = 'session'
    TASK = 'task'
    GUIDANCE = 'guidance'
    RESEARCH_NOTE = 'research-note'
    RESEARCH_DOCUMENT = 'research-document'
    RECEIPT = 'receipt'
    EXTERNAL_LINK = 'external-link'


class EdgeRelation(str, Enum):
    PRIMARY = 'primary'
    SECONDARY = 'secondary'


# Priority scale (lower = closer to the center). Every kind must declare its
# variants here; a missing entry fails with KeyError at build time.
PRIORITIES: dict[NodeKind, dict[str, int]] = {
    NodeKind.PATIENT: {'default': 0},
    NodeKind.SESSION: {'upcoming': 10, 'past': 45},
    NodeKind.TASK: {'open': 20, 'closed': 70},
    NodeKind.GUIDANCE: {'active': 30, 'completed': 50},
    NodeKind.RESEARCH_NOTE: {'default': 40},
    NodeKind.RESEARCH_DOCUMENT: {'default': 50},
    NodeKind.RECEIPT: {'default': 65},
    NodeKind.EXTERNAL_LINK: {'default': 80},
}

CANCELED_SESSION_STATUSES = frozenset({SessionStatus.CANCELED.value, SessionStatus.CANCELED_LATE.value})


def priority_for(kind: NodeKind, variant: str = 'default') -> int:
    return PRIORITIES[kind][variant]


def node_id(kind: NodeKind, source_id) -> str:
    return f'{kind.value}:{source_id}'


# ---------------------------------------------------------------------------
# Input records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GraphPatient:
    id: Any
    first_name: str = ''
    last_name: str = ''


@dataclass(frozen=True)
class GraphSession:
    id: Any
    scheduled_at: datetime
    status: str


@dataclass(frozen=True)
class GraphTask:
    id: Any
    title: str
    status: str
    created_at: datetime
    session_id: Any = None
    due_at: datetime | None = None


@dataclass(frozen=True)
class GraphGuidance:
    id: Any
    title: str
    status: str
    updated_at: datetime
    scheduled_at: datetime | None = None
    session_ids: tuple = ()


@dataclass(frozen=True)
class GraphResearchNote:
    id: Any
    title: str
    updated_at: datetime
    document_id: Any = None
    document_title: str | None = None


@dataclass(frozen=True)
class GraphResearchDocument:
    id: Any
    title: str
    updated_at: datetime | None = None


@dataclass(frozen=True)
class GraphReceipt:
    id: Any
    receipt_number: str
    amount_nis: Decimal
    issued_at: datetime
    session_ids: tuple = ()


@dataclass(frozen=True)
class GraphExternalLink:
    id: Any
    label: str
    href: str | None
    updated_at: datetime | None = None


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ConnectionGraphNode:
    id: str
    kind: NodeKind
    label: str
    href: str
    priority: int
    sort_value: float | None = None
    meta: str | None = None
    external: bool = False

    def to_dict(self) -> dict[str, Any]:
        result = {
            'id': self.id,
            'kind': self.kind.value,
            'label': self.label,
            'href': self.href,
            'priority': self.priority,
        }
        if self.sort_value is not None:
            result['sort_value'] = self.sort_value
        if self.meta:
            result['meta'] = self.meta
        if self.external:
            result['external'] = True
        return result


@dataclass(frozen=True)
class ConnectionGraphEdge:
    source: str
    target: str
    relation: EdgeRelation

    @property
    def id(self) -> str:
        return f'{self.source}->{self.target}'

    def to_dict(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'source': self.source,
            'target': self.target,
            'relation': self.relation.value,
        }


@dataclass
class ConnectionGraph:
    patient_node_id: str
    nodes: list[ConnectionGraphNode] = field(default_factory=list)
    edges: list[ConnectionGraphEdge] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            'patient_node_id': self.patient_node_id,
            'nodes': [n.to_dict() for n in self.nodes],
            'edges': [e.to_dict() for e in self.edges],
        }


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------

def _timestamp(value: datetime | None) -> float | None:
    return value.timestamp() if value is not None else None


def _format_amount(amount) -> str:
    text = f'{Decimal(amount):,.2f}'
    if text.endswith('.00'):
        text = text[:-3]
    return f'₪{text}'


def _rank(node: ConnectionGraphNode) -> tuple:
    return (
        node.priority,
        node.label,
        node.href,
        node.sort_value is None,
        node.sort_value or 0.0,
        node.meta or '',
    )


def _resolve(versions: list[ConnectionGraphNode]) -> ConnectionGraphNode:
    """Best-ranked version wins; an empty ``meta`` is backfilled from the best version that has one."""
    winner = min(versions, key=_rank)
    if not winner.meta:
        with_meta = [v for v in versions if v.meta]
        if with_meta:
            winner = replace(winner, meta=min(with_meta, key=_rank).meta)
    return winner


class _GraphAccumulator:
    def __init__(self, patient_node: ConnectionGraphNode):
        self.patient_node_id = patient_node.id
        self.versions: dict[str, list[ConnectionGraphNode]] = {patient_node.id: [patient_node]}
        self.edges: dict[tuple[str, str], EdgeRelation] = {}

    def upsert(self, node: ConnectionGraphNode) -> None:
        self.versions.setdefault(node.id, []).append(node)

    def add_edge(self, source: str, target: str, relation: EdgeRelation) -> None:
        if source == target:
            return
        key = (source, target)
        if key in self.edges and self.edges[key] == EdgeRelation.PRIMARY:
            return
        self.edges[key] = relation

    def connect(self, node: ConnectionGraphNode) -> None:
        self.upsert(node)
        self.add_edge(self.patient_node_id, node.id, EdgeRelation.PRIMARY)

    def build(self) -> ConnectionGraph:
        nodes = sorted(
            (_resolve(versions) for versions in self.versions.values()),
            key=lambda n: (n.priority, n.label, n.id),
        )
        # Secondary edges may reference records outside the patient's sets
        # (e.g. a task pointing at another patient's session); they are dropped.
        edges = [
            ConnectionGraphEdge(source=source, target=target, relation=relation)
            for (source, target), relation in sorted(self.edges.items())
            if source in self.versions and target in self.versions
        ]
        return ConnectionGraph(patient_node_id=self.patient_node_id, nodes=nodes, edges=edges)


def build_patient_connections_graph(
    patient,
    sessions: Iterable = (),
    tasks: Iterable = (),
    guidances: Iterable = (),
    linked_notes: Iterable = (),
    linked_documents: Iterable = (),
    receipts: Iterable = (),
    external_links: Iterable = (),
    *,
    now: datetime | None = None,
) -> ConnectionGraph:
    """
    Project a patient and its related records into a connection graph.

    Pure function: the same input (in any collection order) always yields
    the same nodes and edges. ``now`` only decides which sessions count as
    upcoming.
    """
    now = now or timezone.now()

    patient_node = ConnectionGraphNode(
        id=node_id(NodeKind.PATIENT, patient.id),
        kind=NodeKind.PATIENT,
        label=f'{patient.first_name} {patient.last_name}'.strip(),
        href=f'/patients/{patient.id}',
        priority=priority_for(NodeKind.PATIENT),
    )
    graph = _GraphAccumulator(patient_node)

    for session in sessions:
        local = to_local(session.scheduled_at)
        upcoming = session.scheduled_at >= now and session.status not in CANCELED_SESSION_STATUSES
        graph.connect(ConnectionGraphNode(
            id=node_id(NodeKind.SESSION, session.id),
            kind=NodeKind.SESSION,
            label=f'Session {local:%d.%m.%Y}',
            meta=f'{local:%H:%M}',
            href=f'/sessions/{session.id}',
            priority=priority_for(NodeKind.SESSION, 'upcoming' if upcoming else 'past'),
            sort_value=_timestamp(session.scheduled_at),
        ))

    for task in tasks:
        task_node_id = node_id(NodeKind.TASK, task.id)
        graph.connect(ConnectionGraphNode(
            id=task_node_id,
            kind=NodeKind.TASK,
            label=task.title or 'Task',
            href=f'/tasks/{task.id}',
            priority=priority_for(NodeKind.TASK, 'open' if task.status == TaskStatus.OPEN.value else 'closed'),
            sort_value=_timestamp(task.due_at or task.created_at),
        ))
        if task.session_id is not None:
            graph.add_edge(task_node_id, node_id(NodeKind.SESSION, task.session_id), EdgeRelation.SECONDARY)

    for guidance in guidances:
        guidance_node_id = node_id(NodeKind.GUIDANCE, guidance.id)
        active = guidance.status == GuidanceStatus.ACTIVE.value
        graph.connect(ConnectionGraphNode(
            id=guidance_node_id,
            kind=NodeKind.GUIDANCE,
            label=guidance.title or 'Guidance',
            href=f'/guidance/{guidance.id}',
            priority=priority_for(NodeKind.GUIDANCE, 'active' if active else 'completed'),
            sort_value=_timestamp(guidance.scheduled_at or guidance.updated_at),
        ))
        for session_id in guidance.session_ids:
            graph.add_edge(guidance_node_id, node_id(NodeKind.SESSION, session_id), EdgeRelation.SECONDARY)

    for note in linked_notes:
        note_node_id = node_id(NodeKind.RESEARCH_NOTE, note.id)
        has_document = note.document_id is not None
        graph.connect(ConnectionGraphNode(
            id=note_node_id,
            kind=NodeKind.RESEARCH_NOTE,
            label=note.title or 'Research note',
            href=f'/research/{note.document_id}' if has_document else f'/research-notes/{note.id}',
            priority=priority_for(NodeKind.RESEARCH_NOTE),
            sort_value=_timestamp(note.updated_at),
            meta=f'Source: {note.document_title}' if note.document_title else None,
        ))
        if has_document:
            document_node_id = node_id(NodeKind.RESEARCH_DOCUMENT, note.document_id)
            graph.connect(ConnectionGraphNode(
                id=document_node_id,
                kind=NodeKind.RESEARCH_DOCUMENT,
                label=note.document_title or 'Research document',
                href=f'/research/{note.document_id}',
                priority=priority_for(NodeKind.RESEARCH_DOCUMENT),
            ))
            graph.add_edge(note_node_id, document_node_id, EdgeRelation.SECONDARY)

    for document in linked_documents:
        graph.connect(ConnectionGraphNode(
            id=node_id(NodeKind.RESEARCH_DOCUMENT, document.id),
            kind=NodeKind.RESEARCH_DOCUMENT,
            label=document.title or 'Research document',
            href=f'/research/{document.id}',
            priority=priority_for(NodeKind.RESEARCH_DOCUMENT),
            sort_value=_timestamp(document.updated_at) or 0.0,
        ))

    for receipt in receipts:
        receipt_node_id = node_id(NodeKind.RECEIPT, receipt.id)
        graph.connect(ConnectionGraphNode(
            id=receipt_node_id,
            kind=NodeKind.RECEIPT,
            label=f'Receipt #{receipt.receipt_number}',
            meta=_format_amount(receipt.amount_nis),
            href=f'/receipts/{receipt.id}',
            priority=priority_for(NodeKind.RECEIPT),
            sort_value=_timestamp(receipt.issued_at),
        ))
        for session_id in receipt.session_ids:
            graph.add_edge(receipt_node_id, node_id(NodeKind.SESSION, session_id), EdgeRelation.SECONDARY)

    for link in external_links:
        if not link.href:
            continue
        graph.connect(ConnectionGraphNode(
            id=node_id(NodeKind.EXTERNAL_LINK, link.id),
            kind=NodeKind.EXTERNAL_LINK,
            label=link.label or 'External link',
            href=link.href,
            external=True,
            priority=priority_for(NodeKind.EXTERNAL_LINK),
            sort_value=_timestamp(link.updated_at) or 0.0,
        ))

    return graph.build()


# ---------------------------------------------------------------------------
# Storage adapter
# ---------------------------------------------------------------------------

# Per-collection caps for one graph, newest records first.
COLLECTION_LIMITS = {
    'sessions': 240,
    'tasks': 100,
    'guidances': 50,
    'linked_notes': 50,
    'receipts': 20,
    'external_links': 50,
}


def collect_patient_connections(patient) -> dict[str, list]:
    """
    Load the related-record collections of ``patient`` as graph input records.

    Research notes are those linked to the patient plus those citing a
    document linked to the patient. Documents are the patient's own plus
    every document cited by one of those notes.
    """
    limits = COLLECTION_LIMITS

    sessions = [
        GraphSession(id=s.id, scheduled_at=s.scheduled_at, status=s.status)
        for s in patient.sessions.order_by('-scheduled_at', '-id')[:limits['sessions']]
    ]
    tasks = [
        GraphTask(
            id=t.id,
            title=t.title,
            status=t.status,
            created_at=t.created_at,
            session_id=t.session_id,
            due_at=t.due_at,
        )
        for t in patient.tasks.order_by(F('due_at').asc(nulls_last=True), '-created_at', 'id')[:limits['tasks']]
    ]
    guidances = [
        GraphGuidance(
            id=g.id,
            title=g.title,
            status=g.status,
            updated_at=g.updated_at,
            scheduled_at=g.scheduled_at,
            session_ids=tuple(s.id for s in g.sessions.all()),
        )
        for g in patient.guidances.prefetch_related('sessions').order_by('-updated_at', 'id')[:limits['guidances']]
    ]

    note_rows = list(
        ResearchNote.objects.filter(Q(patients=patient) | Q(document__patients=patient))
        .select_related('document')
        .distinct()
        .order_by('-updated_at', 'id')[:limits['linked_notes']]
    )
    notes = [
        GraphResearchNote(
            id=n.id,
            title=n.title,
            updated_at=n.updated_at,
            document_id=n.document_id,
            document_title=n.document.title if n.document is not None else None,
        )
        for n in note_rows
    ]
    cited_document_ids = {n.document_id for n in note_rows if n.document_id is not None}
    documents = [
        GraphResearchDocument(id=d.id, title=d.title, updated_at=d.updated_at)
        for d in ResearchDocument.objects.filter(Q(patients=patient) | Q(pk__in=cited_document_ids)).distinct()
    ]

    receipts = [
        GraphReceipt(
            id=r.id,
            receipt_number=r.receipt_number,
            amount_nis=r.amount_nis,
            issued_at=r.issued_at,
            session_ids=tuple(a.session_id for a in r.payment_allocations.all()),
        )
        for r in patient.receipts.prefetch_related('payment_allocations').order_by('-issued_at', 'id')[:limits['receipts']]
    ]
    links = [
        GraphExternalLink(id=c.id, label=c.label, href=c.href, updated_at=c.updated_at)
        for c in patient.concept_links.order_by('-created_at', '-id')[:limits['external_links']]
    ]
    return {
        'sessions': sessions,
        'tasks': tasks,
        'guidances': guidances,
        'linked_notes': notes,
        'linked_documents': documents,
        'receipts': receipts,
        'external_links': links,
    }


def build_graph_for_patient(patient, *, now: datetime | None = None) -> ConnectionGraph:
    return build_patient_connections_graph(
        GraphPatient(id=patient.id, first_name=patient.first_name, last_name=patient.last_name),
        now=now,
        **collect_patient_connections(patient),
    )
