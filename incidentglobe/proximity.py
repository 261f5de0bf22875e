"""Hover support: UV-radius queries over a FilteredView and tooltip summaries.

The query is a linear scan over every UV in the view. That is fine for a few
thousand incidents per frame; a grid or k-d tree over UV space can replace it
as long as it still returns exactly the indices with distance < radius.
"""

import logging
from collections import Counter
from collections.abc import Collection, Iterable, Sequence

import numpy as np

from incidentglobe.config import HoverConfig, TooltipConfig
from incidentglobe.models import (
    ALL_ORGANIZATIONS,
    ActorTargetRow,
    FilteredView,
    IncidentDetail,
    IncidentRecord,
    TooltipSection,
    TooltipSummary,
    TopEntry,
)

logger = logging.getLogger(__name__)

UNKNOWN_LABEL = "Unknown"


def query(view: FilteredView, query_uv: tuple[float, float], radius: float) -> list[int]:
    """Indices into ``view`` whose UV lies strictly within ``radius`` of ``query_uv``."""
    if len(view) == 0:
        return []
    uvs = view.uvs.astype(np.float64)
    dist = np.hypot(uvs[:, 0] - query_uv[0], uvs[:, 1] - query_uv[1])
    return np.flatnonzero(dist < radius).tolist()


def nearest(view: FilteredView, query_uv: tuple[float, float], indices: Sequence[int]) -> int | None:
    """The closest of ``indices`` to ``query_uv``; first one wins ties."""
    if not indices:
        return None
    uvs = view.uvs[list(indices)].astype(np.float64)
    dist = np.hypot(uvs[:, 0] - query_uv[0], uvs[:, 1] - query_uv[1])
    return int(indices[int(np.argmin(dist))])


def hover_radius(query_uv: tuple[float, float], hover: HoverConfig) -> float:
    """Query radius for a hover point.

    With ``adaptive`` the radius widens toward the poles, where UV space is
    stretched: near + (far - near) * |v - 0.5|.
    """
    if not hover.adaptive:
        return hover.radius
    return hover.near_radius + (hover.far_radius - hover.near_radius) * abs(query_uv[1] - 0.5)


# --- Tooltip summarizer ---


def _label(value: str) -> str:
    return value.strip() or UNKNOWN_LABEL


def top_counts(values: Iterable[str], n: int, placeholder: str) -> list[TopEntry]:
    """Top-n by descending count; equal counts keep first-seen order."""
    counts: Counter[str] = Counter(_label(v) for v in values)
    if not counts:
        return [TopEntry(label=placeholder, count=0)]
    return [TopEntry(label=label, count=count) for label, count in counts.most_common(n)]


def _actor_targets(records: Sequence[IncidentRecord], n: int) -> list[ActorTargetRow]:
    rows: dict[str, ActorTargetRow] = {}
    for record in records:
        actor = _label(record.actor_type)
        row = rows.get(actor)
        if row is None:
            row = rows[actor] = ActorTargetRow(
                actor=actor, incidents=0,
                organizations={org.value: 0 for org in ALL_ORGANIZATIONS},
            )
        row.incidents += 1
        for org in ALL_ORGANIZATIONS:
            if record.involves(org):
                row.organizations[org.value] += 1
    ranked = sorted(rows.values(), key=lambda r: r.incidents, reverse=True)
    return ranked[:n]


def _detail(record: IncidentRecord) -> IncidentDetail:
    return IncidentDetail(
        incident_id=record.incident_id or "(unknown)",
        country=record.country or "N/A",
        date=record.date_label,
        details=record.details or "No info",
    )


def summarize(
    view: FilteredView,
    indices: Sequence[int],
    sections: Collection[TooltipSection],
    tooltip: TooltipConfig | None = None,
    nearest_index: int | None = None,
) -> TooltipSummary:
    """Group and sum the hovered incidents for the enabled tooltip sections.

    An empty index list gives a well-formed summary: total 0, zero sums and
    a single placeholder entry in each top list.
    """
    tooltip = tooltip or TooltipConfig()
    records = [view.records[i] for i in indices]
    n, placeholder = tooltip.top_n, tooltip.placeholder
    summary = TooltipSummary(
        total=len(records),
        sections=[s for s in TooltipSection if s in sections],
    )

    if TooltipSection.COUNTRY in sections:
        summary.countries = top_counts((r.country for r in records), n, placeholder)
    if TooltipSection.CONTEXT in sections:
        summary.contexts = top_counts((r.attack_context for r in records), n, placeholder)
    if TooltipSection.ACTOR in sections:
        summary.actors = top_counts((r.actor_type for r in records), n, placeholder)
    if TooltipSection.IMPACT in sections:
        summary.impact = {
            "killed": sum(r.total_killed for r in records),
            "wounded": sum(r.total_wounded for r in records),
            "kidnapped": sum(r.total_kidnapped for r in records),
            "affected": sum(r.total_affected for r in records),
        }
    if TooltipSection.GENDER in sections:
        summary.gender = {
            "male": sum(r.gender_male for r in records),
            "female": sum(r.gender_female for r in records),
            "unknown": sum(r.gender_unknown for r in records),
        }
    if TooltipSection.ACTOR_TARGET in sections:
        summary.actor_targets = _actor_targets(records, n)
    if TooltipSection.ORGANIZATION in sections:
        summary.organizations = {
            org.value: sum(r.org_value(org) for r in records) for org in ALL_ORGANIZATIONS
        }

    if nearest_index is not None and 0 <= nearest_index < len(view):
        summary.detail = _detail(view.records[nearest_index])
    return summary


def hover_summary(
    view: FilteredView,
    query_uv: tuple[float, float],
    sections: Collection[TooltipSection],
    hover: HoverConfig,
    tooltip: TooltipConfig,
) -> TooltipSummary:
    """Query + summarize for a single hover frame."""
    radius = hover_radius(query_uv, hover)
    indices = query(view, query_uv, radius)
    logger.debug("Hover at (%.4f, %.4f) r=%.4f -> %d incidents", *query_uv, radius, len(indices))
    return summarize(
        view, indices, sections, tooltip,
        nearest_index=nearest(view, query_uv, indices),
    )
