# app/services/normalizer.py
"""
Map tenant-specific candidate rows onto the unified candidate shape.

Each tenant has a mapping table of FieldRule entries. Rules are a whitelist:
a raw column that no rule names (the postcode included, should a caller pass
one in) can never reach the output.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from app.models.tenant import TenantId
from app.schemas.candidate import UnifiedCandidate

NONE_SELECTED = "None selected"
NOT_SPECIFIED = "Not specified"

TEXT = "text"
LIST = "list"
VALUE = "value"


@dataclass(frozen=True)
class FieldRule:
    target: str
    source: str | None
    kind: str = TEXT
    default: Any = NOT_SPECIFIED


def split_list(value: Any) -> list[str]:
    """
    Accept a comma-joined string or a native list for a multi-select field.

    Strings are split, trimmed, and stripped of blanks and the "None selected"
    sentinel. Lists pass through unchanged. Order and duplicates are preserved.
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    out: list[str] = []
    for part in str(value).split(","):
        item = part.strip()
        if not item or item == NONE_SELECTED:
            continue
        out.append(item)
    return out


def _text(value: Any, default: Any) -> Any:
    if value is None:
        return default
    if isinstance(value, str):
        stripped = value.strip()
        return stripped if stripped else default
    return str(value)


_COMMON_RULES: tuple[FieldRule, ...] = (
    FieldRule("id", "id", VALUE, None),
    FieldRule("candidate_id", "candidate_id", VALUE, None),
    FieldRule("location", "city"),
    FieldRule("years_experience", "years_experience"),
    FieldRule("availability", "status", default="Unknown"),
    FieldRule("work_type", "work_type"),
    FieldRule("travel_distance", "travel_distance"),
    FieldRule("products", "products", LIST),
)

MAPPINGS: dict[TenantId, tuple[FieldRule, ...]] = {
    TenantId.SEWING: _COMMON_RULES
    + (
        FieldRule("role", "job_title"),
        FieldRule("sector", "sector"),
        FieldRule("machines", "machines", LIST),
        FieldRule("materials", "materials", LIST),
        FieldRule("techniques", "sewing_techniques", LIST),
        FieldRule("desired_salary", "desired_salary", default="Competitive"),
    ),
    TenantId.UPHOLSTERY: _COMMON_RULES
    + (
        FieldRule("role", "job_title", default="Upholsterer"),
        FieldRule("sector", "sector", default="Upholstery"),
        FieldRule("machines", "sewing_machines_used", LIST),
        FieldRule("materials", None, LIST),
        FieldRule("techniques", "techniques", LIST),
        # No salary question on the upholstery form.
        FieldRule("desired_salary", None, default="Competitive"),
        FieldRule("notice_period", "availability"),
        FieldRule("drivers_license", "drivers_license"),
        FieldRule("own_vehicle", "own_vehicle"),
        FieldRule("willing_to_relocate", "willing_to_relocate"),
        FieldRule("sewing_machine_experience", "sewing_machine_experience", default="None"),
    ),
}


def normalize_candidate(raw: Mapping[str, Any], tenant: TenantId) -> UnifiedCandidate:
    fields: dict[str, Any] = {"tenant_type": tenant}
    for rule in MAPPINGS[tenant]:
        value = raw.get(rule.source) if rule.source else None
        if rule.kind == LIST:
            fields[rule.target] = split_list(value)
        elif rule.kind == VALUE:
            fields[rule.target] = value
        else:
            fields[rule.target] = _text(value, rule.default)
    return UnifiedCandidate(**fields)


def normalize_candidates(raws: list[Mapping[str, Any]], tenant: TenantId) -> list[UnifiedCandidate]:
    return [normalize_candidate(raw, tenant) for raw in raws]
