from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.models.tenant import TenantId


class Coordinates(BaseModel):
    lat: float
    lon: float

    model_config = ConfigDict(frozen=True)


class UnifiedCandidate(BaseModel):
    """
    Tenant-agnostic candidate as returned to clients.

    Never carries the postcode itself: only the district code and coordinates
    derived from it during enrichment.
    """

    id: int
    candidate_id: str
    role: str
    location: str
    postcode_district: str | None = None
    coordinates: Coordinates | None = None
    years_experience: str
    availability: str
    sector: str
    work_type: str
    materials: list[str] = Field(default_factory=list)
    techniques: list[str] = Field(default_factory=list)
    products: list[str] = Field(default_factory=list)
    machines: list[str] = Field(default_factory=list)
    desired_salary: str
    travel_distance: str

    # Upholstery-only answers; null for sewing candidates.
    notice_period: str | None = None
    drivers_license: str | None = None
    own_vehicle: str | None = None
    willing_to_relocate: str | None = None
    sewing_machine_experience: str | None = None

    tenant_type: TenantId

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )
