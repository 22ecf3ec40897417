# app/models/candidate.py
"""
Per-tenant candidate tables.

Each tenant splits a candidate into a public row (safe to list) and a
private row keyed by the same ``candidate_id`` that holds the postcode.
The two tenants were designed independently, so column names and value
encodings differ; ``app.services.normalizer`` reconciles them.
"""
from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String, Text, func, true

from app.core.base import Base


class SewingCandidate(Base):
    __tablename__ = "candidates_public"

    id = Column(Integer, primary_key=True, index=True)
    candidate_id = Column(String(64), unique=True, index=True, nullable=False)

    job_title = Column(String(200), nullable=True)
    city = Column(String(120), nullable=True)
    years_experience = Column(String(50), nullable=True)
    status = Column(String(100), nullable=True)
    sector = Column(String(120), nullable=True)
    work_type = Column(String(100), nullable=True)

    # Comma-joined multi-select answers, e.g. "Overlock, None selected"
    machines = Column(Text, nullable=True)
    products = Column(Text, nullable=True)
    materials = Column(Text, nullable=True)
    sewing_techniques = Column(Text, nullable=True)

    desired_salary = Column(String(100), nullable=True)
    travel_distance = Column(String(100), nullable=True)

    is_active = Column(Boolean, nullable=False, server_default=true())
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class SewingCandidatePrivate(Base):
    __tablename__ = "candidates_private"

    id = Column(Integer, primary_key=True, index=True)
    candidate_id = Column(String(64), unique=True, index=True, nullable=False)
    postcode = Column(String(16), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class UpholsteryCandidate(Base):
    __tablename__ = "upholstery_public"

    id = Column(Integer, primary_key=True, index=True)
    candidate_id = Column(String(64), unique=True, index=True, nullable=False)

    job_title = Column(String(200), nullable=True)
    city = Column(String(120), nullable=True)
    years_experience = Column(String(50), nullable=True)
    status = Column(String(100), nullable=True)
    # Notice period, despite the column name.
    availability = Column(String(100), nullable=True)
    sector = Column(String(120), nullable=True)
    work_type = Column(String(100), nullable=True)
    travel_distance = Column(String(100), nullable=True)
    drivers_license = Column(String(50), nullable=True)
    own_vehicle = Column(String(50), nullable=True)
    willing_to_relocate = Column(String(50), nullable=True)

    # Written either as JSON arrays or as comma-joined strings depending on the form version.
    products = Column(JSON, nullable=True)
    techniques = Column(JSON, nullable=True)

    sewing_machine_experience = Column(String(100), nullable=True)
    sewing_machines_used = Column(Text, nullable=True)

    is_active = Column(Boolean, nullable=False, server_default=true())
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class UpholsteryCandidatePrivate(Base):
    __tablename__ = "upholstery_private"

    id = Column(Integer, primary_key=True, index=True)
    candidate_id = Column(String(64), unique=True, index=True, nullable=False)
    postcode = Column(String(16), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
