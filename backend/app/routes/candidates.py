# app/routes/candidates.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from app.models.tenant import TenantId
from app.schemas.candidate import UnifiedCandidate
from app.services.candidates import CandidateDirectory
from app.services.tenants import get_candidate_directory

router = APIRouter(prefix="/api", tags=["candidates"])


@router.get("/candidates", response_model=list[UnifiedCandidate])
def list_sewing_candidates(directory: CandidateDirectory = Depends(get_candidate_directory)):
    return directory.list_candidates(TenantId.SEWING)


@router.get("/candidates/{candidate_id}", response_model=UnifiedCandidate)
def get_sewing_candidate(candidate_id: str, directory: CandidateDirectory = Depends(get_candidate_directory)):
    return directory.get_candidate(TenantId.SEWING, candidate_id)


@router.get("/upholstery", response_model=list[UnifiedCandidate])
def list_upholstery_candidates(directory: CandidateDirectory = Depends(get_candidate_directory)):
    return directory.list_candidates(TenantId.UPHOLSTERY)


@router.get("/upholstery/{candidate_id}", response_model=UnifiedCandidate)
def get_upholstery_candidate(candidate_id: str, directory: CandidateDirectory = Depends(get_candidate_directory)):
    return directory.get_candidate(TenantId.UPHOLSTERY, candidate_id)
