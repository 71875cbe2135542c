"""
Reference Routes

GET /reference/departments - Department names for faculty profiles
GET /reference/domains - Domain names for faculty profiles
"""

from typing import List

from fastapi import APIRouter, Depends

from capstone_portal.services.mongo_service import ReferenceListService

router = APIRouter(prefix="/reference", tags=["Reference"])


def get_reference_service() -> ReferenceListService:
    return ReferenceListService()


@router.get("/departments", response_model=List[str])
async def list_departments(reference: ReferenceListService = Depends(get_reference_service)):
    return reference.departments()


@router.get("/domains", response_model=List[str])
async def list_domains(reference: ReferenceListService = Depends(get_reference_service)):
    return reference.domains()
