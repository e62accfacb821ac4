from fastapi import APIRouter, Depends, status

from app.api.deps import get_scheduling_service
from app.schemas.staff import IdentifierOut, IdentifierRequest, StaffCreate, StaffOut
from app.services.scheduling import SchedulingService

router = APIRouter()


@router.post("/identifiers", response_model=IdentifierOut, status_code=status.HTTP_201_CREATED)
def allocate_identifier(
    payload: IdentifierRequest,
    service: SchedulingService = Depends(get_scheduling_service),
) -> IdentifierOut:
    return IdentifierOut(identifier=service.allocate_identifier(payload.prefix, payload.year))


@router.get("/staff", response_model=list[StaffOut])
def list_staff(service: SchedulingService = Depends(get_scheduling_service)) -> list[StaffOut]:
    return service.list_staff()


@router.post("/staff", response_model=StaffOut, status_code=status.HTTP_201_CREATED)
def create_staff_member(
    payload: StaffCreate,
    service: SchedulingService = Depends(get_scheduling_service),
) -> StaffOut:
    return service.create_staff_member(**payload.model_dump())
