from fastapi import APIRouter, Depends

from app.api.deps import get_scheduling_service
from app.schemas.conflict import ConflictReport
from app.services.scheduling import SchedulingService

router = APIRouter()


@router.get("/schedule", response_model=ConflictReport)
def audit_schedule(service: SchedulingService = Depends(get_scheduling_service)) -> ConflictReport:
    return service.audit_schedule()
