from fastapi import APIRouter, Depends, Query, status

from app.api.deps import get_scheduling_service
from app.models.schedule import DayOfWeek
from app.schemas.schedule import ScheduleCreate, ScheduleOut, ScheduleUpdate
from app.services.scheduling import SchedulingService

router = APIRouter()


@router.get("/", response_model=list[ScheduleOut])
def list_schedules(
    room_id: int | None = Query(default=None, ge=1),
    class_id: int | None = Query(default=None, ge=1),
    day: DayOfWeek | None = None,
    service: SchedulingService = Depends(get_scheduling_service),
) -> list[ScheduleOut]:
    return service.list_schedules(room_id=room_id, class_id=class_id, day_of_week=day)


@router.post("/", response_model=ScheduleOut, status_code=status.HTTP_201_CREATED)
def create_schedule(
    payload: ScheduleCreate,
    service: SchedulingService = Depends(get_scheduling_service),
) -> ScheduleOut:
    return service.create_schedule(**payload.model_dump())


@router.get("/{schedule_id}", response_model=ScheduleOut)
def get_schedule(schedule_id: int, service: SchedulingService = Depends(get_scheduling_service)) -> ScheduleOut:
    return service.get_schedule(schedule_id)


@router.put("/{schedule_id}", response_model=ScheduleOut)
def update_schedule(
    schedule_id: int,
    payload: ScheduleUpdate,
    service: SchedulingService = Depends(get_scheduling_service),
) -> ScheduleOut:
    return service.update_schedule(schedule_id, payload.model_dump(exclude_unset=True))


@router.delete("/{schedule_id}", response_model=ScheduleOut)
def deactivate_schedule(
    schedule_id: int,
    service: SchedulingService = Depends(get_scheduling_service),
) -> ScheduleOut:
    return service.deactivate_schedule(schedule_id)


@router.post("/{schedule_id}/restore", response_model=ScheduleOut)
def restore_schedule(
    schedule_id: int,
    service: SchedulingService = Depends(get_scheduling_service),
) -> ScheduleOut:
    return service.restore_schedule(schedule_id)


@router.delete("/{schedule_id}/permanent")
def hard_delete_schedule(
    schedule_id: int,
    service: SchedulingService = Depends(get_scheduling_service),
) -> dict:
    service.hard_delete_schedule(schedule_id)
    return {"success": True}
