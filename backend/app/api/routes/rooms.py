from fastapi import APIRouter, Depends, Query, status

from app.api.deps import get_scheduling_service
from app.models.room import ROOM_MAX_CAPACITY
from app.models.schedule import DayOfWeek
from app.schemas.room import RoomCreate, RoomOut, RoomStatistics, RoomUpdate
from app.services.scheduling import SchedulingService

router = APIRouter()


@router.get("/", response_model=list[RoomOut])
def list_rooms(
    include_inactive: bool = False,
    service: SchedulingService = Depends(get_scheduling_service),
) -> list[RoomOut]:
    return service.list_rooms(include_inactive=include_inactive)


@router.get("/available", response_model=list[RoomOut])
def available_rooms(
    day: DayOfWeek,
    start_time: str = Query(min_length=5, max_length=5),
    end_time: str = Query(min_length=5, max_length=5),
    min_capacity: int | None = Query(default=None, ge=1, le=ROOM_MAX_CAPACITY),
    service: SchedulingService = Depends(get_scheduling_service),
) -> list[RoomOut]:
    return service.query_available_rooms(day, start_time, end_time, min_capacity)


@router.get("/search", response_model=list[RoomOut])
def search_rooms(
    q: str = Query(min_length=1, max_length=50),
    service: SchedulingService = Depends(get_scheduling_service),
) -> list[RoomOut]:
    return service.search_rooms(q)


@router.get("/statistics", response_model=RoomStatistics)
def room_statistics(service: SchedulingService = Depends(get_scheduling_service)) -> RoomStatistics:
    return service.room_statistics()


@router.get("/building/{building}", response_model=list[RoomOut])
def rooms_by_building(building: str, service: SchedulingService = Depends(get_scheduling_service)) -> list[RoomOut]:
    return service.list_rooms_by_building(building)


@router.get("/{room_id}", response_model=RoomOut)
def get_room(room_id: int, service: SchedulingService = Depends(get_scheduling_service)) -> RoomOut:
    return service.get_room(room_id)


@router.post("/", response_model=RoomOut, status_code=status.HTTP_201_CREATED)
def create_room(
    payload: RoomCreate,
    service: SchedulingService = Depends(get_scheduling_service),
) -> RoomOut:
    return service.create_room(**payload.model_dump())


@router.put("/{room_id}", response_model=RoomOut)
def update_room(
    room_id: int,
    payload: RoomUpdate,
    service: SchedulingService = Depends(get_scheduling_service),
) -> RoomOut:
    return service.update_room(room_id, payload.model_dump(exclude_unset=True))


@router.delete("/{room_id}", response_model=RoomOut)
def deactivate_room(room_id: int, service: SchedulingService = Depends(get_scheduling_service)) -> RoomOut:
    return service.deactivate_room(room_id)


@router.post("/{room_id}/restore", response_model=RoomOut)
def restore_room(room_id: int, service: SchedulingService = Depends(get_scheduling_service)) -> RoomOut:
    return service.restore_room(room_id)


@router.delete("/{room_id}/permanent")
def hard_delete_room(room_id: int, service: SchedulingService = Depends(get_scheduling_service)) -> dict:
    service.hard_delete_room(room_id)
    return {"success": True}
