from fastapi import APIRouter, Depends, Query, status

from app.api.deps import get_scheduling_service
from app.schemas.class_section import ClassSectionCreate, ClassSectionOut, ClassSectionUpdate
from app.services.scheduling import SchedulingService

router = APIRouter()


@router.get("/", response_model=list[ClassSectionOut])
def list_classes(
    subject_id: int | None = Query(default=None, ge=1),
    semester_id: int | None = Query(default=None, ge=1),
    include_inactive: bool = False,
    service: SchedulingService = Depends(get_scheduling_service),
) -> list[ClassSectionOut]:
    return service.list_class_sections(
        subject_id=subject_id,
        semester_id=semester_id,
        include_inactive=include_inactive,
    )


@router.get("/{class_id}", response_model=ClassSectionOut)
def get_class(class_id: int, service: SchedulingService = Depends(get_scheduling_service)) -> ClassSectionOut:
    return service.get_class_section(class_id)


@router.post("/", response_model=ClassSectionOut, status_code=status.HTTP_201_CREATED)
def create_class(
    payload: ClassSectionCreate,
    service: SchedulingService = Depends(get_scheduling_service),
) -> ClassSectionOut:
    return service.create_class_section(**payload.model_dump())


@router.put("/{class_id}", response_model=ClassSectionOut)
def update_class(
    class_id: int,
    payload: ClassSectionUpdate,
    service: SchedulingService = Depends(get_scheduling_service),
) -> ClassSectionOut:
    return service.update_class_section(class_id, payload.model_dump(exclude_unset=True))


@router.delete("/{class_id}", response_model=ClassSectionOut)
def deactivate_class(class_id: int, service: SchedulingService = Depends(get_scheduling_service)) -> ClassSectionOut:
    return service.deactivate_class_section(class_id)


@router.post("/{class_id}/restore", response_model=ClassSectionOut)
def restore_class(class_id: int, service: SchedulingService = Depends(get_scheduling_service)) -> ClassSectionOut:
    return service.restore_class_section(class_id)


@router.delete("/{class_id}/permanent")
def hard_delete_class(class_id: int, service: SchedulingService = Depends(get_scheduling_service)) -> dict:
    service.hard_delete_class_section(class_id)
    return {"success": True}
