from fastapi import APIRouter, Depends, status

from app.api.deps import get_scheduling_service
from app.schemas.program import AcademicYearCreate, AcademicYearOut, ProgramCreate, ProgramOut
from app.schemas.semester import SemesterCreate, SemesterOut, SemesterUpdate
from app.services.scheduling import SchedulingService

router = APIRouter()


@router.get("/programs", response_model=list[ProgramOut])
def list_programs(service: SchedulingService = Depends(get_scheduling_service)) -> list[ProgramOut]:
    return service.list_programs()


@router.post("/programs", response_model=ProgramOut, status_code=status.HTTP_201_CREATED)
def create_program(
    payload: ProgramCreate,
    service: SchedulingService = Depends(get_scheduling_service),
) -> ProgramOut:
    return service.create_program(**payload.model_dump())


@router.get("/academic-years", response_model=list[AcademicYearOut])
def list_academic_years(service: SchedulingService = Depends(get_scheduling_service)) -> list[AcademicYearOut]:
    return service.list_academic_years()


@router.post("/academic-years", response_model=AcademicYearOut, status_code=status.HTTP_201_CREATED)
def create_academic_year(
    payload: AcademicYearCreate,
    service: SchedulingService = Depends(get_scheduling_service),
) -> AcademicYearOut:
    return service.create_academic_year(**payload.model_dump())


@router.get("/programs/{program_id}/semesters", response_model=list[SemesterOut])
def list_semesters(
    program_id: int,
    service: SchedulingService = Depends(get_scheduling_service),
) -> list[SemesterOut]:
    return service.list_semesters(program_id)


@router.post(
    "/programs/{program_id}/semesters",
    response_model=SemesterOut,
    status_code=status.HTTP_201_CREATED,
)
def create_semester(
    program_id: int,
    payload: SemesterCreate,
    service: SchedulingService = Depends(get_scheduling_service),
) -> SemesterOut:
    return service.create_semester(program_id=program_id, **payload.model_dump())


@router.put("/semesters/{semester_id}", response_model=SemesterOut)
def update_semester(
    semester_id: int,
    payload: SemesterUpdate,
    service: SchedulingService = Depends(get_scheduling_service),
) -> SemesterOut:
    return service.update_semester(semester_id, payload.model_dump(exclude_unset=True))


@router.delete("/semesters/{semester_id}", response_model=SemesterOut)
def deactivate_semester(
    semester_id: int,
    service: SchedulingService = Depends(get_scheduling_service),
) -> SemesterOut:
    return service.deactivate_semester(semester_id)


@router.post("/semesters/{semester_id}/restore", response_model=SemesterOut)
def restore_semester(
    semester_id: int,
    service: SchedulingService = Depends(get_scheduling_service),
) -> SemesterOut:
    return service.restore_semester(semester_id)
