from app.models.program import AcademicYear, Program  # noqa: F401
from app.models.room import Room  # noqa: F401
from app.models.schedule import ClassSection, DayOfWeek, ScheduleSlot  # noqa: F401
from app.models.semester import Semester  # noqa: F401
from app.models.staff import IssuedIdentifier, StaffMember, StaffRole  # noqa: F401
