from medsched.models.assignment import AssignmentKind, CSRAssignment, PBLAssignment  # noqa: F401
from medsched.models.course import AcademicTerm, CourseKind, CourseOffering  # noqa: F401
from medsched.models.lecturer import Lecturer  # noqa: F401
from medsched.models.room import Room  # noqa: F401
from medsched.models.schedule import (  # noqa: F401
    CSRCategory,
    CSRSession,
    JournalReadingSession,
    LectureSession,
    NonBlockRowType,
    NonBlockSession,
    PBLSession,
    PracticumSession,
    SpecialAgendaSession,
)
from medsched.models.schedule_lock import ScheduleResourceLock  # noqa: F401
from medsched.models.student import Student  # noqa: F401
from medsched.models.student_group import (  # noqa: F401
    LargeGroup,
    LargeGroupMember,
    MakeupGroup,
    MakeupGroupMember,
    SmallGroup,
    SmallGroupMember,
)
