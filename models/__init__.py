from models.school import School
from models.program import Program
from models.course import Course
from models.csula_course import CsulaCourse, Department, Requisite
from models.mapping import MappedCourse, Mapping, MappingResponse

__all__ = [
    "School",
    "Program",
    "Course",
    "CsulaCourse",
    "Department",
    "Requisite",
    "MappedCourse",
    "Mapping",
    "MappingResponse",
]
