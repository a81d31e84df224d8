"""Per-entity schema descriptors.

One EntitySchema drives the generic list and form controllers: which
fields a form has, which rules it checks (in order), which texts the
search looks at, how a record maps to a draft and how a draft is sent
back to the server.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from config.defaults import department_name
from controllers.fields import FieldKind, FieldSpec, clean_list, to_number
from models import Course, CsulaCourse, Program, School
from models.base import format_credits


@dataclass(frozen=True)
class Rule:
    """A required-field check. check(draft) is True when the rule passes."""

    field: str
    message: str
    check: Callable[[dict], bool]


@dataclass(frozen=True)
class Column:
    header: str
    value: Callable[[object], str]


@dataclass(frozen=True)
class EntitySchema:
    key: str                 # CLI name and list route, e.g. "courses"
    entity: str              # used in messages: "Failed to delete <entity>."
    title: str               # "Course"
    api_attr: str            # StarApi attribute holding the collection
    fields: tuple[FieldSpec, ...]
    rules: tuple[Rule, ...]
    searchable: Callable[[object], list[str]]
    serialize: Callable[[dict], dict]
    to_draft: Callable[[object], dict]
    columns: tuple[Column, ...]
    edit_rules: Optional[tuple[Rule, ...]] = None
    # Exact-match category filter: ids a record belongs to
    category_of: Optional[Callable[[object], set[str]]] = None
    category_label: str = ""
    # "schools": options come from /schools; "records": from category_pairs
    category_source: str = ""
    category_pairs: Optional[Callable[[object], list[tuple[str, str]]]] = None
    plural: str = ""
    list_route: str = ""

    @property
    def plural_entity(self) -> str:
        return self.plural or f"{self.entity}s"

    @property
    def route(self) -> str:
        return self.list_route or f"/{self.key}"

    def rules_for(self, editing: bool) -> tuple[Rule, ...]:
        if editing and self.edit_rules is not None:
            return self.edit_rules
        return self.rules

    def field_spec(self, name: str) -> FieldSpec:
        for f in self.fields:
            if f.name == name:
                return f
        raise KeyError(f"{self.key} has no field {name!r}")

    def empty_draft(self) -> dict:
        return {f.name: f.empty() for f in self.fields}


def _filled(name: str) -> Callable[[dict], bool]:
    return lambda draft: bool(str(draft.get(name) or "").strip())


def _has_items(name: str) -> Callable[[dict], bool]:
    return lambda draft: bool(clean_list(draft.get(name) or []))


def _joined(values) -> str:
    return ", ".join(values)


# ─── SCHOOLS ───

def _school_draft(s: School) -> dict:
    return {"name": s.name, "location": s.location}


def _school_payload(d: dict) -> dict:
    return {"name": d["name"], "location": d.get("location", "")}


SCHOOLS = EntitySchema(
    key="schools",
    entity="school",
    title="School",
    api_attr="schools",
    list_route="/institutions",
    fields=(
        FieldSpec("name", "School name", hint="e.g. East Los Angeles College"),
        FieldSpec("location", "Location", hint="e.g. Monterey Park, CA"),
    ),
    rules=(Rule("name", "School name is required.", _filled("name")),),
    searchable=lambda s: [s.name, s.location],
    serialize=_school_payload,
    to_draft=_school_draft,
    columns=(
        Column("Name", lambda s: s.name),
        Column("Location", lambda s: s.location),
    ),
)


# ─── PROGRAMS ───

def _program_draft(p: Program) -> dict:
    return {"name": p.name, "department": p.department, "s_id": p.school_id}


def _program_payload(d: dict) -> dict:
    return {"name": d["name"], "department": d["department"], "s_id": d["s_id"]}


_PROGRAM_NAME = Rule("name", "Program name is required.", _filled("name"))
_PROGRAM_SCHOOL = Rule("s_id", "Please select an institution.", _filled("s_id"))

PROGRAMS = EntitySchema(
    key="programs",
    entity="program",
    title="Program",
    api_attr="programs",
    fields=(
        FieldSpec("name", "Program name", hint="e.g. Electrical Engineering"),
        FieldSpec("department", "Department", hint="e.g. EE"),
        FieldSpec("s_id", "Institution", FieldKind.CHOICE, choices="schools"),
    ),
    rules=(
        _PROGRAM_NAME,
        Rule("department", "Department name is required.", _filled("department")),
        _PROGRAM_SCHOOL,
    ),
    edit_rules=(
        _PROGRAM_NAME,
        Rule("department", "Department is required.", _filled("department")),
        _PROGRAM_SCHOOL,
    ),
    searchable=lambda p: [p.name, p.department, p.school_name],
    category_of=lambda p: {p.school_id},
    category_label="All Schools",
    category_source="schools",
    serialize=_program_payload,
    to_draft=_program_draft,
    columns=(
        Column("Program", lambda p: p.name),
        Column("Department", lambda p: p.department),
        Column("School", lambda p: p.school_name),
    ),
)


# ─── COURSES (transfer school) ───

def _course_draft(c: Course) -> dict:
    return {
        "course_name": c.course_name,
        "course_code": list(c.course_code),
        "credits": format_credits(c.credits) if c.credits else "",
        "category": c.category,
        "equivalent_to": list(c.equivalent_to),
        "s_id": c.school_id,
        "department": list(c.department),
    }


def _course_payload(d: dict) -> dict:
    return {
        "course_name": d["course_name"],
        "course_code": clean_list(d["course_code"]),
        "equivalent_to": clean_list(d.get("equivalent_to") or []),
        "credits": to_number(d.get("credits")),
        "category": d.get("category", ""),
        "department": clean_list(d.get("department") or []),
        "s_id": d["s_id"],
    }


COURSES = EntitySchema(
    key="courses",
    entity="course",
    title="Course",
    api_attr="courses",
    fields=(
        FieldSpec("course_name", "Course name", hint="e.g. Introduction to Engineering"),
        FieldSpec("course_code", "Course code", FieldKind.CODES,
                  hint="Separate multiple codes with commas, e.g. ENGR 10, ENG 10"),
        FieldSpec("credits", "Credits", FieldKind.NUMBER, hint="e.g. 3"),
        FieldSpec("category", "Category",
                  hint="e.g. Technical Lower Division Major Courses"),
        FieldSpec("equivalent_to", "Equivalent course (CSULA)", FieldKind.CODES,
                  hint="Separate multiple codes with commas, e.g. ENGR 1500"),
        FieldSpec("s_id", "Institution (transfer from)", FieldKind.CHOICE,
                  choices="schools"),
        FieldSpec("department", "Program", FieldKind.MULTI_CHOICE, choices="programs"),
    ),
    rules=(
        Rule("course_name", "Course name is required.", _filled("course_name")),
        Rule("course_code", "Course code is required.", _has_items("course_code")),
        Rule("s_id", "Please select an institution.", _filled("s_id")),
    ),
    searchable=lambda c: [
        c.course_name, *c.course_code, *c.equivalent_to, c.credits_label,
        c.category, c.school_name, *c.department,
    ],
    category_of=lambda c: {c.school_id},
    category_label="All Schools",
    category_source="schools",
    serialize=_course_payload,
    to_draft=_course_draft,
    columns=(
        Column("Course Name", lambda c: c.course_name),
        Column("Course Code", lambda c: _joined(c.course_code)),
        Column("Equivalent Course", lambda c: _joined(c.equivalent_to)),
        Column("Credits", lambda c: c.credits_label),
        Column("Category", lambda c: c.category),
        Column("School", lambda c: c.school_name),
        Column("Department", lambda c: _joined(c.department)),
    ),
)


# ─── CSULA COURSES (home institution) ───

def _csula_draft(c: CsulaCourse) -> dict:
    return {
        "course_name": c.course_name,
        "course_code": list(c.course_code),
        "credits": format_credits(c.credits) if c.credits else "",
        "department": c.department_id,
        "pre_requisite": list(c.pre_requisite.course_code),
        "pre_requisite_description": c.pre_requisite.description,
        "co_requisite": list(c.co_requisite.course_code),
        "co_requisite_description": c.co_requisite.description,
        "course_type": c.course_type,
        "is_pre_and_coreq_same": c.is_pre_and_coreq_same,
        "term": list(c.term),
    }


def _csula_payload(d: dict) -> dict:
    dept = d["department"]
    return {
        "course_name": d["course_name"],
        "course_code": clean_list(d["course_code"]),
        "credits": to_number(d.get("credits")),
        "department": [{"id": dept, "name": department_name(dept)}],
        "pre_requisite": {
            "course_code": clean_list(d.get("pre_requisite") or []),
            "description": d.get("pre_requisite_description", ""),
        },
        "co_requisite": {
            "course_code": clean_list(d.get("co_requisite") or []),
            "description": d.get("co_requisite_description", ""),
        },
        "course_type": d.get("course_type", ""),
        "isPreAndCoreqAreSame": d.get("is_pre_and_coreq_same"),
        "term": list(d.get("term") or []),
    }


CSULA_COURSES = EntitySchema(
    key="csula-courses",
    entity="course",
    title="CSULA Course",
    api_attr="csula_courses",
    list_route="/csulacourses",
    fields=(
        FieldSpec("course_name", "Course name", hint="e.g. General Physics I, Mechanics"),
        FieldSpec("course_code", "Course code", FieldKind.CODES,
                  hint="Separate multiple codes with commas, e.g. PHYS 2100, MATH 1000"),
        FieldSpec("credits", "Credits", FieldKind.NUMBER, hint="e.g. 5"),
        FieldSpec("department", "Department", FieldKind.CHOICE,
                  choices="csula_departments"),
        FieldSpec("pre_requisite", "Pre-requisite codes", FieldKind.CODES),
        FieldSpec("pre_requisite_description", "Pre-requisite description"),
        FieldSpec("co_requisite", "Co-requisite codes", FieldKind.CODES),
        FieldSpec("co_requisite_description", "Co-requisite description"),
        FieldSpec("course_type", "Course type", hint="e.g. Core, Elective"),
        FieldSpec("is_pre_and_coreq_same", "Pre- and co-requisites are the same",
                  FieldKind.FLAG),
        FieldSpec("term", "Terms offered", FieldKind.MULTI_CHOICE, choices="terms"),
    ),
    rules=(
        Rule("course_name", "Course name is required.", _filled("course_name")),
        Rule("course_code", "At least one course code is required.",
             _has_items("course_code")),
        Rule("department", "Please select a department.", _filled("department")),
    ),
    searchable=lambda c: [
        c.course_name, *c.course_code, c.credits_label, c.course_type,
        *c.term, *(d.name for d in c.department),
    ],
    category_of=lambda c: {d.id for d in c.department},
    category_label="All Departments",
    category_source="records",
    category_pairs=lambda c: [(d.id, d.name) for d in c.department],
    serialize=_csula_payload,
    to_draft=_csula_draft,
    columns=(
        Column("Course Name", lambda c: c.course_name),
        Column("Course Code", lambda c: _joined(c.course_code)),
        Column("Credits", lambda c: c.credits_label),
        Column("Department", lambda c: _joined(d.name for d in c.department)),
        Column("Type", lambda c: c.course_type),
        Column("Term", lambda c: _joined(c.term)),
    ),
)


ALL_SCHEMAS: dict[str, EntitySchema] = {
    s.key: s for s in (SCHOOLS, PROGRAMS, COURSES, CSULA_COURSES)
}
