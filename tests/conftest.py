"""Shared fixtures: an in-memory stand-in for requests.Session."""

import json
from urllib.parse import urlparse

import pytest
import requests

from client.api import StarApi
from config.schema import AppConfig

BASE_URL = "http://star.test/api"


class FakeResponse:
    def __init__(self, status_code: int = 200, body=None, text: str | None = None):
        self.status_code = status_code
        self._body = body
        if text is not None:
            self.text = text
        else:
            self.text = "" if body is None else json.dumps(body)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self):
        if self._body is None:
            return json.loads(self.text)
        return self._body


class FakeSession:
    """Answers requests from a route table keyed by (METHOD, path).

    A route value is a FakeResponse, a (status, body) tuple or an
    exception instance to raise. Every call is recorded.
    """

    def __init__(self, routes: dict | None = None):
        self.routes = dict(routes or {})
        self.calls: list[dict] = []

    def request(self, method, url, json=None, params=None, timeout=None):
        path = urlparse(url).path
        prefix = urlparse(BASE_URL).path
        if path.startswith(prefix):
            path = path[len(prefix):]
        self.calls.append({
            "method": method, "path": path, "json": json,
            "params": params, "timeout": timeout,
        })
        answer = self.routes.get((method, path))
        if answer is None:
            return FakeResponse(404, {"error": "Not found"})
        if isinstance(answer, Exception):
            raise answer
        if isinstance(answer, tuple):
            return FakeResponse(*answer)
        return answer

    def calls_to(self, method: str, path: str) -> list[dict]:
        return [c for c in self.calls if c["method"] == method and c["path"] == path]


# ─── Sample records ───────────────────────────────────────────────────────────

ELAC = {"_id": "664f0a", "id": "1", "name": "East Los Angeles College",
        "location": "Monterey Park, CA"}
PCC = {"id": "2", "name": "Pasadena City College", "location": "Pasadena, CA"}

PROGRAMS = [
    {"_id": "p1", "name": "Electrical Engineering", "department": "EE", "school": ELAC},
    {"_id": "p2", "name": "Computer Science", "department": "CS", "school": PCC},
]

COURSES = [
    {"_id": "c1", "course_name": "Introduction to Engineering",
     "course_code": ["ENGR 10"], "credits": 3, "category": "Lower Division",
     "department": ["EE"], "equivalent_to": ["ENGR 1500"], "school": ELAC},
    {"_id": "c2", "course_name": "Calculus I", "course_code": ["MATH 1"],
     "credits": 5, "category": "Math", "department": ["EE", "CS"],
     "equivalent_to": ["MATH 2110"], "s_id": "2"},
]

CSULA_COURSES = [
    {"_id": "h1", "course_name": "General Physics I", "course_code": ["PHYS 2100"],
     "credits": 5, "department": [{"id": "EE", "name": "Electrical and Computer Engineering"}],
     "pre_requisite": {"course_code": ["MATH 2110"], "description": ""},
     "co_requisite": {"course_code": [], "description": ""},
     "course_type": "Core", "isPreAndCoreqAreSame": False, "term": ["Fall"]},
    {"_id": "h2", "course_name": "Programming I", "course_code": ["CS 2011"],
     "credits": 3, "department": [{"id": "CS", "name": "Computer Science"}],
     "course_type": "Core", "term": ["Fall", "Spring"]},
    {"_id": "h3", "course_name": "Discrete Structures", "course_code": ["CS 2148"],
     "credits": 3, "department": [{"id": "CS", "name": "Comp Sci"}], "term": []},
]

# Older records were stored before requisites and terms existed.
CSULA_COURSE_WITH_NULLS = {
    "_id": "h4", "course_name": "Senior Design", "course_code": ["EE 4900"],
    "credits": 3, "department": [{"id": "EE", "name": "Electrical and Computer Engineering"}],
    "pre_requisite": None, "co_requisite": {"course_code": None, "description": None},
    "course_type": None, "isPreAndCoreqAreSame": None, "term": None,
}

MAPPING = {
    "department_name": "Electrical Engineering",
    "school_name": "East Los Angeles College",
    "mappings": [
        {"external_course": {"course_code": ["MATH 1"], "course_name": "Calculus I",
                             "course_credits": 5},
         "csula_course": [{"course_code": ["MATH 2110"], "course_name": "Calculus I",
                           "course_credits": 4}]},
        {"external_course": {"course_code": "READY 0001", "course_name": "Pending",
                             "course_credits": 0},
         "csula_course": [{"course_code": "EE 1000", "course_name": "Ignored",
                           "course_credits": 1}]},
        {"external_course": {"course_code": ["ENGR 10"], "course_name": "Intro Eng",
                             "course_credits": 3},
         "csula_course": [
             {"course_code": ["ENGR 1500"], "course_name": "Intro to Engineering",
              "course_credits": 2},
             {"course_code": ["EE 1010"], "course_name": "EE Lab",
              "course_credits": 1},
         ]},
    ],
}


@pytest.fixture
def config() -> AppConfig:
    return AppConfig(api_base_url=BASE_URL, request_timeout=5)


@pytest.fixture
def session() -> FakeSession:
    return FakeSession({
        ("GET", "/schools"): (200, [ELAC, PCC]),
        ("GET", "/schools/1"): (200, ELAC),
        ("GET", "/programs"): (200, PROGRAMS),
        ("GET", "/programs/1"): (200, [PROGRAMS[0]]),
        ("GET", "/courses"): (200, COURSES),
        ("GET", "/courses/c1"): (200, COURSES[0]),
        ("GET", "/csula-courses"): (200, CSULA_COURSES),
        ("GET", "/csula-courses/h1"): (200, CSULA_COURSES[0]),
        ("GET", "/course-mapping"): (200, MAPPING),
    })


@pytest.fixture
def api(config, session) -> StarApi:
    return StarApi(config, session=session)


@pytest.fixture
def offline() -> requests.ConnectionError:
    return requests.ConnectionError("connection refused")
