"""HTTP access to the STAR REST resources.

Every operation is exactly one request: no retry, no batching, no auth
headers. All failures (transport, non-2xx, undecodable body, invalid
record) surface as ApiError with a user-facing message.
"""

from __future__ import annotations

import logging
from typing import Any, Generic, Optional, Type, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from config.schema import AppConfig
from models import Course, CsulaCourse, MappingResponse, Program, School

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class ApiError(Exception):
    """A failed request. message is safe to show to the user."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status

    @property
    def is_not_found(self) -> bool:
        return self.status == 404


def _server_message(response) -> Optional[str]:
    """The backend's {"error": "..."} text, if the body carries one."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return None


class RemoteCollection(Generic[T]):
    """CRUD access to one REST resource, decoding into model records."""

    def __init__(
        self,
        resource: str,
        model: Type[T],
        config: AppConfig,
        entity: str,
        plural: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        self.resource = resource
        self.model = model
        self.config = config
        self.entity = entity
        self.plural = plural or f"{entity}s"
        self.session = session if session is not None else requests.Session()

    # ─── Transport ───

    def _request(
        self,
        method: str,
        segments: tuple,
        failure: str,
        json: Any = None,
        params: Optional[dict] = None,
        expect_body: bool = True,
    ) -> Any:
        url = self.config.url_for(self.resource, *segments)
        logger.debug(f"{method} {url} params={params}")
        try:
            response = self.session.request(
                method, url, json=json, params=params,
                timeout=self.config.request_timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"{method} {url} failed: {e}")
            raise ApiError(failure) from e

        if not response.ok:
            message = _server_message(response) or failure
            logger.warning(f"{method} {url} -> {response.status_code}: {message}")
            raise ApiError(message, status=response.status_code)

        if not expect_body or not response.text.strip():
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.warning(f"{method} {url}: response is not JSON")
            raise ApiError(failure, status=response.status_code) from e

    def _decode(self, data: Any, failure: str) -> T:
        try:
            return self.model.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Invalid {self.entity} record: {e}")
            raise ApiError(failure) from e

    def _decode_list(self, data: Any, failure: str) -> list[T]:
        if not isinstance(data, list):
            raise ApiError(failure)
        return [self._decode(item, failure) for item in data]

    # ─── Operations ───

    def list(self) -> list[T]:
        failure = f"Failed to fetch {self.plural}."
        return self._decode_list(self._request("GET", (), failure), failure)

    def list_under(self, *segments, **params) -> list[T]:
        """GET a sub-collection, e.g. /programs/{schoolId}."""
        failure = f"Failed to fetch {self.plural}."
        data = self._request("GET", segments, failure, params=params or None)
        return self._decode_list(data, failure)

    def fetch(self, failure: Optional[str] = None, **params) -> T:
        """GET the resource itself as one record, e.g. a query envelope."""
        failure = failure or f"Failed to fetch {self.entity}."
        data = self._request("GET", (), failure, params=params or None)
        if not isinstance(data, dict):
            raise ApiError(failure)
        return self._decode(data, failure)

    def get(self, record_id: str) -> T:
        failure = f"Failed to fetch {self.entity} details."
        data = self._request("GET", (record_id,), failure)
        # Some routes answer a lookup with a one-element list.
        if isinstance(data, list):
            if not data:
                raise ApiError(f"{self.entity.capitalize()} not found.", status=404)
            data = data[0]
        if data is None:
            raise ApiError(f"{self.entity.capitalize()} not found.", status=404)
        return self._decode(data, failure)

    def create(self, payload: dict) -> Optional[T]:
        """POST a new record. Returns the stored record when the body is one."""
        data = self._request("POST", (), f"Failed to add {self.entity}.", json=payload)
        return self._maybe_decode(data)

    def update(self, record_id: str, payload: dict) -> Optional[T]:
        data = self._request(
            "PUT", (record_id,), f"Failed to update {self.entity}.", json=payload
        )
        return self._maybe_decode(data)

    def delete(self, record_id: str) -> None:
        self._request(
            "DELETE", (record_id,), f"Failed to delete {self.entity}.",
            expect_body=False,
        )

    def _maybe_decode(self, data: Any) -> Optional[T]:
        # Write routes answer with the record, a status message or nothing.
        if not isinstance(data, dict):
            return None
        try:
            return self.model.model_validate(data)
        except ValidationError:
            logger.debug(f"{self.entity} write response is not a record: {data}")
            return None


class StarApi:
    """All STAR resources behind one HTTP session."""

    def __init__(self, config: AppConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session if session is not None else requests.Session()
        self.schools: RemoteCollection[School] = RemoteCollection(
            "schools", School, config, "school", session=self.session)
        self.programs: RemoteCollection[Program] = RemoteCollection(
            "programs", Program, config, "program", session=self.session)
        self.courses: RemoteCollection[Course] = RemoteCollection(
            "courses", Course, config, "course", session=self.session)
        self.csula_courses: RemoteCollection[CsulaCourse] = RemoteCollection(
            "csula-courses", CsulaCourse, config, "course", session=self.session)
        self._mapping: RemoteCollection[MappingResponse] = RemoteCollection(
            "course-mapping", MappingResponse, config, "mapping data",
            plural="mapping data", session=self.session)

    def programs_of_school(self, school_id: str) -> list[Program]:
        return self.programs.list_under(school_id)

    def course_mapping(self, school_id: str, department: str) -> MappingResponse:
        """GET /course-mapping?s_id=&dept= as one envelope."""
        return self._mapping.fetch(
            failure="Failed to fetch mapping data", s_id=school_id, dept=department
        )
