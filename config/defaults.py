from config.schema import AppConfig, Theme


# Marker code for external courses whose equivalency is not decided yet.
SENTINEL_COURSE_CODE = "READY 0001"

# Home-institution departments offered in the CSULA course form.
CSULA_DEPARTMENTS: list[dict[str, str]] = [
    {"id": "EE", "name": "Electrical and Computer Engineering"},
    {"id": "CS", "name": "Computer Science"},
]

TERM_OPTIONS: list[str] = ["Fall", "Spring", "Summer", "Winter"]

# Characters allowed in free-text code lists ("ENGR 10, ENG 10").
CODE_LIST_ALLOWED = r"A-Za-z0-9, _-"

HOME_INSTITUTION_NAME = "CalState LA"


def department_name(dept_id: str) -> str:
    """Display name of a home department; empty string for unknown ids."""
    for dep in CSULA_DEPARTMENTS:
        if dep["id"] == dept_id:
            return dep["name"]
    return ""


def default_app_config() -> AppConfig:
    """Configuration used when no config file exists yet."""
    return AppConfig(
        api_base_url="http://localhost:3001/api",
        request_timeout=10.0,
        theme=Theme.LIGHT,
    )
