"""Screen logic shared by the CLI and the TUI browser."""

from client.api import StarApi
from controllers.fields import ValidationFailure, normalize_code_list
from controllers.form import ChoiceProvider, FormController
from controllers.list_view import ListViewController
from controllers.schemas import ALL_SCHEMAS, EntitySchema
from controllers.state import InvalidTransition, StateMachine, ViewState


def list_controller(schema: EntitySchema, api: StarApi) -> ListViewController:
    """List controller wired to the schema's collection and filter source."""
    loader = None
    if schema.category_source == "schools":
        def loader():
            return [(s.id, s.name) for s in api.schools.list()]
    return ListViewController(schema, getattr(api, schema.api_attr), category_loader=loader)


def form_controller(
    schema: EntitySchema, api: StarApi, record_id=None
) -> FormController:
    return FormController(
        schema, getattr(api, schema.api_attr),
        record_id=record_id, choices=ChoiceProvider(api),
    )


__all__ = [
    "ALL_SCHEMAS",
    "ChoiceProvider",
    "EntitySchema",
    "FormController",
    "InvalidTransition",
    "ListViewController",
    "StateMachine",
    "ValidationFailure",
    "ViewState",
    "form_controller",
    "list_controller",
    "normalize_code_list",
]
