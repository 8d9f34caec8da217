"""
Validation Service
Explicit validation of every inbound DTO before any side effect
"""

from typing import Any, Dict, Iterable, List, Mapping, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from expense_approvals.exceptions import ValidationError
from expense_approvals.schemas.expense import ExpenseCreate, ExpenseFilters, ExpenseStatusUpdate
from expense_approvals.schemas.user import UserCreate
from expense_approvals.utils.logger import setup_logger

logger = setup_logger()

ModelT = TypeVar("ModelT", bound=BaseModel)

# Leading loc entries FastAPI adds to name where a request value came from
REQUEST_SOURCES = {"body", "query", "path", "header", "cookie"}


def field_errors(raw_errors: Iterable[Mapping[str, Any]]) -> List[Dict[str, str]]:
    """
    Flatten pydantic errors into [{"field", "message"}] entries

    Accepts both model errors and FastAPI request errors, whose loc
    starts with the request source, e.g. ("path", "expense_id").
    """
    errors = []
    for error in raw_errors:
        loc = [str(part) for part in error.get("loc", ())]
        if len(loc) > 1 and loc[0] in REQUEST_SOURCES:
            loc = loc[1:]
        field = ".".join(loc) or "body"
        message = error["msg"]
        # pydantic prefixes messages raised from validators
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append({"field": field, "message": message})
    return errors


def validate_payload(
    model: Type[ModelT],
    payload: Union[ModelT, Mapping[str, Any], None],
) -> ModelT:
    """
    Validate a payload against a DTO

    Args:
        model: DTO class
        payload: Raw mapping or an already-built DTO instance

    Returns:
        The validated DTO

    Raises:
        ValidationError: Listing every violated field
    """
    if isinstance(payload, model):
        return payload
    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        raise ValidationError([{"field": "body", "message": "Expected an object"}])

    try:
        return model.model_validate(dict(payload))
    except PydanticValidationError as exc:
        errors = field_errors(exc.errors())
        logger.info(f"{model.__name__} validation failed: {[e['field'] for e in errors]}")
        raise ValidationError(errors) from exc


def validate_registration(payload) -> UserCreate:
    return validate_payload(UserCreate, payload)


def validate_expense_create(payload) -> ExpenseCreate:
    return validate_payload(ExpenseCreate, payload)


def validate_expense_filters(payload) -> ExpenseFilters:
    return validate_payload(ExpenseFilters, payload)


def validate_status_update(payload) -> ExpenseStatusUpdate:
    return validate_payload(ExpenseStatusUpdate, payload)
