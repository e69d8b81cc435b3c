from typing import Any, Dict, Mapping, Tuple, Type

from pydantic import BaseModel, ValidationError

# Messages per field and pydantic error type; 'required' covers missing,
# null and blank values of required fields.
FIELD_MESSAGES: Dict[str, Dict[str, str]] = {
    'title': {'required': "Title is required"},
    'type': {
        'required': "Type is required",
        'literal_error': "Type must be Movie or TV Show",
    },
    'director': {'required': "Director is required"},
    'duration': {'required': "Duration is required"},
    'year': {
        'required': "Year is required",
        'greater_than_equal': "Year must be after 1800",
        'value_error': "Year cannot be too far in the future",
        'int_parsing': "Year must be a number",
        'int_type': "Year must be a number",
        'int_from_float': "Year must be a whole number",
    },
    'rating': {
        'greater_than_equal': "Rating must be at least 0",
        'less_than_equal': "Rating must be at most 10",
        'float_parsing': "Rating must be a number",
        'float_type': "Rating must be a number",
        'finite_number': "Rating must be a number",
    },
}

REQUIRED_ERROR_TYPES = ('missing', 'string_too_short')


def _message(name: str, error: Dict[str, Any], required: bool) -> str:
    messages = FIELD_MESSAGES.get(name, {})
    if required and (error['type'] in REQUIRED_ERROR_TYPES or error.get('input') is None):
        return messages.get('required', f"{name.capitalize()} is required")
    if error['type'] in messages:
        return messages[error['type']]
    return f"{name.capitalize()}: {error['msg']}"


def validate_data(
    schema: Type[BaseModel],
    payload: Mapping[str, Any]
) -> Tuple[Dict[str, Any], Dict[str, str]]:
    """
    Validate a candidate record against a pydantic model.

    Every failing field is reported once, with the first error pydantic
    gives for it. Keys the model does not declare are dropped.

    :param schema: model class such as MovieShowCreate
    :param payload: candidate record, e.g. a parsed JSON body or form fields
    :return: (cleaned data holding only the fields present in the payload,
              field-error map); exactly one of them is empty
    """
    try:
        model = schema.model_validate(dict(payload))
    except ValidationError as e:
        errors: Dict[str, str] = {}
        for error in e.errors():
            name = str(error['loc'][0]) if error['loc'] else '__root__'
            field = schema.model_fields.get(name)
            required = field is not None and field.is_required()
            errors.setdefault(name, _message(name, error, required))
        return {}, errors
    return model.model_dump(exclude_unset=True), {}

