"""Helpers shared by the JSON blueprints: payload parsing, form binding and error bodies."""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from flask import jsonify, request
from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms import Field
from wtforms.validators import ValidationError


def json_payload() -> Dict[str, Any]:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def _form_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def json_formdata(payload: Mapping[str, Any]) -> MultiDict:
    """Flatten a JSON object into form data; arrays become repeated keys and nulls are dropped."""

    data = MultiDict()
    for key, value in payload.items():
        if value is None or isinstance(value, dict):
            continue
        if isinstance(value, (list, tuple)):
            for item in value:
                if item is not None:
                    data.add(key, _form_value(item))
        else:
            data.add(key, _form_value(value))
    return data


class JSONForm(FlaskForm):
    class Meta:
        # CSRFProtect checks the X-CSRFToken header before the view runs.
        csrf = False

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "JSONForm":
        return cls(formdata=json_formdata(payload))

    def present_fields(self, payload: Mapping[str, Any]) -> List[str]:
        return [name for name in self._fields if payload.get(name) is not None]

    def validate_partial(self, names: Iterable[str]) -> bool:
        """Run validators for ``names`` only, as a partial update requires."""

        valid = True
        for name in names:
            if not self[name].validate(self):
                valid = False
        return valid

    def values(self, names: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        names = list(self._fields) if names is None else list(names)
        return {name: self[name].data for name in names}


class IdListField(Field):
    """A JSON array of integer ids."""

    def __init__(self, label=None, validators=None, **kwargs):
        kwargs.setdefault("default", list)
        super().__init__(label, validators, **kwargs)

    def process_formdata(self, valuelist):
        ids = []
        for raw in valuelist:
            try:
                ids.append(int(raw))
            except (TypeError, ValueError):
                self.data = []
                raise ValueError("Must be a list of integer ids.")
        self.data = ids


class StringListField(Field):
    """A JSON array of strings; blank entries are dropped."""

    def __init__(self, label=None, validators=None, **kwargs):
        kwargs.setdefault("default", list)
        super().__init__(label, validators, **kwargs)

    def process_formdata(self, valuelist):
        self.data = [value.strip() for value in valuelist if value and value.strip()]


class EachLength:
    def __init__(self, max: int):
        self.max = max

    def __call__(self, form, field):
        for value in field.data or []:
            if len(value) > self.max:
                raise ValidationError(f"Entries must be at most {self.max} characters long.")


def first_error(errors: Mapping[str, Any]) -> Tuple[str, str]:
    for name, messages in errors.items():
        if isinstance(messages, dict):
            messages = [message for nested in messages.values() for message in nested]
        if messages:
            return name, str(messages[0])
    return "", "Invalid request"


def validation_error(errors: Mapping[str, Any]):
    field, message = first_error(errors)
    return (
        jsonify({"error": f"{field}: {message}" if field else message, "field": field, "errors": dict(errors)}),
        400,
    )


def error_response(message: str, status: int = 400):
    return jsonify({"error": message}), status


def not_found(label: str):
    return error_response(f"{label} not found", 404)


def page_args() -> Tuple[Optional[str], Optional[int], Optional[int]]:
    return (
        request.args.get("search"),
        request.args.get("limit", type=int),
        request.args.get("offset", type=int),
    )
