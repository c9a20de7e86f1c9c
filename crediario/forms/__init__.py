"""
JSON-backed forms.

Request bodies are JSON objects; they are flattened into a MultiDict and fed
to Flask-WTF forms so field-level validation reads the same as classic forms.
"""
from flask import request
from werkzeug.datastructures import MultiDict
from wtforms.validators import StopValidation

from crediario.exceptions import ValidationError


class Present:
    """
    Like DataRequired, but 0 and False count as provided values.

    JSON numbers arrive untouched, so a sale of value 0 must still pass.
    """
    field_flags = {'required': True}

    def __init__(self, message=None):
        self.message = message

    def __call__(self, form, field):
        if field.raw_data and field.raw_data[0] not in (None, ''):
            return
        message = self.message or field.gettext('This field is required.')
        field.errors[:] = []
        raise StopValidation(message)



class IfPresent:
    """
    Skip the remaining validators when the key is absent from the body.

    Unlike wtforms' Optional, an empty string is still validated, so a
    partial update can clear a text field but not a date or a number.
    """
    field_flags = {'optional': True}

    def __call__(self, form, field):
        if not field.raw_data:
            field.errors[:] = []
            raise StopValidation()


def json_formdata():
    """Return the JSON body as a MultiDict; nulls are treated as absent."""
    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError({'body': ['Expected a JSON object.']})
    # One value per key, even when the value is a JSON array
    return MultiDict([(key, value) for key, value in payload.items() if value is not None])


def validate_json(form_class, **kwargs):
    """
    Build form_class from the JSON body and validate it.

    Raises:
        ValidationError: with the form's field errors.
    """
    form = form_class(formdata=json_formdata(), **kwargs)
    if not form.validate():
        raise ValidationError(form.errors)
    return form


def provided_fields(form):
    """Names of fields whose key is present in the submitted body (for partial updates)."""
    return {name for name, field in form._fields.items() if field.raw_data}
