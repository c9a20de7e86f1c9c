"""Forms for the client registry."""
import re

from flask_wtf import FlaskForm
from wtforms.validators import Length, ValidationError

from crediario.forms import IfPresent, Present
from crediario.forms.fields import JSONDateField, JSONStringField
from crediario.forms.sale_forms import DATE_FORMATS


def digits_only(value):
    """Strip formatting characters from a phone number."""
    if value is None:
        return None
    return re.sub(r'\D', '', value)


def _strip(value):
    if value is None:
        return None
    return value.strip()


def _valid_phone(form, field):
    if field.data is None:
        return
    if not 10 <= len(field.data) <= 11:
        raise ValidationError('Invalid phone number')


class ClientForm(FlaskForm):
    """Body of POST /clients."""

    class Meta:
        csrf = False

    name = JSONStringField(
        'name',
        validators=[Present(message='Name is required'), Length(min=3, max=200, message='Name must have at least 3 characters')],
        filters=[_strip]
    )

    phone = JSONStringField(
        'phone',
        validators=[Present(message='Phone is required'), _valid_phone],
        filters=[digits_only]
    )

    birthDate = JSONDateField(
        'birthDate',
        validators=[Present(message='Birth date is required')],
        format=DATE_FORMATS
    )

    observations = JSONStringField('observations', validators=[IfPresent()], filters=[_strip])


class ClientUpdateForm(FlaskForm):
    """Body of PATCH /clients/<id>; every field optional."""

    class Meta:
        csrf = False

    name = JSONStringField(
        'name',
        validators=[IfPresent(), Length(min=3, max=200, message='Name must have at least 3 characters')],
        filters=[_strip]
    )
    phone = JSONStringField('phone', validators=[IfPresent(), _valid_phone], filters=[digits_only])
    birthDate = JSONDateField('birthDate', validators=[IfPresent()], format=DATE_FORMATS)
    observations = JSONStringField('observations', validators=[IfPresent()], filters=[_strip])
