"""Forms for sales and payments."""
from flask_wtf import FlaskForm
from wtforms.validators import Length, NumberRange

from crediario.forms import IfPresent, Present
from crediario.forms.fields import (
    JSONBooleanField, JSONDateField, JSONDateTimeField, JSONDecimalField, JSONIntegerField, JSONStringField
)

# Accept plain dates and the ISO timestamps browsers send (Date.toISOString)
DATE_FORMATS = ['%Y-%m-%d', '%Y-%m-%dT%H:%M:%S', '%Y-%m-%dT%H:%M:%S.%fZ', '%Y-%m-%dT%H:%M:%SZ']

# Largest amount a Numeric(12, 2) column holds
MAX_AMOUNT = 9999999999.99


class SaleForm(FlaskForm):
    """Body of POST /sales."""

    class Meta:
        csrf = False

    value = JSONDecimalField(
        'value',
        validators=[
            Present(message='Value is required'),
            NumberRange(min=0, max=MAX_AMOUNT, message='Value must be between 0 and 9999999999.99')
        ],
        places=2
    )

    description = JSONStringField(
        'description',
        validators=[Length(max=500)],
        default=''
    )

    isPaid = JSONBooleanField('isPaid', default=False)

    dueDate = JSONDateField(
        'dueDate',
        validators=[Present(message='Due date is required')],
        format=DATE_FORMATS
    )

    clientId = JSONIntegerField(
        'clientId',
        validators=[Present(message='Client is required')]
    )


class SaleUpdateForm(FlaskForm):
    """Body of PATCH /sales/<id>; every field optional."""

    class Meta:
        csrf = False

    value = JSONDecimalField(
        'value',
        validators=[IfPresent(), NumberRange(min=0, max=MAX_AMOUNT, message='Value must be between 0 and 9999999999.99')],
        places=2
    )
    description = JSONStringField('description', validators=[IfPresent(), Length(max=500)])
    isPaid = JSONBooleanField('isPaid', validators=[IfPresent()])
    dueDate = JSONDateField('dueDate', validators=[IfPresent()], format=DATE_FORMATS)
    clientId = JSONIntegerField('clientId', validators=[IfPresent()])


class PaymentForm(FlaskForm):
    """Body of POST /sales/<id>/payments."""

    class Meta:
        csrf = False

    value = JSONDecimalField(
        'value',
        validators=[
            Present(message='Value is required'),
            NumberRange(min=0.01, max=MAX_AMOUNT, message='Value must be greater than 0')
        ],
        places=2
    )

    payDate = JSONDateTimeField('payDate', validators=[IfPresent()], format=DATE_FORMATS)
