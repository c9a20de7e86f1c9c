"""
Form fields for JSON bodies.

JSON values arrive already typed, so each field checks the type it was given
instead of coercing it: "100" is not a number, 1 is not a boolean and True
is not an id. A wrong type becomes a field error (400).
"""
from decimal import Decimal

from wtforms import BooleanField, DateField, DateTimeField, DecimalField, IntegerField, StringField


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class JSONDecimalField(DecimalField):
    """JSON number -> finite Decimal."""

    def process_formdata(self, valuelist):
        if not valuelist:
            return
        value = valuelist[0]
        if not _is_number(value):
            self.data = None
            raise ValueError(self.gettext('Must be a number.'))
        number = Decimal(str(value))
        if not number.is_finite():
            self.data = None
            raise ValueError(self.gettext('Must be a finite number.'))
        self.data = number


class JSONIntegerField(IntegerField):
    """JSON integer (booleans rejected)."""

    def process_formdata(self, valuelist):
        if not valuelist:
            return
        value = valuelist[0]
        if not isinstance(value, int) or isinstance(value, bool):
            self.data = None
            raise ValueError(self.gettext('Must be an integer.'))
        self.data = value


class JSONBooleanField(BooleanField):
    """JSON true / false only."""

    def process_formdata(self, valuelist):
        if not valuelist:
            self.data = False
            return
        value = valuelist[0]
        if not isinstance(value, bool):
            self.data = None
            raise ValueError(self.gettext('Must be true or false.'))
        self.data = value


class JSONStringField(StringField):
    """JSON string."""

    def process_formdata(self, valuelist):
        if valuelist and not isinstance(valuelist[0], str):
            self.data = None
            raise ValueError(self.gettext('Must be a string.'))
        super().process_formdata(valuelist)


class JSONDateField(DateField):
    """Date sent as a JSON string."""

    def process_formdata(self, valuelist):
        if valuelist and not isinstance(valuelist[0], str):
            self.data = None
            raise ValueError(self.gettext('Not a valid date value.'))
        super().process_formdata(valuelist)


class JSONDateTimeField(DateTimeField):
    """Date/time sent as a JSON string."""

    def process_formdata(self, valuelist):
        if valuelist and not isinstance(valuelist[0], str):
            self.data = None
            raise ValueError(self.gettext('Not a valid datetime value.'))
        super().process_formdata(valuelist)
