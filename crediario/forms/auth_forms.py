"""Forms for login and store selection."""
from flask_wtf import FlaskForm

from crediario.forms import IfPresent, Present
from crediario.forms.fields import JSONIntegerField, JSONStringField


class LoginForm(FlaskForm):
    """Body of POST /auth/login."""

    class Meta:
        csrf = False

    email = JSONStringField('email', validators=[Present(message='Email is required')])
    password = JSONStringField('password', validators=[Present(message='Password is required')])
    storeId = JSONIntegerField('storeId', validators=[IfPresent()])


class SelectStoreForm(FlaskForm):
    """Body of POST /auth/select-store."""

    class Meta:
        csrf = False

    storeId = JSONIntegerField('storeId', validators=[Present(message='Store is required')])
