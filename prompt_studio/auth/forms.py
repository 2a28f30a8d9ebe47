from wtforms import PasswordField, StringField
from wtforms.validators import InputRequired, Length

from ..api import JSONForm


class LoginForm(JSONForm):
    username = StringField("Username", validators=[InputRequired(), Length(max=100)])
    password = PasswordField("Password", validators=[InputRequired(), Length(max=200)])
