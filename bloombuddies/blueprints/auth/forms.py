from wtforms import PasswordField, SelectField, StringField
from wtforms.validators import AnyOf, DataRequired, Email, EqualTo, Length, Optional

from ...utils.forms import ApiForm, text_only

ROLES = ("user", "admin")
PASSWORD_RULES = [DataRequired(), Length(min=8, max=128)]


class LoginForm(ApiForm):
    email = StringField("Email", validators=[DataRequired(), Email()])
    password = PasswordField("Password", validators=[DataRequired()])


class ForgotPasswordForm(ApiForm):
    email = StringField("Email", validators=[DataRequired(), Email()])


class ResetPasswordForm(ApiForm):
    token = StringField("Reset token", validators=[text_only, DataRequired(), Length(max=128)])
    password = PasswordField("Password", validators=PASSWORD_RULES)


class ChangePasswordForm(ApiForm):
    currentPassword = PasswordField("Current password", validators=[DataRequired()])
    password = PasswordField("New password", validators=PASSWORD_RULES)
    confirm = PasswordField("Confirm", validators=[Optional(), EqualTo("password")])


class UserForm(ApiForm):
    email = StringField("Email", validators=[DataRequired(), Email()])
    name = StringField("Name", validators=[Optional(), Length(max=120)])
    password = PasswordField("Password", validators=PASSWORD_RULES)
    role = SelectField("Role", choices=[("user", "User"), ("admin", "Admin")], default="user")


class UserUpdateForm(ApiForm):
    email = StringField("Email", validators=[Optional(), Email()])
    name = StringField("Name", validators=[Optional(), Length(max=120)])
    password = PasswordField("Password", validators=[Optional(), Length(min=8, max=128)])
    role = StringField("Role", validators=[Optional(), AnyOf(ROLES)])
