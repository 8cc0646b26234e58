from wtforms import StringField
from wtforms.validators import DataRequired, Email, Length, Optional

from ...utils.forms import ApiForm, IsoDateTimeField, strip_text, text_only


class RegisterForm(ApiForm):
    name = StringField("Name", filters=[strip_text], validators=[text_only, DataRequired(), Length(max=120)])
    email = StringField("Email", validators=[DataRequired(), Email()])
    phone = StringField("Phone", validators=[Optional(), Length(max=40)])
    appointmentTime = IsoDateTimeField("Appointment time", validators=[DataRequired()])


class ScheduleForm(ApiForm):
    id = StringField("Record ID", filters=[strip_text], validators=[text_only, DataRequired(), Length(max=64)])
    token = StringField("Scheduling token", filters=[strip_text], validators=[text_only, DataRequired(), Length(max=64)])
    appointmentTime = IsoDateTimeField("Appointment time", validators=[DataRequired()])
