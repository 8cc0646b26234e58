from ...utils.forms import ApiForm, IsoDateTimeField
from wtforms.validators import DataRequired


class RescheduleForm(ApiForm):
    appointmentTime = IsoDateTimeField("Appointment time", validators=[DataRequired()])
