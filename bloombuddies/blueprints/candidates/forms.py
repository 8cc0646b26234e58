from wtforms import StringField, TextAreaField
from wtforms.validators import Length, Optional, ValidationError

from ...services.dashboard import canonical_status
from ...services.store import STATUSES
from ...utils.forms import ApiForm


class CandidateUpdateForm(ApiForm):
    status = StringField("Status", validators=[Optional(), Length(max=30)])
    nextAction = TextAreaField("Next action", validators=[Optional(), Length(max=2000)])
    availability = TextAreaField("Availability", validators=[Optional(), Length(max=2000)])

    def validate_status(self, field):
        if canonical_status(field.data) not in STATUSES:
            raise ValidationError(f"Status must be one of: {', '.join(STATUSES)}")
