from flask import jsonify
from flask_wtf import FlaskForm
from wtforms import StringField
from wtforms.validators import StopValidation

from ..services.window import parse_timestamp


class ApiForm(FlaskForm):
    """FlaskForm fed from the JSON body; the API is token-authenticated, so no CSRF."""

    class Meta:
        csrf = False


class IsoDateTimeField(StringField):
    """ISO-8601 timestamp, stored as an aware UTC datetime."""

    def _value(self):
        return self.data.isoformat() if self.data else ""

    def process_formdata(self, valuelist):
        if not valuelist or valuelist[0] in (None, ""):
            self.data = None
            return
        try:
            self.data = parse_timestamp(valuelist[0])
        except (TypeError, ValueError):
            self.data = None
            raise ValueError(self.gettext("Not a valid ISO-8601 timestamp."))


def form_error(form, message="Invalid request"):
    return jsonify({"error": message, "errors": form.errors}), 400


def strip_text(value):
    return value.strip() if isinstance(value, str) else value


def text_only(form, field):
    # JSON bodies can carry numbers or objects where a string is expected
    if field.data is not None and not isinstance(field.data, str):
        raise StopValidation("Must be a string.")
