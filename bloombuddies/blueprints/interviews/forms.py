from wtforms import StringField
from wtforms.validators import DataRequired, Length

from ...utils.forms import ApiForm, strip_text, text_only


class TokenForm(ApiForm):
    token = StringField("Token", filters=[strip_text], validators=[text_only, DataRequired(), Length(max=128)])
