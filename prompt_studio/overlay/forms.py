from flask_wtf.file import FileField
from wtforms import IntegerField, StringField
from wtforms.validators import Length, Optional

from ..api import JSONForm

FALSE_VALUES = {"false", "0", "no", "off"}


class UploadForm(JSONForm):
    image = FileField("Image")
    template_id = IntegerField("Template", validators=[Optional()])
    set_active = StringField("Show on overlay", default="true")

    @property
    def activate(self) -> bool:
        return (self.set_active.data or "true").strip().lower() not in FALSE_VALUES


class CaptionForm(JSONForm):
    caption = StringField("Caption", default="", validators=[Length(max=500)])
