from wtforms import StringField, TextAreaField
from wtforms.validators import DataRequired, Length

from ..api import JSONForm


class SceneForm(JSONForm):
    title = StringField("Title", validators=[DataRequired(), Length(max=200)])
    description = TextAreaField("Description", validators=[DataRequired(), Length(max=2000)])
    tags = StringField("Tags", default="", validators=[Length(max=500)])


class CharacterForm(JSONForm):
    name = StringField("Name", validators=[DataRequired(), Length(max=100)])
    description = TextAreaField("Description", validators=[DataRequired(), Length(max=1000)])
    appearance = TextAreaField("Appearance", default="", validators=[Length(max=1000)])
    tags = StringField("Tags", default="", validators=[Length(max=500)])


class EventForm(JSONForm):
    description = StringField("Description", validators=[DataRequired(), Length(max=500)])
    type = StringField("Type", default="action", validators=[Length(max=100)])
    tags = StringField("Tags", default="", validators=[Length(max=200)])


class StyleProfileForm(JSONForm):
    name = StringField("Name", validators=[DataRequired(), Length(max=200)])
    style_preset = StringField("Style preset", default="", validators=[Length(max=500)])
    composition = StringField("Composition", default="", validators=[Length(max=500)])
    lighting = StringField("Lighting", default="", validators=[Length(max=500)])
    mood = StringField("Mood", default="", validators=[Length(max=500)])
    camera = StringField("Camera", default="", validators=[Length(max=500)])
    post_processing = StringField("Post-processing", default="", validators=[Length(max=500)])
    ai_style = StringField("AI style", default="", validators=[Length(max=200)])
