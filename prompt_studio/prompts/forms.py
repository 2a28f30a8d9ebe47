from wtforms import IntegerField, SelectField, StringField, TextAreaField
from wtforms.validators import DataRequired, Length, Optional

from ..api import EachLength, IdListField, JSONForm, StringListField
from ..services.prompt_builder import OUTPUT_STYLES, PROSE


class TemplateForm(JSONForm):
    title = StringField("Title", default="", validators=[Length(max=200)])
    scene_id = IntegerField("Scene", validators=[Optional()])
    character_ids = IdListField("Characters")
    event_ids = IdListField("Events")
    custom_events = StringListField("Custom events", validators=[EachLength(max=500)])
    modifiers = StringListField("Modifiers", validators=[EachLength(max=200)])
    custom_prompt = TextAreaField("Custom prompt", default="", validators=[Length(max=1000)])
    style_profile_id = IntegerField("Style profile", validators=[Optional()])
    style_preset = StringField("Style preset", default="", validators=[Length(max=500)])
    composition = StringField("Composition", default="", validators=[Length(max=500)])
    lighting = StringField("Lighting", default="", validators=[Length(max=500)])
    mood = StringField("Mood", default="", validators=[Length(max=500)])
    camera = StringField("Camera", default="", validators=[Length(max=500)])
    post_processing = StringField("Post-processing", default="", validators=[Length(max=500)])
    ai_style = StringField("AI style", default="", validators=[Length(max=200)])


class PreviewForm(TemplateForm):
    action_text = TextAreaField("Action", default="", validators=[Length(max=1000)])
    output_style = SelectField(
        "Output style",
        choices=[(style, style) for style in OUTPUT_STYLES],
        default=PROSE,
        validate_choice=True,
    )


class NarrativeForm(JSONForm):
    text = TextAreaField("Narrative", validators=[DataRequired(), Length(max=5000)])
