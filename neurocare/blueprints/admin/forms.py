from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField, DateTimeLocalField, SelectField
from wtforms.validators import DataRequired, Optional, Length

DATETIME_FORMATS = ["%Y-%m-%dT%H:%M", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M"]

class RejectForm(FlaskForm):
    reason = TextAreaField("Motif", validators=[DataRequired(message="A rejection reason is required"), Length(max=2000)])

class ScheduleInterviewForm(FlaskForm):
    interview_date = DateTimeLocalField("Date de l'entretien", format=DATETIME_FORMATS,
                                        validators=[DataRequired(message="An interview date is required")])
    notes = TextAreaField("Notes", validators=[Optional()])

class AdminNotesForm(FlaskForm):
    notes = TextAreaField("Notes", validators=[Optional()])
    interview_date = DateTimeLocalField("Date de l'entretien", format=DATETIME_FORMATS, validators=[Optional()])

class DiplomaReviewForm(FlaskForm):
    status = SelectField("Décision", choices=[("verified", "Vérifié"), ("rejected", "Refusé")],
                         validators=[DataRequired()])
    reason = StringField("Motif", validators=[Optional(), Length(max=2000)])
