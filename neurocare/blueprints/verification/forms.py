from flask_wtf import FlaskForm
from flask_wtf.file import FileField, FileRequired, FileAllowed
from wtforms import StringField
from wtforms.validators import Optional, Length

UPLOAD_EXTENSIONS = ["pdf", "jpg", "jpeg", "png"]

class DocumentUploadForm(FlaskForm):
    file = FileField("Document", validators=[FileRequired(), FileAllowed(UPLOAD_EXTENSIONS, "PDF, JPG ou PNG uniquement")])

class DiplomaAnalyzeForm(FlaskForm):
    file = FileField("Diplôme", validators=[FileRequired(), FileAllowed(UPLOAD_EXTENSIONS, "PDF, JPG ou PNG uniquement")])

class DiplomaForm(FlaskForm):
    file = FileField("Diplôme", validators=[FileRequired(), FileAllowed(UPLOAD_EXTENSIONS, "PDF, JPG ou PNG uniquement")])
    diploma_number = StringField("Numéro de diplôme", validators=[Optional(), Length(max=64)])
    delivery_date = StringField("Date de délivrance", validators=[Optional(), Length(max=64)])
    # required only for DREETS professions, checked by the service
    region = StringField("Région", validators=[Optional(), Length(max=80)])
