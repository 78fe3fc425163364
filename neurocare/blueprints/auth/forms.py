from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField, SelectField
from wtforms.validators import DataRequired, Email, Length, Optional

from ...services.professions import PROFESSION_CHOICES

class _RegisterForm(FlaskForm):
    email = StringField("Email", validators=[DataRequired(), Email(), Length(max=255)])
    password = PasswordField("Mot de passe", validators=[DataRequired(), Length(min=8)])
    first_name = StringField("Prénom", validators=[DataRequired(), Length(max=120)])
    last_name = StringField("Nom", validators=[DataRequired(), Length(max=120)])
    phone = StringField("Téléphone", validators=[Optional(), Length(max=40)])

class RegisterEducatorForm(_RegisterForm):
    profession_type = SelectField("Profession", choices=PROFESSION_CHOICES, default="educator")

class RegisterFamilyForm(_RegisterForm):
    location = StringField("Ville", validators=[Optional(), Length(max=200)])

class LoginForm(FlaskForm):
    email = StringField("Email", validators=[DataRequired(), Email()])
    password = PasswordField("Password", validators=[DataRequired()])
