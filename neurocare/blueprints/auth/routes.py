from flask import current_app, jsonify
from flask_login import login_user, logout_user, login_required, current_user
from . import bp
from ...extensions import db
from .forms import LoginForm, RegisterEducatorForm, RegisterFamilyForm
from ...models.educator import EducatorProfile
from ...models.family import FamilyProfile
from ...models.user import User
from ...services.errors import ValidationError

def _form_error(form):
    raise ValidationError("Invalid form", details={"fields": form.errors})

def _create_user(form, role):
    email = form.email.data.strip().lower()
    if User.query.filter_by(email=email).first():
        raise ValidationError("An account already exists for this email", details={"field": "email"})
    user = User(email=email, role=role)
    user.set_password(form.password.data)
    db.session.add(user)
    db.session.flush()
    return user

def _me(user):
    data = {"id": user.id, "email": user.email, "role": user.role}
    if user.educator_profile:
        data["educator"] = user.educator_profile.to_dict()
    if user.family_profile:
        p = user.family_profile
        data["family"] = {"id": p.id, "first_name": p.first_name, "last_name": p.last_name}
    return data

@bp.post("/register/educator")
def register_educator():
    """Educators start in pending_documents, hidden and without badge."""
    form = RegisterEducatorForm()
    if not form.validate_on_submit():
        _form_error(form)
    user = _create_user(form, "educator")
    profile = EducatorProfile(user_id=user.id, first_name=form.first_name.data.strip(),
                              last_name=form.last_name.data.strip(), phone=form.phone.data or None,
                              profession_type=form.profession_type.data)
    profile.apply_status("pending_documents")
    db.session.add(profile)
    db.session.commit()
    current_app.logger.info("educator %s registered (%s)", profile.id, profile.profession_type)
    login_user(user)
    return jsonify(_me(user)), 201

@bp.post("/register/family")
def register_family():
    form = RegisterFamilyForm()
    if not form.validate_on_submit():
        _form_error(form)
    user = _create_user(form, "family")
    db.session.add(FamilyProfile(user_id=user.id, first_name=form.first_name.data.strip(),
                                 last_name=form.last_name.data.strip(), phone=form.phone.data or None,
                                 location=form.location.data or None))
    db.session.commit()
    login_user(user)
    return jsonify(_me(user)), 201

@bp.post("/login")
def login():
    form = LoginForm()
    if form.validate_on_submit():
        user = User.query.filter_by(email=form.email.data.strip().lower()).first()
        if user and user.check_password(form.password.data):
            login_user(user)
            return jsonify(_me(user))
    return jsonify({"error": {"error_code": "INVALID_CREDENTIALS", "message": "Invalid credentials"}}), 401

@bp.post("/logout")
@login_required
def logout():
    logout_user()
    return jsonify({"ok": True})

@bp.get("/me")
@login_required
def me():
    return jsonify(_me(current_user))
