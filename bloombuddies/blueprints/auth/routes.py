from urllib.parse import urlencode

from flask import current_app, jsonify
from flask_login import login_required, current_user
from . import bp
from ...extensions import db
from .forms import ChangePasswordForm, ForgotPasswordForm, LoginForm, ResetPasswordForm, UserForm, UserUpdateForm
from ...jobs.notify import queue_user_email
from ...models.user import User
from ...services.tokens import issue_access_token
from ...utils.decorators import admin_required
from ...utils.forms import form_error


@bp.post("/login")
def login():
    form = LoginForm()
    if not form.validate_on_submit():
        return form_error(form)

    user = User.find_by_email(form.email.data)
    if user and user.is_locked():
        return jsonify({"error": "Too many failed attempts. Please try again later."}), 429
    if not user or not user.check_password(form.password.data):
        if user:
            user.record_login(False, current_app.config["MAX_LOGIN_ATTEMPTS"], current_app.config["LOCKOUT_MINUTES"])
            db.session.commit()
        current_app.logger.info("failed login for %s", form.email.data)
        return jsonify({"error": "Invalid credentials"}), 401

    user.record_login(True, current_app.config["MAX_LOGIN_ATTEMPTS"], current_app.config["LOCKOUT_MINUTES"])
    db.session.commit()
    return jsonify({"token": issue_access_token(user), "user": user.to_dict()})


@bp.get("/me")
@login_required
def me():
    return jsonify({"user": current_user.to_dict()})


@bp.post("/forgot-password")
def forgot_password():
    form = ForgotPasswordForm()
    if not form.validate_on_submit():
        return form_error(form)

    user = User.find_by_email(form.email.data)
    if user:
        ttl = current_app.config["RESET_TOKEN_TTL_MINUTES"]
        raw = user.issue_reset_token(ttl)
        db.session.commit()
        link = f"{current_app.config['FRONTEND_URL'].rstrip('/')}/dashboard/reset-password.html?{urlencode({'token': raw})}"
        queue_user_email("password_reset", user, reset_link=link, ttl_minutes=ttl)
    else:
        current_app.logger.info("password reset requested for unknown email %s", form.email.data)
    # same answer either way so the endpoint does not reveal which emails exist
    return jsonify({"success": True, "message": "If that account exists, a reset link has been sent."})


@bp.post("/reset-password")
def reset_password():
    form = ResetPasswordForm()
    if not form.validate_on_submit():
        return form_error(form)

    user = User.find_by_reset_token(form.token.data)
    if not user:
        return jsonify({"success": False, "error": "Invalid or expired reset token"}), 400
    user.set_password(form.password.data)
    user.clear_reset_token()
    user.failed_logins = 0
    user.locked_until = None
    db.session.commit()
    queue_user_email("password_changed", user)
    return jsonify({"success": True})


@bp.post("/change-password")
@login_required
def change_password():
    form = ChangePasswordForm()
    if not form.validate_on_submit():
        return form_error(form)
    if not current_user.check_password(form.currentPassword.data):
        return jsonify({"success": False, "error": "Current password is incorrect"}), 400
    current_user.set_password(form.password.data)
    db.session.commit()
    queue_user_email("password_changed", current_user)
    return jsonify({"success": True})


@bp.get("/users")
@admin_required
def users_index():
    users = User.query.order_by(User.created_at.desc(), User.id.desc()).all()
    return jsonify({"users": [u.to_dict() for u in users]})


@bp.post("/users")
@admin_required
def create_user():
    form = UserForm()
    if not form.validate_on_submit():
        return form_error(form)
    if User.find_by_email(form.email.data):
        return jsonify({"error": "User already exists"}), 409
    user = User(email=form.email.data.strip().lower(), name=form.name.data or None, role=form.role.data)
    user.set_password(form.password.data)
    db.session.add(user)
    db.session.commit()
    return jsonify({"user": user.to_dict()}), 201


@bp.put("/users/<int:user_id>")
@admin_required
def update_user(user_id):
    user = db.get_or_404(User, user_id)
    form = UserUpdateForm()
    if not form.validate_on_submit():
        return form_error(form)
    if form.email.data:
        other = User.find_by_email(form.email.data)
        if other and other.id != user.id:
            return jsonify({"error": "Another user already has that email"}), 409
        user.email = form.email.data.strip().lower()
    if form.name.data:
        user.name = form.name.data
    if form.role.data:
        user.role = form.role.data
    if form.password.data:
        user.set_password(form.password.data)
    db.session.commit()
    return jsonify({"user": user.to_dict()})


@bp.delete("/users/<int:user_id>")
@admin_required
def delete_user(user_id):
    user = db.get_or_404(User, user_id)
    if user.id == current_user.id:
        return jsonify({"error": "You cannot delete your own account"}), 400
    db.session.delete(user)
    db.session.commit()
    return jsonify({"success": True})
