from flask import Blueprint, render_template, redirect, url_for, flash, request
from flask_login import login_user, logout_user, current_user
from wanderlust import db, login_manager
from wanderlust.errors import AuthenticationError
from wanderlust.forms import LoginForm, RegisterForm, form_errors
from wanderlust.models import User
from wanderlust.routes import commit_changes
import logging

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)


def is_safe_redirect(target):
    # Only relative paths on this site
    return bool(target) and target.startswith('/') and not target.startswith('//')


@login_manager.unauthorized_handler
def unauthorized():
    if request.method != 'GET':
        raise AuthenticationError()
    flash('You must be logged in to do that!', 'error')
    next_page = request.full_path if request.query_string else request.path
    return redirect(url_for('auth.login', next=next_page))


@auth_bp.route('/register', methods=['GET', 'POST'])
def register():
    if current_user.is_authenticated:
        return redirect(url_for('listings.index'))
    form = RegisterForm()
    if form.validate_on_submit():
        user = User(username=form.username.data, email=form.email.data)
        user.set_password(form.password.data)
        db.session.add(user)
        commit_changes('new user')
        login_user(user)
        logger.info(f"Registered user {user.username} (ID {user.id})")
        flash('Welcome to Wanderlust!', 'success')
        return redirect(url_for('listings.index'))
    if form.is_submitted():
        for message in form_errors(form):
            flash(message, 'error')
        return redirect(url_for('auth.register'))
    return render_template('users/register.html', form=form)


@auth_bp.route('/login', methods=['GET', 'POST'])
def login():
    if current_user.is_authenticated:
        return redirect(url_for('listings.index'))
    form = LoginForm()
    if form.validate_on_submit():
        user = User.query.filter_by(username=form.username.data).first()
        if user is None or not user.check_password(form.password.data):
            logger.info(f"Failed login for username {form.username.data!r}")
            flash('Invalid username or password.', 'error')
            return redirect(url_for('auth.login', next=request.args.get('next')))

        login_user(user)
        flash('Welcome back to Wanderlust!', 'success')

        next_page = request.args.get('next')
        if not is_safe_redirect(next_page):
            next_page = url_for('listings.index')
        return redirect(next_page)
    if form.is_submitted():
        flash('Invalid username or password.', 'error')
        return redirect(url_for('auth.login', next=request.args.get('next')))
    return render_template('users/login.html', form=form)


@auth_bp.route('/logout')
def logout():
    logout_user()
    flash('You are logged out!', 'success')
    return redirect(url_for('listings.index'))
