from flask import Blueprint, redirect, url_for, send_from_directory, current_app
from werkzeug.utils import secure_filename
from sqlalchemy.exc import SQLAlchemyError
from wanderlust import db
from wanderlust.errors import InfrastructureError
import os
import logging
import uuid

logger = logging.getLogger(__name__)

main_bp = Blueprint('main', __name__)

ALLOWED_EXTENSIONS = {'jpg', 'jpeg', 'png'}


def allowed_file(filename):
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


def save_image(file):
    """Store an uploaded image under a unique name. Returns (url, filename) or (None, None)."""
    if not file or not file.filename or not allowed_file(file.filename):
        return None, None
    upload_folder = current_app.config['UPLOAD_FOLDER']
    os.makedirs(upload_folder, exist_ok=True)
    filename = secure_filename(f"{uuid.uuid4()}_{file.filename}")
    save_path = os.path.join(upload_folder, filename)
    logger.debug(f"Attempting to save image to {save_path}")
    try:
        file.save(save_path)
    except OSError as e:
        logger.error(f"Error saving image to {save_path}: {e}")
        raise InfrastructureError('Could not save the uploaded image.') from e
    return url_for('main.uploaded_file', filename=filename), filename


def remove_image(filename):
    if not filename:
        return
    path = os.path.join(current_app.config['UPLOAD_FOLDER'], filename)
    try:
        os.remove(path)
        logger.debug(f"Removed image {path}")
    except FileNotFoundError:
        logger.warning(f"Image already gone: {path}")


def commit_changes(action, discard_upload=None):
    """Commit the unit of work. On failure, roll back and delete ``discard_upload`` from disk."""
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error committing {action} to database: {e}")
        remove_image(discard_upload)
        raise InfrastructureError() from e


@main_bp.route('/')
def index():
    return redirect(url_for('listings.index'))


@main_bp.route('/uploads/<path:filename>')
def uploaded_file(filename):
    # Missing files raise NotFound, which the error handler renders as a 404 page
    absolute_upload_folder = os.path.abspath(current_app.config['UPLOAD_FOLDER'])
    return send_from_directory(absolute_upload_folder, filename)
