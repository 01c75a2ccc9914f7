from flask import Blueprint, redirect, url_for, flash
from flask_login import login_required, current_user
from wanderlust import db
from wanderlust.decorators import get_listing_or_404, review_author_required
from wanderlust.errors import ValidationError
from wanderlust.forms import ReviewForm, form_errors
from wanderlust.models import Review
from wanderlust.routes import commit_changes
import logging

logger = logging.getLogger(__name__)

reviews_bp = Blueprint('reviews', __name__)


@reviews_bp.route('')
def index(listing_id):
    # Reviews are shown on the listing page
    get_listing_or_404(listing_id)
    return redirect(url_for('listings.show', listing_id=listing_id, _anchor='reviews'))


@reviews_bp.route('', methods=['POST'])
@login_required
def create(listing_id):
    listing = get_listing_or_404(listing_id)
    form = ReviewForm()
    if not form.validate_on_submit():
        raise ValidationError('; '.join(form_errors(form)) or 'Invalid review data.')
    review = Review(
        rating=form.rating.data,
        comment=form.comment.data,
        author_id=current_user.id,
        listing=listing,
    )
    db.session.add(review)
    commit_changes(f'new review on listing {listing.id}')
    logger.info(f"User {current_user.id} reviewed listing {listing.id}")
    flash('New Review Created!', 'success')
    return redirect(url_for('listings.show', listing_id=listing.id))


@reviews_bp.route('/<int:review_id>', methods=['DELETE'])
@login_required
@review_author_required
def destroy(listing, review):
    db.session.delete(review)
    commit_changes(f'deletion of review on listing {listing.id}')
    flash('Review Deleted!', 'success')
    return redirect(url_for('listings.show', listing_id=listing.id))
