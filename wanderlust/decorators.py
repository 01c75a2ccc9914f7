# wanderlust/decorators.py
from functools import wraps
from flask_login import current_user
from wanderlust import db
from wanderlust.errors import NotFoundError, ForbiddenError
from wanderlust.models import Listing, Review


def get_listing_or_404(listing_id):
    listing = db.session.get(Listing, listing_id)
    if listing is None:
        raise NotFoundError('Listing you requested for does not exist!')
    return listing


def listing_owner_required(func):
    """
    Decorator for views taking a ``listing_id``: loads the listing and ensures
    the current user owns it. Missing listings raise NotFoundError (404),
    anyone else raises ForbiddenError (403) before the view touches the database.
    The loaded listing is passed to the view as ``listing``.
    """
    @wraps(func)
    def decorated_view(listing_id, *args, **kwargs):
        listing = get_listing_or_404(listing_id)
        if not listing.is_owned_by(current_user):
            raise ForbiddenError('You are not the owner of this listing.')
        return func(listing, *args, **kwargs)
    return decorated_view


def review_author_required(func):
    """Same idea for reviews: the review author or the listing owner may proceed."""
    @wraps(func)
    def decorated_view(listing_id, review_id, *args, **kwargs):
        listing = get_listing_or_404(listing_id)
        review = db.session.get(Review, review_id)
        if review is None or review.listing_id != listing.id:
            raise NotFoundError('Review not found.')
        if not review.can_be_deleted_by(current_user):
            raise ForbiddenError('You are not the author of this review.')
        return func(listing, review, *args, **kwargs)
    return decorated_view
