from flask import Blueprint, render_template, redirect, url_for, flash, request, current_app
from flask_login import login_required, current_user
from sqlalchemy import or_
from wanderlust import db
from wanderlust.decorators import get_listing_or_404, listing_owner_required
from wanderlust.errors import ValidationError
from wanderlust.forms import ListingForm, ReviewForm, form_errors
from wanderlust.models import Listing
from wanderlust.routes import save_image, remove_image, commit_changes
import logging

logger = logging.getLogger(__name__)

listings_bp = Blueprint('listings', __name__)


def _validated_listing_form():
    form = ListingForm()
    if not form.validate_on_submit():
        raise ValidationError('; '.join(form_errors(form)) or 'Invalid listing data.')
    return form


def _apply_form(listing, form):
    """Copy the form onto ``listing``. Returns (new_upload, replaced_upload) filenames."""
    listing.title = form.title.data
    listing.description = form.description.data
    listing.price = form.price.data
    listing.location = form.location.data
    listing.country = form.country.data

    replaced = None
    image_url, image_filename = save_image(form.image_upload.data)
    if image_url:
        replaced = listing.image_filename
        listing.image_url, listing.image_filename = image_url, image_filename
    elif form.image_url.data and form.image_url.data != listing.image_url:
        replaced = listing.image_filename
        listing.image_url, listing.image_filename = form.image_url.data, None
    elif not listing.image_url:
        listing.image_url = current_app.config['DEFAULT_LISTING_IMAGE']
    return image_filename, replaced


@listings_bp.route('')
def index():
    query = Listing.query
    search_term = request.args.get('q', '').strip()
    if search_term:
        query = query.filter(
            or_(
                Listing.title.ilike(f'%{search_term}%'),
                Listing.location.ilike(f'%{search_term}%'),
                Listing.country.ilike(f'%{search_term}%')
            )
        )
    listings = query.order_by(Listing.created_at.desc()).all()
    return render_template('listings/index.html', listings=listings, search_term=search_term)


@listings_bp.route('/new')
@login_required
def new():
    return render_template('listings/new.html', form=ListingForm())


@listings_bp.route('', methods=['POST'])
@login_required
def create():
    form = _validated_listing_form()
    listing = Listing(owner_id=current_user.id)
    new_upload, _ = _apply_form(listing, form)
    db.session.add(listing)
    commit_changes('new listing', discard_upload=new_upload)
    logger.info(f"User {current_user.id} created listing {listing.id}")
    flash('New Listing Created!', 'success')
    return redirect(url_for('listings.show', listing_id=listing.id))


@listings_bp.route('/<int:listing_id>')
def show(listing_id):
    listing = get_listing_or_404(listing_id)
    return render_template('listings/show.html', listing=listing, review_form=ReviewForm())


@listings_bp.route('/<int:listing_id>/edit')
@login_required
@listing_owner_required
def edit(listing):
    form = ListingForm(obj=listing)
    if listing.image_filename:
        # Local uploads are not absolute URLs; blank keeps the current image
        form.image_url.data = None
    return render_template('listings/edit.html', form=form, listing=listing)


@listings_bp.route('/<int:listing_id>', methods=['PUT', 'PATCH'])
@login_required
@listing_owner_required
def update(listing):
    form = _validated_listing_form()
    new_upload, replaced = _apply_form(listing, form)
    commit_changes(f'update of listing {listing.id}', discard_upload=new_upload)
    remove_image(replaced)
    logger.info(f"User {current_user.id} updated listing {listing.id}")
    flash('Listing Updated!', 'success')
    return redirect(url_for('listings.show', listing_id=listing.id))


@listings_bp.route('/<int:listing_id>', methods=['DELETE'])
@login_required
@listing_owner_required
def destroy(listing):
    listing_id, image_filename = listing.id, listing.image_filename
    # Reviews go with the listing through the delete-orphan cascade
    db.session.delete(listing)
    commit_changes(f'deletion of listing {listing_id}')
    remove_image(image_filename)
    logger.info(f"User {current_user.id} deleted listing {listing_id}")
    flash('Listing Deleted!', 'success')
    return redirect(url_for('listings.index'))
