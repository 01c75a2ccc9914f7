# tests/helpers.py
# Shared helpers; callers wrap the database helpers in app.app_context().

from urllib.parse import urlparse, parse_qs
from wanderlust import db
from wanderlust.models import User, Listing, Review

LISTING_DATA = {
    'title': 'Cozy Beachfront Cottage',
    'description': 'Escape to this charming beachfront cottage.',
    'price': '1500',
    'location': 'Malibu',
    'country': 'United States',
}


def create_test_user(username='testuser', email=None, password='password'):
    """Add a user to the test database and return its ID."""
    if email is None:
        email = f"{username}@example.com"
    user = User.query.filter_by(username=username).first()
    if user:
        return user.id
    user = User(username=username, email=email)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user.id


def create_test_listing(owner_id, **overrides):
    data = dict(LISTING_DATA, price=1500, image_url='https://example.com/cottage.jpg')
    data.update(overrides)
    listing = Listing(owner_id=owner_id, **data)
    db.session.add(listing)
    db.session.commit()
    return listing.id


def create_test_review(listing_id, author_id, rating=4, comment='Lovely stay'):
    review = Review(listing_id=listing_id, author_id=author_id, rating=rating, comment=comment)
    db.session.add(review)
    db.session.commit()
    return review.id


def login(client, username, password, next_page=None):
    path = '/login' if next_page is None else f'/login?next={next_page}'
    return client.post(path, data=dict(username=username, password=password), follow_redirects=False)


def redirect_path(response):
    return urlparse(response.headers.get('Location', '')).path


def redirect_query(response):
    return parse_qs(urlparse(response.headers.get('Location', '')).query)


def last_flash(client):
    with client.session_transaction() as sess:
        flashes = sess.get('_flashes', [])
    return tuple(flashes[-1]) if flashes else None
