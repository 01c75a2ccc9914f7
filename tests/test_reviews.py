# tests/test_reviews.py

from wanderlust import db
from wanderlust.models import Review
from helpers import create_test_user, create_test_listing, create_test_review, login, redirect_path, last_flash


def test_create_review(auth_client, app, owner_id):
    with app.app_context():
        listing_id = create_test_listing(owner_id)
    response = auth_client.post(f'/listings/{listing_id}/reviews', data={'rating': '5', 'comment': 'Amazing views'})
    assert response.status_code == 302
    assert redirect_path(response) == f'/listings/{listing_id}'
    assert last_flash(auth_client) == ('success', 'New Review Created!')

    with app.app_context():
        review = Review.query.one()
        assert review.rating == 5
        assert review.author_id == owner_id
        assert review.listing_id == listing_id

    page = auth_client.get(f'/listings/{listing_id}')
    assert b"Amazing views" in page.data
    assert b"@owner" in page.data


def test_review_rating_out_of_range_is_rejected(auth_client, app, owner_id):
    with app.app_context():
        listing_id = create_test_listing(owner_id)
    response = auth_client.post(f'/listings/{listing_id}/reviews', data={'rating': '9', 'comment': 'Too good'})
    assert response.status_code == 400
    assert b"Rating must be between 1 and 5." in response.data
    with app.app_context():
        assert Review.query.count() == 0


def test_review_requires_comment(auth_client, app, owner_id):
    with app.app_context():
        listing_id = create_test_listing(owner_id)
    response = auth_client.post(f'/listings/{listing_id}/reviews', data={'rating': '3'})
    assert response.status_code == 400


def test_review_on_missing_listing_is_404(auth_client):
    response = auth_client.post('/listings/9999/reviews', data={'rating': '4', 'comment': 'Ghost house'})
    assert response.status_code == 404


def test_anonymous_review_is_unauthorized(client, app, owner_id):
    with app.app_context():
        listing_id = create_test_listing(owner_id)
    response = client.post(f'/listings/{listing_id}/reviews', data={'rating': '4', 'comment': 'Nice'})
    assert response.status_code == 401
    with app.app_context():
        assert Review.query.count() == 0


def test_reviews_index_redirects_to_listing(client, app, owner_id):
    with app.app_context():
        listing_id = create_test_listing(owner_id)
    response = client.get(f'/listings/{listing_id}/reviews')
    assert response.status_code == 302
    assert redirect_path(response) == f'/listings/{listing_id}'


def test_author_deletes_review(client, app, owner_id):
    with app.app_context():
        listing_id = create_test_listing(owner_id)
        author_id = create_test_user(username='author')
        review_id = create_test_review(listing_id, author_id)
    login(client, 'author', 'password')
    response = client.post(f'/listings/{listing_id}/reviews/{review_id}?_method=DELETE')
    assert response.status_code == 302
    assert redirect_path(response) == f'/listings/{listing_id}'
    assert last_flash(client) == ('success', 'Review Deleted!')
    with app.app_context():
        assert db.session.get(Review, review_id) is None


def test_listing_owner_deletes_review(auth_client, app, owner_id):
    with app.app_context():
        listing_id = create_test_listing(owner_id)
        author_id = create_test_user(username='author')
        review_id = create_test_review(listing_id, author_id)
    response = auth_client.delete(f'/listings/{listing_id}/reviews/{review_id}')
    assert response.status_code == 302
    with app.app_context():
        assert db.session.get(Review, review_id) is None


def test_third_party_cannot_delete_review(client, app, owner_id):
    with app.app_context():
        listing_id = create_test_listing(owner_id)
        author_id = create_test_user(username='author')
        review_id = create_test_review(listing_id, author_id)
        create_test_user(username='bystander')
    login(client, 'bystander', 'password')
    response = client.delete(f'/listings/{listing_id}/reviews/{review_id}')
    assert response.status_code == 403
    assert b"You are not the author of this review." in response.data
    with app.app_context():
        assert db.session.get(Review, review_id) is not None


def test_review_must_belong_to_listing(auth_client, app, owner_id):
    with app.app_context():
        listing_id = create_test_listing(owner_id)
        other_listing_id = create_test_listing(owner_id, title='Elsewhere')
        review_id = create_test_review(other_listing_id, owner_id)
    response = auth_client.delete(f'/listings/{listing_id}/reviews/{review_id}')
    assert response.status_code == 404
    with app.app_context():
        assert db.session.get(Review, review_id) is not None
