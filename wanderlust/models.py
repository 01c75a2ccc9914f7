from wanderlust import db
from datetime import datetime
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash


class User(UserMixin, db.Model):
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    listings = db.relationship('Listing', back_populates='owner')
    reviews = db.relationship('Review', back_populates='author')

    def set_password(self, password):
        # Werkzeug embeds the random salt in the hash string
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def __repr__(self):
        return f'<User {self.username}>'


class Listing(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=False)
    price = db.Column(db.Integer, nullable=False)
    location = db.Column(db.String(100), nullable=False)
    country = db.Column(db.String(100), nullable=False)
    image_url = db.Column(db.String(512))
    image_filename = db.Column(db.String(255))
    owner_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    owner = db.relationship('User', back_populates='listings')
    reviews = db.relationship(
        'Review',
        back_populates='listing',
        cascade='all, delete-orphan',
        order_by='Review.created_at',
    )

    def is_owned_by(self, user):
        return user.is_authenticated and self.owner_id == user.id

    @property
    def average_rating(self):
        if not self.reviews:
            return None
        return round(sum(r.rating for r in self.reviews) / len(self.reviews), 1)

    def __repr__(self):
        return f'<Listing {self.id} {self.title!r}>'


class Review(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    rating = db.Column(db.Integer, nullable=False)
    comment = db.Column(db.Text, nullable=False)
    author_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    listing_id = db.Column(db.Integer, db.ForeignKey('listing.id'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    author = db.relationship('User', back_populates='reviews')
    listing = db.relationship('Listing', back_populates='reviews')

    def can_be_deleted_by(self, user):
        if not user.is_authenticated:
            return False
        return self.author_id == user.id or self.listing.owner_id == user.id


class StoredSession(db.Model):
    """Server-side session record; the client only holds the signed sid."""
    __tablename__ = 'sessions'

    sid = db.Column(db.String(64), primary_key=True)
    data = db.Column(db.Text, nullable=False, default='{}')
    expires_at = db.Column(db.DateTime, nullable=False, index=True)
    touched_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def is_expired(self, now=None):
        return self.expires_at <= (now or datetime.utcnow())
