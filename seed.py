from dotenv import load_dotenv

load_dotenv()

from wanderlust import db, create_app  # noqa: E402
from wanderlust.models import User, Listing  # noqa: E402

app = create_app()

SAMPLE_LISTINGS = [
    {
        'title': 'Cozy Beachfront Cottage',
        'description': 'Escape to this charming beachfront cottage for a relaxing getaway.',
        'image_url': 'https://images.unsplash.com/photo-1552733407-5d5c46c3bb3b?w=800',
        'price': 1500,
        'location': 'Malibu',
        'country': 'United States',
    },
    {
        'title': 'Modern Loft in Downtown',
        'description': 'Stay in the heart of the city in this stylish loft apartment.',
        'image_url': 'https://images.unsplash.com/photo-1501785888041-af3ef285b470?w=800',
        'price': 1200,
        'location': 'New York City',
        'country': 'United States',
    },
    {
        'title': 'Mountain Retreat',
        'description': 'Unplug and unwind in this peaceful mountain cabin.',
        'image_url': 'https://images.unsplash.com/photo-1571896349842-33c89424de2d?w=800',
        'price': 1000,
        'location': 'Aspen',
        'country': 'United States',
    },
    {
        'title': 'Historic Villa in Tuscany',
        'description': 'Experience the charm of Tuscany in this beautifully restored villa.',
        'image_url': 'https://images.unsplash.com/photo-1566073771259-6a8506099945?w=800',
        'price': 2500,
        'location': 'Florence',
        'country': 'Italy',
    },
]


def seed_demo_user():
    user = User.query.filter_by(username='demo').first()
    if not user:
        user = User(username='demo', email='demo@example.com')
        user.set_password('demo123')
        db.session.add(user)
        db.session.commit()
        print("Demo user created: username=demo, password=demo123")
    return user


def seed_listings(owner):
    for data in SAMPLE_LISTINGS:
        if not Listing.query.filter_by(title=data['title']).first():
            db.session.add(Listing(owner_id=owner.id, **data))
    db.session.commit()


with app.app_context():
    try:
        owner = seed_demo_user()
        seed_listings(owner)
        print("Database seeded successfully!")
    except Exception as e:
        print(f"Seeding failed: {str(e)}")
        db.session.rollback()
        raise
