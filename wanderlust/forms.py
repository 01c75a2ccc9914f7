from flask_wtf import FlaskForm
from flask_wtf.file import FileField, FileAllowed
from wtforms import StringField, TextAreaField, SubmitField, PasswordField, IntegerField
from wtforms.validators import DataRequired, InputRequired, Email, Length, EqualTo, NumberRange, Optional, URL, ValidationError
from wanderlust.models import User

ALLOWED_IMAGE_EXTENSIONS = ['jpg', 'jpeg', 'png']


class ListingForm(FlaskForm):
    title = StringField('Title', validators=[DataRequired(), Length(max=100)])
    description = TextAreaField('Description', validators=[DataRequired(), Length(max=2000)])
    # InputRequired so that a price of 0 is accepted
    price = IntegerField('Price', validators=[InputRequired(), NumberRange(min=0, message='Price must be a non-negative number.')])
    location = StringField('Location', validators=[DataRequired(), Length(max=100)])
    country = StringField('Country', validators=[DataRequired(), Length(max=100)])
    image_url = StringField('Image URL', validators=[Optional(), URL(), Length(max=512)], render_kw={"placeholder": "https://example.com/photo.jpg"})
    image_upload = FileField('Upload Image', validators=[FileAllowed(ALLOWED_IMAGE_EXTENSIONS, 'Images only!')])
    submit = SubmitField('Save Listing')


class ReviewForm(FlaskForm):
    rating = IntegerField('Rating', validators=[InputRequired(), NumberRange(min=1, max=5, message='Rating must be between 1 and 5.')])
    comment = TextAreaField('Comment', validators=[DataRequired(), Length(max=1000)])
    submit = SubmitField('Submit Review')


class LoginForm(FlaskForm):
    username = StringField('Username', validators=[DataRequired()])
    password = PasswordField('Password', validators=[DataRequired()])
    submit = SubmitField('Log In')


class RegisterForm(FlaskForm):
    username = StringField('Username', validators=[DataRequired(), Length(min=3, max=80)])
    email = StringField('Email', validators=[DataRequired(), Email()])
    password = PasswordField('Password', validators=[DataRequired(), Length(min=6)])
    confirm_password = PasswordField('Confirm Password', validators=[DataRequired(), EqualTo('password')])
    submit = SubmitField('Sign Up')

    def validate_username(self, field):
        if User.query.filter_by(username=field.data).first():
            raise ValidationError('A user with the given username is already registered.')

    def validate_email(self, field):
        if User.query.filter_by(email=field.data).first():
            raise ValidationError('Email already registered.')


def form_errors(form):
    """Flatten WTForms errors into 'Field: message' strings."""
    messages = []
    for name, errors in form.errors.items():
        label = form[name].label.text if name in form else name
        for error in errors:
            messages.append(f"{label}: {error}")
    return messages
