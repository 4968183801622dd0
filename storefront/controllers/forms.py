"""
Provides forms for sign-up, sign-in, account data and the catalog.

The API accepts JSON, but validation is done with plain WTForms forms. Use
:func:`to_multidict` to feed a JSON body to a form; it translates the
camelCase keys used by the storefront into the snake_case field names used
here.
"""

import re
from typing import Any, List, Optional

import pycountry
from werkzeug.datastructures import MultiDict
from wtforms import BooleanField, DecimalField, Form, IntegerField, \
    PasswordField, StringField
from wtforms.validators import Email, InputRequired, Length, NumberRange, \
    Optional as OptionalField, Regexp, ValidationError

from ..exceptions import first_error
from ..services.passwords import is_too_long

MISSING_FIELDS = 'Missing required fields'
PASSWORDS_DIFFER = 'Passwords do not match'
PASSWORD_TOO_SHORT = 'Password must be at least 8 characters long'
PASSWORD_TOO_LONG = 'Password must be at most 72 bytes long'
INVALID_EMAIL = 'Invalid email address'
CREDENTIALS_REQUIRED = 'Email and password are required'

PASSWORD_RULES = [MISSING_FIELDS, PASSWORDS_DIFFER, PASSWORD_TOO_SHORT,
                  INVALID_EMAIL, PASSWORD_TOO_LONG]
"""Which problem to report first when a password form has several."""

MIN_PASSWORD_LENGTH = 8

FALSE_VALUES = ('false', '0', '')
"""Form values that a :class:`BooleanField` reads as false."""


def _snake(key: str) -> str:
    return re.sub(r'(?<!^)([A-Z])', r'_\1', key).lower()


def to_multidict(payload: Optional[dict]) -> MultiDict:
    """
    Convert a JSON object into form data.

    Nested objects and lists are left out; they are validated separately.
    Booleans become ``'true'``/``'false'`` so that :class:`BooleanField`
    reads them correctly.
    """
    data = MultiDict()
    for key, value in (payload or {}).items():
        if value is None or isinstance(value, (dict, list)):
            continue
        if isinstance(value, bool):
            value = 'true' if value else 'false'
        data.add(_snake(key), str(value))
    return data


def form_errors(form: Form, precedence: Optional[List[str]] = None) -> str:
    """The single message to report for an invalid form."""
    errors = [message for messages in form.errors.values()
              for message in messages]
    return first_error(errors, precedence or [])


def _validate_new_password(form: Form, field: Any) -> None:
    if field.data and is_too_long(field.data):
        raise ValidationError(PASSWORD_TOO_LONG)


def _validate_confirmation(form: Form, field: Any) -> None:
    if form.password.data and field.data != form.password.data:
        raise ValidationError(PASSWORDS_DIFFER)


class SignUpForm(Form):
    """Account creation form."""

    name = StringField('Name', validators=[InputRequired(MISSING_FIELDS),
                                           Length(max=255)])
    email = StringField('Email', validators=[
        InputRequired(MISSING_FIELDS),
        Email(INVALID_EMAIL, check_deliverability=False),
        Length(max=255)
    ])
    password = PasswordField('Password', validators=[
        InputRequired(MISSING_FIELDS),
        Length(min=MIN_PASSWORD_LENGTH, message=PASSWORD_TOO_SHORT),
        _validate_new_password
    ])
    confirm_password = PasswordField('Confirm password', validators=[
        InputRequired(MISSING_FIELDS),
        _validate_confirmation
    ])
    phone = StringField('Phone', validators=[OptionalField(),
                                             Length(max=50)])


class SignInForm(Form):
    """Sign in form."""

    email = StringField('Email',
                        validators=[InputRequired(CREDENTIALS_REQUIRED)])
    password = PasswordField('Password',
                             validators=[InputRequired(CREDENTIALS_REQUIRED)])
    remember_me = BooleanField('Remember me', false_values=FALSE_VALUES)
    return_url = StringField('Return URL')


class EmailForm(Form):
    """Used to ask for a new verification e-mail, or a password reset."""

    email = StringField('Email', validators=[
        InputRequired('Email is required'),
        Email(INVALID_EMAIL, check_deliverability=False)
    ])


class ResetPasswordForm(Form):
    """Choose a new password."""

    password = PasswordField('Password', validators=[
        InputRequired(MISSING_FIELDS),
        Length(min=MIN_PASSWORD_LENGTH, message=PASSWORD_TOO_SHORT),
        _validate_new_password
    ])
    confirm_password = PasswordField('Confirm password', validators=[
        InputRequired(MISSING_FIELDS),
        _validate_confirmation
    ])


class ProfileForm(Form):
    """Edit the public profile."""

    name = StringField('Name', validators=[InputRequired('Name is required'),
                                           Length(max=255)])
    email = StringField('Email', validators=[
        InputRequired('Email is required'),
        Email(INVALID_EMAIL, check_deliverability=False),
        Length(max=255)
    ])
    phone = StringField('Phone', validators=[OptionalField(),
                                             Length(max=50)])
    image = StringField('Image', validators=[OptionalField(),
                                             Length(max=1024)])


class AddressForm(Form):
    """Shipping address."""

    name = StringField('Name', validators=[InputRequired('Name is required')])
    line1 = StringField('Address line 1',
                        validators=[InputRequired('Address is required')])
    line2 = StringField('Address line 2', validators=[OptionalField()])
    city = StringField('City', validators=[InputRequired('City is required')])
    state = StringField('State', validators=[OptionalField()])
    postal_code = StringField('Postal code', validators=[
        InputRequired('Postal code is required'),
        Length(max=32)
    ])
    country = StringField('Country',
                          validators=[InputRequired('Country is required')])
    is_default = BooleanField('Default address', false_values=FALSE_VALUES)

    def validate_country(self, field: StringField) -> None:
        """Must be an ISO 3166-1 alpha-2 code."""
        code = (field.data or '').strip().upper()
        if len(code) != 2 or pycountry.countries.get(alpha_2=code) is None:
            raise ValidationError('Invalid country code')
        field.data = code


class FavoriteForm(Form):
    """Mark a product as a favorite."""

    product_id = StringField('Product', validators=[
        InputRequired('Product id is required')
    ])


class StoreForm(Form):
    """Create a store."""

    name = StringField('Name', validators=[InputRequired('Name is required'),
                                           Length(max=255)])


class BillboardForm(Form):
    """Billboard form."""

    label = StringField('Label', validators=[
        InputRequired('Label is required'), Length(max=255)
    ])
    image_url = StringField('Image URL', validators=[
        InputRequired('Image URL is required'), Length(max=1024)
    ])


class CategoryForm(Form):
    """Category form."""

    name = StringField('Name', validators=[InputRequired('Name is required'),
                                           Length(max=255)])
    billboard_id = StringField('Billboard', validators=[
        InputRequired('Billboard id is required')
    ])


class SizeForm(Form):
    """Size form."""

    name = StringField('Name', validators=[InputRequired('Name is required'),
                                           Length(max=255)])
    value = StringField('Value', validators=[
        InputRequired('Value is required'), Length(max=255)
    ])


class ColorForm(Form):
    """Color form; the value is a hex code such as ``#ff0000``."""

    name = StringField('Name', validators=[InputRequired('Name is required'),
                                           Length(max=255)])
    value = StringField('Value', validators=[
        InputRequired('Value is required'),
        Regexp(r'^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$',
               message='Value must be a valid hex code')
    ])


class ProductForm(Form):
    """Scalar fields of a product. Images and variants are checked apart."""

    name = StringField('Name', validators=[InputRequired('Name is required'),
                                           Length(max=255)])
    price = DecimalField('Price', places=2,
                         validators=[InputRequired('Price is required')])
    category_id = StringField('Category', validators=[
        InputRequired('Category id is required')
    ])
    description = StringField('Description', validators=[
        InputRequired('Description is required')
    ])
    is_featured = BooleanField('Featured', false_values=FALSE_VALUES)
    is_archived = BooleanField('Archived', false_values=FALSE_VALUES)

    def validate_price(self, field: DecimalField) -> None:
        """Prices are positive."""
        if field.data is None or field.data <= 0:
            raise ValidationError('Price must be greater than 0')


class VariantForm(Form):
    """
    A size/color combination of a product.

    Size and color may be given either by id or by name.
    """

    product_id = StringField('Product')
    size_id = StringField('Size')
    size = StringField('Size name')
    color_id = StringField('Color')
    color = StringField('Color name')
    in_stock = IntegerField('In stock', validators=[
        InputRequired('In stock is required'),
        NumberRange(min=0, message='In stock must not be negative')
    ])

    def validate_size_id(self, field: StringField) -> None:
        """Either ``sizeId`` or ``size`` is required."""
        if not field.data and not self.size.data:
            raise ValidationError('Size is required')

    def validate_color_id(self, field: StringField) -> None:
        """Either ``colorId`` or ``color`` is required."""
        if not field.data and not self.color.data:
            raise ValidationError('Color is required')
