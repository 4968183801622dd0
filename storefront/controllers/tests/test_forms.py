"""Tests for :mod:`storefront.controllers.forms`."""

from unittest import TestCase

from .. import forms


class TestToMultidict(TestCase):
    """JSON bodies become form data."""

    def test_keys_and_values(self):
        data = forms.to_multidict({
            'confirmPassword': 'foo',
            'rememberMe': True,
            'isDefault': False,
            'inStock': 3,
            'phone': None,
            'images': [{'url': '/a.png'}],
        })
        self.assertEqual(data.get('confirm_password'), 'foo')
        self.assertEqual(data.get('remember_me'), 'true')
        self.assertEqual(data.get('is_default'), 'false')
        self.assertEqual(data.get('in_stock'), '3')
        self.assertNotIn('phone', data)
        self.assertNotIn('images', data)

    def test_no_payload(self):
        self.assertEqual(len(forms.to_multidict(None)), 0)

    def test_numeric_flags(self):
        """JSON 0 and 1 are read as false and true by boolean fields."""
        form = forms.SignInForm(forms.to_multidict({
            'email': 'a@b.co', 'password': 'password123', 'rememberMe': 0
        }))
        self.assertFalse(form.remember_me.data)
        form = forms.SignInForm(forms.to_multidict({
            'email': 'a@b.co', 'password': 'password123', 'rememberMe': 1
        }))
        self.assertTrue(form.remember_me.data)
        form = forms.ProductForm(forms.to_multidict({
            'isFeatured': 0, 'isArchived': 0
        }))
        self.assertFalse(form.is_featured.data)
        self.assertFalse(form.is_archived.data)


class TestSignUpForm(TestCase):
    """Only one message is reported, in a fixed order."""

    def _error(self, **payload):
        form = forms.SignUpForm(forms.to_multidict(payload))
        self.assertFalse(form.validate())
        return forms.form_errors(form, forms.PASSWORD_RULES)

    def test_missing_beats_everything(self):
        self.assertEqual(
            self._error(email='nope', password='short',
                        confirmPassword='other'),
            forms.MISSING_FIELDS
        )

    def test_mismatch_beats_length(self):
        self.assertEqual(
            self._error(name='A', email='a@example.com', password='short',
                        confirmPassword='other'),
            forms.PASSWORDS_DIFFER
        )

    def test_too_short(self):
        self.assertEqual(
            self._error(name='A', email='a@example.com', password='short',
                        confirmPassword='short'),
            forms.PASSWORD_TOO_SHORT
        )

    def test_bad_email(self):
        self.assertEqual(
            self._error(name='A', email='not-an-email',
                        password='password123',
                        confirmPassword='password123'),
            forms.INVALID_EMAIL
        )

    def test_too_long(self):
        password = 'a' * 73
        self.assertEqual(
            self._error(name='A', email='a@example.com', password=password,
                        confirmPassword=password),
            forms.PASSWORD_TOO_LONG
        )

    def test_valid(self):
        form = forms.SignUpForm(forms.to_multidict({
            'name': 'Alice', 'email': 'alice@example.com',
            'password': 'password123', 'confirmPassword': 'password123'
        }))
        self.assertTrue(form.validate())


class TestAddressForm(TestCase):
    """Countries are ISO 3166-1 alpha-2 codes."""

    def _form(self, country):
        return forms.AddressForm(forms.to_multidict({
            'name': 'Home', 'line1': '1 Main St', 'city': 'Ithaca',
            'postalCode': '14850', 'country': country
        }))

    def test_valid_country(self):
        form = self._form('us')
        self.assertTrue(form.validate())
        self.assertEqual(form.country.data, 'US')

    def test_invalid_country(self):
        for country in ['XX', 'USA', 'United States']:
            form = self._form(country)
            self.assertFalse(form.validate())
            self.assertEqual(forms.form_errors(form), 'Invalid country code')


class TestCatalogForms(TestCase):
    """Catalog input rules."""

    def test_color_value(self):
        form = forms.ColorForm(forms.to_multidict({'name': 'Red',
                                                   'value': 'red'}))
        self.assertFalse(form.validate())
        form = forms.ColorForm(forms.to_multidict({'name': 'Red',
                                                   'value': '#F00'}))
        self.assertTrue(form.validate())

    def test_price(self):
        form = forms.ProductForm(forms.to_multidict({
            'name': 'Tee', 'price': 0, 'categoryId': 'c',
            'description': 'A shirt'
        }))
        self.assertFalse(form.validate())
        self.assertEqual(forms.form_errors(form),
                         'Price must be greater than 0')

    def test_variant_by_name_or_id(self):
        form = forms.VariantForm(forms.to_multidict({
            'size': 'Small', 'colorId': 'c1', 'inStock': 2
        }))
        self.assertTrue(form.validate())

        form = forms.VariantForm(forms.to_multidict({'color': 'Red',
                                                     'inStock': 2}))
        self.assertFalse(form.validate())
        self.assertEqual(forms.form_errors(form), 'Size is required')

    def test_negative_stock(self):
        form = forms.VariantForm(forms.to_multidict({
            'sizeId': 's1', 'colorId': 'c1', 'inStock': -1
        }))
        self.assertFalse(form.validate())
