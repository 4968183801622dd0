"""Install the storefront accounts and catalog service."""

from setuptools import setup, find_packages

setup(
    name='storefront',
    version='0.3.0',
    packages=find_packages(include=['storefront', 'storefront.*'],
                           exclude=['*tests*']),
    install_requires=[
        "flask",
        "flask-sqlalchemy",
        "sqlalchemy",
        "werkzeug",
        "wtforms",
        "email-validator",
        "pyjwt",
        "bcrypt",
        "retry",
        "pytz",
        "pycountry",
        "click",
        "python-json-logger",
        "mimesis",
    ],
    extras_require={
        'test': [
            "pytest",
            "hypothesis",
            "jsonschema",
        ]
    },
    zip_safe=False
)
