"""Install the to-do service."""

from setuptools import setup, find_packages

setup(
    name='todos',
    version='0.1.0',
    packages=find_packages(exclude=['tests', 'tests.*']),
    package_data={'todos': ['config.py']},
    install_requires=[
        "flask>=3.0",
        "flask-sqlalchemy>=3.0",
        "sqlalchemy",
        "pyjwt",
        "werkzeug",
        "wtforms",
        "pytz",
        "python-json-logger>=3.1"
    ],
    extras_require={
        'test': [
            "pytest",
            "jsonschema"
        ]
    },
    zip_safe=False
)
