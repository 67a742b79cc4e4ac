# -*- coding: utf-8 -*-

from setuptools import find_packages, setup

requirements = [
    "Django>=5.2,<5.3",
    "beautifulsoup4>=4.12,<4.13",
    "django-compressor>=4.5,<4.6",
]

test_requirements = [
    "pytest>=7.2,<8.0",
    "pytest-cov>=4.0,<5.0",
    "pytest-django>=4.11,<5.0",
    "pytest-xdist>=3.2,<4.0",
]

setup(
    name='sitetrack',
    version='0.1.0.dev',
    description='Hotjar tracking snippet generation and visibility rules for Django sites',
    author='The sitetrack Team',
    install_requires=requirements,
    extras_require={
        'test': test_requirements,
    },
    packages=find_packages(exclude=['ez_setup']),
    include_package_data=True,
    package_data={
        'sitetrack': [
            'base/templates/*.html',
            'base/static/sitetrack/*.js',
            'hotjar/templates/hotjar/*.html',
        ],
    },
)
