from django.conf import settings

from sitetrack.base.tests import pytest_plugin as base_plugin


def pytest_addoption(parser):
    parser.addoption(
        '--strict-template-vars', action='store_true', help="Raise errors for undefined template variables")


# called for running each test
def pytest_runtest_setup(item):
    base_plugin.pytest_runtest_setup(item)


def pytest_configure(config):
    if config.getoption("--strict-template-vars"):
        # this will raise an error if a template variable is not defined
        settings.TEMPLATES[0]['OPTIONS']['string_if_invalid'] = '{% templatetag openvariable %} INVALID_VAR: %s {% templatetag closevariable %}'
