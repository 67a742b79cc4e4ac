from django.contrib.auth.models import Group, User
from django.test import TestCase as DjangoTestCase
from unittest import mock

class TestCase(DjangoTestCase):

    def setUp(self):
        csrf_patch = mock.patch(
            'django.middleware.csrf.get_token',
            mock.Mock(return_value='deterministicToken')
        )

        csrf_patch.start()
        self.addCleanup(csrf_patch.stop)


def create_user(username, groups=(), is_superuser=False, password='password'):
    """Creates a user belonging to the given auth groups.

    Groups are created on demand, so tests can refer to roles by name only.
    """
    user = User.objects.create_user(
        username=username, password=password, is_superuser=is_superuser
    )
    for name in groups:
        group, _created = Group.objects.get_or_create(name=name)
        user.groups.add(group)
    return user
