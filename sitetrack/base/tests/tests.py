from django.test import RequestFactory
from django.test.utils import override_settings
from django.urls import reverse

from sitetrack.base.tests import TestCase
from sitetrack.base.utils import request_cached


class TestIndex(TestCase):
    def test_index(self):
        response = self.client.get(reverse('index'))
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, 'sitetrack/base.js')

    @override_settings(SITE_NAME='Test site')
    def test_site_name(self):
        response = self.client.get(reverse('index'))
        self.assertContains(response, '<title>Test site</title>', html=True)

    def test_not_found(self):
        response = self.client.get('/no/such/page/')
        self.assertEqual(response.status_code, 404)
        self.assertContains(response, 'Page not found', status_code=404)


class TestRequestCached(TestCase):
    def test_called_once_per_request(self):
        calls = []

        @request_cached
        def counted(request):
            calls.append(request)
            return len(calls)

        factory = RequestFactory()
        first = factory.get('/')
        second = factory.get('/')

        self.assertEqual(counted(first), 1)
        self.assertEqual(counted(first), 1)
        self.assertEqual(counted(second), 2)
        self.assertEqual(len(calls), 2)
