import os
import re
import tempfile
from io import StringIO
from unittest import mock

from django.contrib.auth.models import AnonymousUser
from django.core.exceptions import ImproperlyConfigured
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import SimpleTestCase
from django.test.utils import override_settings
from django.urls import reverse

from sitetrack.base.tests import TestCase, create_user
from sitetrack.hotjar.conf import (
    get_snippet,
    get_tracking_settings,
    should_compact_snippet,
)
from sitetrack.hotjar.forms import HotjarSettingsForm
from sitetrack.hotjar.snippet import (
    build_snippet,
    escape_js_string,
    snippet_script_url,
)
from sitetrack.hotjar.visibility import (
    PageVisibility,
    RequestContext,
    RoleVisibility,
    TrackingSettings,
    parse_pages,
    path_matches,
    should_track,
    user_roles,
)

HOTJAR_CONFIGURED = dict(
    HOTJAR_ACCOUNT='12345',
    HOTJAR_SNIPPET_VERSION='5',
    HOTJAR_VISIBILITY_PAGES=0,
    HOTJAR_PAGES='/admin\n/admin/*',
    HOTJAR_VISIBILITY_ROLES=0,
    HOTJAR_ROLES=(),
)


def make_settings(**kwargs):
    values = dict(
        account_id='12345',
        snippet_version='5',
        page_visibility=PageVisibility.EXCLUDE_LISTED,
        pages=(),
        role_visibility=RoleVisibility.INCLUDE_LISTED_ONLY,
        roles=frozenset(),
    )
    values.update(kwargs)
    return TrackingSettings(**values)


_js_string = r'"(?:[^"\\]|\\.)*"'
_settings_literal_re = re.compile(
    r'h\._hjSettings=\{hjid:(' + _js_string + r'),hjsv:(' + _js_string + r')\};'
)


def settings_values(snippet):
    match = _settings_literal_re.search(snippet)
    assert match is not None, snippet
    return match.groups()


class TestSnippet(SimpleTestCase):
    def test_example(self):
        snippet = build_snippet('12345', '5', False)
        self.assertIn('hjid:"12345",hjsv:"5"', snippet)
        self.assertIn("'//static.hotjar.com/c/hotjar-','.js?sv='", snippet)
        self.assertTrue(
            snippet_script_url('12345', '5').endswith('hotjar-12345.js?sv=5')
        )

    def test_template(self):
        snippet = build_snippet('12345', '5', False)
        self.assertTrue(snippet.startswith('(function(h,o,t,j,a,r){\n'))
        self.assertIn('h.hj=h.hj||function(){(h.hj.q=h.hj.q||[]).push(arguments)};', snippet)
        self.assertIn('r=o.createElement(\'script\');r.async=1;', snippet)
        self.assertTrue(snippet.endswith('.js?sv=\');'))

    def test_escaping(self):
        hostile = [
            '</script><script>alert(1)</script>',
            '"};alert(1);//',
            "' + alert(1) + '",
            'a&b>c',
            '\\"',
        ]
        for value in hostile:
            for snippet in (
                build_snippet(value, value, False),
                build_snippet(value, value, True),
            ):
                for encoded in settings_values(snippet):
                    for char in '<>&\'"':
                        self.assertNotIn(char, encoded[1:-1], value)
                self.assertNotIn('</script', snippet.lower())

    def test_escape_js_string(self):
        self.assertEqual(escape_js_string('12345'), '"12345"')
        self.assertEqual(
            escape_js_string('<a href=\'x\'>"&"</a>'),
            '"\\u003Ca href=\\u0027x\\u0027\\u003E\\u0022\\u0026\\u0022\\u003C/a\\u003E"',
        )
        self.assertEqual(escape_js_string('\\"'), '"\\\\\\u0022"')
        self.assertEqual(escape_js_string('zażółć'), '"za\\u017c\\u00f3\\u0142\\u0107"')
        self.assertEqual(escape_js_string('a\nb'), '"a\\nb"')

    def test_compaction_is_whitespace_only(self):
        for account, version in [
            ('12345', '5'),
            ('a  b', 'c\nd'),
            ('<x>', '\'"'),
        ]:
            compact = build_snippet(account, version, True)
            full = build_snippet(account, version, False)
            self.assertNotIn('\n', compact)
            self.assertNotIn('  ', compact)
            self.assertEqual(
                re.sub(r'\s', '', compact), re.sub(r'\s', '', full)
            )

    def test_compact_example(self):
        snippet = build_snippet('12345', '5', True)
        self.assertIn(
            '(function(h,o,t,j,a,r){h.hj=h.hj||function(){', snippet
        )
        self.assertIn('hjid:"12345",hjsv:"5"', snippet)

    def test_deterministic(self):
        self.assertEqual(
            build_snippet('12345', '5', False), build_snippet('12345', '5', False)
        )


class TestPathMatching(SimpleTestCase):
    def test_exact(self):
        self.assertTrue(path_matches('/about', '/about'))
        self.assertFalse(path_matches('/about/', '/about'))
        self.assertFalse(path_matches('/About', '/about'))

    def test_trailing_wildcard(self):
        self.assertTrue(path_matches('/blog/post-1', '/blog/*'))
        self.assertTrue(path_matches('/blog/', '/blog/*'))
        self.assertFalse(path_matches('/blog', '/blog/*'))
        self.assertTrue(path_matches('/node/add/page', '/node/add*'))

    def test_inner_asterisk_is_literal(self):
        self.assertFalse(path_matches('/user/1/edit', '/user/*/edit'))
        self.assertTrue(path_matches('/user/*/edit', '/user/*/edit'))

    def test_front(self):
        self.assertTrue(path_matches('/', '<front>'))
        self.assertFalse(path_matches('/home', '<front>'))
        self.assertTrue(path_matches('/home', '<front>', front_path='/home'))

    def test_malformed(self):
        self.assertFalse(path_matches('/about', 'about'))
        self.assertFalse(path_matches('/about', ''))
        self.assertFalse(path_matches('/about', '   '))
        self.assertFalse(path_matches('/about', None))
        self.assertFalse(path_matches('/', '*'))

    def test_parse_pages(self):
        self.assertEqual(parse_pages(''), ())
        self.assertEqual(parse_pages(None), ())
        self.assertEqual(
            parse_pages('/a\r\n/b\r/c\n\n  /d  \n'), ('/a', '/b', '/c', '/d')
        )
        self.assertEqual(parse_pages(['/a', '', ' /b']), ('/a', '/b'))


class TestShouldTrack(SimpleTestCase):
    def test_include_listed_pages(self):
        settings = make_settings(
            page_visibility=PageVisibility.INCLUDE_LISTED_ONLY, pages=['/blog/*']
        )
        self.assertTrue(should_track(settings, RequestContext('/blog/post-1', set())))
        self.assertFalse(should_track(settings, RequestContext('/about', set())))

    def test_exclude_listed_pages(self):
        settings = make_settings(
            page_visibility=PageVisibility.EXCLUDE_LISTED,
            pages=['/admin', '/admin/*'],
        )
        self.assertFalse(should_track(settings, RequestContext('/admin', set())))
        self.assertFalse(should_track(settings, RequestContext('/admin/users', set())))
        self.assertTrue(should_track(settings, RequestContext('/about', set())))

    def test_no_pages(self):
        exclude = make_settings(page_visibility=PageVisibility.EXCLUDE_LISTED)
        include = make_settings(page_visibility=PageVisibility.INCLUDE_LISTED_ONLY)
        context = RequestContext('/about', set())
        self.assertTrue(should_track(exclude, context))
        self.assertFalse(should_track(include, context))

    def test_malformed_pages_never_match(self):
        settings = make_settings(
            page_visibility=PageVisibility.INCLUDE_LISTED_ONLY,
            pages=['about', None, ''],
        )
        self.assertFalse(should_track(settings, RequestContext('/about', set())))

    def test_front_page(self):
        settings = make_settings(
            page_visibility=PageVisibility.INCLUDE_LISTED_ONLY,
            pages=['<front>'],
            front_path='/start',
        )
        self.assertTrue(should_track(settings, RequestContext('/start', set())))
        self.assertFalse(should_track(settings, RequestContext('/', set())))

    def test_empty_roles(self):
        for mode in RoleVisibility:
            settings = make_settings(role_visibility=mode, roles=[])
            for roles in [set(), {'admin'}, {'anonymous'}]:
                self.assertTrue(should_track(settings, RequestContext('/', roles)))

    def test_exclude_listed_roles(self):
        settings = make_settings(
            role_visibility=RoleVisibility.EXCLUDE_LISTED, roles=['admin']
        )
        self.assertFalse(should_track(settings, RequestContext('/', {'admin'})))
        self.assertTrue(should_track(settings, RequestContext('/', {'editor'})))

    def test_include_listed_roles(self):
        settings = make_settings(
            role_visibility=RoleVisibility.INCLUDE_LISTED_ONLY,
            roles=['editor', 'author'],
        )
        self.assertTrue(
            should_track(settings, RequestContext('/', {'authenticated', 'author'}))
        )
        self.assertFalse(should_track(settings, RequestContext('/', {'anonymous'})))

    def test_pages_and_roles(self):
        settings = make_settings(
            page_visibility=PageVisibility.INCLUDE_LISTED_ONLY,
            pages=['/blog/*'],
            role_visibility=RoleVisibility.EXCLUDE_LISTED,
            roles=['admin'],
        )
        self.assertTrue(should_track(settings, RequestContext('/blog/1', {'editor'})))
        self.assertFalse(should_track(settings, RequestContext('/blog/1', {'admin'})))
        self.assertFalse(should_track(settings, RequestContext('/about', {'editor'})))


class TestUserRoles(TestCase):
    def test_anonymous(self):
        self.assertEqual(user_roles(AnonymousUser()), {'anonymous'})
        self.assertEqual(user_roles(None), {'anonymous'})

    def test_groups(self):
        user = create_user('editor', groups=['editor', 'author'])
        self.assertEqual(user_roles(user), {'authenticated', 'editor', 'author'})

    def test_superuser(self):
        user = create_user('admin', is_superuser=True)
        self.assertEqual(user_roles(user), {'authenticated', 'superuser'})


class TestSettingsForm(SimpleTestCase):
    def make_form(self, **kwargs):
        data = {
            'account': '12345',
            'snippet_version': '5',
            'visibility_pages': 0,
            'pages': '/admin\n/admin/*',
            'visibility_roles': 0,
            'roles': [],
        }
        data.update(kwargs)
        return HotjarSettingsForm(data=data)

    def test_valid(self):
        form = self.make_form(account=' 12345 ', pages='<front>\r\n/blog/*\n')
        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(form.cleaned_data['account'], '12345')
        self.assertEqual(form.cleaned_data['pages'], ('<front>', '/blog/*'))
        self.assertEqual(
            form.cleaned_data['visibility_pages'], PageVisibility.EXCLUDE_LISTED
        )
        self.assertEqual(
            form.cleaned_data['visibility_roles'], RoleVisibility.INCLUDE_LISTED_ONLY
        )

    def test_unprefixed_path(self):
        form = self.make_form(pages='/admin\nblog\nabout')
        self.assertFalse(form.is_valid())
        self.assertEqual(
            form.errors['pages'], ['Path "blog" not prefixed with slash.']
        )

    def test_lengths(self):
        self.assertFalse(self.make_form(account='1' * 21).is_valid())
        self.assertTrue(self.make_form(account='1' * 20).is_valid())
        self.assertFalse(self.make_form(snippet_version='1' * 11).is_valid())
        self.assertFalse(self.make_form(account='').is_valid())
        self.assertFalse(self.make_form(snippet_version='  ').is_valid())

    def test_visibility_choices(self):
        form = self.make_form(visibility_pages='1', visibility_roles=1)
        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(
            form.cleaned_data['visibility_pages'], PageVisibility.INCLUDE_LISTED_ONLY
        )
        self.assertEqual(
            form.cleaned_data['visibility_roles'], RoleVisibility.EXCLUDE_LISTED
        )
        self.assertFalse(self.make_form(visibility_pages=2).is_valid())

    def test_roles_filtered(self):
        form = self.make_form(roles=['editor', '', None, ' admin '])
        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(form.cleaned_data['roles'], {'editor', 'admin'})


class TestConf(SimpleTestCase):
    def test_not_configured(self):
        self.assertIsNone(get_tracking_settings())

    @override_settings(
        HOTJAR_ACCOUNT='12345',
        HOTJAR_SNIPPET_VERSION='5',
        HOTJAR_VISIBILITY_PAGES='include_listed_only',
        HOTJAR_PAGES=['/blog/*', '<front>'],
        HOTJAR_VISIBILITY_ROLES=RoleVisibility.EXCLUDE_LISTED,
        HOTJAR_ROLES=['admin'],
        HOTJAR_FRONT_PATH='/start',
    )
    def test_configured(self):
        tracking = get_tracking_settings()
        self.assertEqual(tracking.account_id, '12345')
        self.assertEqual(tracking.snippet_version, '5')
        self.assertEqual(tracking.page_visibility, PageVisibility.INCLUDE_LISTED_ONLY)
        self.assertEqual(tracking.pages, ('/blog/*', '<front>'))
        self.assertEqual(tracking.role_visibility, RoleVisibility.EXCLUDE_LISTED)
        self.assertEqual(tracking.roles, {'admin'})
        self.assertEqual(tracking.front_path, '/start')

    @override_settings(HOTJAR_ACCOUNT='1' * 21)
    def test_invalid(self):
        with self.assertRaises(ImproperlyConfigured) as cm:
            get_tracking_settings()
        self.assertIn('account', str(cm.exception))

    @override_settings(
        HOTJAR_ACCOUNT='12345',
        HOTJAR_VISIBILITY_PAGES=1,
        HOTJAR_PAGES=['/blog/*', 'blog', None, 7, ''],
    )
    def test_malformed_pages_kept(self):
        with self.assertLogs('sitetrack.hotjar.conf', level='WARNING'):
            tracking = get_tracking_settings()
        self.assertEqual(tracking.pages, ('/blog/*', 'blog'))
        self.assertTrue(should_track(tracking, RequestContext('/blog/1', set())))
        self.assertFalse(should_track(tracking, RequestContext('blog', set())))

    @override_settings(HOTJAR_ACCOUNT='12345', HOTJAR_ROLES='admin')
    def test_single_role_string(self):
        self.assertEqual(get_tracking_settings().roles, {'admin'})

    @override_settings(COMPRESS_ENABLED=False, HOTJAR_AGGREGATION_APPS=('pipeline',))
    def test_not_compact(self):
        self.assertFalse(should_compact_snippet())

    @override_settings(COMPRESS_ENABLED=True)
    def test_compact_with_compressor(self):
        self.assertTrue(should_compact_snippet())

    @override_settings(
        COMPRESS_ENABLED=False, HOTJAR_AGGREGATION_APPS=('django.contrib.auth',)
    )
    def test_compact_with_aggregation_app(self):
        self.assertTrue(should_compact_snippet())


class TestHotjarOnPage(TestCase):
    def test_without_hotjar(self):
        response = self.client.get(reverse('index'))
        self.assertNotContains(response, 'hotjar')

    @override_settings(**HOTJAR_CONFIGURED)
    def test_with_hotjar(self):
        response = self.client.get(reverse('index'))
        self.assertContains(
            response,
            '<script src="%s" async></script>' % reverse('hotjar_snippet'),
            html=True,
        )

    @override_settings(HOTJAR_SNIPPET_URL='/media/hotjar/hotjar.script.js', **HOTJAR_CONFIGURED)
    def test_snippet_file_url(self):
        response = self.client.get(reverse('index'))
        self.assertContains(response, 'src="/media/hotjar/hotjar.script.js"')

    @override_settings(**dict(HOTJAR_CONFIGURED, HOTJAR_PAGES='<front>'))
    def test_excluded_front_page(self):
        response = self.client.get(reverse('index'))
        self.assertNotContains(response, 'hotjar')

    @override_settings(
        **dict(HOTJAR_CONFIGURED, HOTJAR_VISIBILITY_PAGES=1, HOTJAR_PAGES='/blog/*')
    )
    def test_listed_pages_only(self):
        response = self.client.get(reverse('index'))
        self.assertNotContains(response, 'hotjar')
        response = self.client.get('/blog/post-1')
        self.assertContains(response, 'hotjar.script.js', status_code=404)

    @override_settings(
        **dict(HOTJAR_CONFIGURED, HOTJAR_VISIBILITY_ROLES=1, HOTJAR_ROLES=['editor'])
    )
    def test_excluded_role(self):
        response = self.client.get(reverse('index'))
        self.assertContains(response, 'hotjar.script.js')

        self.client.force_login(create_user('editor', groups=['editor']))
        response = self.client.get(reverse('index'))
        self.assertNotContains(response, 'hotjar')

        self.client.force_login(create_user('author', groups=['author']))
        response = self.client.get(reverse('index'))
        self.assertContains(response, 'hotjar.script.js')

    @override_settings(
        **dict(HOTJAR_CONFIGURED, HOTJAR_VISIBILITY_ROLES=0, HOTJAR_ROLES=['anonymous'])
    )
    def test_anonymous_only(self):
        response = self.client.get(reverse('index'))
        self.assertContains(response, 'hotjar.script.js')

        self.client.force_login(create_user('test_user'))
        response = self.client.get(reverse('index'))
        self.assertNotContains(response, 'hotjar')

    @override_settings(**dict(HOTJAR_CONFIGURED, HOTJAR_PAGES='/admin\nblog'))
    def test_malformed_page_pattern(self):
        response = self.client.get(reverse('index'))
        self.assertContains(response, 'hotjar.script.js')

    @override_settings(**dict(HOTJAR_CONFIGURED, HOTJAR_ACCOUNT='1' * 21))
    def test_invalid_settings(self):
        with self.assertLogs('sitetrack.hotjar.processors', level='ERROR'):
            response = self.client.get(reverse('index'))
        self.assertNotContains(response, 'hotjar')


class TestSnippetView(TestCase):
    def test_not_configured(self):
        response = self.client.get(reverse('hotjar_snippet'))
        self.assertEqual(response.status_code, 404)

    @override_settings(COMPRESS_ENABLED=False, **HOTJAR_CONFIGURED)
    def test_snippet(self):
        response = self.client.get(reverse('hotjar_snippet'))
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response['Content-Type'].startswith('application/javascript'))
        self.assertEqual(
            response.content.decode('utf-8'), build_snippet('12345', '5', False)
        )
        self.assertIn('public', response['Cache-Control'])
        self.assertIn('max-age=3600', response['Cache-Control'])

    @override_settings(COMPRESS_ENABLED=True, **HOTJAR_CONFIGURED)
    def test_compact_snippet(self):
        response = self.client.get(reverse('hotjar_snippet'))
        self.assertEqual(
            response.content.decode('utf-8'), build_snippet('12345', '5', True)
        )

    @override_settings(
        **dict(HOTJAR_CONFIGURED, HOTJAR_VISIBILITY_PAGES=1, HOTJAR_PAGES='/blog/*')
    )
    def test_served_regardless_of_visibility(self):
        response = self.client.get(reverse('hotjar_snippet'))
        self.assertEqual(response.status_code, 200)

    @override_settings(**HOTJAR_CONFIGURED)
    def test_conditional_get(self):
        response = self.client.get(reverse('hotjar_snippet'))
        etag = response['ETag']
        response = self.client.get(reverse('hotjar_snippet'), HTTP_IF_NONE_MATCH=etag)
        self.assertEqual(response.status_code, 304)

        with self.settings(HOTJAR_SNIPPET_VERSION='6'):
            response = self.client.get(
                reverse('hotjar_snippet'), HTTP_IF_NONE_MATCH=etag
            )
            self.assertEqual(response.status_code, 200)

    @override_settings(**HOTJAR_CONFIGURED)
    def test_post_not_allowed(self):
        response = self.client.post(reverse('hotjar_snippet'))
        self.assertEqual(response.status_code, 405)

    @override_settings(**HOTJAR_CONFIGURED)
    def test_head(self):
        response = self.client.head(reverse('hotjar_snippet'))
        self.assertEqual(response.status_code, 200)
        self.assertIn('ETag', response)
        self.assertEqual(response.content, b'')

    @override_settings(**HOTJAR_CONFIGURED)
    def test_snippet_built_once(self):
        with mock.patch(
            'sitetrack.hotjar.views.get_snippet', wraps=get_snippet
        ) as get_snippet_mock:
            response = self.client.get(reverse('hotjar_snippet'))
        self.assertEqual(response.status_code, 200)
        get_snippet_mock.assert_called_once()


class TestWriteSnippetCommand(SimpleTestCase):
    def setUp(self):
        self.tmp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp_dir.cleanup)

    @override_settings(COMPRESS_ENABLED=False, **HOTJAR_CONFIGURED)
    def test_write(self):
        directory = os.path.join(self.tmp_dir.name, 'hotjar')
        out = StringIO()
        call_command('write_hotjar_snippet', directory=directory, stdout=out)

        path = os.path.join(directory, 'hotjar.script.js')
        with open(path, encoding='utf-8') as f:
            self.assertEqual(f.read(), build_snippet('12345', '5', False))
        self.assertIn('Created snippet file', out.getvalue())
        self.assertEqual(os.listdir(directory), ['hotjar.script.js'])

    @override_settings(COMPRESS_ENABLED=False, **HOTJAR_CONFIGURED)
    def test_replace(self):
        directory = self.tmp_dir.name
        path = os.path.join(directory, 'hotjar.script.js')
        with open(path, 'w') as f:
            f.write('old')
        call_command('write_hotjar_snippet', directory=directory, stdout=StringIO())
        with open(path, encoding='utf-8') as f:
            self.assertIn('hjid:"12345"', f.read())

    @override_settings(**HOTJAR_CONFIGURED)
    def test_default_directory(self):
        with self.settings(HOTJAR_SNIPPET_ROOT=self.tmp_dir.name):
            call_command('write_hotjar_snippet', stdout=StringIO())
        self.assertTrue(
            os.path.exists(os.path.join(self.tmp_dir.name, 'hotjar.script.js'))
        )

    def test_not_configured(self):
        with self.assertRaises(CommandError):
            call_command('write_hotjar_snippet', directory=self.tmp_dir.name)

    @override_settings(**HOTJAR_CONFIGURED)
    def test_unwritable_directory(self):
        blocker = os.path.join(self.tmp_dir.name, 'file')
        with open(blocker, 'w') as f:
            f.write('')
        with self.assertRaises(CommandError) as cm:
            call_command(
                'write_hotjar_snippet',
                directory=os.path.join(blocker, 'hotjar'),
                stdout=StringIO(),
            )
        self.assertIn('An error occurred saving the snippet file', str(cm.exception))
