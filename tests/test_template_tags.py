"""
Template tags, filters and context processors.
"""

from django.contrib.auth.models import AnonymousUser
from django.template import Context, Template
from django.test import RequestFactory, SimpleTestCase, TestCase, override_settings

from apps.updates.context_processors import feed_settings, user_permissions
from apps.updates.templatetags import update_tags
from .helpers import FakeUser, make_record, make_user


# =============================================================================
# Filters
# =============================================================================

class FilterTests(SimpleTestCase):

    def test_status_display(self):
        self.assertEqual(update_tags.status_display('in-progress'), 'In Progress')
        self.assertEqual(update_tags.status_display('reopen'), 'Reopened')
        self.assertEqual(update_tags.status_display('mystery'), 'mystery')

    def test_status_class(self):
        self.assertEqual(update_tags.status_class('blocked'), 'status-blocked')
        self.assertEqual(update_tags.status_class('mystery'), '')

    def test_can_edit(self):
        record = make_record('completed')
        self.assertTrue(update_tags.can_edit(record, FakeUser('admin')))
        self.assertFalse(update_tags.can_edit(record, FakeUser('user')))
        self.assertFalse(update_tags.can_edit(record, None))
        self.assertFalse(update_tags.can_edit(None, FakeUser('admin')))


# =============================================================================
# Simple Tags
# =============================================================================

class BadgeTests(SimpleTestCase):

    def test_status_badge(self):
        html = update_tags.status_badge(make_record('completed'))
        self.assertIn('bg-green-100', html)
        self.assertIn('Completed', html)

    def test_priority_badge(self):
        self.assertIn('bg-red-100', update_tags.priority_badge(make_record(priority='High')))

    def test_blocker_badge(self):
        self.assertEqual(update_tags.blocker_badge(make_record()), '')
        html = update_tags.blocker_badge(
            make_record(blocker_type='Dependency', blocker_description='Needs <api> keys')
        )
        self.assertIn('Dependency', html)
        self.assertIn('Needs &lt;api&gt; keys', html)

    def test_tags_load_in_templates(self):
        template = Template('{% load update_tags %}{% status_badge update %}{{ update.status|status_class }}')
        html = template.render(Context({'update': make_record('to-do')}))
        self.assertIn('To Do', html)
        self.assertIn('status-to-do', html)


# =============================================================================
# Context Processors
# =============================================================================

class ContextProcessorTests(TestCase):

    def setUp(self):
        self.factory = RequestFactory()

    def test_anonymous_user(self):
        request = self.factory.get('/')
        request.user = AnonymousUser()
        self.assertEqual(user_permissions(request), {'is_admin': False, 'is_manager_or_above': False})

    def test_roles(self):
        request = self.factory.get('/')
        for role, expected in (('user', (False, False)), ('manager', (False, True)), ('admin', (True, True))):
            with self.subTest(role=role):
                request.user = make_user(role)
                context = user_permissions(request)
                self.assertEqual((context['is_admin'], context['is_manager_or_above']), expected)

    @override_settings(FEED_POLL_INTERVAL=45)
    def test_feed_settings(self):
        self.assertEqual(feed_settings(self.factory.get('/')), {'feed_poll_interval': 45})
