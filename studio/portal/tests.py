"""
Test suite for the client portal
Tests: access links, public progress, caching, asset redirects and link expiry
"""
from datetime import timedelta
from io import StringIO
from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient
from studio.approvals.models import ClientApprovalVersion, ClientApprovalAsset
from studio.core.models import AuditLog
from studio.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from studio.portal.models import ClientAccessToken, ClientAccessLog
from studio.portal.progress import client_phase_status
from studio.projects.models import Stage


class ClientAccessTokenTests(TestCase):
    """Test staff management of client links"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.project = TestDataFactory.create_project(name='Harbor House')

    def test_create_link(self):
        response = self.client.post(f'/api/v1/projects/{self.project.id}/client-access/',
                                    {'name': 'Homeowners'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['active'])
        self.assertEqual(response.data['access_count'], 0)
        self.assertTrue(response.data['url'].endswith(f"/api/v1/client-progress/{response.data['token']}/"))
        self.assertTrue(AuditLog.objects.filter(action='portal_token_create').exists())

    def test_list_links(self):
        TestDataFactory.create_access_token(self.project)
        TestDataFactory.create_access_token(TestDataFactory.create_project())
        response = self.client.get(f'/api/v1/projects/{self.project.id}/client-access/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_revoke_link_is_audited(self):
        token = TestDataFactory.create_access_token(self.project)
        response = self.client.patch(f'/api/v1/client-access/{token.id}/', {'active': False}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['active'])
        self.assertTrue(AuditLog.objects.filter(action='portal_token_revoke', object_id=str(token.id)).exists())

    def test_token_value_is_read_only(self):
        token = TestDataFactory.create_access_token(self.project)
        original = token.token
        self.client.patch(f'/api/v1/client-access/{token.id}/', {'token': 'guessable'}, format='json')
        token.refresh_from_db()
        self.assertEqual(token.token, original)

    def test_tokens_are_unique(self):
        first = TestDataFactory.create_access_token(self.project)
        second = TestDataFactory.create_access_token(self.project)
        self.assertNotEqual(first.token, second.token)
        self.assertGreaterEqual(len(first.token), 40)


class ClientProgressTests(TestCase):
    """Test the public progress view"""

    def setUp(self):
        self.anonymous = APIClient()
        self.project = TestDataFactory.create_project(name='Harbor House')
        self.room = TestDataFactory.create_room(self.project, room_type='KITCHEN')
        self.token = TestDataFactory.create_access_token(self.project)

    def _url(self, token_value=None):
        return f'/api/v1/client-progress/{token_value or self.token.token}/'

    def test_progress_without_login(self):
        response = self.anonymous.get(self._url())
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['name'], 'Harbor House')
        self.assertEqual(len(response.data['rooms']), 1)
        self.assertEqual(len(response.data['rooms'][0]['phases']), 5)
        self.assertIsNone(response.data['rooms'][0]['ffe_stats'])

    def test_access_is_recorded(self):
        self.anonymous.get(self._url(), HTTP_USER_AGENT='Mozilla/5.0')
        self.anonymous.get(self._url())
        self.token.refresh_from_db()
        self.assertEqual(self.token.access_count, 2)
        self.assertIsNotNone(self.token.last_accessed_at)
        self.assertEqual(ClientAccessLog.objects.filter(token=self.token, action='VIEW_PROGRESS').count(), 2)

    def test_unknown_token(self):
        response = self.anonymous.get(self._url('does-not-exist'))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_inactive_token(self):
        ClientAccessToken.objects.filter(pk=self.token.pk).update(active=False)
        response = self.anonymous.get(self._url())
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_expired_token(self):
        ClientAccessToken.objects.filter(pk=self.token.pk).update(expires_at=timezone.now() - timedelta(days=1))
        response = self.anonymous.get(self._url())
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(ClientAccessLog.objects.count(), 0)

    def test_not_applicable_phases_are_hidden(self):
        Stage.objects.filter(room=self.room, type='DRAWINGS').update(status='NOT_APPLICABLE')
        response = self.anonymous.get(self._url())
        phases = [p['type'] for p in response.data['rooms'][0]['phases']]
        self.assertNotIn('DRAWINGS', phases)
        self.assertEqual(len(phases), 4)

    def test_payload_refreshes_after_stage_save(self):
        self.anonymous.get(self._url())
        stage = TestDataFactory.get_stage(self.room, 'DESIGN_CONCEPT')

        # Queryset updates send no signals, so the cached payload is served
        Stage.objects.filter(pk=stage.pk).update(status='ON_HOLD')
        response = self.anonymous.get(self._url())
        self.assertEqual(response.data['rooms'][0]['phases'][0]['status'], 'PENDING')

        stage.refresh_from_db()
        stage.status = 'COMPLETED'
        stage.completed_at = timezone.now()
        stage.save()
        response = self.anonymous.get(self._url())
        self.assertEqual(response.data['rooms'][0]['phases'][0]['status'], 'COMPLETED')

    def test_client_phase_status(self):
        self.assertEqual(client_phase_status('COMPLETED'), 'COMPLETED')
        self.assertEqual(client_phase_status('NOT_STARTED'), 'PENDING')
        self.assertEqual(client_phase_status('ON_HOLD'), 'IN_PROGRESS')
        self.assertEqual(client_phase_status('IN_PROGRESS'), 'IN_PROGRESS')

    def test_payload_refreshes_after_preset_items_added(self):
        response = self.anonymous.get(self._url())
        self.assertIsNone(response.data['rooms'][0]['ffe_stats'])

        designer = AuthenticatedAPIClient()
        designer.authenticate_user(TestDataFactory.create_user())
        response = designer.post(f'/api/v1/rooms/{self.room.id}/ffe/sections/',
                                 {'name': 'Lighting', 'use_presets': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.anonymous.get(self._url())
        self.assertEqual(response.data['rooms'][0]['ffe_stats']['considered'], 4)


class ClientProgressAssetTests(TestCase):
    """Test asset redirects for approved renderings"""

    def setUp(self):
        self.anonymous = APIClient()
        self.project = TestDataFactory.create_project()
        self.room = TestDataFactory.create_room(self.project)
        self.token = TestDataFactory.create_access_token(self.project)
        rendering = TestDataFactory.create_rendering(TestDataFactory.get_stage(self.room, 'THREE_D'))
        self.asset = rendering.assets.first()
        self.version = ClientApprovalVersion.objects.create(
            stage=TestDataFactory.get_stage(self.room, 'CLIENT_APPROVAL'),
            rendering_version=rendering,
            version='V1',
            status='SENT_TO_CLIENT',
        )
        ClientApprovalAsset.objects.create(version=self.version, asset=self.asset)

    def _url(self):
        return f'/api/v1/client-progress/{self.token.token}/assets/{self.asset.id}/'

    def test_unapproved_asset_is_hidden(self):
        response = self.anonymous.get(self._url())
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_approved_asset_redirects(self):
        self.version.status = 'CLIENT_APPROVED'
        self.version.client_decision = 'APPROVED'
        self.version.client_decided_at = timezone.now()
        self.version.save()

        response = self.anonymous.get(self._url())
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response['Location'], self.asset.url)
        self.assertTrue(ClientAccessLog.objects.filter(token=self.token, action='VIEW_ASSET').exists())

        progress = self.anonymous.get(f'/api/v1/client-progress/{self.token.token}/')
        approved = progress.data['rooms'][0]['approved_renderings']
        self.assertEqual(len(approved), 1)
        self.assertEqual(approved[0]['assets'][0]['id'], self.asset.id)

    def test_asset_left_out_of_email_is_hidden(self):
        ClientApprovalAsset.objects.filter(version=self.version, asset=self.asset).update(include_in_email=False)
        self.version.status = 'CLIENT_APPROVED'
        self.version.client_decision = 'APPROVED'
        self.version.client_decided_at = timezone.now()
        self.version.save()

        response = self.anonymous.get(self._url())
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(ClientAccessLog.objects.filter(token=self.token, action='VIEW_ASSET').exists())

    def test_asset_of_other_project(self):
        self.version.status = 'CLIENT_APPROVED'
        self.version.save()
        other_token = TestDataFactory.create_access_token(TestDataFactory.create_project())
        response = self.anonymous.get(f'/api/v1/client-progress/{other_token.token}/assets/{self.asset.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class DeactivateExpiredTokensCommandTests(TestCase):
    """Test the deactivate_expired_tokens management command"""

    def setUp(self):
        project = TestDataFactory.create_project()
        self.expired = TestDataFactory.create_access_token(project, expires_at=timezone.now() - timedelta(hours=1))
        self.current = TestDataFactory.create_access_token(project, expires_at=timezone.now() + timedelta(days=7))
        self.open_ended = TestDataFactory.create_access_token(project)

    def test_dry_run_changes_nothing(self):
        out = StringIO()
        call_command('deactivate_expired_tokens', '--dry-run', stdout=out)
        self.assertIn('1 expired link(s) would be deactivated', out.getvalue())
        self.expired.refresh_from_db()
        self.assertTrue(self.expired.active)

    def test_deactivates_expired_links(self):
        out = StringIO()
        call_command('deactivate_expired_tokens', stdout=out)
        self.assertIn('Deactivated 1 expired link(s)', out.getvalue())
        self.expired.refresh_from_db()
        self.current.refresh_from_db()
        self.open_ended.refresh_from_db()
        self.assertFalse(self.expired.active)
        self.assertTrue(self.current.active)
        self.assertTrue(self.open_ended.active)
