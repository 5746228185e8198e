"""
Test suite for the approvals module
Tests: rendering versions, push to client approval, internal approval, sending, follow-ups and client decisions
"""
from datetime import timedelta
from io import StringIO
from unittest.mock import patch
from django.core import mail
from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from studio.approvals import workflow
from studio.approvals.models import (
    RenderingVersion, ClientApprovalVersion, ClientApprovalEmailLog, ClientDecision
)
from studio.core.models import AuditLog
from studio.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from studio.projects.models import Stage, Notification
from studio.projects.workflow import WorkflowError


class RenderingTests(TestCase):
    """Test rendering version endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user(role='RENDERER')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.room = TestDataFactory.create_room()
        self.three_d = TestDataFactory.get_stage(self.room, 'THREE_D')

    def test_create_rendering_numbers_versions_and_starts_stage(self):
        url = f'/api/v1/stages/{self.three_d.id}/renderings/'
        response = self.client.post(url, {'custom_name': 'Warm palette'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['version'], 'V1')
        self.assertEqual(response.data['label'], 'V1 - Warm palette')

        response = self.client.post(url, {}, format='json')
        self.assertEqual(response.data['version'], 'V2')

        self.three_d.refresh_from_db()
        self.assertEqual(self.three_d.status, 'IN_PROGRESS')

    def test_renderings_only_on_three_d_stage(self):
        concept = TestDataFactory.get_stage(self.room, 'DESIGN_CONCEPT')
        response = self.client.post(f'/api/v1/stages/{concept.id}/renderings/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_complete_requires_asset(self):
        rendering = workflow.create_rendering_version(self.three_d, self.user)
        response = self.client.post(f'/api/v1/renderings/{rendering.id}/complete/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(f'/api/v1/renderings/{rendering.id}/assets/', {
            'title': 'Living room view', 'url': 'https://cdn.example.com/living.jpg'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.post(f'/api/v1/renderings/{rendering.id}/complete/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'COMPLETED')

    def test_rendering_notes(self):
        rendering = workflow.create_rendering_version(self.three_d, self.user)
        response = self.client.post(f'/api/v1/renderings/{rendering.id}/notes/', {'content': 'Lighter floor'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.get(f'/api/v1/renderings/{rendering.id}/notes/')
        self.assertEqual(len(response.data), 1)

    def test_only_in_progress_renderings_can_be_deleted(self):
        rendering = TestDataFactory.create_rendering(self.three_d, status='COMPLETED')
        response = self.client.delete(f'/api/v1/renderings/{rendering.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class ClientApprovalWorkflowTests(TestCase):
    """Test the client approval workflow end to end"""

    def setUp(self):
        self.designer = TestDataFactory.create_user()
        self.renderer = TestDataFactory.create_user(role='RENDERER')
        self.owner = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.designer)

        self.room = TestDataFactory.create_room()
        self.three_d = TestDataFactory.get_stage(self.room, 'THREE_D')
        self.approval_stage = TestDataFactory.get_stage(self.room, 'CLIENT_APPROVAL')
        Stage.objects.filter(pk=self.three_d.pk).update(status='IN_PROGRESS', assigned_to=self.renderer)
        self.three_d.refresh_from_db()
        self.rendering = TestDataFactory.create_rendering(self.three_d, user=self.renderer, asset_count=2)

    def base_url(self):
        return f'/api/v1/stages/{self.approval_stage.id}/client-approval/'

    def push(self):
        response = self.client.post(self.base_url(), {'rendering_version_id': self.rendering.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        return ClientApprovalVersion.objects.get(pk=response.data['id'])

    def approve_internally(self):
        owner_client = AuthenticatedAPIClient().authenticate_user(self.owner)
        response = owner_client.post(self.base_url() + 'internal-approve/', {'approved': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        return response

    def send(self):
        response = self.client.post(self.base_url() + 'send-to-client/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        return response

    def test_push_creates_version_and_completes_three_d(self):
        version = self.push()
        self.assertEqual(version.status, 'PENDING_INTERNAL_APPROVAL')
        self.assertEqual(version.version, 'V1')
        self.assertEqual(version.assets.count(), 2)

        self.rendering.refresh_from_db()
        self.three_d.refresh_from_db()
        self.approval_stage.refresh_from_db()
        self.assertEqual(self.rendering.status, 'PUSHED_TO_CLIENT')
        self.assertEqual(self.three_d.status, 'COMPLETED')
        self.assertEqual(self.approval_stage.status, 'IN_PROGRESS')
        self.assertTrue(AuditLog.objects.filter(action='rendering_push').exists())

    def test_push_requires_completed_rendering(self):
        self.rendering.status = 'IN_PROGRESS'
        self.rendering.save()
        response = self.client.post(self.base_url(), {'rendering_version_id': self.rendering.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_push_blocked_while_version_open(self):
        self.push()
        second = TestDataFactory.create_rendering(self.three_d, version='V2')
        response = self.client.post(self.base_url(), {'rendering_version_id': second.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Another version is already going through client approval')

    def test_get_client_approval(self):
        response = self.client.get(self.base_url())
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['current_version'])
        self.assertEqual(len(response.data['pushable_renderings']), 1)

        self.push()
        response = self.client.get(self.base_url())
        self.assertEqual(response.data['current_version']['status'], 'PENDING_INTERNAL_APPROVAL')

    def test_internal_approval_requires_admin(self):
        self.push()
        response = self.client.post(self.base_url() + 'internal-approve/', {'approved': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_internal_rejection_returns_to_draft(self):
        self.push()
        owner_client = AuthenticatedAPIClient().authenticate_user(self.owner)
        response = owner_client.post(self.base_url() + 'internal-approve/',
                                     {'approved': False, 'notes': 'Fix the rug'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'DRAFT')
        self.assertFalse(response.data['approved_internally'])

    def test_push_blocked_while_version_in_draft(self):
        self.push()
        owner_client = AuthenticatedAPIClient().authenticate_user(self.owner)
        owner_client.post(self.base_url() + 'internal-approve/', {'approved': False}, format='json')

        second = TestDataFactory.create_rendering(self.three_d, version='V2')
        response = self.client.post(self.base_url(), {'rendering_version_id': second.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Another version is already going through client approval')
        self.assertEqual(ClientApprovalVersion.objects.filter(stage=self.approval_stage).count(), 1)

    def test_internal_approval_rejects_null_decision(self):
        version = self.push()
        owner_client = AuthenticatedAPIClient().authenticate_user(self.owner)
        for value in [None, 'maybe', 0]:
            response = owner_client.post(self.base_url() + 'internal-approve/', {'approved': value}, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertEqual(response.data['error'], 'approved must be true or false')
        version.refresh_from_db()
        self.assertEqual(version.status, 'PENDING_INTERNAL_APPROVAL')

    def test_send_requires_internal_approval(self):
        self.push()
        response = self.client.post(self.base_url() + 'send-to-client/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_send_to_client_emails_selected_assets(self):
        version = self.push()
        self.approve_internally()
        keep = version.assets.order_by('display_order').first().asset_id

        response = self.client.post(self.base_url() + 'send-to-client/', {'selected_asset_ids': [keep]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'SENT_TO_CLIENT')
        included = [a for a in response.data['assets'] if a['include_in_email']]
        self.assertEqual(len(included), 1)

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, [self.room.project.client.email])
        self.assertEqual(ClientApprovalEmailLog.objects.filter(version=version).count(), 1)

        self.approval_stage.refresh_from_db()
        self.assertEqual(self.approval_stage.status, 'PENDING_APPROVAL')

    def test_send_with_unknown_asset(self):
        self.push()
        self.approve_internally()
        response = self.client.post(self.base_url() + 'send-to-client/', {'selected_asset_ids': [999999]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_send_without_client_email(self):
        client_record = self.room.project.client
        client_record.email = ''
        client_record.save()
        self.push()
        self.approve_internally()
        response = self.client.post(self.base_url() + 'send-to-client/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_send_failure_returns_bad_gateway(self):
        version = self.push()
        self.approve_internally()
        with patch('studio.approvals.emails.EmailMultiAlternatives.send', side_effect=Exception('SMTP down')):
            response = self.client.post(self.base_url() + 'send-to-client/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        version.refresh_from_db()
        self.assertEqual(version.status, 'READY_FOR_CLIENT')
        self.assertFalse(ClientApprovalEmailLog.objects.filter(version=version).exists())

    def test_mark_as_sent_does_not_email(self):
        self.push()
        self.approve_internally()
        response = self.client.post(self.base_url() + 'mark-as-sent/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'SENT_TO_CLIENT')
        self.assertEqual(len(mail.outbox), 0)

    def test_email_open_tracking(self):
        version = self.push()
        self.approve_internally()
        self.send()
        log = ClientApprovalEmailLog.objects.get(version=version)

        response = self.client.get(f'/api/v1/client-approval/track/{log.tracking_id}/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'image/gif')

        version.refresh_from_db()
        log.refresh_from_db()
        self.assertEqual(version.status, 'CLIENT_REVIEWING')
        self.assertIsNotNone(version.email_opened_at)
        self.assertIsNotNone(log.opened_at)

    def test_client_approval_completes_stage_and_opens_next_phases(self):
        version = self.push()
        self.approve_internally()
        self.send()

        response = self.client.post(self.base_url() + 'client-decision/', {'decision': 'APPROVED'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'CLIENT_APPROVED')
        self.assertEqual(ClientDecision.objects.filter(version=version).count(), 1)

        statuses = dict(self.room.stages.values_list('type', 'status'))
        self.assertEqual(statuses['CLIENT_APPROVAL'], 'COMPLETED')
        self.assertEqual(statuses['DRAWINGS'], 'IN_PROGRESS')
        self.assertEqual(statuses['FFE'], 'IN_PROGRESS')

    def test_revision_request_reopens_three_d(self):
        self.push()
        self.approve_internally()
        self.send()
        mail.outbox.clear()

        response = self.client.post(self.base_url() + 'client-decision/',
                                    {'decision': 'REVISION_REQUESTED', 'notes': 'Darker cabinets'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'REVISION_REQUESTED')

        self.rendering.refresh_from_db()
        self.three_d.refresh_from_db()
        self.approval_stage.refresh_from_db()
        self.assertEqual(self.rendering.status, 'IN_PROGRESS')
        self.assertTrue(self.rendering.notes.filter(content__contains='Darker cabinets').exists())
        self.assertEqual(self.three_d.status, 'IN_PROGRESS')
        self.assertEqual(self.approval_stage.status, 'REVISION_REQUESTED')

        self.assertTrue(Notification.objects.filter(user=self.renderer, type='REVISION_REQUESTED').exists())
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, [self.renderer.email])

    def test_invalid_decision(self):
        self.push()
        response = self.client.post(self.base_url() + 'client-decision/', {'decision': 'MAYBE'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_decision_before_sending_is_rejected(self):
        self.push()
        response = self.client.post(self.base_url() + 'client-decision/', {'decision': 'APPROVED'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_version_activity_and_email_logs(self):
        version = self.push()
        self.approve_internally()
        self.send()
        response = self.client.get(f'/api/v1/client-approval/versions/{version.id}/activity/')
        types = [a['type'] for a in response.data]
        self.assertIn('PUSHED', types)
        self.assertIn('INTERNAL_APPROVED', types)
        self.assertIn('SENT_TO_CLIENT', types)

        response = self.client.get(f'/api/v1/client-approval/versions/{version.id}/email-logs/')
        self.assertEqual(len(response.data), 1)


class FollowUpTests(TestCase):
    """Test follow-up flagging"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.room = TestDataFactory.create_room()
        self.approval_stage = TestDataFactory.get_stage(self.room, 'CLIENT_APPROVAL')
        self.version = ClientApprovalVersion.objects.create(
            stage=self.approval_stage,
            version='V1',
            status='SENT_TO_CLIENT',
            sent_to_client_at=timezone.now() - timedelta(days=5),
        )

    def test_flag_follow_ups(self):
        fresh = ClientApprovalVersion.objects.create(
            stage=TestDataFactory.get_stage(TestDataFactory.create_room(), 'CLIENT_APPROVAL'),
            version='V1',
            status='SENT_TO_CLIENT',
            sent_to_client_at=timezone.now(),
        )
        self.assertEqual(workflow.flag_follow_ups(3), 1)
        self.version.refresh_from_db()
        fresh.refresh_from_db()
        self.assertEqual(self.version.status, 'FOLLOW_UP_REQUIRED')
        self.assertEqual(fresh.status, 'SENT_TO_CLIENT')

    def test_mark_follow_up(self):
        workflow.flag_follow_ups(3)
        self.version.refresh_from_db()
        workflow.mark_follow_up(self.version, self.user, 'Called the client')
        self.assertEqual(self.version.status, 'CLIENT_REVIEWING')
        self.assertEqual(self.version.follow_up_notes, 'Called the client')

    def test_mark_follow_up_rejected_for_approved_version(self):
        self.version.status = 'CLIENT_APPROVED'
        self.version.save()
        with self.assertRaises(WorkflowError):
            workflow.mark_follow_up(self.version, self.user)

    def test_flag_followups_command(self):
        out = StringIO()
        call_command('flag_followups', '--days', '3', stdout=out)
        self.assertIn('Flagged 1', out.getvalue())


class RenderingLabelTests(TestCase):
    """Test per-room rendering numbering"""

    def test_next_label_skips_custom_labels(self):
        room = TestDataFactory.create_room()
        stage = TestDataFactory.get_stage(room, 'THREE_D')
        RenderingVersion.objects.create(room=room, stage=stage, version='V3')
        RenderingVersion.objects.create(room=room, stage=stage, version='draft')
        self.assertEqual(workflow.next_rendering_label(room), 'V4')
