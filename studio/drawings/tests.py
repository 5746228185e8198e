"""
Test suite for the drawings module
Tests: drawing checklist, drawing register, revisions, transmittals and the distribution matrix
"""
from datetime import timedelta
from unittest.mock import patch
from django.core import mail
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from studio.core.models import AuditLog
from studio.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from studio.drawings import transmittals as transmittal_service
from studio.drawings.models import DrawingChecklistItem, ProjectDrawing, Transmittal
from studio.projects.workflow import WorkflowError


class DrawingChecklistTests(TestCase):
    """Test drawing checklist endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user(role='DRAFTER')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.room = TestDataFactory.create_room()
        self.stage = TestDataFactory.get_stage(self.room, 'DRAWINGS')

    def test_add_default_items_once(self):
        url = f'/api/v1/stages/{self.stage.id}/drawing-checklist/'
        response = self.client.post(url, {'use_defaults': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(response.data), 4)

        response = self.client.post(url, {'use_defaults': True}, format='json')
        self.assertEqual(len(response.data), 0)
        self.assertEqual(DrawingChecklistItem.objects.filter(stage=self.stage).count(), 4)

    def test_add_custom_item(self):
        url = f'/api/v1/stages/{self.stage.id}/drawing-checklist/'
        response = self.client.post(url, {'name': 'Bathroom tile layout', 'type': 'CUSTOM'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertFalse(response.data['completed'])

    def test_checklist_only_on_drawings_stage(self):
        ffe = TestDataFactory.get_stage(self.room, 'FFE')
        response = self.client.get(f'/api/v1/stages/{ffe.id}/drawing-checklist/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_toggle_records_user_and_activity(self):
        item = TestDataFactory.create_checklist_item(self.stage, name='Millwork details')
        response = self.client.post(f'/api/v1/drawing-checklist/{item.id}/toggle/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['completed'])
        self.assertEqual(response.data['completed_by']['id'], self.user.id)
        self.assertTrue(self.stage.activities.filter(type='CHECKLIST').exists())

        response = self.client.post(f'/api/v1/drawing-checklist/{item.id}/toggle/')
        self.assertFalse(response.data['completed'])
        self.assertIsNone(response.data['completed_at'])


class DrawingRegisterTests(TestCase):
    """Test the drawing register and revisions"""

    def setUp(self):
        self.user = TestDataFactory.create_user(role='DRAFTER')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.project = TestDataFactory.create_project()

    def test_create_drawing(self):
        response = self.client.post(f'/api/v1/projects/{self.project.id}/drawings/', {
            'drawing_number': 'E-201', 'title': 'Lighting layout', 'discipline': 'ELECTRICAL',
            'drawing_type': 'FLOOR_PLAN',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['discipline_short'], 'ELEC')
        self.assertEqual(response.data['current_revision'], 0)

    def test_duplicate_drawing_number_rejected(self):
        TestDataFactory.create_drawing(self.project, drawing_number='A-101')
        response = self.client.post(f'/api/v1/projects/{self.project.id}/drawings/', {
            'drawing_number': 'A-101', 'title': 'Copy',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('drawing_number', response.data)

    def test_room_must_belong_to_project(self):
        other_room = TestDataFactory.create_room()
        response = self.client.post(f'/api/v1/projects/{self.project.id}/drawings/', {
            'title': 'Wrong room', 'room': other_room.id,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_filter_drawings(self):
        TestDataFactory.create_drawing(self.project, drawing_number='A-101', title='Ground floor plan')
        TestDataFactory.create_drawing(self.project, drawing_number='E-101', title='Power plan', discipline='ELECTRICAL')

        response = self.client.get(f'/api/v1/projects/{self.project.id}/drawings/?discipline=ELECTRICAL')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['drawing_number'], 'E-101')

        response = self.client.get(f'/api/v1/projects/{self.project.id}/drawings/?search=ground plan')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['drawing_number'], 'A-101')

    def test_add_revisions(self):
        drawing = TestDataFactory.create_drawing(self.project, drawing_number='A-101')
        url = f'/api/v1/drawings/{drawing.id}/revisions/'

        response = self.client.post(url, {'description': 'First issue', 'file_path': '/dwg/A-101-r1.pdf'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['revision_number'], 1)

        response = self.client.post(url, {'description': 'Client comments'}, format='json')
        self.assertEqual(response.data['revision_number'], 2)

        drawing.refresh_from_db()
        self.assertEqual(drawing.current_revision, 2)
        self.assertEqual(drawing.file_path, '/dwg/A-101-r1.pdf')

        response = self.client.post(url, {'revision_number': 2}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_unissued_drawing(self):
        drawing = TestDataFactory.create_drawing(self.project)
        response = self.client.delete(f'/api/v1/drawings/{drawing.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(ProjectDrawing.objects.filter(pk=drawing.pk).exists())

    def test_delete_issued_drawing_archives_it(self):
        drawing = TestDataFactory.create_drawing(self.project)
        TestDataFactory.create_transmittal(self.project, [drawing], status='SENT', sent_at=timezone.now())
        response = self.client.delete(f'/api/v1/drawings/{drawing.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        drawing.refresh_from_db()
        self.assertEqual(drawing.status, 'ARCHIVED')


class TransmittalServiceTests(TestCase):
    """Test transmittal numbering and state transitions"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.project = TestDataFactory.create_project(name='Harbor Loft')
        self.drawing = TestDataFactory.create_drawing(self.project, drawing_number='A-101', current_revision=1)

    def test_numbering_per_project(self):
        self.assertEqual(transmittal_service.next_transmittal_number(self.project), 'T-001')
        TestDataFactory.create_transmittal(self.project, number='T-009')
        TestDataFactory.create_transmittal(self.project, number='custom')
        self.assertEqual(transmittal_service.next_transmittal_number(self.project), 'T-010')

        other = TestDataFactory.create_project()
        self.assertEqual(transmittal_service.next_transmittal_number(other), 'T-001')

    def test_create_one_transmittal_per_recipient(self):
        recipients = [
            {'name': 'Builder Co', 'email': 'site@builder.test', 'type': 'CONTRACTOR'},
            {'name': 'Lighting Consultant', 'email': 'lux@consult.test', 'type': 'CONSULTANT'},
        ]
        created, results = transmittal_service.create_transmittals(
            self.project, self.user, recipients, [{'drawing_id': self.drawing.id}], subject='Issue for pricing'
        )
        self.assertEqual([t.transmittal_number for t in created], ['T-001', 'T-002'])
        self.assertEqual(results, [])
        for transmittal in created:
            self.assertEqual(transmittal.status, 'DRAFT')
            self.assertEqual(transmittal.items.count(), 1)
            self.assertEqual(transmittal.items.first().revision_number, 1)

    def test_foreign_drawings_are_skipped(self):
        foreign = TestDataFactory.create_drawing(TestDataFactory.create_project())
        with self.assertRaises(WorkflowError):
            transmittal_service.create_transmittals(
                self.project, self.user, [{'name': 'Builder'}], [{'drawing_id': foreign.id}]
            )

    def test_subject(self):
        transmittal = TestDataFactory.create_transmittal(self.project)
        self.assertEqual(transmittal_service.transmittal_subject(transmittal), 'Harbor Loft — Drawing(s)')
        transmittal.subject = 'Kitchen package'
        self.assertEqual(transmittal_service.transmittal_subject(transmittal), 'Harbor Loft — Kitchen package')

    def test_send_transmittal(self):
        transmittal = TestDataFactory.create_transmittal(self.project, [self.drawing])
        transmittal_service.send_transmittal(transmittal, self.user)
        transmittal.refresh_from_db()
        self.assertEqual(transmittal.status, 'SENT')
        self.assertIsNotNone(transmittal.sent_at)
        self.assertTrue(transmittal.email_message_id)

        self.assertEqual(len(mail.outbox), 1)
        message = mail.outbox[0]
        self.assertEqual(message.to, ['site@contractor.test'])
        self.assertEqual(message.subject, 'Harbor Loft — Drawing(s)')
        self.assertIn('A-101', message.body)

    def test_send_twice_rejected(self):
        transmittal = TestDataFactory.create_transmittal(self.project, [self.drawing])
        transmittal_service.send_transmittal(transmittal, self.user)
        with self.assertRaises(WorkflowError) as ctx:
            transmittal_service.send_transmittal(transmittal, self.user)
        self.assertEqual(ctx.exception.message, 'Transmittal has already been sent')

    def test_send_without_email(self):
        transmittal = TestDataFactory.create_transmittal(self.project, [self.drawing], recipient_email='')
        with self.assertRaises(WorkflowError):
            transmittal_service.send_transmittal(transmittal, self.user)

    def test_acknowledge_and_cancel_rules(self):
        transmittal = TestDataFactory.create_transmittal(self.project, [self.drawing])
        with self.assertRaises(WorkflowError):
            transmittal_service.acknowledge_transmittal(transmittal)

        transmittal_service.send_transmittal(transmittal, self.user)
        transmittal_service.acknowledge_transmittal(transmittal)
        self.assertEqual(transmittal.status, 'ACKNOWLEDGED')
        self.assertIsNotNone(transmittal.acknowledged_at)

        with self.assertRaises(WorkflowError):
            transmittal_service.cancel_transmittal(transmittal)


class TransmittalAPITests(TestCase):
    """Test transmittal endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.project = TestDataFactory.create_project()
        self.drawing = TestDataFactory.create_drawing(self.project, drawing_number='A-101', current_revision=2)

    def create_payload(self, **extra):
        data = {
            'recipients': [
                {'name': 'Builder Co', 'email': 'site@builder.test', 'type': 'CONTRACTOR'},
                {'name': 'Joinery Ltd', 'email': 'shop@joinery.test', 'type': 'SUBCONTRACTOR'},
            ],
            'items': [{'drawing_id': self.drawing.id, 'purpose': 'FOR_CONSTRUCTION'}],
            'subject': 'Construction issue',
        }
        data.update(extra)
        return data

    def test_create_transmittals(self):
        response = self.client.post(f'/api/v1/projects/{self.project.id}/transmittals/',
                                    self.create_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(response.data['transmittals']), 2)
        self.assertNotIn('send_results', response.data)
        self.assertEqual(AuditLog.objects.filter(action='transmittal_create').count(), 2)

    def test_create_and_send_immediately(self):
        payload = self.create_payload(send_immediately=True)
        payload['recipients'].append({'name': 'No Email Person'})
        response = self.client.post(f'/api/v1/projects/{self.project.id}/transmittals/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        results = response.data['send_results']
        self.assertEqual(len(results), 3)
        self.assertEqual([r['sent'] for r in results], [True, True, False])
        self.assertIn('error', results[2])
        self.assertEqual(len(mail.outbox), 2)
        self.assertEqual(Transmittal.objects.filter(status='SENT').count(), 2)
        self.assertEqual(Transmittal.objects.filter(status='DRAFT').count(), 1)

    def test_create_requires_recipients_and_items(self):
        url = f'/api/v1/projects/{self.project.id}/transmittals/'
        response = self.client.post(url, self.create_payload(recipients=[]), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post(url, self.create_payload(items=[]), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_transmittals_filtered(self):
        TestDataFactory.create_transmittal(self.project, [self.drawing], number='T-001')
        TestDataFactory.create_transmittal(self.project, [self.drawing], number='T-002', status='SENT',
                                           sent_at=timezone.now())
        response = self.client.get(f'/api/v1/projects/{self.project.id}/transmittals/?status=SENT')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['transmittal_number'], 'T-002')
        self.assertEqual(response.data['results'][0]['item_count'], 1)

    def test_send_endpoint(self):
        transmittal = TestDataFactory.create_transmittal(self.project, [self.drawing])
        response = self.client.post(f'/api/v1/transmittals/{transmittal.id}/send/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'SENT')

        response = self.client.post(f'/api/v1/transmittals/{transmittal.id}/send/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_send_failure_returns_bad_gateway(self):
        transmittal = TestDataFactory.create_transmittal(self.project, [self.drawing])
        with patch('studio.drawings.transmittals.EmailMultiAlternatives.send', side_effect=Exception('SMTP down')):
            response = self.client.post(f'/api/v1/transmittals/{transmittal.id}/send/')
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        transmittal.refresh_from_db()
        self.assertEqual(transmittal.status, 'DRAFT')

    def test_only_drafts_can_be_edited(self):
        transmittal = TestDataFactory.create_transmittal(self.project, [self.drawing], status='SENT',
                                                         sent_at=timezone.now())
        response = self.client.patch(f'/api/v1/transmittals/{transmittal.id}/', {'notes': 'late'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.delete(f'/api/v1/transmittals/{transmittal.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cancel_endpoint(self):
        transmittal = TestDataFactory.create_transmittal(self.project, [self.drawing])
        response = self.client.post(f'/api/v1/transmittals/{transmittal.id}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'CANCELLED')


class DistributionMatrixTests(TestCase):
    """Test the distribution matrix"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.project = TestDataFactory.create_project()
        self.plan = TestDataFactory.create_drawing(self.project, drawing_number='A-101', current_revision=2)
        self.power = TestDataFactory.create_drawing(self.project, drawing_number='E-101', discipline='ELECTRICAL',
                                                    current_revision=1)
        now = timezone.now()
        # Builder got A-101 rev 1 and then rev 2; the consultant only got rev 1
        TestDataFactory.create_transmittal(self.project, [self.plan], number='T-001', recipient_name='Builder',
                                           recipient_email='Site@Builder.test', status='SENT',
                                           sent_at=now - timedelta(days=10), revision_number=1)
        TestDataFactory.create_transmittal(self.project, [self.plan, self.power], number='T-002',
                                           recipient_name='Builder', recipient_email='site@builder.test',
                                           status='ACKNOWLEDGED', sent_at=now - timedelta(days=1))
        TestDataFactory.create_transmittal(self.project, [self.plan], number='T-003', recipient_name='Consultant',
                                           recipient_email='lux@consult.test', status='SENT',
                                           sent_at=now - timedelta(days=5), revision_number=1)
        TestDataFactory.create_transmittal(self.project, [self.power], number='T-004', recipient_name='Consultant',
                                           recipient_email='lux@consult.test', status='DRAFT')

    def test_matrix(self):
        response = self.client.get(f'/api/v1/projects/{self.project.id}/distribution-matrix/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data

        self.assertEqual([r['key'] for r in data['recipients']], ['site@builder.test', 'lux@consult.test'])
        self.assertEqual(data['recipients'][0]['transmittal_count'], 2)
        self.assertEqual([g['discipline'] for g in data['disciplines']], ['ARCHITECTURAL', 'ELECTRICAL'])
        self.assertEqual(data['drawing_count'], 2)

        plan_row = data['disciplines'][0]['drawings'][0]
        builder_cell = plan_row['cells']['site@builder.test']
        consultant_cell = plan_row['cells']['lux@consult.test']
        self.assertEqual(builder_cell['transmittal_number'], 'T-002')
        self.assertTrue(builder_cell['is_current'])
        self.assertEqual(consultant_cell['revision_number'], 1)
        self.assertFalse(consultant_cell['is_current'])
        self.assertEqual(plan_row['outdated_count'], 1)

        power_row = data['disciplines'][1]['drawings'][0]
        # Drafts are not issues
        self.assertIsNone(power_row['cells']['lux@consult.test'])
        self.assertEqual(data['outdated_count'], 1)

    def test_matrix_discipline_filter(self):
        response = self.client.get(f'/api/v1/projects/{self.project.id}/distribution-matrix/?discipline=ELECTRICAL')
        self.assertEqual(response.data['drawing_count'], 1)

        response = self.client.get(f'/api/v1/projects/{self.project.id}/distribution-matrix/?discipline=GARDEN')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cancelled_transmittals_do_not_list_recipients(self):
        TestDataFactory.create_transmittal(self.project, [self.plan], number='T-005', recipient_name='Gone',
                                           recipient_email='gone@nowhere.test', status='CANCELLED')
        response = self.client.get(f'/api/v1/projects/{self.project.id}/recipients/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertNotIn('gone@nowhere.test', [r['key'] for r in response.data])
