"""
Test suite for the projects module
Tests: clients, projects, rooms, the stage workflow, design sections and notifications
"""
from io import StringIO
from django.core import mail
from django.core.management import call_command
from django.test import TestCase
from rest_framework import status
from studio.core.models import AuditLog
from studio.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from studio.projects import workflow
from studio.projects.models import Project, Room, Stage, DesignSection, Notification
from studio.projects.workflow import WorkflowError


class PhaseSequenceTests(TestCase):
    """Test phase ordering helpers"""

    def test_phase_sequence_info(self):
        info = workflow.phase_sequence_info('THREE_D')
        self.assertEqual(info['previous'], 'DESIGN_CONCEPT')
        self.assertEqual(info['next'], 'CLIENT_APPROVAL')
        self.assertEqual(info['order'], 2)
        self.assertFalse(info['is_first'])

        last = workflow.phase_sequence_info('FFE')
        self.assertTrue(last['is_last'])
        self.assertIsNone(last['next'])

    def test_unknown_phase(self):
        with self.assertRaises(WorkflowError):
            workflow.phase_sequence_info('PAINTING')

    def test_client_approval_opens_drawings_and_ffe(self):
        self.assertEqual(workflow.phases_to_notify('CLIENT_APPROVAL'), ['DRAWINGS', 'FFE'])
        self.assertEqual(workflow.phases_to_notify('FFE'), [])


class RoomStatusTests(TestCase):
    """Test the roll-up of stage statuses into the room"""

    def setUp(self):
        self.room = TestDataFactory.create_room()

    def set_status(self, stage_type, value):
        Stage.objects.filter(room=self.room, type=stage_type).update(status=value)

    def recompute(self):
        room = Room.objects.get(pk=self.room.pk)
        return workflow.recompute_room(room)

    def test_new_room_has_all_stages(self):
        types = sorted(self.room.stages.values_list('type', flat=True))
        self.assertEqual(types, sorted(workflow.PHASE_SEQUENCE))
        room = self.recompute()
        self.assertEqual(room.status, 'NOT_STARTED')
        self.assertEqual(room.current_stage, 'DESIGN_CONCEPT')

    def test_in_progress(self):
        self.set_status('DESIGN_CONCEPT', 'COMPLETED')
        self.set_status('THREE_D', 'IN_PROGRESS')
        room = self.recompute()
        self.assertEqual(room.status, 'IN_PROGRESS')
        self.assertEqual(room.current_stage, 'THREE_D')

    def test_needs_attention_wins(self):
        self.set_status('DESIGN_CONCEPT', 'IN_PROGRESS')
        self.set_status('THREE_D', 'NEEDS_ATTENTION')
        self.assertEqual(self.recompute().status, 'NEEDS_ATTENTION')

    def test_on_hold_only_without_active_stages(self):
        self.set_status('DESIGN_CONCEPT', 'ON_HOLD')
        self.assertEqual(self.recompute().status, 'ON_HOLD')
        self.set_status('THREE_D', 'IN_PROGRESS')
        self.assertEqual(self.recompute().status, 'IN_PROGRESS')

    def test_not_applicable_stages_are_ignored(self):
        for phase in ['DESIGN_CONCEPT', 'THREE_D', 'CLIENT_APPROVAL', 'DRAWINGS']:
            self.set_status(phase, 'COMPLETED')
        self.set_status('FFE', 'NOT_APPLICABLE')
        room = self.recompute()
        self.assertEqual(room.status, 'COMPLETED')
        self.assertIsNone(room.current_stage)
        self.assertEqual(workflow.room_progress(room.stages.all()), 100)

    def test_progress_percentage(self):
        self.set_status('DESIGN_CONCEPT', 'COMPLETED')
        self.set_status('THREE_D', 'COMPLETED')
        self.assertEqual(workflow.room_progress(Stage.objects.filter(room=self.room)), 40)


class StageWorkflowTests(TestCase):
    """Test stage transitions and completion checks"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.renderer = TestDataFactory.create_user(role='RENDERER')
        self.room = TestDataFactory.create_room()
        self.concept = TestDataFactory.get_stage(self.room, 'DESIGN_CONCEPT')

    def add_required_sections(self, stage):
        for section_type in DesignSection.REQUIRED_TYPES:
            DesignSection.objects.create(stage=stage, type=section_type, content=f'{section_type} notes')

    def test_start_stage(self):
        workflow.start_stage(self.concept, self.user)
        self.concept.refresh_from_db()
        self.assertEqual(self.concept.status, 'IN_PROGRESS')
        self.assertIsNotNone(self.concept.started_at)
        self.assertTrue(self.concept.activities.filter(type='STATUS_CHANGE').exists())

    def test_cannot_start_completed_stage(self):
        Stage.objects.filter(pk=self.concept.pk).update(status='COMPLETED')
        self.concept.refresh_from_db()
        with self.assertRaises(WorkflowError):
            workflow.start_stage(self.concept, self.user)

    def test_design_concept_requires_sections(self):
        workflow.start_stage(self.concept, self.user)
        with self.assertRaises(WorkflowError) as ctx:
            workflow.complete_stage(self.concept, self.user)
        self.assertIn('Missing sections', ctx.exception.details[0])

    def test_complete_design_concept_opens_three_d(self):
        three_d = TestDataFactory.get_stage(self.room, 'THREE_D')
        workflow.assign_stage(three_d, self.renderer, self.user)
        workflow.start_stage(self.concept, self.user)
        self.add_required_sections(self.concept)

        workflow.complete_stage(self.concept, self.user)

        self.concept.refresh_from_db()
        three_d.refresh_from_db()
        self.assertEqual(self.concept.status, 'COMPLETED')
        self.assertEqual(self.concept.completed_by, self.user)
        self.assertFalse(self.concept.design_sections.filter(completed=False).exists())
        self.assertEqual(three_d.status, 'IN_PROGRESS')
        self.assertTrue(Notification.objects.filter(user=self.renderer, type='PHASE_READY').exists())

        room = Room.objects.get(pk=self.room.pk)
        self.assertEqual(room.current_stage, 'THREE_D')

    def test_three_d_requires_completed_rendering(self):
        three_d = TestDataFactory.get_stage(self.room, 'THREE_D')
        workflow.start_stage(three_d, self.user)
        self.assertEqual(workflow.completion_blockers(three_d), ['At least one rendering version must be completed'])
        TestDataFactory.create_rendering(three_d, status='COMPLETED')
        self.assertEqual(workflow.completion_blockers(three_d), [])

    def test_drawings_require_completed_checklist(self):
        drawings = TestDataFactory.get_stage(self.room, 'DRAWINGS')
        self.assertEqual(workflow.completion_blockers(drawings), ['Add at least one drawing checklist item'])
        item = TestDataFactory.create_checklist_item(drawings, name='Lighting plan')
        self.assertEqual(workflow.completion_blockers(drawings), ['Incomplete drawings: Lighting plan'])
        item.completed = True
        item.save()
        self.assertEqual(workflow.completion_blockers(drawings), [])

    def test_hold_and_resume(self):
        workflow.start_stage(self.concept, self.user)
        workflow.hold_stage(self.concept, self.user)
        self.assertEqual(Room.objects.get(pk=self.room.pk).status, 'ON_HOLD')
        workflow.resume_stage(self.concept, self.user)
        self.assertEqual(self.concept.status, 'IN_PROGRESS')

    def test_start_from_on_hold(self):
        workflow.start_stage(self.concept, self.user)
        workflow.hold_stage(self.concept, self.user)
        workflow.start_stage(self.concept, self.user)
        self.assertEqual(Stage.objects.get(pk=self.concept.pk).status, 'IN_PROGRESS')

    def test_start_rejected_after_revision_request(self):
        Stage.objects.filter(pk=self.concept.pk).update(status='REVISION_REQUESTED')
        self.concept.refresh_from_db()
        with self.assertRaises(WorkflowError):
            workflow.start_stage(self.concept, self.user)

    def test_hold_only_from_in_progress(self):
        for current in ['NOT_STARTED', 'PENDING_APPROVAL', 'NEEDS_ATTENTION', 'REVISION_REQUESTED']:
            Stage.objects.filter(pk=self.concept.pk).update(status=current)
            self.concept.refresh_from_db()
            with self.assertRaises(WorkflowError):
                workflow.hold_stage(self.concept, self.user)
            self.assertEqual(Stage.objects.get(pk=self.concept.pk).status, current)

    def test_not_applicable_round_trip(self):
        ffe = TestDataFactory.get_stage(self.room, 'FFE')
        workflow.mark_not_applicable(ffe, self.user)
        self.assertEqual(ffe.status, 'NOT_APPLICABLE')
        workflow.mark_applicable(ffe, self.user)
        self.assertEqual(ffe.status, 'NOT_STARTED')

    def test_assign_notifies_and_emails(self):
        workflow.assign_stage(self.concept, self.renderer, self.user)
        notification = Notification.objects.get(user=self.renderer)
        self.assertEqual(notification.type, 'STAGE_ASSIGNED')
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, [self.renderer.email])

    def test_assign_same_user_twice_notifies_once(self):
        workflow.assign_stage(self.concept, self.renderer, self.user)
        workflow.assign_stage(self.concept, self.renderer, self.user)
        self.assertEqual(Notification.objects.filter(user=self.renderer).count(), 1)

    def test_email_opt_out(self):
        self.renderer.email_notifications_enabled = False
        self.renderer.save()
        workflow.assign_stage(self.concept, self.renderer, self.user)
        self.assertEqual(Notification.objects.filter(user=self.renderer).count(), 1)
        self.assertEqual(len(mail.outbox), 0)


class ClientAPITests(TestCase):
    """Test client endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_and_search_client(self):
        response = self.client.post('/api/v1/clients/', {'name': 'Okafor Holdings', 'company': 'Okafor'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.get('/api/v1/clients/?search=okafor')
        self.assertEqual(len(response.data), 1)

    def test_client_with_projects_cannot_be_deleted(self):
        project = TestDataFactory.create_project()
        response = self.client.delete(f'/api/v1/clients/{project.client_id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class ProjectAPITests(TestCase):
    """Test project and room endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.studio_client = TestDataFactory.create_client()

    def test_create_project_with_rooms(self):
        """Test creating a project creates every room with its five stages"""
        data = {
            'name': 'Cliffside Villa',
            'client': self.studio_client.id,
            'type': 'RESIDENTIAL',
            'rooms': [
                {'type': 'LIVING_ROOM'},
                {'type': 'KITCHEN', 'name': 'Main kitchen'},
            ],
        }
        response = self.client.post('/api/v1/projects/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(response.data['rooms']), 2)
        for room in response.data['rooms']:
            self.assertEqual(len(room['stages']), 5)
            self.assertEqual(room['stages'][0]['type'], 'DESIGN_CONCEPT')
        self.assertEqual(response.data['created_by']['id'], self.user.id)
        self.assertTrue(AuditLog.objects.filter(action='create', model_name='Project').exists())

    def test_create_project_requires_client(self):
        response = self.client.post('/api/v1/projects/', {'name': 'Orphan'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('client', response.data)

    def test_invalid_room_rolls_back(self):
        data = {'name': 'Bad rooms', 'client': self.studio_client.id, 'rooms': [{'type': 'SPACESHIP'}]}
        response = self.client.post('/api/v1/projects/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Project.objects.filter(name='Bad rooms').exists())

    def test_list_projects_paginated_and_filtered(self):
        TestDataFactory.create_project(name='Alpha', client=self.studio_client, status='IN_PROGRESS')
        TestDataFactory.create_project(name='Beta', client=self.studio_client, status='ON_HOLD')
        response = self.client.get('/api/v1/projects/?status=ON_HOLD')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['name'], 'Beta')

    def test_add_room_to_project(self):
        project = TestDataFactory.create_project(client=self.studio_client)
        response = self.client.post(f'/api/v1/projects/{project.id}/rooms/', {'type': 'BATHROOM'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(response.data['stages']), 5)
        self.assertEqual(response.data['display_name'], 'Bathroom')

    def test_only_admins_delete_projects(self):
        project = TestDataFactory.create_project(client=self.studio_client)
        response = self.client.delete(f'/api/v1/projects/{project.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        admin_client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_admin())
        response = admin_client.delete(f'/api/v1/projects/{project.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)


class StageAPITests(TestCase):
    """Test stage endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.room = TestDataFactory.create_room()
        self.concept = TestDataFactory.get_stage(self.room, 'DESIGN_CONCEPT')

    def test_stage_detail_lists_blockers(self):
        response = self.client.get(f'/api/v1/stages/{self.concept.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['phase']['order'], 1)
        self.assertTrue(response.data['completion_blockers'])

    def test_start_action(self):
        response = self.client.post(f'/api/v1/stages/{self.concept.id}/start/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'IN_PROGRESS')
        self.assertEqual(response.data['room']['status'], 'IN_PROGRESS')
        self.assertTrue(AuditLog.objects.filter(action='stage_start').exists())

    def test_complete_with_blockers_returns_details(self):
        self.client.post(f'/api/v1/stages/{self.concept.id}/start/')
        response = self.client.post(f'/api/v1/stages/{self.concept.id}/complete/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Stage cannot be completed yet')
        self.assertIn('details', response.data)

    def test_invalid_transition(self):
        response = self.client.post(f'/api/v1/stages/{self.concept.id}/resume/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_assign_action(self):
        drafter = TestDataFactory.create_user(role='DRAFTER')
        response = self.client.post(f'/api/v1/stages/{self.concept.id}/assign/', {'user_id': drafter.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['assigned_to']['id'], drafter.id)

    def test_assign_rejects_non_numeric_user_id(self):
        response = self.client.post(f'/api/v1/stages/{self.concept.id}/assign/', {'user_id': 'abc'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'user_id must be a user id')
        self.assertIsNone(Stage.objects.get(pk=self.concept.pk).assigned_to)

    def test_stage_activity(self):
        self.client.post(f'/api/v1/stages/{self.concept.id}/start/')
        response = self.client.get(f'/api/v1/stages/{self.concept.id}/activity/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertGreaterEqual(len(response.data), 1)

    def test_design_section_upsert_starts_stage(self):
        url = f'/api/v1/stages/{self.concept.id}/design-sections/'
        response = self.client.post(url, {'type': 'GENERAL', 'content': 'Warm minimal'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.post(url, {'type': 'GENERAL', 'content': 'Warm minimal, oak'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(DesignSection.objects.filter(stage=self.concept).count(), 1)

        self.concept.refresh_from_db()
        self.assertEqual(self.concept.status, 'IN_PROGRESS')

        response = self.client.get(url)
        self.assertEqual(response.data['missing_types'], ['WALL_COVERING', 'CEILING', 'FLOOR'])

    def test_design_sections_only_on_concept_stage(self):
        three_d = TestDataFactory.get_stage(self.room, 'THREE_D')
        response = self.client.get(f'/api/v1/stages/{three_d.id}/design-sections/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class NotificationAPITests(TestCase):
    """Test notification endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        Notification.objects.create(user=self.user, type='PROJECT_UPDATE', title='One', message='First')
        Notification.objects.create(user=self.user, type='PROJECT_UPDATE', title='Two', message='Second')

    def test_list_and_mark_read(self):
        response = self.client.get('/api/v1/notifications/')
        self.assertEqual(response.data['unread_count'], 2)

        notification_id = response.data['results'][0]['id']
        response = self.client.post(f'/api/v1/notifications/{notification_id}/read/')
        self.assertTrue(response.data['is_read'])

        response = self.client.post('/api/v1/notifications/read-all/')
        self.assertEqual(response.data['updated'], 1)

    def test_cannot_read_other_users_notification(self):
        other = TestDataFactory.create_user()
        notification = Notification.objects.create(user=other, type='PROJECT_UPDATE', title='x', message='y')
        response = self.client.post(f'/api/v1/notifications/{notification.id}/read/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class BackfillRoomStagesCommandTests(TestCase):
    """Test the backfill_room_stages management command"""

    def test_creates_missing_stages(self):
        room = TestDataFactory.create_room(with_stages=False)
        Stage.objects.create(room=room, type='DESIGN_CONCEPT', status='IN_PROGRESS')

        out = StringIO()
        call_command('backfill_room_stages', '--dry-run', stdout=out)
        self.assertEqual(room.stages.count(), 1)
        self.assertIn('missing', out.getvalue())

        call_command('backfill_room_stages', stdout=StringIO())
        self.assertEqual(room.stages.count(), 5)
        room.refresh_from_db()
        self.assertEqual(room.status, 'IN_PROGRESS')
        self.assertEqual(room.current_stage, 'DESIGN_CONCEPT')
