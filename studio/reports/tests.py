"""
Test suite for reports
Tests: project progress, team workload and dashboard KPIs
"""
from datetime import timedelta
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from studio.approvals.models import ClientApprovalVersion
from studio.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from studio.projects.models import Stage


class ProjectProgressReportTests(TestCase):
    """Test the project progress report"""

    def setUp(self):
        self.user = TestDataFactory.create_user(first_name='Rita', last_name='Moss')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.project = TestDataFactory.create_project(name='Harbor House')
        self.kitchen = TestDataFactory.create_room(self.project, room_type='KITCHEN')
        self.bedroom = TestDataFactory.create_room(self.project, room_type='BEDROOM', order=1)

    def test_progress_report(self):
        Stage.objects.filter(room=self.kitchen, type__in=['DESIGN_CONCEPT', 'THREE_D']).update(status='COMPLETED')
        Stage.objects.filter(room=self.kitchen, type='CLIENT_APPROVAL').update(status='IN_PROGRESS', assigned_to=self.user)
        section = TestDataFactory.create_ffe_section(self.kitchen)
        TestDataFactory.create_ffe_item(section, state='CONFIRMED')
        TestDataFactory.create_task(project=self.project, room=self.kitchen)
        TestDataFactory.create_task(project=self.project, room=self.kitchen, status='DONE')
        TestDataFactory.create_task(project=self.project, due_date=timezone.localdate() - timedelta(days=2))

        response = self.client.get(f'/api/v1/reports/projects/{self.project.id}/progress/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['project']['name'], 'Harbor House')

        kitchen, bedroom = response.data['rooms']
        self.assertEqual(kitchen['progress'], 40)
        self.assertEqual(bedroom['progress'], 0)
        self.assertEqual(response.data['overall_progress'], 20)
        self.assertEqual(kitchen['stages'][2]['assigned_to'], 'Rita Moss')
        self.assertEqual(kitchen['ffe']['percentage'], 100)
        self.assertEqual(kitchen['open_tasks'], 1)

        counts = response.data['stage_status_counts']
        self.assertEqual(counts['COMPLETED'], 2)
        self.assertEqual(counts['IN_PROGRESS'], 1)
        self.assertEqual(counts['NOT_STARTED'], 7)
        self.assertEqual(response.data['tasks'], {'total': 3, 'open': 2, 'overdue': 1})

    def test_not_applicable_stages_do_not_count(self):
        Stage.objects.filter(room=self.bedroom, type='DRAWINGS').update(status='NOT_APPLICABLE')
        Stage.objects.filter(room=self.bedroom).exclude(type='DRAWINGS').update(status='COMPLETED')
        response = self.client.get(f'/api/v1/reports/projects/{self.project.id}/progress/')
        self.assertEqual(response.data['rooms'][1]['progress'], 100)

    def test_unknown_project(self):
        response = self.client.get('/api/v1/reports/projects/999999/progress/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class WorkloadReportTests(TestCase):
    """Test the workload report"""

    def setUp(self):
        self.designer = TestDataFactory.create_user(username='designer')
        self.renderer = TestDataFactory.create_user(username='renderer', role='RENDERER')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.designer)
        self.project = TestDataFactory.create_project(name='Harbor House')
        self.room = TestDataFactory.create_room(self.project)

    def test_workload_per_user(self):
        Stage.objects.filter(room=self.room, type='DESIGN_CONCEPT').update(status='IN_PROGRESS', assigned_to=self.designer)
        Stage.objects.filter(room=self.room, type='DRAWINGS').update(assigned_to=self.designer)
        Stage.objects.filter(room=self.room, type='THREE_D').update(status='COMPLETED', assigned_to=self.renderer)
        TestDataFactory.create_task(assignee=self.designer, project=self.project,
                                    due_date=timezone.localdate() - timedelta(days=1))
        TestDataFactory.create_task(assignee=self.designer)
        TestDataFactory.create_task(assignee=self.designer, status='DONE')

        response = self.client.get(f'/api/v1/reports/workload/?user={self.designer.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['users']), 1)

        row = response.data['users'][0]
        self.assertEqual(row['stages_in_progress'], 1)
        self.assertEqual(row['stages_not_started'], 1)
        self.assertEqual(row['open_tasks'], 2)
        self.assertEqual(row['overdue_tasks'], 1)
        self.assertEqual([p['project_name'] for p in row['projects']], ['Harbor House', 'No project'])
        self.assertEqual(row['projects'][0]['overdue_tasks'], 1)

    def test_completed_stages_are_not_workload(self):
        Stage.objects.filter(room=self.room, type='THREE_D').update(status='COMPLETED', assigned_to=self.renderer)
        response = self.client.get(f'/api/v1/reports/workload/?user={self.renderer.id}')
        row = response.data['users'][0]
        self.assertEqual(row['stages_in_progress'], 0)
        self.assertEqual(row['projects'], [])

    def test_invalid_user(self):
        response = self.client.get('/api/v1/reports/workload/?user=abc')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class DashboardKPITests(TestCase):
    """Test dashboard KPIs"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_kpis(self):
        project = TestDataFactory.create_project(status='IN_PROGRESS')
        TestDataFactory.create_project(status='URGENT')
        TestDataFactory.create_project(status='COMPLETED')
        room = TestDataFactory.create_room(project)
        approval_stage = TestDataFactory.get_stage(room, 'CLIENT_APPROVAL')
        ClientApprovalVersion.objects.create(stage=approval_stage, version='V1', status='PENDING_INTERNAL_APPROVAL')
        ClientApprovalVersion.objects.create(stage=approval_stage, version='V2', status='FOLLOW_UP_REQUIRED')
        Stage.objects.filter(room=room, type='DRAWINGS').update(due_date=timezone.localdate() - timedelta(days=3))
        Stage.objects.filter(room=room, type='FFE').update(
            status='COMPLETED', due_date=timezone.localdate() - timedelta(days=3)
        )
        TestDataFactory.create_task(assignee=self.user)
        TestDataFactory.create_task(due_date=timezone.localdate() - timedelta(days=1))
        TestDataFactory.create_task(assignee=self.user, status='DONE')
        drawing = TestDataFactory.create_drawing(project)
        TestDataFactory.create_transmittal(project, drawings=[drawing], status='SENT', sent_at=timezone.now())
        TestDataFactory.create_transmittal(project, drawings=[drawing], number='T-002', status='SENT',
                                           sent_at=timezone.now() - timedelta(days=45))

        response = self.client.get('/api/v1/reports/dashboard-kpis/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['projects'], {'active': 2, 'total': 3})
        self.assertEqual(response.data['approvals']['awaiting_internal'], 1)
        self.assertEqual(response.data['approvals']['follow_up_required'], 1)
        self.assertEqual(response.data['tasks'], {'open': 2, 'overdue': 1, 'mine': 1})
        self.assertEqual(response.data['transmittals_sent_last_30_days'], 1)
        self.assertEqual(response.data['stages_overdue'], 1)
        self.assertEqual(sum(response.data['rooms_by_status'].values()), 1)
