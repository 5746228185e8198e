"""
Test suite for the task board
Tests: task creation rules, status timestamps, filters and board grouping
"""
from datetime import timedelta, date
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from studio.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from studio.tasks.board import task_sort_key, build_board
from studio.tasks.models import Task


class TaskModelTests(TestCase):
    """Test status timestamps and overdue detection"""

    def test_timestamps_follow_status(self):
        task = TestDataFactory.create_task()
        self.assertIsNone(task.started_at)

        task.status = 'IN_PROGRESS'
        task.save()
        started_at = task.started_at
        self.assertIsNotNone(started_at)

        task.status = 'DONE'
        task.save()
        self.assertIsNotNone(task.completed_at)
        self.assertEqual(task.started_at, started_at)

        task.status = 'TODO'
        task.save()
        self.assertIsNone(task.completed_at)

    def test_is_overdue(self):
        yesterday = timezone.localdate() - timedelta(days=1)
        self.assertTrue(TestDataFactory.create_task(due_date=yesterday).is_overdue)
        self.assertFalse(TestDataFactory.create_task(due_date=yesterday, status='DONE').is_overdue)
        self.assertFalse(TestDataFactory.create_task().is_overdue)


class TaskSortKeyTests(TestCase):
    """Test board ordering"""

    def test_priority_then_due_date(self):
        now = timezone.now()
        urgent = Task(title='Urgent', priority='URGENT', created_at=now)
        low_soon = Task(title='Low soon', priority='LOW', due_date=date(2026, 1, 1), created_at=now)
        high_undated = Task(title='High undated', priority='HIGH', created_at=now)
        high_dated = Task(title='High dated', priority='HIGH', due_date=date(2026, 3, 1), created_at=now)

        ordered = sorted([low_soon, high_undated, urgent, high_dated], key=task_sort_key)
        self.assertEqual([t.title for t in ordered], ['Urgent', 'High dated', 'High undated', 'Low soon'])

    def test_invalid_group_by(self):
        with self.assertRaises(ValueError):
            build_board([], 'assignee', lambda items: items)


class TaskAPITests(TestCase):
    """Test task endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.project = TestDataFactory.create_project(name='Harbor House')
        self.room = TestDataFactory.create_room(self.project)

    def test_create_task_derives_project_from_room(self):
        stage = TestDataFactory.get_stage(self.room, 'DRAWINGS')
        response = self.client.post('/api/v1/tasks/', {
            'title': 'Check stair section', 'stage': stage.id, 'assignee': self.user.id
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['room'], self.room.id)
        self.assertEqual(response.data['project'], self.project.id)
        self.assertEqual(response.data['priority'], 'MEDIUM')
        self.assertEqual(response.data['created_by']['id'], self.user.id)

    def test_stage_from_other_room_rejected(self):
        other_room = TestDataFactory.create_room(self.project, room_type='KITCHEN', order=1)
        stage = TestDataFactory.get_stage(other_room, 'FFE')
        response = self.client.post('/api/v1/tasks/', {
            'title': 'Mismatched', 'room': self.room.id, 'stage': stage.id
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('stage', response.data)

    def test_room_from_other_project_rejected(self):
        other_project = TestDataFactory.create_project()
        response = self.client.post('/api/v1/tasks/', {
            'title': 'Mismatched', 'project': other_project.id, 'room': self.room.id
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('room', response.data)

    def test_toggle(self):
        task = TestDataFactory.create_task(project=self.project)
        response = self.client.post(f'/api/v1/tasks/{task.id}/toggle/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'DONE')
        self.assertIsNotNone(response.data['completed_at'])

        response = self.client.post(f'/api/v1/tasks/{task.id}/toggle/')
        self.assertEqual(response.data['status'], 'TODO')
        self.assertIsNone(response.data['completed_at'])

    def test_list_filters(self):
        yesterday = timezone.localdate() - timedelta(days=1)
        TestDataFactory.create_task(title='Mine overdue', assignee=self.user, due_date=yesterday)
        TestDataFactory.create_task(title='Mine done', assignee=self.user, status='DONE', due_date=yesterday)
        TestDataFactory.create_task(title='Someone else', priority='URGENT')

        response = self.client.get('/api/v1/tasks/?mine=true')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)

        response = self.client.get('/api/v1/tasks/?overdue=true')
        self.assertEqual([t['title'] for t in response.data['results']], ['Mine overdue'])

        response = self.client.get('/api/v1/tasks/?status=DONE&status=TODO&priority=URGENT')
        self.assertEqual([t['title'] for t in response.data['results']], ['Someone else'])

        response = self.client.get('/api/v1/tasks/?search=else')
        self.assertEqual(response.data['count'], 1)

    def test_invalid_status_filter(self):
        response = self.client.get('/api/v1/tasks/?status=BLOCKED')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_task(self):
        task = TestDataFactory.create_task(project=self.project)
        response = self.client.delete(f'/api/v1/tasks/{task.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Task.objects.filter(pk=task.pk).exists())


class TaskBoardTests(TestCase):
    """Test the grouped board"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.alpha = TestDataFactory.create_project(name='Alpha Loft')
        self.zulu = TestDataFactory.create_project(name='Zulu Villa')
        TestDataFactory.create_task(title='Zulu low', project=self.zulu, priority='LOW')
        TestDataFactory.create_task(title='Zulu urgent', project=self.zulu, priority='URGENT')
        TestDataFactory.create_task(title='Alpha done', project=self.alpha, status='DONE')
        TestDataFactory.create_task(title='Loose end')

    def test_project_board(self):
        response = self.client.get('/api/v1/tasks/board/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['group_by'], 'project')
        self.assertEqual(response.data['total'], 4)
        self.assertEqual(response.data['open'], 3)

        groups = response.data['groups']
        self.assertEqual([g['label'] for g in groups], ['Alpha Loft', 'Zulu Villa', 'No project'])
        self.assertIsNone(groups[-1]['key'])
        self.assertEqual(groups[0]['open_count'], 0)
        self.assertEqual([t['title'] for t in groups[1]['tasks']], ['Zulu urgent', 'Zulu low'])

    def test_status_board_shows_every_column(self):
        response = self.client.get('/api/v1/tasks/board/?group_by=status')
        groups = response.data['groups']
        self.assertEqual([g['key'] for g in groups], ['TODO', 'IN_PROGRESS', 'REVIEW', 'DONE', 'CANCELLED'])
        self.assertEqual(groups[0]['count'], 3)
        self.assertEqual(groups[1]['count'], 0)

    def test_priority_board(self):
        response = self.client.get(f'/api/v1/tasks/board/?group_by=priority&project={self.zulu.id}')
        groups = {g['key']: g['count'] for g in response.data['groups']}
        self.assertEqual(groups, {'URGENT': 1, 'HIGH': 0, 'MEDIUM': 0, 'NORMAL': 0, 'LOW': 1})

    def test_invalid_group_by(self):
        response = self.client.get('/api/v1/tasks/board/?group_by=assignee')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
