"""
Test suite for the core module
Tests: authentication, users, settings, audit logs, permissions and global search
"""
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient
from studio.core.models import Setting, AuditLog
from studio.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from studio.core.utils import create_audit_log


class AuthTests(TestCase):
    """Test login and the current user endpoint"""

    def setUp(self):
        self.user = TestDataFactory.create_user(username='designer', password='testpass123')

    def test_login_returns_tokens_and_user(self):
        """Test login returns access and refresh tokens with the user"""
        client = APIClient()
        response = client.post('/api/v1/auth/login/', {'username': 'designer', 'password': 'testpass123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['username'], 'designer')
        self.assertEqual(response.data['user']['role'], 'DESIGNER')

    def test_login_with_wrong_password(self):
        """Test login with a wrong password is rejected"""
        client = APIClient()
        response = client.post('/api/v1/auth/login/', {'username': 'designer', 'password': 'wrong'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_requires_authentication(self):
        """Test anonymous requests are rejected"""
        response = APIClient().get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_reports_capabilities(self):
        """Test the current user payload includes role capabilities"""
        client = AuthenticatedAPIClient().authenticate_user(self.user)
        response = client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_admin'])
        self.assertFalse(response.data['can_approve_internally'])
        self.assertTrue(response.data['can_manage_portal'])

    def test_me_patch_ignores_role(self):
        """Test users can edit their profile but not their role"""
        client = AuthenticatedAPIClient().authenticate_user(self.user)
        response = client.patch('/api/v1/auth/me/', {'first_name': 'Dana', 'role': 'OWNER'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.first_name, 'Dana')
        self.assertEqual(self.user.role, 'DESIGNER')


class UserModelTests(TestCase):
    """Test User helpers"""

    def test_display_name_falls_back_to_username(self):
        user = TestDataFactory.create_user(username='plainuser')
        self.assertEqual(user.display_name, 'plainuser')
        user.first_name = 'Ana'
        user.last_name = 'Lopez'
        self.assertEqual(user.display_name, 'Ana Lopez')

    def test_is_studio_admin(self):
        self.assertTrue(TestDataFactory.create_user(role='OWNER').is_studio_admin)
        self.assertTrue(TestDataFactory.create_user(role='ADMIN').is_studio_admin)
        self.assertTrue(TestDataFactory.create_user(is_staff=True).is_studio_admin)
        self.assertFalse(TestDataFactory.create_user(role='DRAFTER').is_studio_admin)


class UserAPITests(TestCase):
    """Test user management endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_create_user(self):
        """Test an admin can create a team member"""
        data = {
            'username': 'newdrafter',
            'email': 'drafter@studio.test',
            'password': 'Str0ngPassw0rd!',
            'password_confirm': 'Str0ngPassw0rd!',
            'role': 'DRAFTER',
        }
        response = self.client.post('/api/v1/users/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['role'], 'DRAFTER')

    def test_create_user_password_mismatch(self):
        data = {
            'username': 'mismatch',
            'password': 'Str0ngPassw0rd!',
            'password_confirm': 'Different0ne!',
        }
        response = self.client.post('/api/v1/users/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_filter_users_by_role(self):
        TestDataFactory.create_user(role='RENDERER')
        response = self.client.get('/api/v1/users/?role=RENDERER')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['role'], 'RENDERER')

    def test_non_admin_cannot_list_users(self):
        """Test designers cannot manage users"""
        designer = TestDataFactory.create_user()
        client = AuthenticatedAPIClient().authenticate_user(designer)
        response = client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_cannot_delete_self(self):
        response = self.client.delete(f'/api/v1/users/{self.admin.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class SettingTests(TestCase):
    """Test runtime settings"""

    def test_get_int(self):
        Setting.objects.create(key='CLIENT_APPROVAL_FOLLOW_UP_DAYS', value='5')
        Setting.objects.create(key='BROKEN', value='five')
        self.assertEqual(Setting.get_int('CLIENT_APPROVAL_FOLLOW_UP_DAYS', 3), 5)
        self.assertEqual(Setting.get_int('BROKEN', 3), 3)
        self.assertEqual(Setting.get_int('MISSING', 7), 7)

    def test_setting_crud_requires_admin(self):
        admin_client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_admin())
        response = admin_client.post('/api/v1/settings/', {'key': 'STUDIO_TAGLINE', 'value': 'Calm rooms'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        designer_client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        response = designer_client.get('/api/v1/settings/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class AuditLogTests(TestCase):
    """Test audit log helpers and endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.designer = TestDataFactory.create_user()

    def test_create_audit_log_skips_missing_fields(self):
        self.assertIsNone(create_audit_log(user=self.admin, action='create', model_name='Project'))
        self.assertEqual(AuditLog.objects.count(), 0)

    def test_create_audit_log_with_user(self):
        log = create_audit_log(user=self.admin, action='create', model_name='Project', object_id=7,
                               object_name='Harbor House')
        self.assertIsNotNone(log)
        self.assertEqual(log.object_id, '7')
        self.assertEqual(log.user, self.admin)

    def test_designer_only_sees_own_logs(self):
        create_audit_log(user=self.admin, action='create', model_name='Project', object_id=1)
        create_audit_log(user=self.designer, action='create', model_name='Task', object_id=2)

        client = AuthenticatedAPIClient().authenticate_user(self.designer)
        response = client.get('/api/v1/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['model_name'], 'Task')

        admin_client = AuthenticatedAPIClient().authenticate_user(self.admin)
        response = admin_client.get('/api/v1/audit-logs/?model=Project')
        self.assertEqual(len(response.data), 1)

    def test_designer_cannot_read_other_log(self):
        log = create_audit_log(user=self.admin, action='create', model_name='Project', object_id=1)
        client = AuthenticatedAPIClient().authenticate_user(self.designer)
        response = client.get(f'/api/v1/audit-logs/{log.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class ViewerPermissionTests(TestCase):
    """Test that viewers have read-only access"""

    def setUp(self):
        self.viewer = TestDataFactory.create_user(role='VIEWER')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.viewer)

    def test_viewer_can_read(self):
        TestDataFactory.create_project()
        response = self.client.get('/api/v1/projects/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_viewer_cannot_write(self):
        response = self.client.post('/api/v1/clients/', {'name': 'Blocked'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class GlobalSearchTests(TestCase):
    """Test global search across projects, drawings, transmittals and tasks"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_empty_query(self):
        response = self.client.get('/api/v1/search/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['projects'], [])
        self.assertEqual(response.data['tasks'], [])

    def test_search_finds_related_records(self):
        client = TestDataFactory.create_client(name='Marlowe Family')
        project = TestDataFactory.create_project(name='Marlowe Residence', client=client)
        TestDataFactory.create_drawing(project, drawing_number='A-101', title='Marlowe ground floor plan')
        TestDataFactory.create_task(title='Call Marlowe about tiles', project=project)

        response = self.client.get('/api/v1/search/?q=marlowe')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['projects']), 1)
        self.assertEqual(len(response.data['clients']), 1)
        self.assertEqual(len(response.data['drawings']), 1)
        self.assertEqual(len(response.data['tasks']), 1)
