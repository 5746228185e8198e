"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from studio.projects.models import Client, Project, Room
from studio.projects.workflow import create_room_stages
from studio.approvals.models import RenderingVersion, RenderingAsset
from studio.drawings.models import ProjectDrawing, DrawingChecklistItem, Transmittal, TransmittalItem
from studio.ffe.models import RoomFFESection, RoomFFEItem
from studio.portal.models import ClientAccessToken
from studio.tasks.models import Task
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', role='DESIGNER',
                    is_staff=False, is_superuser=False, **extra):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            role=role,
            is_staff=is_staff,
            is_superuser=is_superuser,
            **extra
        )

    @staticmethod
    def create_admin(**kwargs):
        """Create a studio owner"""
        kwargs.setdefault('role', 'OWNER')
        return TestDataFactory.create_user(**kwargs)

    @staticmethod
    def create_client(name=None, email=None, company=None):
        """Create a test client"""
        if not name:
            name = f'Client_{TestDataFactory.random_string(6)}'
        if email is None:
            email = f'{name.lower()}@client.test'
        return Client.objects.create(name=name, email=email, company=company)

    @staticmethod
    def create_project(name=None, client=None, user=None, status='IN_PROGRESS', **fields):
        """Create a test project"""
        if not name:
            name = f'Project_{TestDataFactory.random_string(6)}'
        if not client:
            client = TestDataFactory.create_client()
        return Project.objects.create(name=name, client=client, created_by=user, status=status, **fields)

    @staticmethod
    def create_room(project=None, room_type='LIVING_ROOM', name='', order=0, with_stages=True):
        """Create a test room, with its workflow stages unless with_stages is False"""
        if not project:
            project = TestDataFactory.create_project()
        room = Room.objects.create(project=project, type=room_type, name=name, order=order)
        if with_stages:
            create_room_stages(room)
        return room

    @staticmethod
    def get_stage(room, stage_type):
        """Return the stage of the given phase for a room"""
        return room.stages.get(type=stage_type)

    @staticmethod
    def create_rendering(stage, user=None, version='V1', status='COMPLETED', asset_count=1):
        """Create a rendering version with assets on a THREE_D stage"""
        rendering = RenderingVersion.objects.create(
            room=stage.room, stage=stage, version=version, status=status, created_by=user
        )
        for index in range(asset_count):
            RenderingAsset.objects.create(
                rendering_version=rendering,
                title=f'Render {index + 1}',
                url=f'https://cdn.example.com/{TestDataFactory.random_string(8)}.jpg',
                order=index,
            )
        return rendering

    @staticmethod
    def create_checklist_item(stage, name=None, item_type='CUSTOM', completed=False):
        """Create a drawing checklist item on a DRAWINGS stage"""
        if not name:
            name = f'Drawing_{TestDataFactory.random_string(4)}'
        return DrawingChecklistItem.objects.create(stage=stage, name=name, type=item_type, completed=completed)

    @staticmethod
    def create_drawing(project, drawing_number=None, title=None, discipline='ARCHITECTURAL',
                       current_revision=0, room=None, user=None):
        """Create a drawing in a project register"""
        if drawing_number is None:
            drawing_number = f'A-{random.randint(100, 999)}{TestDataFactory.random_string(2)}'
        if not title:
            title = f'Drawing {drawing_number}'
        return ProjectDrawing.objects.create(
            project=project,
            room=room,
            drawing_number=drawing_number,
            title=title,
            discipline=discipline,
            current_revision=current_revision,
            created_by=user,
        )

    @staticmethod
    def create_transmittal(project, drawings=(), number='T-001', recipient_name='Contractor',
                           recipient_email='site@contractor.test', status='DRAFT', sent_at=None,
                           revision_number=None):
        """Create a transmittal with one item per drawing"""
        transmittal = Transmittal.objects.create(
            project=project,
            transmittal_number=number,
            recipient_name=recipient_name,
            recipient_email=recipient_email,
            recipient_type='CONTRACTOR',
            status=status,
            sent_at=sent_at,
        )
        for drawing in drawings:
            TransmittalItem.objects.create(
                transmittal=transmittal,
                drawing=drawing,
                revision_number=drawing.current_revision if revision_number is None else revision_number,
            )
        return transmittal

    @staticmethod
    def create_ffe_section(room, name='Lighting', order=0):
        """Create an FFE section in a room"""
        return RoomFFESection.objects.create(room=room, name=name, order=order)

    @staticmethod
    def create_ffe_item(section, name=None, state='PENDING', is_required=False, visibility='VISIBLE', **fields):
        """Create an FFE item in a section"""
        if not name:
            name = f'Item_{TestDataFactory.random_string(6)}'
        return RoomFFEItem.objects.create(
            room=section.room,
            section=section,
            name=name,
            state=state,
            is_required=is_required,
            visibility=visibility,
            **fields
        )

    @staticmethod
    def create_access_token(project, name='Client link', **fields):
        """Create a client portal link"""
        return ClientAccessToken.objects.create(project=project, name=name, **fields)

    @staticmethod
    def create_task(title=None, project=None, room=None, assignee=None, status='TODO', priority='MEDIUM',
                    due_date=None, user=None):
        """Create a test task"""
        if not title:
            title = f'Task_{TestDataFactory.random_string(6)}'
        return Task.objects.create(
            title=title,
            project=project,
            room=room,
            assignee=assignee,
            status=status,
            priority=priority,
            due_date=due_date,
            created_by=user,
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
