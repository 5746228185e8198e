"""
Test suite for the FFE module
Tests: progress statistics, presets, change history, bulk updates and FFE stage completion
"""
from django.test import TestCase
from rest_framework import status
from studio.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from studio.ffe.models import RoomFFEItem, FFEChangeLog
from studio.ffe.presets import preset_items
from studio.ffe.utils import ffe_stats, ffe_completion_blockers
from studio.projects import workflow
from studio.projects.models import Room, Stage
from studio.projects.workflow import WorkflowError


class FFEStatsTests(TestCase):
    """Test FFE progress calculation"""

    def setUp(self):
        self.room = TestDataFactory.create_room()
        self.section = TestDataFactory.create_ffe_section(self.room)

    def test_hidden_and_not_needed_items_are_not_considered(self):
        TestDataFactory.create_ffe_item(self.section, state='CONFIRMED')
        TestDataFactory.create_ffe_item(self.section, state='COMPLETED')
        TestDataFactory.create_ffe_item(self.section, state='SELECTED')
        TestDataFactory.create_ffe_item(self.section, state='PENDING', visibility='HIDDEN')
        TestDataFactory.create_ffe_item(self.section, state='NOT_NEEDED')

        stats = ffe_stats(self.room.ffe_items.all())
        self.assertEqual(stats['total'], 5)
        self.assertEqual(stats['considered'], 3)
        self.assertEqual(stats['completed'], 2)
        self.assertEqual(stats['percentage'], 67)
        self.assertEqual(stats['by_state']['CONFIRMED'], 1)

    def test_empty_room(self):
        stats = ffe_stats([])
        self.assertEqual(stats['percentage'], 0)
        self.assertEqual(stats['required_open'], 0)

    def test_room_progress_follows_item_changes(self):
        item = TestDataFactory.create_ffe_item(self.section, state='PENDING')
        TestDataFactory.create_ffe_item(self.section, state='CONFIRMED')
        self.assertEqual(Room.objects.get(pk=self.room.pk).progress_ffe, 50)

        item.state = 'COMPLETED'
        item.save()
        self.assertEqual(Room.objects.get(pk=self.room.pk).progress_ffe, 100)

        item.delete()
        self.assertEqual(Room.objects.get(pk=self.room.pk).progress_ffe, 100)

    def test_required_items_block_completion(self):
        TestDataFactory.create_ffe_item(self.section, name='Pendant light', is_required=True)
        TestDataFactory.create_ffe_item(self.section, name='Floor lamp', is_required=False)
        TestDataFactory.create_ffe_item(self.section, name='Hidden sconce', is_required=True, visibility='HIDDEN')
        self.assertEqual(ffe_completion_blockers(self.room), ['Required FFE item not resolved: Pendant light'])

    def test_ffe_stage_completion(self):
        item = TestDataFactory.create_ffe_item(self.section, name='Pendant light', is_required=True)
        stage = TestDataFactory.get_stage(self.room, 'FFE')
        Stage.objects.filter(pk=stage.pk).update(status='IN_PROGRESS')
        stage.refresh_from_db()

        with self.assertRaises(WorkflowError):
            workflow.complete_stage(stage)

        item.state = 'NOT_NEEDED'
        item.save()
        workflow.complete_stage(stage)
        self.assertEqual(stage.status, 'COMPLETED')


class PresetTests(TestCase):
    """Test section presets"""

    def test_preset_lookup_is_case_insensitive(self):
        items = preset_items('  lighting ')
        self.assertEqual(len(items), 4)
        self.assertEqual([i['order'] for i in items], [0, 1, 2, 3])

    def test_unknown_preset(self):
        self.assertEqual(preset_items('Garden'), [])


class FFEAPITests(TestCase):
    """Test FFE endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user(role='FFE')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.room = TestDataFactory.create_room()

    def test_create_section_from_preset(self):
        response = self.client.post(f'/api/v1/rooms/{self.room.id}/ffe/sections/',
                                    {'name': 'Lighting', 'use_presets': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(response.data['items']), 4)
        self.assertEqual(sum(1 for i in response.data['items'] if i['is_required']), 2)

    def test_create_empty_section(self):
        response = self.client.post(f'/api/v1/rooms/{self.room.id}/ffe/sections/', {'name': 'Art'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['items'], [])

    def test_room_ffe_overview(self):
        section = TestDataFactory.create_ffe_section(self.room, name='Furniture')
        TestDataFactory.create_ffe_item(section, name='Sofa', is_required=True)
        response = self.client.get(f'/api/v1/rooms/{self.room.id}/ffe/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['sections']), 1)
        self.assertEqual(response.data['stats']['required_open'], 1)
        self.assertEqual(response.data['completion_blockers'], ['Required FFE item not resolved: Sofa'])

    def test_add_item_to_foreign_section_rejected(self):
        foreign_section = TestDataFactory.create_ffe_section(TestDataFactory.create_room())
        response = self.client.post(f'/api/v1/rooms/{self.room.id}/ffe/items/',
                                    {'name': 'Rug', 'section': foreign_section.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('section', response.data)

    def test_update_item_records_history(self):
        section = TestDataFactory.create_ffe_section(self.room)
        item = TestDataFactory.create_ffe_item(section, name='Pendant light')

        response = self.client.patch(f'/api/v1/ffe/items/{item.id}/', {'state': 'SELECTED', 'quantity': 2}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        logs = FFEChangeLog.objects.filter(item=item)
        self.assertEqual(set(logs.values_list('field', flat=True)), {'state', 'quantity'})
        state_log = logs.get(field='state')
        self.assertEqual(state_log.old_value, 'PENDING')
        self.assertEqual(state_log.new_value, 'SELECTED')
        self.assertEqual(state_log.user, self.user)

        ffe_stage = TestDataFactory.get_stage(self.room, 'FFE')
        self.assertTrue(ffe_stage.activities.filter(type='FFE').exists())

        response = self.client.get(f'/api/v1/ffe/items/{item.id}/')
        self.assertEqual(len(response.data['history']), 2)

    def test_filter_items(self):
        section = TestDataFactory.create_ffe_section(self.room)
        TestDataFactory.create_ffe_item(section, state='CONFIRMED', is_required=True)
        TestDataFactory.create_ffe_item(section, state='PENDING')
        response = self.client.get(f'/api/v1/rooms/{self.room.id}/ffe/items/?state=CONFIRMED')
        self.assertEqual(len(response.data), 1)
        response = self.client.get(f'/api/v1/rooms/{self.room.id}/ffe/items/?required=false')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['state'], 'PENDING')

    def test_bulk_state(self):
        section = TestDataFactory.create_ffe_section(self.room)
        first = TestDataFactory.create_ffe_item(section)
        second = TestDataFactory.create_ffe_item(section, state='CONFIRMED')
        foreign = TestDataFactory.create_ffe_item(TestDataFactory.create_ffe_section(TestDataFactory.create_room()))

        response = self.client.post(f'/api/v1/rooms/{self.room.id}/ffe/items/bulk-state/', {
            'item_ids': [first.id, second.id, foreign.id], 'state': 'CONFIRMED'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['updated'], 1)
        self.assertEqual(response.data['stats']['percentage'], 100)

        foreign.refresh_from_db()
        self.assertEqual(foreign.state, 'PENDING')
        self.assertEqual(FFEChangeLog.objects.filter(item=first, field='state').count(), 1)

    def test_bulk_state_without_matching_items(self):
        response = self.client.post(f'/api/v1/rooms/{self.room.id}/ffe/items/bulk-state/', {
            'item_ids': [999999], 'state': 'CONFIRMED'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_section_updates_progress(self):
        section = TestDataFactory.create_ffe_section(self.room)
        TestDataFactory.create_ffe_item(section, state='CONFIRMED')
        other = TestDataFactory.create_ffe_section(self.room, name='Furniture', order=1)
        TestDataFactory.create_ffe_item(other, state='PENDING')
        self.assertEqual(Room.objects.get(pk=self.room.pk).progress_ffe, 50)

        response = self.client.delete(f'/api/v1/ffe/sections/{other.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(RoomFFEItem.objects.filter(section=other.id).exists())
        self.assertEqual(Room.objects.get(pk=self.room.pk).progress_ffe, 100)

    def test_section_presets(self):
        response = self.client.get('/api/v1/ffe/section-presets/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('Lighting', [p['name'] for p in response.data])
