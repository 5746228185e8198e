# Generated manually

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('projects', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='RoomFFESection',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True)),
                ('order', models.PositiveIntegerField(default=0)),
                ('is_expanded', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('room', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='ffe_sections', to='projects.room')),
            ],
            options={
                'db_table': 'room_ffe_sections',
                'ordering': ['order', 'id'],
            },
        ),
        migrations.CreateModel(
            name='RoomFFEItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True)),
                ('state', models.CharField(choices=[('PENDING', 'Pending'), ('UNDECIDED', 'Undecided'), ('SELECTED', 'Selected'), ('CONFIRMED', 'Confirmed'), ('NOT_NEEDED', 'Not Needed'), ('COMPLETED', 'Completed')], default='PENDING', max_length=20)),
                ('visibility', models.CharField(choices=[('VISIBLE', 'Visible'), ('HIDDEN', 'Hidden')], default='VISIBLE', max_length=10)),
                ('is_required', models.BooleanField(default=False)),
                ('quantity', models.PositiveIntegerField(default=1)),
                ('notes', models.TextField(blank=True)),
                ('supplier_link', models.URLField(blank=True, max_length=1000)),
                ('unit_cost', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('order', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('room', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='ffe_items', to='projects.room')),
                ('section', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='ffe.roomffesection')),
            ],
            options={
                'db_table': 'room_ffe_items',
                'ordering': ['section__order', 'order', 'id'],
                'indexes': [
                    models.Index(fields=['room', 'state'], name='room_ffe_it_room_id_5f3a8c_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='FFEChangeLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('field', models.CharField(max_length=50)),
                ('old_value', models.TextField(blank=True, null=True)),
                ('new_value', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('item', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='change_logs', to='ffe.roomffeitem')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='ffe_changes', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'ffe_change_logs',
                'ordering': ['-created_at', '-id'],
            },
        ),
    ]
