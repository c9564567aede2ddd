import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('teams', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='DailyUpdate',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('employee_email', models.EmailField(db_index=True, max_length=254)),
                ('employee_name', models.CharField(max_length=150)),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now, editable=False)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('tasks_completed', models.TextField()),
                ('story_points', models.PositiveIntegerField(blank=True, null=True)),
                ('priority', models.CharField(choices=[('Low', 'Low'), ('Medium', 'Medium'), ('High', 'High')], default='Medium', max_length=10)),
                ('status', models.CharField(choices=[('to-do', 'To Do'), ('in-progress', 'In Progress'), ('completed', 'Completed'), ('blocked', 'Blocked'), ('reopen', 'Reopened')], db_index=True, default='in-progress', max_length=15)),
                ('start_date', models.DateField(blank=True, null=True)),
                ('end_date', models.DateField(blank=True, null=True)),
                ('blocker_type', models.CharField(blank=True, choices=[('Risk', 'Risk'), ('Issue', 'Issue'), ('Dependency', 'Dependency'), ('Blocker', 'Blocker')], max_length=15, null=True)),
                ('blocker_description', models.TextField(blank=True, help_text='Required when a blocker type is set', null=True)),
                ('expected_resolution_date', models.DateField(blank=True, help_text='Only meaningful when a blocker type is set', null=True)),
                ('additional_notes', models.TextField(blank=True)),
                ('team', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='updates', to='teams.team')),
            ],
            options={
                'verbose_name': 'daily update',
                'verbose_name_plural': 'daily updates',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['employee_email', 'created_at'], name='updates_owner_created_idx'),
                    models.Index(fields=['team', 'created_at'], name='updates_team_created_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(
                        condition=(
                            models.Q(
                                blocker_type__isnull=True,
                                blocker_description__isnull=True,
                                expected_resolution_date__isnull=True,
                            )
                            | (
                                models.Q(blocker_type__isnull=False, blocker_description__isnull=False)
                                & ~models.Q(blocker_description='')
                            )
                        ),
                        name='daily_update_blocker_fields_paired',
                    ),
                ],
            },
        ),
    ]
