from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

	initial = True

	dependencies = [
		migrations.swappable_dependency(settings.AUTH_USER_MODEL),
	]

	operations = [
		migrations.CreateModel(
			name='Patient',
			fields=[
				('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
				('first_name', models.CharField(max_length=100)),
				('last_name', models.CharField(blank=True, default='', max_length=100)),
				('fixed_session_day', models.PositiveSmallIntegerField(blank=True, null=True)),
				('fixed_session_time', models.CharField(blank=True, default='', max_length=5)),
				('archived_at', models.DateTimeField(blank=True, db_index=True, null=True)),
				('created_at', models.DateTimeField(auto_now_add=True)),
				('updated_at', models.DateTimeField(auto_now=True)),
				(
					'owner',
					models.ForeignKey(
						on_delete=django.db.models.deletion.PROTECT,
						related_name='patients',
						to=settings.AUTH_USER_MODEL,
					),
				),
			],
			options={
				'ordering': ['last_name', 'first_name', 'id'],
				'indexes': [
					models.Index(fields=['owner', 'archived_at'], name='patient_owner_archived_idx'),
				],
			},
		),
		migrations.CreateModel(
			name='PatientLifecycleEvent',
			fields=[
				('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
				('event_type', models.CharField(choices=[('SET_INACTIVE', 'Set inactive'), ('REACTIVATED', 'Reactivated')], max_length=32)),
				('occurred_at', models.DateTimeField()),
				('reason', models.TextField(blank=True, null=True)),
				('metadata', models.JSONField(blank=True, null=True)),
				('created_at', models.DateTimeField(auto_now_add=True)),
				(
					'actor',
					models.ForeignKey(
						on_delete=django.db.models.deletion.PROTECT,
						related_name='patient_lifecycle_events',
						to=settings.AUTH_USER_MODEL,
					),
				),
				(
					'patient',
					models.ForeignKey(
						on_delete=django.db.models.deletion.CASCADE,
						related_name='lifecycle_events',
						to='patients.patient',
					),
				),
			],
			options={
				'ordering': ['-occurred_at', '-id'],
				'indexes': [
					models.Index(fields=['patient', 'occurred_at'], name='lifecycle_patient_time_idx'),
				],
			},
		),
	]
