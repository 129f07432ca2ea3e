from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

	initial = True

	dependencies = [
		('patients', '0001_initial'),
	]

	operations = [
		migrations.CreateModel(
			name='TherapySession',
			fields=[
				('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
				('scheduled_at', models.DateTimeField(db_index=True)),
				('status', models.CharField(choices=[('SCHEDULED', 'Scheduled'), ('COMPLETED', 'Completed'), ('CANCELED', 'Canceled'), ('CANCELED_LATE', 'Canceled late'), ('UNDOCUMENTED', 'Undocumented')], default='SCHEDULED', max_length=20)),
				('cancellation_reason', models.TextField(blank=True, null=True)),
				('canceled_at', models.DateTimeField(blank=True, null=True)),
				('is_recurring_template', models.BooleanField(default=False)),
				('created_at', models.DateTimeField(auto_now_add=True)),
				('updated_at', models.DateTimeField(auto_now=True)),
				(
					'patient',
					models.ForeignKey(
						on_delete=django.db.models.deletion.CASCADE,
						related_name='sessions',
						to='patients.patient',
					),
				),
			],
			options={
				'ordering': ['scheduled_at', 'id'],
				'indexes': [
					models.Index(fields=['patient', 'status', 'scheduled_at'], name='session_patient_status_idx'),
				],
			},
		),
		migrations.CreateModel(
			name='Task',
			fields=[
				('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
				('title', models.CharField(max_length=255)),
				('status', models.CharField(choices=[('OPEN', 'Open'), ('DONE', 'Done'), ('CANCELED', 'Canceled')], default='OPEN', max_length=20)),
				('due_at', models.DateTimeField(blank=True, null=True)),
				('completed_at', models.DateTimeField(blank=True, null=True)),
				('created_at', models.DateTimeField(auto_now_add=True)),
				('updated_at', models.DateTimeField(auto_now=True)),
				(
					'patient',
					models.ForeignKey(
						blank=True,
						null=True,
						on_delete=django.db.models.deletion.CASCADE,
						related_name='tasks',
						to='patients.patient',
					),
				),
				(
					'session',
					models.ForeignKey(
						blank=True,
						null=True,
						on_delete=django.db.models.deletion.SET_NULL,
						related_name='tasks',
						to='appointments.therapysession',
					),
				),
			],
			options={
				'ordering': ['status', 'due_at', 'id'],
				'indexes': [
					models.Index(fields=['patient', 'status'], name='task_patient_status_idx'),
				],
			},
		),
	]
