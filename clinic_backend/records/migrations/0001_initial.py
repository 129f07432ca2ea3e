from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

	initial = True

	dependencies = [
		('patients', '0001_initial'),
		('appointments', '0001_initial'),
	]

	operations = [
		migrations.CreateModel(
			name='Guidance',
			fields=[
				('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
				('title', models.CharField(blank=True, default='', max_length=255)),
				('status', models.CharField(choices=[('ACTIVE', 'Active'), ('COMPLETED', 'Completed')], default='ACTIVE', max_length=20)),
				('scheduled_at', models.DateTimeField(blank=True, null=True)),
				('created_at', models.DateTimeField(auto_now_add=True)),
				('updated_at', models.DateTimeField(auto_now=True)),
				(
					'patient',
					models.ForeignKey(
						on_delete=django.db.models.deletion.CASCADE,
						related_name='guidances',
						to='patients.patient',
					),
				),
				('sessions', models.ManyToManyField(blank=True, related_name='guidances', to='appointments.therapysession')),
			],
			options={
				'ordering': ['-updated_at', 'id'],
			},
		),
		migrations.CreateModel(
			name='ResearchDocument',
			fields=[
				('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
				('title', models.CharField(blank=True, default='', max_length=255)),
				('created_at', models.DateTimeField(auto_now_add=True)),
				('updated_at', models.DateTimeField(auto_now=True)),
				('patients', models.ManyToManyField(blank=True, related_name='research_documents', to='patients.patient')),
			],
			options={
				'ordering': ['title', 'id'],
			},
		),
		migrations.CreateModel(
			name='ResearchNote',
			fields=[
				('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
				('title', models.CharField(blank=True, default='', max_length=255)),
				('created_at', models.DateTimeField(auto_now_add=True)),
				('updated_at', models.DateTimeField(auto_now=True)),
				(
					'document',
					models.ForeignKey(
						blank=True,
						null=True,
						on_delete=django.db.models.deletion.SET_NULL,
						related_name='notes',
						to='records.researchdocument',
					),
				),
				('patients', models.ManyToManyField(blank=True, related_name='research_notes', to='patients.patient')),
			],
			options={
				'ordering': ['-updated_at', 'id'],
			},
		),
		migrations.CreateModel(
			name='Receipt',
			fields=[
				('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
				('receipt_number', models.CharField(max_length=32)),
				('amount_nis', models.DecimalField(decimal_places=2, max_digits=10)),
				('issued_at', models.DateTimeField()),
				('created_at', models.DateTimeField(auto_now_add=True)),
				(
					'patient',
					models.ForeignKey(
						on_delete=django.db.models.deletion.CASCADE,
						related_name='receipts',
						to='patients.patient',
					),
				),
			],
			options={
				'ordering': ['-issued_at', 'id'],
			},
		),
		migrations.CreateModel(
			name='PaymentAllocation',
			fields=[
				('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
				('amount_nis', models.DecimalField(decimal_places=2, max_digits=10)),
				(
					'receipt',
					models.ForeignKey(
						on_delete=django.db.models.deletion.CASCADE,
						related_name='payment_allocations',
						to='records.receipt',
					),
				),
				(
					'session',
					models.ForeignKey(
						on_delete=django.db.models.deletion.CASCADE,
						related_name='payment_allocations',
						to='appointments.therapysession',
					),
				),
			],
			options={
				'ordering': ['receipt_id', 'id'],
			},
		),
		migrations.CreateModel(
			name='PatientConceptLink',
			fields=[
				('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
				('label', models.CharField(blank=True, default='', max_length=255)),
				('href', models.URLField(blank=True, max_length=1000, null=True)),
				('created_at', models.DateTimeField(auto_now_add=True)),
				('updated_at', models.DateTimeField(auto_now=True)),
				(
					'patient',
					models.ForeignKey(
						on_delete=django.db.models.deletion.CASCADE,
						related_name='concept_links',
						to='patients.patient',
					),
				),
			],
			options={
				'ordering': ['label', 'id'],
			},
		),
	]
