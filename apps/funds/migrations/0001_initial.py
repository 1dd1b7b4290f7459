# Generated manually for funds app

import uuid
from decimal import Decimal
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Fund',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('maximum_allowance', models.DecimalField(decimal_places=2, max_digits=18, validators=[MinValueValidator(Decimal('0.01'))])),
                ('balance', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=18)),
                ('allowances_created', models.PositiveIntegerField(default=0, editable=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='funds_created', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'funds',
                'ordering': ['-created_at'],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('maximum_allowance__gt', 0)), name='fund_maximum_allowance_positive'),
                    models.CheckConstraint(condition=models.Q(('balance__gte', 0)), name='fund_balance_non_negative'),
                ],
            },
        ),
        migrations.CreateModel(
            name='FundBenefactor',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('position', models.PositiveIntegerField()),
                ('joined_at', models.DateTimeField(auto_now_add=True)),
                ('fund', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='benefactor_memberships', to='funds.fund')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='benefactor_memberships', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'fund_benefactors',
                'ordering': ['position'],
                'indexes': [models.Index(fields=['user', 'joined_at'], name='fund_benefa_user_id_5c2e1a_idx')],
                'unique_together': {('fund', 'user'), ('fund', 'position')},
            },
        ),
        migrations.CreateModel(
            name='Allowance',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('number', models.PositiveIntegerField(editable=False)),
                ('total', models.DecimalField(decimal_places=2, max_digits=18, validators=[MinValueValidator(Decimal('0.01'))])),
                ('spent', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=18)),
                ('required_approvals', models.PositiveIntegerField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('archived_at', models.DateTimeField(blank=True, null=True)),
                ('fund', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='allowances', to='funds.fund')),
                ('beneficiary', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='allowances_received', to=settings.AUTH_USER_MODEL)),
                ('created_by', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='allowances_created', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'allowances',
                'ordering': ['fund', 'number'],
                'indexes': [
                    models.Index(fields=['fund', 'archived_at'], name='allowances_fund_id_8d41c7_idx'),
                    models.Index(fields=['beneficiary', 'archived_at'], name='allowances_benefic_3f9a20_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('spent__gte', 0), ('spent__lte', models.F('total'))), name='allowance_spent_within_total'),
                    models.CheckConstraint(condition=models.Q(models.Q(('archived_at__isnull', True), ('spent__lt', models.F('total'))), models.Q(('archived_at__isnull', False), ('spent', models.F('total'))), _connector='OR'), name='allowance_active_iff_not_exhausted'),
                ],
                'unique_together': {('fund', 'number')},
            },
        ),
        migrations.CreateModel(
            name='Approval',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('position', models.PositiveIntegerField()),
                ('approved_at', models.DateTimeField(auto_now_add=True)),
                ('allowance', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='approvals', to='funds.allowance')),
                ('approver', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='allowance_approvals', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'allowance_approvals',
                'ordering': ['position'],
                'unique_together': {('allowance', 'approver'), ('allowance', 'position')},
            },
        ),
    ]
