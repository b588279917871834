from decimal import Decimal

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Campaign',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('tenant_id', models.IntegerField(db_index=True)),
                ('name', models.CharField(max_length=200)),
                ('platform', models.CharField(blank=True, choices=[('google', 'Google Ads'), ('linkedin', 'LinkedIn Ads'), ('leadprosper', 'LeadProsper'), ('hyros', 'HYROS')], default='', max_length=20)),
                ('is_active', models.BooleanField(default=True)),
                ('account_id', models.CharField(blank=True, max_length=100, null=True)),
                ('external_campaign_id', models.CharField(blank=True, max_length=100, null=True)),
                ('case_payout_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('leads', models.IntegerField(default=0)),
                ('cases', models.IntegerField(default=0)),
                ('revenue', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('ad_spend', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('stats_synced_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['name'],
                'indexes': [
                    models.Index(fields=['tenant_id', 'platform'], name='campaign_tenant_platform_idx'),
                    models.Index(fields=['tenant_id', 'is_active'], name='campaign_tenant_active_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('tenant_id', 'name'), name='unique_campaign_name_per_tenant'),
                ],
            },
        ),
    ]
