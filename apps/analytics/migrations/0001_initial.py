from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='DailyMetric',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('tenant_id', models.IntegerField(db_index=True)),
                ('platform', models.CharField(choices=[('google', 'Google Ads'), ('linkedin', 'LinkedIn Ads'), ('leadprosper', 'LeadProsper'), ('hyros', 'HYROS')], max_length=20)),
                ('external_campaign_id', models.CharField(max_length=100)),
                ('external_campaign_name', models.CharField(blank=True, max_length=255, null=True)),
                ('date', models.DateField()),
                ('leads', models.IntegerField(default=0)),
                ('cost', models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ('revenue', models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ('ad_spend', models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['date', 'pk'],
                'indexes': [
                    models.Index(fields=['tenant_id', 'date'], name='dailymetric_tenant_date_idx'),
                    models.Index(fields=['tenant_id', 'platform', 'external_campaign_id'], name='dailymetric_tenant_ext_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('tenant_id', 'platform', 'external_campaign_id', 'date'), name='unique_daily_metric_per_campaign_day'),
                ],
            },
        ),
    ]
