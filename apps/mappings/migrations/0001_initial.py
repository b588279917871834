import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('campaigns', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='CampaignMapping',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('platform', models.CharField(choices=[('google', 'Google Ads'), ('linkedin', 'LinkedIn Ads'), ('leadprosper', 'LeadProsper'), ('hyros', 'HYROS')], max_length=20)),
                ('account_id', models.CharField(max_length=100)),
                ('external_campaign_id', models.CharField(max_length=100)),
                ('external_campaign_name', models.CharField(blank=True, default='', max_length=255)),
                ('is_active', models.BooleanField(default=True)),
                ('linked_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('unlinked_at', models.DateTimeField(blank=True, null=True)),
                ('last_synced', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('campaign', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='mappings', to='campaigns.campaign')),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['platform', 'external_campaign_id', 'is_active'], name='mapping_platform_external_idx'),
                    models.Index(fields=['campaign', 'is_active'], name='mapping_campaign_active_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('is_active', True)), fields=('campaign', 'platform'), name='unique_active_mapping_per_campaign_platform'),
                ],
            },
        ),
    ]
