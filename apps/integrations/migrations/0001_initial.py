import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='AccountConnection',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('tenant_id', models.IntegerField(db_index=True)),
                ('platform', models.CharField(choices=[('google', 'Google Ads'), ('linkedin', 'LinkedIn Ads'), ('leadprosper', 'LeadProsper'), ('hyros', 'HYROS')], max_length=20)),
                ('account_id', models.CharField(blank=True, default='', max_length=100)),
                ('account_name', models.CharField(blank=True, default='', max_length=255)),
                ('credentials', models.JSONField(blank=True, default=dict)),
                ('is_connected', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='account_connections', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['tenant_id', 'platform', 'is_connected'], name='connection_tenant_platform_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('tenant_id', 'platform', 'account_id'), name='unique_connection_per_tenant_platform_account'),
                ],
            },
        ),
    ]
