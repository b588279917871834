from django.db import models


class Platform(models.TextChoices):
    GOOGLE = 'google', 'Google Ads'
    LINKEDIN = 'linkedin', 'LinkedIn Ads'
    LEADPROSPER = 'leadprosper', 'LeadProsper'
    HYROS = 'hyros', 'HYROS'
