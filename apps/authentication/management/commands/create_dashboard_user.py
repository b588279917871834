from django.core.management.base import BaseCommand
from django.contrib.auth import get_user_model

User = get_user_model()

class Command(BaseCommand):
    help = 'Create a dashboard user for a tenant'

    def add_arguments(self, parser):
        parser.add_argument('--email', type=str, required=True)
        parser.add_argument('--password', type=str, required=True)
        parser.add_argument('--tenant_id', type=int, required=True)
        parser.add_argument('--role', type=str, default='user')
        parser.add_argument('--username', type=str, required=True)

    def handle(self, *args, **options):
        email = options['email']
        tenant_id = options['tenant_id']

        if User.objects.filter(email=email).exists():
            self.stdout.write(
                self.style.ERROR(f'User with email {email} already exists')
            )
            return

        User.objects.create_user(
            username=options['username'],
            email=email,
            password=options['password'],
            tenant_id=tenant_id,
            role=options['role']
        )

        self.stdout.write(
            self.style.SUCCESS(
                f'Successfully created user {email} for tenant {tenant_id}'
            )
        )
