import base64
import json

from django.core.management.base import BaseCommand, CommandError


class Command(BaseCommand):
    help = 'Print the base64 form of an identity-provider service-account JSON file for FB_SERVICE_KEY.'

    def add_arguments(self, parser):
        parser.add_argument('path', help='service-account JSON downloaded from the identity provider')

    def handle(self, *args, **options):
        try:
            with open(options['path'], encoding='utf-8') as fh:
                key = json.load(fh)
        except OSError as e:
            raise CommandError(f'Cannot read {options["path"]}: {e}')
        except ValueError as e:
            raise CommandError(f'{options["path"]} is not valid JSON: {e}')

        encoded = base64.b64encode(json.dumps(key).encode('utf-8')).decode('ascii')
        self.stdout.write('Copy this base64 string to your .env file as FB_SERVICE_KEY:')
        self.stdout.write(encoded)
