# Check Upstream Management Command
from django.core import checks
from django.core.management.base import BaseCommand, CommandError

from marketplace.checks import check_upstream_url
from marketplace.proxy import UpstreamUnavailable, get_api_url, send_upstream


class Command(BaseCommand):
    help = 'Verifies BANTUIN_API_URL is configured and the backend answers.'

    def add_arguments(self, parser):
        parser.add_argument(
            '--timeout',
            type=float,
            default=5.0,
            help='Seconds to wait for the backend.',
        )
        parser.add_argument(
            '--skip-request',
            action='store_true',
            help='Only validate the setting, do not contact the backend.',
        )

    def handle(self, *args, **options):
        timeout = options['timeout']

        self.stdout.write('Checking BANTUIN_API_URL...')
        for message in check_upstream_url(None):
            if message.level >= checks.WARNING:
                raise CommandError(f'{message.id}: {message.msg}')

        api_url = get_api_url()
        self.stdout.write(f'  Backend: {api_url}')

        if options['skip_request']:
            self.stdout.write(self.style.SUCCESS('Configuration is valid. Backend not contacted.'))
            return

        self.stdout.write('Requesting /services?limit=1...')
        try:
            result = send_upstream('GET', '/services', params={'limit': 1}, timeout=timeout)
        except UpstreamUnavailable as e:
            raise CommandError(f'Backend unreachable: {e}')

        if not result.ok:
            raise CommandError(f'Backend answered with status {result.status_code}.')

        self.stdout.write(self.style.SUCCESS(f'Backend reachable (status {result.status_code}).'))
