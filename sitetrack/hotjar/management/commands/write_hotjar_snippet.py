import logging
import os
import tempfile

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.utils.translation import gettext as _

from sitetrack.hotjar.conf import SNIPPET_FILENAME, get_snippet, get_tracking_settings

logger = logging.getLogger(__name__)


def write_snippet_file(directory, snippet):
    """Saves ``snippet`` as ``hotjar.script.js`` in ``directory``.

       The file is replaced atomically, so a web server never serves
       a partially written snippet.
    """
    os.makedirs(directory, exist_ok=True)
    path = os.path.join(directory, SNIPPET_FILENAME)
    fd, tmp_path = tempfile.mkstemp(
        dir=directory, prefix='.' + SNIPPET_FILENAME, suffix='.tmp'
    )
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            f.write(snippet)
        os.chmod(tmp_path, 0o644)
        os.replace(tmp_path, path)
    except BaseException:
        os.unlink(tmp_path)
        raise
    return path


class Command(BaseCommand):
    help = _("Creates the Hotjar snippet file based on the current settings")

    def add_arguments(self, parser):
        parser.add_argument(
            '-d',
            '--directory',
            metavar='DIR',
            dest='directory',
            default=None,
            help="Directory where hotjar.script.js is saved "
                 "(defaults to HOTJAR_SNIPPET_ROOT)",
        )

    def handle(self, *args, **options):
        tracking = get_tracking_settings()
        if tracking is None:
            raise CommandError(_("Set HOTJAR_ACCOUNT to create the snippet file."))

        directory = options['directory'] or getattr(
            settings,
            'HOTJAR_SNIPPET_ROOT',
            os.path.join(settings.MEDIA_ROOT, 'hotjar'),
        )
        try:
            path = write_snippet_file(directory, get_snippet(tracking))
        except OSError as e:
            logger.error(
                "Failed to save the Hotjar snippet in %s", directory, exc_info=True
            )
            raise CommandError(
                _(
                    "An error occurred saving the snippet file in %(directory)s "
                    "(%(error)s), possibly due to a permissions problem. "
                    "Make the directory writable and try again."
                )
                % {'directory': directory, 'error': e}
            )

        logger.info("Saved the Hotjar snippet for account %s", tracking.account_id)
        self.stdout.write(_("Created snippet file %s based on configuration.") % path)
