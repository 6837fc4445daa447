"""
Split command for gitsplit.

Splits every selected reference of the project and publishes the results.
"""

import logging

import click

from ..cli_utils import add_common_options, standard_command
from ..config import load_config
from ..errors import GitSplitError
from ..output import DETAIL_COLUMNS, emit, emit_summary
from ..services.split_service import SplitService
from ..workspace import WorkingSpace

logger = logging.getLogger(__name__)


@click.command('split')
@add_common_options('ref', 'config', 'verbose', 'pretty')
@standard_command
def split_handler(refs, config_path, verbose, pretty):
    """
    Split the project and publish every split to its targets.

    References are selected by the 'origins' patterns of the configuration,
    optionally narrowed with --ref. Splits whose source did not move since
    the last run are served from the cache.

    \b
    Examples:
        # Split every branch and tag
        gitsplit split
        # Only the main branch and one tag
        gitsplit split --ref main --ref v1.2.0
        # Human readable
        gitsplit split --pretty
    """
    config = load_config(config_path)

    with WorkingSpace.create(config) as workspace:
        workspace.init()

        service = SplitService.from_workspace(workspace)
        try:
            report = service.split(whitelist=list(refs))
        except GitSplitError:
            if service.last_report is not None:
                emit(service.last_report.details, pretty=pretty, columns=DETAIL_COLUMNS)
            raise

        emit(report.details, pretty=pretty, columns=DETAIL_COLUMNS)
        emit_summary(report.to_dict(), pretty=pretty)

    logger.info("Done")
