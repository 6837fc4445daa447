"""
Status command for gitsplit.

Reports which (reference, split) pairs are served from the cache and which
would be recomputed by the next split, without splitting or publishing.
"""

import click

from ..cli_utils import add_common_options, standard_command
from ..config import load_config
from ..output import DETAIL_COLUMNS, emit
from ..services.split_service import SplitService
from ..workspace import WorkingSpace


@click.command('status')
@add_common_options('ref', 'config', 'verbose', 'pretty')
@standard_command
def status_handler(refs, config_path, verbose, pretty):
    """
    Show the cache state of every selected reference.

    The working space is refreshed first so the state reflects the project
    as it is now.

    \b
    Examples:
        gitsplit status
        gitsplit status --ref main --pretty
    """
    config = load_config(config_path)

    with WorkingSpace.create(config) as workspace:
        workspace.init()
        service = SplitService.from_workspace(workspace)
        emit(service.describe(whitelist=list(refs)), pretty=pretty, columns=DETAIL_COLUMNS)
