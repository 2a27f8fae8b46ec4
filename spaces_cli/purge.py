"""Remove every space under the spaces directory."""

from __future__ import annotations

import logging
import shutil
from typing import TYPE_CHECKING

from .errors import SpacesIOError

if TYPE_CHECKING:
    from .config import Config

logger = logging.getLogger(__name__)


def purge_spaces(config: Config) -> str:
    """Delete ``spaces_dir`` recursively and return a confirmation message.

    Raises:
        SpacesIOError: The directory does not exist or could not be removed.

    """
    spaces_dir = config.spaces_dir
    if not spaces_dir.is_dir():
        msg = f"no spaces found in {spaces_dir}"
        raise SpacesIOError(msg)

    logger.info("Removing %s", spaces_dir)
    try:
        shutil.rmtree(spaces_dir)
    except OSError as e:
        msg = f"failed to purge {spaces_dir}: {e}"
        raise SpacesIOError(msg) from e

    config.current_spaces = {}
    return f"all spaces in {spaces_dir} purged successfully"
