"""Canonical import ordering through the external isort tool."""

import logging

from .config import ToolConfig
from .utils import read_text, run_tool, snapshot_file


logger = logging.getLogger(__name__)


class ImportSorter:
    """
    Sorts imports by letting isort rewrite a snapshot file in place.

    The snapshot is re-read after isort exits and removed before ``sort``
    returns.
    """

    def __init__(self, config: ToolConfig):
        self.config = config

    def sort(self, text: str) -> str:
        """
        Return ``text`` with its imports in canonical order.

        Raises:
            ToolNotFoundError: If the isort executable cannot be located.
            ToolTimeoutError: If isort does not finish in time.
        """
        with snapshot_file(text) as path:
            output = run_tool(self.config, "sorter", [], path)
            if output.strip():
                logger.debug(f"Sorter output: {output.strip()}")
            return read_text(path)
