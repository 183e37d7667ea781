"""
Base class and shared helpers for output reporters.

Every reporter writes its artifact atomically: content goes to a temporary
file beside the destination and is moved into place only once complete.
"""

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, List

from tabjoin.core.column_typer import ColumnKind
from tabjoin.core.exceptions import OutputWriteError, TabJoinException
from tabjoin.core.table import Table

logger = logging.getLogger(__name__)


def column_kinds(table: Table) -> List[ColumnKind]:
    """Infer the kind of every column; the key column is always text."""
    return [ColumnKind.TEXT] + [table.classify(idx) for idx in range(1, table.width)]


def _output_mode(destination: Path) -> int:
    """Permission bits for a new output: the existing file's, else 0o666 under the umask."""
    if destination.exists():
        return destination.stat().st_mode & 0o777
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_atomic(output_path, writer: Callable[[Path], None]) -> Path:
    """
    Produce a file through writer() without ever exposing a partial result.

    Args:
        output_path: Final destination
        writer: Callable that writes the complete artifact to the path it is given

    Returns:
        The destination path

    Raises:
        OutputWriteError: If writing or renaming fails; the destination is untouched
    """
    destination = Path(output_path)
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise OutputWriteError(f"Cannot create directory for {destination}: {e}", str(destination), e)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{destination.name}.", suffix=".tmp", dir=destination.parent)
    os.close(fd)
    tmp_path = Path(tmp_name)
    try:
        writer(tmp_path)
        os.chmod(tmp_path, _output_mode(destination))
        os.replace(tmp_path, destination)
    except TabJoinException:
        tmp_path.unlink(missing_ok=True)
        raise
    except Exception as e:
        tmp_path.unlink(missing_ok=True)
        raise OutputWriteError(f"Error writing {destination}: {e}", str(destination), e)
    logger.debug(f"Wrote {destination}")
    return destination


class Reporter(ABC):
    """Renders a finished table (or a report derived from it) to a file."""

    @abstractmethod
    def generate(self, table: Table, output_path) -> Path:
        """
        Write the artifact for table to output_path.

        Returns:
            The path written
        """
        pass
