"""Sinks — where a finished merge ends up.

A sink is any object with `persist(path)`. It returns normally on
success and raises PersistError otherwise. The export driver calls it
with a fully written file, after encoding and before the job completes.
"""

import logging
import shutil
from pathlib import Path
from typing import Protocol

from .errors import PersistError, PersistFailure

logger = logging.getLogger(__name__)


class Sink(Protocol):
    def persist(self, path: str) -> None: ...


class DirectorySink:
    """Copy finished videos into a library directory.

    The directory is created on first use. An existing file with the
    same name is overwritten.
    """

    def __init__(self, target_dir):
        self.target_dir = Path(target_dir)

    def persist(self, path: str) -> None:
        src = Path(path)
        try:
            self.target_dir.mkdir(parents=True, exist_ok=True)
            dest = self.target_dir / src.name
            shutil.copy2(src, dest)
        except PermissionError as e:
            raise PersistError(PersistFailure.PERMISSION_DENIED, str(e)) from e
        except OSError as e:
            raise PersistError(PersistFailure.IO_ERROR, str(e)) from e
        except Exception as e:
            raise PersistError(PersistFailure.UNKNOWN, str(e)) from e
        logger.info("Saved %s to %s", src.name, self.target_dir)
