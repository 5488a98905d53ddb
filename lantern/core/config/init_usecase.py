"""Init use case for setting up a new lantern deployment directory.

Creates the .lantern/ directory with config.toml and the sync state database.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from lantern.core.use_case_errors import format_error_message, log_use_case_error
from lantern.ports.database import DatabaseInitializer
from lantern.shared.config_io import create_default_config_file

logger = logging.getLogger(__name__)

STATE_DB_NAME = "state.db"


@dataclass
class InitRequest:
    """Request to initialize a lantern deployment.

    Attributes:
        root: Directory in which .lantern/ is created.
        force: If True, reinitialize even if .lantern/ already exists.
    """

    root: Path
    force: bool = False


@dataclass
class InitResponse:
    """Response from init operation.

    Attributes:
        lantern_dir: Path to the .lantern/ directory (None on failure).
        config_path: Path to config.toml (None on failure).
        db_path: Path to the state database (None on failure).
        was_reinitialized: True if an existing .lantern/ was reused.
        success: Whether initialization succeeded.
        error: Error message if initialization failed.
        already_exists: True if failed because .lantern/ already exists.
    """

    lantern_dir: Path | None
    config_path: Path | None
    db_path: Path | None
    was_reinitialized: bool = False
    success: bool = True
    error: str | None = None
    already_exists: bool = False

    @classmethod
    def create_error(cls, message: str, *, already_exists: bool = False) -> "InitResponse":
        return cls(
            lantern_dir=None,
            config_path=None,
            db_path=None,
            success=False,
            error=message,
            already_exists=already_exists,
        )


class InitUseCase:
    """Creates the .lantern/ directory structure.

    The config file is rewritten on --force; the state database is kept, so
    markers and document ids survive a reinitialization.
    """

    def __init__(self, db_initializer: DatabaseInitializer):
        self._db_initializer = db_initializer

    def execute(self, request: InitRequest) -> InitResponse:
        """Execute the init operation.

        Error handling contract:
            - KeyboardInterrupt/SystemExit are re-raised
            - All other exceptions are converted to error responses

        Args:
            request: Init request with target directory and options.

        Returns:
            InitResponse with created paths, or error information.
        """
        lantern_dir = request.root / ".lantern"
        config_path = lantern_dir / "config.toml"
        db_path = lantern_dir / STATE_DB_NAME

        try:
            was_reinitialized = False
            if lantern_dir.exists():
                if not request.force:
                    return InitResponse.create_error(
                        f"Directory {lantern_dir} already exists. "
                        "Use --force to reinitialize.",
                        already_exists=True,
                    )
                was_reinitialized = True

            lantern_dir.mkdir(parents=True, exist_ok=True)
            create_default_config_file(config_path)
            self._db_initializer.init_database(db_path)
            logger.info("Initialized lantern in %s", lantern_dir)

            return InitResponse(
                lantern_dir=lantern_dir,
                config_path=config_path,
                db_path=db_path,
                was_reinitialized=was_reinitialized,
            )
        except (KeyboardInterrupt, SystemExit):
            raise
        except Exception as e:
            log_use_case_error(e, "initialization")
            return InitResponse.create_error(format_error_message(e, "initialization"))
