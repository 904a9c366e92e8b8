import logging
import sys
from pathlib import Path
from typing import Optional

import structlog

FIRST_PARTY_PACKAGES = frozenset(["contract_player"])


def construct_log_file_name(data_path: Path, definition_name: str, started_at) -> Path:
    file_name = f"contract-player_{definition_name}_{started_at:%Y-%m-%dT%H:%M:%S}.log"
    return data_path.joinpath(file_name)


def configure_logging(
    level: str = "INFO", log_file: Optional[Path] = None, colors: Optional[bool] = None
) -> None:
    """Route structlog through the stdlib logging machinery.

    The console gets `level` and above, human readable. If `log_file` is given
    it receives everything down to DEBUG for our own packages, one JSON object
    per line.
    """
    if colors is None:
        colors = sys.stderr.isatty()

    timestamper = structlog.processors.TimeStamper(fmt="iso")
    pre_chain = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        timestamper,
    ]
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *pre_chain,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level.upper())
    console.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(colors=colors), foreign_pre_chain=pre_chain
        )
    )
    handlers = [console]

    if log_file is not None:
        log_file.parent.mkdir(exist_ok=True, parents=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.addFilter(_FirstPartyDebugFilter(level.upper()))
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.processors.JSONRenderer(), foreign_pre_chain=pre_chain
            )
        )
        handlers.append(file_handler)

    root = logging.getLogger()
    root.handlers = handlers
    root.setLevel(logging.DEBUG if log_file is not None else level.upper())


class _FirstPartyDebugFilter(logging.Filter):
    """Let DEBUG records of our own packages through, everything else from `level` up."""

    def __init__(self, level: str) -> None:
        super().__init__()
        self.level = logging.getLevelName(level)

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.split(".")[0] in FIRST_PARTY_PACKAGES:
            return True
        return record.levelno >= self.level
