"""Centralized logging configuration using Loguru."""

import sys
from typing import Any

from loguru import logger

from layoffs.core.config import settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message} | {extra}"


def _is_quality_note(record: dict[str, Any]) -> bool:
    return "quality" in record["extra"]


def setup_logging() -> None:
    """Configure Loguru sinks for the cleaner.

    stderr always gets the configured level. Unless LOG_TO_FILES is off, the
    logs/ directory also gets a daily debug log, an error log, a data quality
    log (ambiguous backfills, nulled dates) and a JSON log for aggregation.
    """
    logger.remove()

    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level=settings.log_level,
        colorize=True,
        backtrace=True,
        diagnose=settings.debug,
    )

    if not settings.log_to_files:
        logger.debug(f"Logging initialized | level={settings.log_level} | files=off")
        return

    logs_dir = settings.logs_dir

    # (file name, level, retention, filter)
    file_sinks = [
        ("layoffs_{time:YYYY-MM-DD}.log", "DEBUG", "30 days", None),
        ("errors_{time:YYYY-MM-DD}.log", "ERROR", "90 days", None),
        ("data_quality_{time:YYYY-MM-DD}.log", "WARNING", "90 days", _is_quality_note),
    ]
    for file_name, level, retention, record_filter in file_sinks:
        logger.add(
            logs_dir / file_name,
            format=FILE_FORMAT,
            level=level,
            filter=record_filter,
            rotation="00:00",
            retention=retention,
            compression="gz",
            backtrace=True,
            diagnose=True,
        )

    logger.add(
        logs_dir / "layoffs_{time:YYYY-MM-DD}.json",
        format="{message}",
        level="INFO",
        rotation="00:00",
        retention="14 days",
        compression="gz",
        serialize=True,
    )

    logger.info(
        f"Logging initialized | app={settings.app_name} | level={settings.log_level} | "
        f"env={settings.app_env.value}"
    )


def get_logger(name: str) -> Any:
    """Get a logger instance with the given name.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger instance
    """
    return logger.bind(name=name)


def log_quality_note(kind: str, message: str, **extra: Any) -> None:
    """Log a data problem that the run works around instead of failing.

    Args:
        kind: Note category, e.g. ambiguous_backfill or date_nulled
        message: What was found and what was done about it
        **extra: Additional context
    """
    logger.bind(quality=kind, **extra).warning(f"{message} | quality={kind}")


def log_stage_start(pipeline: str, stage: str, rows: int, **extra: Any) -> None:
    """Log the start of a pipeline stage.

    Args:
        pipeline: Pipeline name
        stage: Stage name
        rows: Number of rows entering the stage
        **extra: Additional context
    """
    logger.bind(pipeline=pipeline, stage=stage, **extra).debug(
        f"Stage started | pipeline={pipeline} | stage={stage} | rows={rows}"
    )


def log_stage_complete(
    pipeline: str, stage: str, rows_in: int, rows_out: int, duration: float, **extra: Any
) -> None:
    """Log the completion of a pipeline stage.

    Args:
        pipeline: Pipeline name
        stage: Stage name
        rows_in: Number of rows that entered the stage
        rows_out: Number of rows that left the stage
        duration: Stage duration in seconds
        **extra: Additional context
    """
    logger.bind(pipeline=pipeline, stage=stage, **extra).info(
        f"Stage completed | pipeline={pipeline} | stage={stage} | "
        f"input={rows_in} | output={rows_out} | duration={duration:.3f}s"
    )


def log_run_complete(
    run_id: str, duration: float, success: bool = True, **extra: Any
) -> None:
    """Log completion of a cleaning run.

    Args:
        run_id: Run identifier
        duration: Run duration in seconds
        success: Whether the run completed successfully
        **extra: Additional context (counters or error)
    """
    status = "SUCCESS" if success else "FAILED"
    log_func = logger.info if success else logger.error

    log_func(
        f"Cleaning run completed | id={run_id} | status={status} | duration={duration:.2f}s",
        run_id=run_id,
        duration=duration,
        success=success,
        **extra,
    )
