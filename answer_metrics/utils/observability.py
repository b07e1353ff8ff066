"""
Structured Logging & Observability
Production-grade logging that's both human-readable and machine-parseable.
"""
import sys
from loguru import logger
from answer_metrics.config import get_settings


def configure_logging():
    """
    Configure loguru for production observability.

    In development: Human-readable colorized output
    In production: Structured JSON logs for ingestion (ELK, Datadog, etc.)
    """
    settings = get_settings()

    # Remove default handler
    logger.remove()

    # Development mode: Beautiful console output
    if not settings.enable_structured_logging:
        logger.add(
            sys.stderr,
            format=(
                "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
                "{message}"
            ),
            level=settings.log_level,
            colorize=True,
        )
    # Production mode: JSON structured logs
    else:
        logger.add(
            sys.stderr,
            format="{message}",
            level=settings.log_level,
            serialize=True,  # Output as JSON
        )

    logger.info(f"Logging configured: level={settings.log_level}, structured={settings.enable_structured_logging}")


def log_query_performance(
    query_type: str,
    duration_ms: float,
    rows_returned: int,
    success: bool = True,
    error: str | None = None,
    **context
):
    """
    Structured logging for a completed projection query.

    Args:
        query_type: Which projection ran (e.g., "brand_metrics")
        duration_ms: Wall time of the whole call in milliseconds
        rows_returned: Number of flattened rows (or aggregate entries) produced
        success: Whether the call completed
        error: Error message if failed
        **context: Additional context (mode, chunk count, brand, ...)

    Example:
        >>> log_query_performance(
        ...     query_type="competitor_metrics",
        ...     duration_ms=84.2,
        ...     rows_returned=312,
        ...     mode="event_ids",
        ... )
    """
    log_data = {
        "event_type": "query_performance",
        "query_type": query_type,
        "duration_ms": round(duration_ms, 2),
        "rows_returned": rows_returned,
        "success": success,
    }

    if error:
        log_data["error"] = error

    log_data.update(context)

    level = "info" if success else "error"
    logger.bind(**log_data).log(
        level.upper(),
        f"Query: {query_type} | {rows_returned} rows | {duration_ms:.1f}ms"
    )
