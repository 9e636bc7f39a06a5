"""Timestamp parsing for the datetime fields AWS listings return."""

from datetime import datetime, timezone
from typing import Any, Optional

import structlog

logger = structlog.get_logger()

# Lambda reports LastModified as e.g. "2024-05-01T10:20:30.000+0000"
_LAMBDA_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%f%z"


def parse_aws_timestamp(value: Any) -> Optional[datetime]:
    """Unparseable values yield None; such a resource is never long idle."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    text = str(value)
    try:
        return datetime.strptime(text, _LAMBDA_TIMESTAMP_FORMAT)
    except ValueError:
        pass
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        logger.warning("aws_timestamp_unparseable", value=text)
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
