from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any

import structlog

logger = structlog.get_logger()


async def iter_aws_paginator_pages(
    paginator: Any,
    *,
    operation_name: str,
    paginate_kwargs: dict[str, Any] | None = None,
) -> AsyncGenerator[dict[str, Any], None]:
    """
    Stream AWS paginator pages until the continuation token runs out.
    """
    pages_seen = 0
    async for page in paginator.paginate(**(paginate_kwargs or {})):
        pages_seen += 1
        yield page
    logger.debug(
        "aws_paginator_exhausted",
        operation=operation_name,
        pages=pages_seen,
    )
