"""
Shared error translation for controllers.
"""

import logging
from typing import Any, Callable, TypeVar

from fastapi import HTTPException

from odr_api.errors import DisputeServiceError, to_http_exception

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BaseController:
    """Runs service calls and turns their errors into HTTP responses."""

    def _run(self, action: str, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        try:
            return func(*args, **kwargs)
        except DisputeServiceError as e:
            if e.status_code >= 500:
                logger.error(f"Error {action}: {e.message}")
            raise to_http_exception(e)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error {action}: {str(e)}", exc_info=True)
            raise HTTPException(status_code=500, detail=f"Error {action}: {str(e)}")
