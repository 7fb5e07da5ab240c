"""aiohttp middlewares: caller resolution and exception mapping."""
import hmac
import json
import logging
from typing import Callable

from aiohttp import web
from pydantic import ValidationError as PydanticValidationError

from core.exceptions import (
    AppointmentConflictError,
    DuplicateClientError,
    NailsStudioError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from web.policy import GUEST, CurrentUser, admin_user, master_user

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-Api-Key"


def resolve_user(api_key: str | None, config) -> CurrentUser | None:
    """Map an API key to a caller.

    Returns:
        GUEST when no key is given, None when the key is unknown
    """
    if not api_key:
        return GUEST

    if config.admin_api_key and hmac.compare_digest(api_key, config.admin_api_key):
        return admin_user()

    for key, master_id in config.master_api_keys.items():
        if hmac.compare_digest(api_key, key):
            return master_user(master_id)

    return None


@web.middleware
async def auth_middleware(request: web.Request, handler: Callable):
    """Attach ``request['user']``. Unknown keys are rejected, missing keys mean guest."""
    user = resolve_user(request.headers.get(API_KEY_HEADER), request.app["config"])
    if user is None:
        logger.warning(f"Invalid API key for {request.method} {request.path}")
        return web.json_response({"error": "Invalid API key"}, status=401)

    request["user"] = user
    return await handler(request)


def _error(status: int, exc: NailsStudioError) -> web.Response:
    return web.json_response(
        {"error": exc.message, "type": type(exc).__name__, "details": exc.details},
        status=status,
        dumps=_dumps,
    )


def _dumps(data) -> str:
    return json.dumps(data, default=str, ensure_ascii=False)


@web.middleware
async def error_middleware(request: web.Request, handler: Callable):
    """Translate engine exceptions into JSON error responses."""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except PydanticValidationError as e:
        errors = [
            {"field": ".".join(str(p) for p in err["loc"]), "error": err["msg"]}
            for err in e.errors()
        ]
        return web.json_response({"error": "Помилка валідації", "errors": errors}, status=400)
    except ValidationError as e:
        return _error(400, e)
    except PermissionDeniedError as e:
        user = request.get("user")
        logger.warning(
            f"Permission denied: {request.method} {request.path}",
            extra={"user_id": user.id if user else None, "role": user.role.value if user else None},
        )
        return _error(403, e)
    except NotFoundError as e:
        return _error(404, e)
    except (AppointmentConflictError, DuplicateClientError) as e:
        return _error(409, e)
    except NailsStudioError as e:
        return _error(400, e)
    except Exception as e:
        logger.error(f"Unhandled error on {request.method} {request.path}: {e}", exc_info=True)
        return web.json_response({"error": "Internal server error"}, status=500)
