"""
Activity logging middleware

Writes one activity log entry per mutating /api request made by an
authenticated operator. Login, logout and the activity log routes log
explicitly and are skipped here.
"""

import re
from typing import Any, Dict, Optional, Tuple

import structlog
from fastapi import Request

from gamehouse.models.activity_log import LogAction, LogResource, LogStatus
from gamehouse.services.activity_log_service import ActivityLogService
from gamehouse.utils.dependencies import get_client_ip, get_user_agent

logger = structlog.get_logger(__name__)

MUTATING_METHODS = {"POST", "PUT", "PATCH", "DELETE"}
SKIPPED_PREFIXES = (
    "/api/auth/",
    "/api/admin/activity-logs",
)
OBJECT_ID = re.compile(r"^[0-9a-fA-F]{24}$")

RESOURCE_SEGMENTS = {
    "customers": LogResource.CUSTOMER,
    "services": LogResource.SERVICE,
    "sessions": LogResource.SESSION,
    "categories": LogResource.CATEGORY,
    "operators": LogResource.OPERATOR,
    "settings": LogResource.SETTINGS,
    "backup": LogResource.BACKUP,
}

METHOD_ACTIONS = {
    "POST": LogAction.CREATE,
    "PUT": LogAction.UPDATE,
    "PATCH": LogAction.UPDATE,
    "DELETE": LogAction.DELETE,
}


def classify_request(method: str, path: str) -> Tuple[Optional[str], Optional[str], Optional[str]]:
    """
    Derive (action, resource, resource_id) from a request

    Resource is the first known collection segment after /api; resource id
    is the first ObjectId-shaped segment.
    """
    segments = [segment for segment in path.split("/") if segment]
    resource = None
    for segment in segments[1:]:
        if segment in RESOURCE_SEGMENTS:
            resource = RESOURCE_SEGMENTS[segment].value
            break
    resource_id = next((segment for segment in segments if OBJECT_ID.match(segment)), None)

    is_session = segments[1:2] == ["sessions"]
    nested_service = is_session and len(segments) >= 4 and segments[3] == "services"
    last = segments[-1] if segments else ""

    if is_session and last == "end":
        action = LogAction.END_SESSION
    elif nested_service and last == "pause":
        action = LogAction.PAUSE_SESSION
    elif nested_service and last == "resume":
        action = LogAction.RESUME_SESSION
    elif nested_service and method == "POST":
        action = LogAction.ADD_SERVICE
    elif nested_service and method in ("PUT", "PATCH"):
        action = LogAction.EDIT_SERVICE
    elif nested_service and method == "DELETE":
        action = LogAction.REMOVE_SERVICE
    elif is_session and method == "POST" and len(segments) == 2:
        action = LogAction.START_SESSION
    elif is_session and method == "DELETE" and len(segments) == 3:
        action = LogAction.CANCEL_SESSION
    else:
        action = METHOD_ACTIONS.get(method)

    return (action.value if action else None), resource, resource_id


async def log_activity_middleware(request: Request, call_next):
    """Record mutating API calls after they complete"""
    response = await call_next(request)

    path = request.url.path
    if (
        request.method not in MUTATING_METHODS
        or not path.startswith("/api/")
        or path.startswith(SKIPPED_PREFIXES)
        or getattr(request.state, "skip_activity_log", False)
    ):
        return response

    operator = getattr(request.state, "operator", None)
    if not operator:
        return response

    action, resource, resource_id = classify_request(request.method, path)
    if not action or not resource:
        return response

    details: Dict[str, Any] = {
        "method": request.method,
        "path": path,
        "status_code": response.status_code,
    }
    details.update(getattr(request.state, "activity_details", None) or {})

    db = getattr(request.app.state, "db", None)
    if db is None:
        return response

    # log_activity never raises
    await ActivityLogService(db).log_activity(
        operator.get("id"),
        operator.get("username"),
        action,
        resource,
        resource_id=resource_id or details.pop("resource_id", None),
        details=details,
        ip_address=get_client_ip(request),
        user_agent=get_user_agent(request),
        status=LogStatus.SUCCESS.value if 200 <= response.status_code < 300 else LogStatus.FAILED.value,
    )
    return response
