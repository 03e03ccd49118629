"""
Domain error taxonomy.

Services raise these; the API layer renders them with ``to_dict()`` and the
error's HTTP status code.
"""

from typing import Any, Optional


class MediaHubError(Exception):
    """Base class for all errors raised by the publication core."""

    code = 500

    def __init__(self, message: str, code: Optional[int] = None, payload: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.payload = payload

    def to_dict(self) -> dict:
        rv = dict(self.payload or ())
        rv["message"] = self.message
        rv["code"] = self.code
        rv["error"] = type(self).__name__
        rv["success"] = False
        return rv


class ValidationError(MediaHubError):
    """Missing or malformed input. User-facing, never retried."""

    code = 400

    def __init__(self, message: str = "Invalid data", field: Optional[str] = None, value: Any = None):
        payload = {}
        if field:
            payload["field"] = field
        super().__init__(message, payload=payload)
        self.field = field
        self.value = value


class PolicyViolationError(ValidationError):
    """Attachments do not satisfy the category's media requirements."""

    def __init__(self, message: str, rule: str):
        super().__init__(message, field="attachments")
        self.rule = rule
        self.payload["rule"] = rule


class StateConflictError(ValidationError):
    """A status transition that the workflow does not allow."""

    code = 409

    def __init__(self, current: str, target: str, action: str):
        super().__init__(
            f"Illegal status transition: {current} -> {target} ({action})",
            field="status",
        )
        self.current = current
        self.target = target
        self.action = action
        self.payload.update({"current": current, "target": target, "action": action})


class ConflictError(MediaHubError):
    """A uniqueness violation detected late (e.g. at flush time)."""

    code = 409

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, payload={"field": field} if field else None)
        self.field = field


class NotFoundError(MediaHubError):
    """The requested entity does not exist."""

    code = 404

    def __init__(self, entity: str, entity_id: Any = None):
        payload = {"entity": entity}
        if entity_id is not None:
            payload["entity_id"] = entity_id
        super().__init__(f"{entity} not found", payload=payload)
        self.entity = entity
        self.entity_id = entity_id


class StorageError(MediaHubError):
    """The store failed. The message is generic; details only go to the logs."""

    code = 500

    def __init__(self, operation: Optional[str] = None):
        super().__init__("A storage error occurred. Please retry the request.")
        self.operation = operation
