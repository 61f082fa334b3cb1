# util/errors.py
from typing import Iterable
from fastapi import HTTPException, status
from util.enums import ErrorInfo, ErrorMessage


class AppError(HTTPException):
    # Flow: raise AppError to short-circuit with a typed status & message.
    def __init__(
        self,
        message: str,
        http_status: int = status.HTTP_400_BAD_REQUEST,
        code: str = "bad_request",
    ) -> None:
        super().__init__(status_code=http_status, detail=message)
        self.code = code
        self.message = message

    @classmethod
    def from_info(cls, info: ErrorInfo, message: str | None = None):
        return cls(message or info.message, info.http_status, info.code)


# ---------------- Client faults (4xx, never retried) ----------------


class ValidationError(AppError):
    """Inbound bus envelope is malformed or comes from an untrusted origin."""


class UnsupportedMessageType(ValidationError):
    def __init__(self, message_type: str | None) -> None:
        info = ErrorMessage.UNSUPPORTED_MESSAGE_TYPE.value
        super().__init__(f"{info.message}: {message_type}", info.http_status, info.code)


class UntrustedTopic(ValidationError):
    def __init__(self, topic: str | None) -> None:
        info = ErrorMessage.UNTRUSTED_TOPIC.value
        super().__init__(f"{info.message}: {topic}", info.http_status, info.code)


class MalformedEnvelope(ValidationError):
    def __init__(self, message: str | None = None) -> None:
        info = ErrorMessage.MALFORMED_ENVELOPE.value
        super().__init__(message or info.message, info.http_status, info.code)


class IntegrityError(AppError):
    """A write would break workspace scoping; the write must not happen."""


class CrossTenantReference(IntegrityError):
    def __init__(self, ref_ids: Iterable[str] = ()) -> None:
        info = ErrorMessage.CROSS_TENANT_REFERENCE.value
        ids = sorted(ref_ids)
        message = info.message
        if ids:
            message = f"{message} References: {', '.join(ids)}"
        super().__init__(message, info.http_status, info.code)
        self.ref_ids = ids


class DocumentNotFound(AppError):
    def __init__(self, doc_id: str) -> None:
        info = ErrorMessage.DOCUMENT_NOT_FOUND.value
        super().__init__(f"{info.message} ({doc_id})", info.http_status, info.code)


# ---------------- Backend faults (5xx, caller decides on retry) ----------------


class BackendError(AppError):
    """Object store, document store or upstream bus call failed."""


class UploadError(BackendError):
    def __init__(
        self, message: str, info: ErrorInfo = ErrorMessage.UPLOAD_FAILED.value
    ) -> None:
        super().__init__(message, info.http_status, info.code)


class HandshakeConfirmationFailed(BackendError):
    def __init__(self, message: str | None = None) -> None:
        info = ErrorMessage.HANDSHAKE_FAILED.value
        super().__init__(message or info.message, info.http_status, info.code)


# ---------------- Programmer faults (never rendered as HTTP) ----------------


class ConfigurationError(ValueError):
    """Invalid argument shape passed by a caller; fail before any I/O."""


class MissingTenant(ValueError):
    """A tenant-scoped operation was called without a tenant."""
