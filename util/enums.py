# util/enums.py
from enum import Enum
from typing import NamedTuple
from fastapi import status


class Color(str, Enum):
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    BOLD = "\033[1m"

    def __str__(self):
        return self.value


class Environment(str, Enum):
    DEV = "dev"
    PROD = "prod"


class BusMessageType(str, Enum):
    # Values are the ones the bus sends in the message-type header and body.
    HANDSHAKE = "SubscriptionConfirmation"
    NOTIFICATION = "Notification"


class WipeScope(str, Enum):
    ALL = "all"
    DOCUMENTS = "documents"
    OBJECTS = "objects"


class WipeStage(str, Enum):
    RECEIVED = "received"
    VALIDATING = "validating"
    DELETING_DOCUMENTS = "deleting_documents"
    DELETING_OBJECTS = "deleting_objects"
    COMPLETED = "completed"
    FAILED = "failed"


class ErrorInfo(NamedTuple):
    code: str
    message: str
    http_status: int


class ErrorMessage(Enum):
    UNSUPPORTED_MESSAGE_TYPE = ErrorInfo(
        "unsupported_message_type",
        "Unhandled SNS event type",
        status.HTTP_400_BAD_REQUEST,
    )
    UNTRUSTED_TOPIC = ErrorInfo(
        "untrusted_topic", "Unrecognized SNS topic Arn", status.HTTP_400_BAD_REQUEST
    )
    MALFORMED_ENVELOPE = ErrorInfo(
        "malformed_envelope",
        "Could not decode SNS message.",
        status.HTTP_400_BAD_REQUEST,
    )
    HANDSHAKE_FAILED = ErrorInfo(
        "handshake_failed",
        "Failed to confirm SNS subscription.",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    CROSS_TENANT_REFERENCE = ErrorInfo(
        "invalid_references",
        "Could not save document. Invalid references saved on document.",
        status.HTTP_400_BAD_REQUEST,
    )
    DOCUMENT_NOT_FOUND = ErrorInfo(
        "not_found", "Could not retrieve document.", status.HTTP_404_NOT_FOUND
    )
    UPLOAD_FAILED = ErrorInfo(
        "upload_failed", "Failed to upload file to S3.", status.HTTP_502_BAD_GATEWAY
    )
    META_FAILED = ErrorInfo(
        "storage_error",
        "Failed to request file meta from S3.",
        status.HTTP_502_BAD_GATEWAY,
    )
    MISSING_WORKSPACE = ErrorInfo(
        "missing_workspace",
        "Missing workspace header.",
        status.HTTP_400_BAD_REQUEST,
    )
