"""
Error taxonomy for the ingestion pipeline

Every failure a pipeline step can report derives from ``IngestError`` and
carries the HTTP status the API maps it to.
"""

from typing import Optional


class IngestError(Exception):
    """Base class for classified ingestion failures"""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, *, video_id: Optional[str] = None):
        self.message = message or self.default_message
        self.video_id = video_id
        super().__init__(self.message)


# ----------------------------------------------------------------------------
# Client errors
# ----------------------------------------------------------------------------

class ValidationError(IngestError):
    """Bad input shape or type"""
    status_code = 400
    default_message = "Invalid input"


class UploadTooLargeError(ValidationError):
    default_message = "Upload exceeds the maximum allowed size"


class ProbeError(ValidationError):
    """File could not be parsed as a supported video container"""
    default_message = "Unable to read video dimensions"


class AuthenticationError(IngestError):
    status_code = 401
    default_message = "Couldn't validate credentials"


class AuthorizationError(IngestError):
    """Caller is not the owner of record"""
    status_code = 403
    default_message = "Not authorized to modify this video"


class NotFoundError(IngestError):
    status_code = 404
    default_message = "Video not found"


# ----------------------------------------------------------------------------
# Server errors
# ----------------------------------------------------------------------------

class ToolError(IngestError):
    """External probe/remux process failed"""
    default_message = "Media tool failed"


class ProbeToolError(ToolError):
    default_message = "Unable to probe video"


class RemuxError(ToolError):
    default_message = "Unable to process video for fast start"


class StagingError(IngestError):
    """Writing the upload to scratch space failed"""
    default_message = "Error writing the video file"


class StorageError(IngestError):
    """Object store transport or backend failure"""
    default_message = "Object storage failure"


class StorageWriteError(StorageError):
    default_message = "Unable to upload the video to object storage"


class ConsistencyWarning(IngestError):
    """
    Metadata update failed after the object write succeeded.

    The stored object now exists with nothing referencing it.
    """
    default_message = "Unable to update video metadata"

    def __init__(self, message: Optional[str] = None, *, video_id: Optional[str] = None,
                 orphan_key: Optional[str] = None):
        super().__init__(message, video_id=video_id)
        self.orphan_key = orphan_key
