from docvault.verification.models import FileDescriptor, StepStatus, UploadResult, UploadStatus

__all__ = ["FileDescriptor", "StepStatus", "UploadResult", "UploadStatus"]
