from __future__ import annotations


class DevEnvError(RuntimeError):
    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class PreconditionError(DevEnvError):
    """A required ancestor directory is missing."""


class ProvisionPermissionError(DevEnvError):
    """chmod/mkdir on a target directory failed."""


class ProvisionIOError(DevEnvError):
    pass


class SignatureCheckError(DevEnvError):
    """Reading an existing file to look for the managed signature failed."""


class CleanupError(DevEnvError):
    """Removing the previous destination before an import failed."""


class ExtractionError(DevEnvError):
    pass


class PortResolutionError(DevEnvError):
    pass
