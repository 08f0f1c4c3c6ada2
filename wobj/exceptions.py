"""Project-specific exception types."""


class WobjError(Exception):
    """Base class for failures that abort an export."""


class SceneImportError(WobjError):
    """Raised when the import provider cannot produce a scene."""


class UnsupportedImporterError(SceneImportError):
    """Raised when no importer handles the source file's extension."""


class EmitError(WobjError):
    """Raised when the destination cannot be opened or written."""
