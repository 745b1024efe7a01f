class EditorError(Exception):
    """Base editing error"""


class ImageLoadError(EditorError):
    """Background image could not be fetched or decoded"""


class UnknownShapeKind(EditorError):
    """Requested shape kind is not recognized"""


class MissingTargetObject(EditorError):
    """No object with the requested id is on the stack"""


class DuplicateObjectId(EditorError):
    """An object with the same id is already on the stack"""


class LayerStackError(EditorError):
    """Operation would break the background-first stack layout"""


class SessionClosedError(EditorError):
    """Session was used after it was closed"""
