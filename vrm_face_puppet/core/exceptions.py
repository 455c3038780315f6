"""Exceptions raised by the face puppet."""


class CameraUnavailableError(RuntimeError):
    """The camera device could not be opened. Fatal at startup."""


class AvatarLoadError(RuntimeError):
    """The avatar asset could not be read or parsed."""
