class NoterError(Exception):
    """Base class for failures reported back to the user."""


class SexpSyntaxError(ValueError):
    pass


class MalformedRecord(NoterError, ValueError):
    """Highlight text that does not decode into a region."""


class NoHighlightAtLocation(NoterError):
    pass


class NoActiveSession(NoterError):
    pass


class NoPdfWindow(NoterError):
    pass


class AnnotationError(NoterError, ValueError):
    """The viewer refused to create an annotation for a region."""
