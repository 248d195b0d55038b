class PresentationError(Exception):
    """Base class for rejected presentation requests.

    ``notice`` is the short text shown to the host as a transient message.
    """

    notice = 'Presentation request rejected'

    def __init__(self, message=None):
        super().__init__(message or self.notice)
        self.notice = message or self.notice


class NoActiveRound(PresentationError):
    notice = 'No active round'


class NoActiveContent(PresentationError):
    notice = 'No active round to display'


class UnknownRevealFlag(PresentationError, ValueError):
    notice = 'Unknown reveal flag'
