"""
Error types for tabsplit
"""


class TabsplitError(Exception):
    """Base class for all tabsplit errors"""


class ValidationError(TabsplitError):
    """A manual item add/edit carried an empty name or a non-numeric value"""


class ExternalServiceError(TabsplitError):
    """The OCR or command service failed or answered with an unusable payload"""

    def __init__(self, message: str, status: int = 502):
        super().__init__(message)
        self.status = status


class QuotaExceededError(ExternalServiceError):
    """The external service rejected the call for rate or quota reasons"""

    def __init__(self, message: str = "quota exceeded"):
        super().__init__(message, status=429)


class SessionBusyError(TabsplitError):
    """A request was issued while another one of the same kind is outstanding"""
