"""Domain errors raised by the discovery core and mapped to HTTP by the routes."""


class LokalakuError(Exception):
    """Base class for errors the service knows how to report."""


class InvalidInput(LokalakuError, ValueError):
    """A coordinate or radius failed validation before reaching geo code."""


class UpstreamDegraded(LokalakuError):
    """An external collaborator failed, timed out or returned unusable data.

    Always absorbed at the component boundary and turned into a fallback value.
    """

    def __init__(self, upstream: str, reason: str, status_code: int | None = None):
        super().__init__(f"{upstream}: {reason}")
        self.upstream = upstream
        self.reason = reason
        self.status_code = status_code


class VendorNotFound(LokalakuError):
    def __init__(self, vendor_id: int):
        super().__init__(f"vendor {vendor_id} does not exist")
        self.vendor_id = vendor_id


class VendorNotLive(LokalakuError):
    def __init__(self, vendor_id: int):
        super().__init__(f"vendor {vendor_id} is not live")
        self.vendor_id = vendor_id
