"""DID resolution exceptions."""


class DidResolutionError(Exception):
    """Resolving a DID to its verification methods failed.

    Always caught per issuer: one issuer's resolution failure never aborts
    the checks of the other issuers.
    """

    def __init__(self, message: str = "DID resolution failed"):
        self.message = message
        super().__init__(message)
