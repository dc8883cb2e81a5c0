"""Chain read failures.

Callers match on the message text of the first three classes, so their
default messages are fixed literals.
"""


class ChainCallError(Exception):
    """Base exception for contract reads.

    Also raised directly for transport and JSON-RPC failures that do not
    fall into a more specific class.
    """

    def __init__(self, message: str = "chain call failed"):
        self.message = message
        super().__init__(message)


class ContractNotDeployedError(ChainCallError):
    """No code at the contract address."""

    def __init__(self, message: str = "contract not deployed"):
        super().__init__(message)


class InvalidArgumentError(ChainCallError):
    """Argument does not conform to the declared ABI type of the method."""

    def __init__(self, message: str = "invalid input argument"):
        super().__init__(message)


class MethodNotFoundError(ChainCallError):
    """Method name is not part of the contract interface."""

    def __init__(self, message: str = "contract.functions[method] is not a function"):
        super().__init__(message)


class InvalidAddressError(ChainCallError):
    """Contract address is not a 20-byte hex address."""

    def __init__(self, message: str = "invalid address"):
        super().__init__(message)


class CallRevertedError(ChainCallError):
    """The contract reverted the call (e.g. ownerOf on a nonexistent token)."""

    def __init__(self, message: str = "execution reverted"):
        super().__init__(message)
