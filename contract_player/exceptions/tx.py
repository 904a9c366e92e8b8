class PlayerError(Exception):
    exit_code = 20


class TxError(PlayerError):
    exit_code = 21


class TxReverted(TxError):
    """The transaction was included, but its execution reverted."""

    exit_code = 22

    def __init__(self, tx_hash: int, reason: str) -> None:
        self.tx_hash = tx_hash
        self.reason = reason
        super().__init__(f"Transaction {tx_hash:#066x} has been rejected/reverted: {reason}")


class TxTimedOut(TxError):
    """We waited the configured time for a terminal receipt, but got none."""

    exit_code = 23

    def __init__(self, tx_hash: int, timeout: float) -> None:
        self.tx_hash = tx_hash
        self.timeout = timeout
        super().__init__(f"Timeout while waiting for transaction {tx_hash:#066x} ({timeout}s)")


class ProviderError(TxError):
    """The node answered a query with an error we do not know how to handle.

    The original client error is available as ``__cause__`` and :attr:`.error`.
    """

    exit_code = 24

    def __init__(self, message: str, error: Exception = None) -> None:
        self.error = error
        super().__init__(message if error is None else f"{message}: {error}")


class ConfigConflict(PlayerError):
    """The target address is already occupied by a contract of a different class."""

    exit_code = 25
