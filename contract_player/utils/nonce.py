import structlog

log = structlog.get_logger(__name__)


class NonceSequencer:
    """Local view of an account's nonce.

    Seeded once from the chain-reported nonce; afterwards it is only ever
    advanced locally, once per transaction that reached the node. Confirmation
    does not matter, a submitted transaction holds its nonce regardless.

    Not safe for concurrent submission. Callers sharing one account across
    tasks must serialize submit + :meth:`advance` themselves.
    """

    def __init__(self, initial: int) -> None:
        if initial < 0:
            raise ValueError(f"Nonce must not be negative, got {initial}")
        self._initial = initial
        self._current = initial

    @property
    def current(self) -> int:
        return self._current

    @property
    def consumed(self) -> int:
        """The number of nonces handed out since initialization."""
        return self._current - self._initial

    def advance(self) -> int:
        """Consume the current nonce and return the next one."""
        self._current += 1
        log.debug("Nonce advanced", nonce=self._current)
        return self._current

    def __repr__(self) -> str:
        return f"<{self.__class__.__qualname__} current={self._current} consumed={self.consumed}>"
