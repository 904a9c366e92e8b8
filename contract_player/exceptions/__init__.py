from contract_player.exceptions.tx import (
    ConfigConflict,
    PlayerError,
    ProviderError,
    TxError,
    TxReverted,
    TxTimedOut,
)

__all__ = [
    "ConfigConflict",
    "PlayerError",
    "ProviderError",
    "TxError",
    "TxReverted",
    "TxTimedOut",
]
