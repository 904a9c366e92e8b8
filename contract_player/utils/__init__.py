from contract_player.utils.formatting import to_hex

__all__ = ["to_hex"]
