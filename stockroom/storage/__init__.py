"""
Durable storage for Stockroom.
"""

from .persistence_gateway import (
    PersistenceGateway,
    RecoveryAction,
    decode_inventory,
    encode_inventory,
)

__all__ = [
    "PersistenceGateway",
    "RecoveryAction",
    "encode_inventory",
    "decode_inventory",
]
