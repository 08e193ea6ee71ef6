"""Grid — сериализованный фасад ledger энергосети."""

from .energy_grid import SNAPSHOT_SCHEMA_VERSION, EnergyGrid

__all__ = [
    "EnergyGrid",
    "SNAPSHOT_SCHEMA_VERSION",
]
