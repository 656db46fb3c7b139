from .accumulator import FluxAccumulator, SLOT_GAIN, SLOT_LOSS, transfer_balance
from .flux import FluxReport, evaluate_membrane_flux, evaluate_partitioned, molar_flux
from .partial_pressure import partial_pressure
from .sources import PermeateSourceTerm, ReactantSinkTerm, SourceTerm

__all__ = [
    "FluxAccumulator",
    "SLOT_LOSS",
    "SLOT_GAIN",
    "transfer_balance",
    "FluxReport",
    "evaluate_membrane_flux",
    "evaluate_partitioned",
    "molar_flux",
    "partial_pressure",
    "SourceTerm",
    "ReactantSinkTerm",
    "PermeateSourceTerm",
]
