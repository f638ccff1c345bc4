"""Search sessions and the pairing workflow."""

from .session import SearchSession
from .workflow import PairingResult, PairingWorkflow, ResolvedPairing, SearchOutcome

__all__ = ["PairingResult", "PairingWorkflow", "ResolvedPairing", "SearchOutcome", "SearchSession"]
