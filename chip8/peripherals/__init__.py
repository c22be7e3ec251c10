"""Host-side peripheral adapters."""

from .audio import ToneGate, ToneSnapshot

__all__ = ["ToneGate", "ToneSnapshot"]
