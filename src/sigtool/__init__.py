"""sigtool - Named key management and multi-scheme digital signatures."""

__version__ = "0.1.0"
__description__ = "Local key custody and ECDSA/BLS signing toolkit"

# Make key modules available at package level
from . import lib

__all__ = ["lib"]
