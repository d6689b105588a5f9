"""tcsweep - residue sweeper for Beckhoff TwinCAT installations."""

__version__ = "0.3.0"

__all__ = ["__version__"]
