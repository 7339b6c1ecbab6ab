"""DXBC container scanning and building, with readers and writers for signature, STAT, SFI0 and RTS0 chunks."""

__version__ = "0.1.0"
__all__ = ["container", "sfi0", "rts0", "signature", "stat"]