"""Fault types raised by the CHIP-8 interpreter."""

from __future__ import annotations


class CPUFault(RuntimeError):
    """Base class for errors caused by a malformed program or interpreter gap."""


class UnsupportedOpcode(CPUFault):
    """Raised when an instruction does not decode to a known operation."""

    def __init__(self, opcode: int, address: int) -> None:
        super().__init__(f"unsupported opcode {opcode:04X} at {address:03X}")
        self.opcode = opcode & 0xFFFF
        self.address = address


class StackUnderflow(CPUFault):
    """Raised when 00EE executes with an empty call stack."""

    def __init__(self, address: int) -> None:
        super().__init__(f"return with empty stack at {address:03X}")
        self.address = address


class OutOfBoundsAccess(CPUFault):
    """Raised when a memory access falls outside the address space."""

    def __init__(self, address: int, size: int = 0x1000) -> None:
        super().__init__(f"memory access out of range: {address:04X} (size {size:04X})")
        self.address = address
        self.size = size


__all__ = [
    "CPUFault",
    "OutOfBoundsAccess",
    "StackUnderflow",
    "UnsupportedOpcode",
]
