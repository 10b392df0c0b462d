from typing import Protocol


class II2CBus(Protocol):
    """
    Addressed register bus (I2C).

    All transactions are synchronous and assumed to complete; there are no
    timeouts at this layer.
    """

    @property
    def bus_number(self) -> int:
        ...

    def probe(self, address: int) -> bool:
        """True if a device acknowledges at address."""
        ...

    def write(self, address: int, data: bytes) -> None:
        """Single write transaction."""
        ...

    def write_read(self, address: int, data: bytes, length: int) -> bytes:
        """Combined write-then-read transaction (repeated start)."""
        ...

    def close(self) -> None:
        ...
