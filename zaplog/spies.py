"""Write-syncer doubles for observing and faking log output."""

from __future__ import annotations


class Syncer:
    """Records calls to ``sync`` and raises a configured error, if any."""

    def __init__(self) -> None:
        self._err: BaseException | None = None
        self._called = False

    def set_error(self, err: BaseException | None) -> None:
        """Set the error that ``sync`` raises."""
        self._err = err

    def sync(self) -> None:
        self._called = True
        if self._err is not None:
            raise self._err

    def called(self) -> bool:
        """Report whether ``sync`` has been called."""
        return self._called


class Discarder(Syncer):
    """Accepts and drops every write."""

    def write(self, data: bytes) -> int:
        return len(data)


class FailWriter(Syncer):
    """Fails every write."""

    def write(self, data: bytes) -> int:
        raise OSError("failed")


class ShortWriter(Syncer):
    """Reports writing one byte fewer than given, without failing."""

    def write(self, data: bytes) -> int:
        return len(data) - 1


class Buffer(Syncer):
    """Collects writes in memory."""

    def __init__(self) -> None:
        super().__init__()
        self._data = bytearray()

    def write(self, data: bytes) -> int:
        self._data.extend(data)
        return len(data)

    def getvalue(self) -> str:
        return self._data.decode("utf-8", errors="replace")

    def lines(self) -> list[str]:
        """Contents split on newlines, without the part after the last one."""
        return self.getvalue().split("\n")[:-1]

    def stripped(self) -> str:
        """Contents with trailing newlines removed."""
        return self.getvalue().rstrip("\n")