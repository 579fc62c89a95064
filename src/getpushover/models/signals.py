"""
Control signals received over the push stream.

The relay sends single-character frames:
  #  keepalive
  !  new messages are waiting
  R  reconnect now
  E  device needs to log in again
"""

from enum import Enum
from typing import Union


class ControlSignal(str, Enum):
    KEEPALIVE = "#"
    NEW_DATA = "!"
    RESET = "R"
    REAUTHENTICATE = "E"
    MESSAGE = ""

    @classmethod
    def decode(cls, frame: Union[str, bytes]) -> tuple["ControlSignal", str]:
        """Decode a raw frame into (signal, text). Unrecognised frames become MESSAGE."""
        if isinstance(frame, (bytes, bytearray)):
            text = bytes(frame).decode("utf-8", errors="replace")
        else:
            text = frame
        for signal in (cls.KEEPALIVE, cls.NEW_DATA, cls.RESET, cls.REAUTHENTICATE):
            if text == signal.value:
                return signal, text
        return cls.MESSAGE, text
