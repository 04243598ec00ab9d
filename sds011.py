"""SDS011 serial framing.

The sensor pushes a 10 byte packet once per second with no transport
framing around it:

    byte 0      AA   header
    byte 1      C0   command id
    byte 2-3    PM2.5 * 10, little endian
    byte 4-5    PM10 * 10, little endian
    byte 6-8    id / checksum (ignored here)
    byte 9      AB   tail
"""

import enum
from collections import namedtuple

import serial

# === SDS011 Protocol ===
HEADER = 0xAA
COMMAND_ID = 0xC0
TAIL = 0xAB
PAYLOAD_SIZE = 8
TAIL_OFFSET = 7

DEFAULT_BAUD_RATE = 9600
# Device produces output at 1Hz; 2 seconds of silence means something is wrong.
DEFAULT_TIMEOUT = 2.0

Sample = namedtuple("Sample", ["pm25", "pm10"])


class ReadTimeout(serial.SerialException):
    """The port went quiet for longer than its read timeout."""


class FrameState(enum.Enum):
    SCAN_HEADER = "scan_header"
    SCAN_SYNC = "scan_sync"
    READ_PAYLOAD = "read_payload"
    VALIDATE = "validate"


def open_port(path, baudrate=DEFAULT_BAUD_RATE, timeout=DEFAULT_TIMEOUT):
    return serial.Serial(
        path,
        baudrate=baudrate,
        bytesize=serial.EIGHTBITS,
        parity=serial.PARITY_NONE,
        stopbits=serial.STOPBITS_ONE,
        timeout=timeout,
    )


def read_exact(port, size):
    """Read exactly `size` bytes or raise ReadTimeout.

    pyserial returns a short buffer when the read timeout expires, so a
    short read is the idle timeout firing.
    """
    data = port.read(size)
    if len(data) != size:
        raise ReadTimeout(
            f"read timed out: wanted {size} byte(s), got {len(data)}"
        )
    return data


class FrameSynchronizer:
    """Finds packet boundaries in the raw byte stream.

    Every mismatch drops back to the header scan; nothing is buffered
    between attempts or between calls, so a corrupted packet costs the
    bytes already read for it. Transport errors are never caught here.
    """

    def __init__(self, port):
        self.port = port
        self.state = FrameState.SCAN_HEADER

    def next_payload(self):
        payload = b""
        self.state = FrameState.SCAN_HEADER
        while True:
            if self.state is FrameState.SCAN_HEADER:
                if read_exact(self.port, 1)[0] == HEADER:
                    self.state = FrameState.SCAN_SYNC
            elif self.state is FrameState.SCAN_SYNC:
                # The header byte is not reused if this one is wrong.
                if read_exact(self.port, 1)[0] == COMMAND_ID:
                    self.state = FrameState.READ_PAYLOAD
                else:
                    self.state = FrameState.SCAN_HEADER
            elif self.state is FrameState.READ_PAYLOAD:
                payload = read_exact(self.port, PAYLOAD_SIZE)
                self.state = FrameState.VALIDATE
            else:
                if payload[TAIL_OFFSET] == TAIL:
                    return payload
                self.state = FrameState.SCAN_HEADER


def decode_sample(payload):
    # Both values are tenths of a microgram per cubic meter.
    pm25 = int.from_bytes(payload[0:2], byteorder="little") / 10
    pm10 = int.from_bytes(payload[2:4], byteorder="little") / 10
    return Sample(pm25, pm10)


def iter_samples(port):
    synchronizer = FrameSynchronizer(port)
    while True:
        yield decode_sample(synchronizer.next_payload())
