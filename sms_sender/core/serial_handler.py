"""Serial port I/O handler for the modem link.

This module wraps pyserial with a background reader thread. Inbound bytes
are appended to a buffer and waiters are woken through a
``threading.Condition``, so callers can block for replies in short slices
and stay responsive to cancellation.
"""

from typing import Optional, TYPE_CHECKING
import threading
import time

import serial

from sms_sender.core.exceptions import (
    SerialPortError,
    SerialPortBusyError,
    ConnectionTimeoutError
)

# Avoid circular import for type hints
if TYPE_CHECKING:
    from sms_sender.logging.communication_logger import CommunicationLogger

# Seconds to wait for the reader thread to exit on close
READER_JOIN_TIMEOUT = 2.0


class SerialHandler:
    """Owns one serial connection and its background reader thread.

    Example:
        >>> with SerialHandler('/dev/ttyUSB0', baud_rate=115200) as handler:
        ...     handler.write('AT+CMGF=0')
        ...     text = handler.read_available(timeout=1.0)
    """

    def __init__(self,
                 port: str,
                 baud_rate: int = 115200,
                 timeout: float = 0.1,
                 logger: Optional['CommunicationLogger'] = None,
                 **kwargs):
        """Initialize handler with port configuration.

        Args:
            port: Serial port device path
            baud_rate: Baud rate (default 115200)
            timeout: pyserial read timeout, i.e. the reader thread's poll interval
            logger: Optional CommunicationLogger for port events
            **kwargs: Additional arguments passed to serial.Serial
        """
        self.port = port
        self.baud_rate = baud_rate
        self.timeout = timeout
        self.logger = logger
        self.kwargs = kwargs
        self._serial: Optional[serial.Serial] = None
        self._lock = threading.Lock()
        self._open_time: Optional[float] = None

        self._rx_buffer = bytearray()
        self._data_available = threading.Condition()
        self._reader_thread: Optional[threading.Thread] = None
        self._stop_reader = threading.Event()
        self._reader_error: Optional[Exception] = None

    def open(self) -> None:
        """Open the port and start the reader thread.

        Raises:
            SerialPortError: Port doesn't exist or permission denied
            SerialPortBusyError: Port already in use
            ConnectionTimeoutError: Open timeout exceeded
        """
        with self._lock:
            if self._serial is not None and self._serial.is_open:
                return

            try:
                self._serial = serial.Serial(
                    port=self.port,
                    baudrate=self.baud_rate,
                    timeout=self.timeout,
                    **self.kwargs
                )
            except (serial.SerialException, OSError, ValueError) as e:
                if self.logger:
                    self.logger.log_error(
                        source="SerialHandler",
                        error=f"Failed to open port: {e}",
                        details={"port": self.port, "error_type": type(e).__name__}
                    )
                raise self._classify_open_error(e)

            self._open_time = time.time()
            self._start_reader()

            if self.logger:
                self.logger.log_port_event(
                    event="Port opened",
                    port=self.port,
                    details={"baud_rate": self.baud_rate, "timeout": self.timeout, **self.kwargs}
                )

    def _classify_open_error(self, error: Exception) -> SerialPortError:
        error_msg = str(error).lower()

        if 'permission denied' in error_msg or 'access denied' in error_msg:
            return SerialPortError(f"Permission denied accessing port {self.port}", self.port, error)
        if 'busy' in error_msg or 'in use' in error_msg:
            return SerialPortBusyError(f"Port {self.port} is already in use", self.port, error)
        if 'timeout' in error_msg or 'timed out' in error_msg:
            return ConnectionTimeoutError(f"Timeout opening port {self.port}", self.port, error)
        return SerialPortError(f"Failed to open port {self.port}: {error}", self.port, error)

    def _start_reader(self) -> None:
        self._stop_reader.clear()
        self._reader_error = None
        with self._data_available:
            self._rx_buffer.clear()
        self._reader_thread = threading.Thread(
            target=self._reader_loop,
            name=f"serial-reader-{self.port}",
            daemon=True
        )
        self._reader_thread.start()

    def _reader_loop(self) -> None:
        """Move inbound bytes into the buffer until stopped or the port fails."""
        while not self._stop_reader.is_set():
            try:
                data = self._serial.read(self._serial.in_waiting or 1)
            except (serial.SerialException, OSError) as e:
                if self._stop_reader.is_set():
                    break
                if self.logger:
                    self.logger.log_error(
                        source="SerialHandler",
                        error=f"Read failed: {e}",
                        details={"port": self.port}
                    )
                with self._data_available:
                    self._reader_error = e
                    self._data_available.notify_all()
                break

            if data:
                with self._data_available:
                    self._rx_buffer.extend(data)
                    self._data_available.notify_all()

    def read_available(self, timeout: Optional[float] = None) -> str:
        """Return buffered inbound text, waiting up to ``timeout`` for some.

        Args:
            timeout: Seconds to wait when the buffer is empty; None waits until
                data arrives

        Returns:
            Decoded text received since the last call ("" if none arrived)

        Raises:
            SerialPortError: Port not open, or the reader thread hit an I/O error
        """
        with self._data_available:
            if not self._rx_buffer and self._reader_error is None:
                if not self.is_connected():
                    raise SerialPortError("Cannot read from closed port", self.port, None)
                self._data_available.wait(timeout)

            if self._reader_error is not None and not self._rx_buffer:
                raise SerialPortError(
                    f"Failed to read from port {self.port}: {self._reader_error}",
                    self.port,
                    self._reader_error
                )

            data = bytes(self._rx_buffer)
            self._rx_buffer.clear()

        return data.decode('utf-8', errors='replace')

    def write(self, data: str, terminator: str = "\r\n") -> int:
        """Write ``data`` followed by ``terminator``.

        Returns:
            Number of bytes written

        Raises:
            SerialPortError: Port not open or write failed
        """
        with self._lock:
            if self._serial is None or not self._serial.is_open:
                raise SerialPortError("Cannot write to closed port", self.port, None)

            try:
                bytes_written = self._serial.write(f"{data}{terminator}".encode('utf-8'))
                self._serial.flush()
                return bytes_written
            except (serial.SerialException, OSError) as e:
                raise SerialPortError(f"Failed to write to port {self.port}: {e}", self.port, e)

    def flush_buffers(self) -> None:
        """Discard pending input and output, including already buffered text.

        Raises:
            SerialPortError: Port not open or flush failed
        """
        with self._lock:
            if self._serial is None or not self._serial.is_open:
                raise SerialPortError("Cannot flush buffers on closed port", self.port, None)

            try:
                self._serial.reset_input_buffer()
                self._serial.reset_output_buffer()
            except (serial.SerialException, OSError) as e:
                raise SerialPortError(f"Failed to flush buffers on port {self.port}: {e}", self.port, e)

        with self._data_available:
            self._rx_buffer.clear()

    def close(self) -> None:
        """Stop the reader thread and close the port.

        Safe to call multiple times; does nothing if port is already closed.
        """
        self._stop_reader.set()
        reader = self._reader_thread
        if reader is not None and reader is not threading.current_thread():
            reader.join(READER_JOIN_TIMEOUT)
        self._reader_thread = None

        with self._lock:
            if self._serial is None or not self._serial.is_open:
                return
            try:
                self._serial.close()
                if self.logger:
                    details = None
                    if self._open_time:
                        details = {"session_duration_seconds": time.time() - self._open_time}
                    self.logger.log_port_event(event="Port closed", port=self.port, details=details)
            except (serial.SerialException, OSError) as e:
                if self.logger:
                    self.logger.log_error(
                        source="SerialHandler",
                        error=f"Error closing port: {e}",
                        details={"port": self.port}
                    )
            finally:
                self._open_time = None

        # Wake anyone still waiting so they notice the closed port
        with self._data_available:
            self._data_available.notify_all()

    def is_connected(self) -> bool:
        return self._serial is not None and bool(self._serial.is_open)

    def __enter__(self):
        """Context manager entry: open port."""
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit: close port."""
        self.close()
        return False

    def __repr__(self) -> str:
        status = "open" if self.is_connected() else "closed"
        return f"SerialHandler(port='{self.port}', baud={self.baud_rate}, status={status})"
