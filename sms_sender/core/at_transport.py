"""AT command transport that submits PDU messages through a modem.

SmsTransport drives the modem through PDU mode and, for every message, the
two-step ``AT+CMGS`` submission:

    AT+CMGF=0\\r\\n          -> OK
    AT+CMGS=<length>\\r\\n   -> >
    <pdu hex><Ctrl-Z>       -> +CMGS: <mr>

The first ERROR aborts the whole operation. No command is ever retried.
"""

from collections.abc import Iterable as IterableABC
from enum import Enum
from typing import Iterable, List, Optional, Union, TYPE_CHECKING
import threading
import time

from sms_sender.core.serial_handler import SerialHandler
from sms_sender.core.command_response import (
    CommandResponse,
    ResponseStatus,
    classify_response
)
from sms_sender.core.exceptions import (
    ATCommandError,
    InvalidPortError,
    MissingTextError,
    ResponseTimeoutError,
    SendCancelledError
)
from sms_sender.pdu.message import PduMessage, build_messages
from sms_sender.pdu.number import Number, compose_number

if TYPE_CHECKING:
    from sms_sender.config.config_models import SerialConfig
    from sms_sender.logging.communication_logger import CommunicationLogger

SET_PDU_MODE_COMMAND = "AT+CMGF=0"
SET_SIZE_COMMAND = "AT+CMGS={length}"
COMMAND_TERMINATOR = "\r\n"
CTRL_Z = "\x1a"

DEFAULT_BAUD_RATE = 115200
DEFAULT_SETTLE_TIME = 0.5

# Longest single wait on the reader; bounds cancel and timeout latency
WAIT_SLICE = 0.1


class TransportState(Enum):
    """Progress of a send operation."""
    CLOSED = "closed"
    OPENING = "opening"
    MODE_SET = "mode_set"
    SENDING_SIZE = "sending_size"
    SENDING_CONTENT = "sending_content"
    COMPLETED = "completed"
    FAILED = "failed"


class SmsTransport:
    """Sends one or more PduMessages through an AT modem on a serial port.

    Each call to send() opens the port, runs the full command sequence and
    closes the port again, whatever the outcome. Only one send runs at a time.

    Example:
        >>> messages = build_messages(13052345678, "Hello World!")
        >>> transport = SmsTransport('/dev/ttyUSB0', messages, response_timeout=30)
        >>> submissions = transport.send()
        >>> submissions[0].modem_reference
        17
    """

    def __init__(self,
                 port: str,
                 messages: Union[PduMessage, Iterable[PduMessage]],
                 baud_rate: int = DEFAULT_BAUD_RATE,
                 settle_time: float = DEFAULT_SETTLE_TIME,
                 response_timeout: Optional[float] = None,
                 logger: Optional['CommunicationLogger'] = None,
                 serial_handler: Optional[SerialHandler] = None,
                 read_timeout: float = 0.1):
        """Initialize the transport.

        Args:
            port: Serial port device path
            messages: A PduMessage or an iterable of them, collected once here
            baud_rate: Baud rate used to open the port
            settle_time: Seconds to pause after opening the port
            response_timeout: Seconds to wait for each reply; None waits forever
            logger: Optional CommunicationLogger for commands, replies and states
            serial_handler: Pre-built handler (a new SerialHandler is created otherwise)
            read_timeout: Reader poll interval for a handler created here

        Raises:
            InvalidPortError: ``port`` is blank or not a string
            TypeError: ``messages`` is neither a PduMessage nor iterable
        """
        self._validate_port(port)
        if isinstance(messages, PduMessage):
            messages = [messages]
        elif not isinstance(messages, IterableABC):
            raise TypeError(f"messages must be a PduMessage or an iterable of them, "
                            f"got {type(messages).__name__}")

        self.port = port
        self.messages = list(messages)
        self.baud_rate = baud_rate
        self.settle_time = settle_time
        self.response_timeout = response_timeout
        self.logger = logger
        self.read_timeout = read_timeout
        self._serial_handler = serial_handler

        self._state = TransportState.CLOSED
        self._state_lock = threading.Lock()
        self._send_lock = threading.Lock()
        self._cancel_event = threading.Event()
        self._history: List[CommandResponse] = []
        self._history_lock = threading.Lock()

    @staticmethod
    def _validate_port(port: object) -> None:
        if not isinstance(port, str) or not port.strip():
            raise InvalidPortError(port)

    @classmethod
    def for_text(cls,
                 port: str,
                 number: Number,
                 text: str,
                 country_code: Optional[Number] = None,
                 reference: Optional[int] = None,
                 **kwargs) -> 'SmsTransport':
        """Build a transport for a text, splitting it when it is too long.

        Args:
            port: Serial port device path
            number: Destination number; local when ``country_code`` is given
            text: Message text (GSM-7 default alphabet)
            country_code: Prefix composed in front of ``number``
            reference: Concatenation reference; random when None
            **kwargs: Passed to the constructor

        Raises:
            InvalidPortError: ``port`` is blank
            MissingTextError: ``text`` is None or blank
            MessageValidationError: Number or text cannot be encoded
        """
        cls._validate_port(port)
        if not isinstance(text, str) or not text.strip():
            raise MissingTextError()

        destination = compose_number(country_code, number) if country_code is not None else number
        return cls(port, build_messages(destination, text, reference=reference), **kwargs)

    @classmethod
    def from_config(cls,
                    port: str,
                    messages: Union[PduMessage, Iterable[PduMessage]],
                    config: 'SerialConfig',
                    logger: Optional['CommunicationLogger'] = None) -> 'SmsTransport':
        """Build a transport using the serial section of the configuration."""
        return cls(
            port,
            messages,
            baud_rate=config.default_baud,
            settle_time=config.settle_time,
            response_timeout=config.response_timeout_seconds,
            logger=logger,
            read_timeout=config.read_timeout
        )

    @property
    def state(self) -> TransportState:
        with self._state_lock:
            return self._state

    def send(self) -> List[CommandResponse]:
        """Open the port, submit every message in order, close the port.

        Returns:
            The +CMGS reply of each message, in order

        Raises:
            ATCommandError: The modem answered a command with ERROR
            ResponseTimeoutError: A reply did not arrive within response_timeout
            SendCancelledError: cancel() was called while waiting
            SerialPortError: The port could not be opened, read or written
        """
        with self._send_lock:
            self._cancel_event.clear()
            with self._history_lock:
                self._history.clear()

            handler = self._serial_handler or SerialHandler(
                self.port,
                baud_rate=self.baud_rate,
                timeout=self.read_timeout,
                logger=self.logger
            )
            submissions: List[CommandResponse] = []

            try:
                self._set_state(TransportState.OPENING)
                handler.open()
                if self._cancel_event.wait(self.settle_time):
                    raise SendCancelledError("open")
                handler.flush_buffers()

                self._exchange(handler, SET_PDU_MODE_COMMAND, ResponseStatus.SUCCESS)
                self._set_state(TransportState.MODE_SET)

                for message in self.messages:
                    self._set_state(TransportState.SENDING_SIZE)
                    self._exchange(handler,
                                   SET_SIZE_COMMAND.format(length=message.length),
                                   ResponseStatus.PROMPT)

                    self._set_state(TransportState.SENDING_CONTENT)
                    submissions.append(self._exchange(handler,
                                                      message.to_pdu(),
                                                      ResponseStatus.SUBMITTED,
                                                      terminator=CTRL_Z))

                self._set_state(TransportState.COMPLETED)
                return submissions

            except Exception as e:
                self._set_state(TransportState.FAILED)
                if self.logger:
                    self.logger.log_error(
                        source="SmsTransport",
                        error=str(e),
                        details={"port": self.port, "error_type": type(e).__name__}
                    )
                raise
            finally:
                handler.close()

    def cancel(self) -> None:
        """Abort a send in progress. Safe to call from another thread."""
        self._cancel_event.set()
        if self.logger:
            self.logger.log_trace("SmsTransport", "Cancellation requested", port=self.port)

    def get_history(self) -> List[CommandResponse]:
        """Every exchange of the most recent send, in order."""
        with self._history_lock:
            return self._history.copy()

    def _set_state(self, new_state: TransportState) -> None:
        with self._state_lock:
            old_state = self._state
            self._state = new_state
        if self.logger:
            self.logger.log_state_change(self.port, old_state.value, new_state.value)

    def _exchange(self,
                  handler: SerialHandler,
                  command: str,
                  expected: ResponseStatus,
                  terminator: str = COMMAND_TERMINATOR) -> CommandResponse:
        """Write one command and wait until its reply is classified.

        Raises:
            ATCommandError: Reply contained ERROR
        """
        if self.logger:
            self.logger.log_command(self.port, command)

        start_time = time.monotonic()
        handler.write(command, terminator=terminator)
        received, status = self._wait_for_reply(handler, command, expected, start_time)
        execution_time = time.monotonic() - start_time

        response = CommandResponse.from_reply(command, received, status, execution_time)
        with self._history_lock:
            self._history.append(response)

        if self.logger:
            self.logger.log_response(
                port=self.port,
                response=response.get_response_text(),
                status=status.value,
                execution_time=execution_time,
                command=command
            )

        if status == ResponseStatus.ERROR:
            raise ATCommandError(
                f"Modem rejected command: {response.error_message}",
                command,
                response
            )
        return response

    def _wait_for_reply(self,
                        handler: SerialHandler,
                        command: str,
                        expected: ResponseStatus,
                        start_time: float):
        """Accumulate inbound text until it classifies as ``expected`` or ERROR.

        Returns:
            (accumulated text, final status)
        """
        received = ""
        deadline = None
        if self.response_timeout is not None:
            deadline = start_time + self.response_timeout

        while True:
            if self._cancel_event.is_set():
                self._log_abandoned(command, received, "cancelled", start_time)
                raise SendCancelledError(command)

            wait = WAIT_SLICE
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    self._log_abandoned(command, received, "timeout", start_time)
                    raise ResponseTimeoutError(command, self.response_timeout, received)
                wait = min(wait, remaining)

            chunk = handler.read_available(wait)
            if not chunk:
                continue

            received += chunk
            if not chunk.strip():
                continue

            status = classify_response(received, expected)
            if self.logger:
                self.logger.log_trace(
                    "SmsTransport",
                    "Classified reply",
                    details={"chunk": chunk, "expected": expected.value, "status": status.value},
                    port=self.port
                )
            if status != ResponseStatus.INCOMPLETE:
                return received, status

    def _log_abandoned(self, command: str, received: str, status: str, start_time: float) -> None:
        if self.logger:
            self.logger.log_response(
                port=self.port,
                response=received,
                status=status,
                execution_time=time.monotonic() - start_time,
                command=command
            )

    def __repr__(self) -> str:
        return (f"SmsTransport(port='{self.port}', baud={self.baud_rate}, "
                f"state={self.state.value})")
