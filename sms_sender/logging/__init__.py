"""Communication logging for the modem link.

Records commands, replies, port events and transport state changes for
debugging a modem session.
"""

from sms_sender.logging.log_models import LogEntry
from sms_sender.logging.file_handler import FileHandler
from sms_sender.logging.communication_logger import CommunicationLogger

__all__ = ['LogEntry', 'FileHandler', 'CommunicationLogger']
