"""PDU SMS Sender - command-line interface.

Encodes a text as GSM-7 SMS-SUBMIT PDUs and submits them through an AT modem.
"""

import argparse
import dataclasses
import sys
from typing import List, Optional

import yaml

from sms_sender.core import SmsTransport, SmsSenderError, MessageValidationError
from sms_sender.config import ConfigManager, ConfigSchema, Config, LogLevel, get_default_config
from sms_sender.logging import CommunicationLogger
from sms_sender.pdu import PduMessage, build_messages
from sms_sender.pdu.number import compose_number


def show_config(manager: ConfigManager) -> None:
    """Print the active configuration with the layer each value came from."""
    path = manager.get_config_path()
    print(f"Configuration file: {path if path else '(none, defaults only)'}")
    for section, values in manager.get_config().to_dict().items():
        print(f"\n[{section}]")
        for key, value in values.items():
            source = manager.get_source(f"{section}.{key}") or "default"
            print(f"  {key:24} = {value!r:12} ({source})")


def print_messages(messages: List[PduMessage]) -> None:
    """Print each PDU with the length passed to AT+CMGS."""
    total = len(messages)
    for index, message in enumerate(messages, start=1):
        print(f"Part {index}/{total}: AT+CMGS={message.length}")
        print(f"  {message.to_pdu()}")


def build_logger(args: argparse.Namespace, config: Config) -> Optional[CommunicationLogger]:
    """Create the communication logger from --log options or the config file."""
    logging_config = config.logging
    if args.log:
        logging_config = dataclasses.replace(
            logging_config,
            enabled=True,
            level=LogLevel[args.log_level] if args.log_level else logging_config.level,
            log_to_file=True,
            log_to_console=args.log_to_console or logging_config.log_to_console,
            log_file_path=args.log_file or logging_config.log_file_path
        )

    if not logging_config.enabled:
        return None
    return CommunicationLogger.from_config(logging_config)


def send_text(
    port: str,
    number: str,
    text: str,
    country_code: Optional[str],
    config: Config,
    baud: int,
    timeout: Optional[float],
    verbose: bool,
    logger: Optional[CommunicationLogger] = None
) -> int:
    """Build the messages for ``text`` and submit them on ``port``.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    try:
        transport = SmsTransport.for_text(
            port,
            number,
            text,
            country_code=country_code,
            reference=config.sms.concatenation_reference,
            baud_rate=baud,
            settle_time=config.serial.settle_time,
            response_timeout=timeout,
            logger=logger,
            read_timeout=config.serial.read_timeout
        )

        if verbose:
            print(f"Opening port {port} at {baud} baud...")

        submissions = transport.send()

        print(f"\n{'='*60}")
        print(f"Sent {len(submissions)} message part(s) on {port}")
        for index, response in enumerate(submissions, start=1):
            reference = response.modem_reference if response.modem_reference is not None else "?"
            print(f"  Part {index}: reference {reference} ({response.execution_time:.3f}s)")
        if verbose:
            print("\nExchanges:")
            for response in transport.get_history():
                print(f"  {response}")
        print(f"{'='*60}\n")
        return 0

    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 1
    except SmsSenderError as e:
        print(f"Error: {e}", file=sys.stderr)
        if verbose:
            import traceback
            traceback.print_exc()
        return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="PDU SMS Sender - send GSM-7 SMS through an AT modem",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --port /dev/ttyUSB0 --number 13052345678 --text "Hello World!"
  %(prog)s --port COM3 --country-code 1 --number 3052345678 --text "Hi" --verbose
  %(prog)s --number 13052345678 --text "Hello" --dry-run       # Print PDUs only

  # Logging examples:
  %(prog)s --port COM3 --number 13052345678 --text "Hi" --log
  %(prog)s --port COM3 --number 13052345678 --text "Hi" --log --log-level DEBUG --log-to-console
        """
    )

    parser.add_argument('--port', type=str, help='Serial port device (e.g., COM3, /dev/ttyUSB0)')
    parser.add_argument('--number', type=str, help='Destination number (international, digits only)')
    parser.add_argument('--country-code', type=str,
                        help='Country code prefixed to --number (default: from config)')
    parser.add_argument('--text', type=str, help='Message text (GSM-7 default alphabet)')
    parser.add_argument('--baud', type=int, help='Baud rate (default: from config, 115200)')
    parser.add_argument('--timeout', type=float,
                        help='Seconds to wait for each modem reply, 0 waits forever '
                             '(default: from config)')
    parser.add_argument('--config', type=str, metavar='PATH', help='Path to a YAML configuration file')
    parser.add_argument('--dry-run', action='store_true',
                        help='Print the PDUs and their lengths without opening the port')
    parser.add_argument('--show-config', action='store_true',
                        help='Show current configuration with sources')
    parser.add_argument('--verbose', action='store_true', help='Enable verbose output')

    # Logging arguments
    parser.add_argument('--log', action='store_true', help='Enable communication logging')
    parser.add_argument('--log-file', type=str, metavar='PATH',
                        help='Path to log file (default: ~/.sms-sender/logs/comm_YYYYMMDD_HHMMSS.log)')
    parser.add_argument('--log-level', type=str, choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Log level (default: INFO)')
    parser.add_argument('--log-to-console', action='store_true',
                        help='Output logs to console (stderr) in addition to file')

    args = parser.parse_args(argv)

    try:
        manager = ConfigManager.initialize(config_path=args.config)
        config = manager.get_config()
        if args.verbose:
            print("Configuration loaded")
    except (OSError, ValueError, yaml.YAMLError) as e:
        if args.config:
            print(f"Error: Failed to load configuration: {e}", file=sys.stderr)
            return 1
        print(f"Warning: Failed to load configuration: {e}", file=sys.stderr)
        manager = None
        config = get_default_config()

    if args.show_config:
        if manager is None:
            return 1
        show_config(manager)
        return 0

    if not args.number or args.text is None:
        print("Error: --number and --text are required", file=sys.stderr)
        return 1

    country_code = args.country_code
    if country_code is None and config.sms.default_country_code is not None:
        country_code = str(config.sms.default_country_code)

    if args.dry_run:
        try:
            destination = compose_number(country_code, args.number) if country_code else args.number
            print_messages(list(build_messages(destination, args.text,
                                               reference=config.sms.concatenation_reference)))
            return 0
        except MessageValidationError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    if not args.port:
        print("Error: --port is required unless --dry-run is given", file=sys.stderr)
        return 1

    baud = args.baud if args.baud is not None else config.serial.default_baud
    if not ConfigSchema.validate_baud_rate(baud):
        print(f"Warning: {baud} is not a standard baud rate", file=sys.stderr)

    if args.timeout is None:
        timeout = config.serial.response_timeout_seconds
    else:
        timeout = args.timeout if args.timeout > 0 else None

    try:
        logger = build_logger(args, config)
    except (OSError, ValueError) as e:
        print(f"Warning: Failed to initialize logger: {e}", file=sys.stderr)
        logger = None

    try:
        exit_code = send_text(
            port=args.port,
            number=args.number,
            text=args.text,
            country_code=country_code,
            config=config,
            baud=baud,
            timeout=timeout,
            verbose=args.verbose,
            logger=logger
        )
        if logger and logger.log_file_path and args.verbose:
            print(f"\nLog file: {logger.log_file_path}")
        return exit_code
    finally:
        if logger:
            logger.close()


if __name__ == '__main__':
    sys.exit(main())
