"""Read an SDS011 sensor and print one CSV line per sample.

    timestamp,pm25,pm25_aqi,pm10,pm10_aqi,lrapa_pm25_aqi

AQI values off the top of the table print as 501.000.
"""

import argparse
import logging
import os
import sys
from datetime import datetime

import pytz
import requests
import serial

import aqi
import sds011
from logging_config import setup_logging

logger = logging.getLogger(__name__)

# === SDS011 Setup ===
SERIAL_PORT = "/dev/ttyUSB0"
BAUD_RATE = sds011.DEFAULT_BAUD_RATE
READ_TIMEOUT = sds011.DEFAULT_TIMEOUT

# === HTTP push ===
POST_TIMEOUT = 5

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _timezone(name):
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        raise argparse.ArgumentTypeError(f"unknown timezone: {name}")


def parse_args(argv=None, environ=None):
    environ = os.environ if environ is None else environ
    parser = argparse.ArgumentParser(
        prog="sds011-aqi",
        description="Print PM2.5/PM10 readings and AQI values from an SDS011 sensor as CSV.",
    )
    parser.add_argument(
        "serial_port",
        nargs="?",
        default=environ.get("SDS011_PORT", SERIAL_PORT),
        help="path to the serial port, e.g. /dev/ttyUSB0",
    )
    parser.add_argument(
        "--baud-rate", type=int, default=environ.get("SDS011_BAUD_RATE", BAUD_RATE)
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=environ.get("SDS011_TIMEOUT", READ_TIMEOUT),
        help="seconds of silence before giving up",
    )
    parser.add_argument(
        "--timezone",
        type=_timezone,
        default=environ.get("SDS011_TIMEZONE"),
        help="timezone name for timestamps (default: local time)",
    )
    parser.add_argument(
        "--post-url",
        default=environ.get("SDS011_POST_URL"),
        help="also POST every record as JSON to this URL",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=environ.get("LOG_LEVEL", "INFO"),
    )
    args = parser.parse_args(argv)
    # argparse leaves defaults out of the choices check, so LOG_LEVEL from
    # the environment is validated here.
    if args.log_level not in LOG_LEVELS:
        parser.error(f"invalid LOG_LEVEL: {args.log_level!r} (choose from {', '.join(LOG_LEVELS)})")
    return args


def now(tz=None):
    if tz is None:
        return datetime.now().astimezone()
    return datetime.now(tz)


def build_record(sample, timestamp):
    return {
        "timestamp": timestamp.isoformat(),
        "PM25": sample.pm25,
        "PM25_AQI": aqi.aqi(aqi.PM25_AQI, sample.pm25),
        "PM10": sample.pm10,
        "PM10_AQI": aqi.aqi(aqi.PM10_AQI, sample.pm10),
        "PM25_LRAPA_AQI": aqi.aqi(aqi.PM25_AQI, aqi.lrapa(sample.pm25)),
    }


def format_csv(record):
    return "{},{:.1f},{:.3f},{:.1f},{:.3f},{:.3f}".format(
        record["timestamp"],
        record["PM25"],
        aqi.shown(record["PM25_AQI"]),
        record["PM10"],
        aqi.shown(record["PM10_AQI"]),
        aqi.shown(record["PM25_LRAPA_AQI"]),
    )


def send_to_server(url, record):
    data = {
        "timestamp": record["timestamp"],
        "PM25": record["PM25"],
        "PM25_AQI": round(aqi.shown(record["PM25_AQI"]), 3),
        "PM10": record["PM10"],
        "PM10_AQI": round(aqi.shown(record["PM10_AQI"]), 3),
        "PM25_LRAPA_AQI": round(aqi.shown(record["PM25_LRAPA_AQI"]), 3),
        "PM25_category": aqi.category(record["PM25_AQI"]),
        "PM10_category": aqi.category(record["PM10_AQI"]),
    }

    try:
        response = requests.post(url, json=data, timeout=POST_TIMEOUT)
    except requests.RequestException as e:
        logger.warning("(x) exception while sending to %s: %s", url, e)
        return False

    if not response.ok:
        logger.warning("(x) server error: %s %s", response.status_code, response.text)
        return False
    logger.debug("record sent to %s", url)
    return True


def emit(line):
    print(line, flush=True)


def run(samples, output=emit, tz=None, post_url=None):
    """Turn every sample into a record until the sample source fails."""
    for sample in samples:
        record = build_record(sample, now(tz))
        output(format_csv(record))
        if post_url:
            send_to_server(post_url, record)


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.log_level)

    try:
        ser = sds011.open_port(args.serial_port, baudrate=args.baud_rate, timeout=args.timeout)
    except serial.SerialException as e:
        logger.error("(x) could not open serial port %s: %s", args.serial_port, e)
        return 1

    logger.info("... Gathering Air Quality Data from %s ...", args.serial_port)
    try:
        run(sds011.iter_samples(ser), tz=args.timezone, post_url=args.post_url)
    except KeyboardInterrupt:
        logger.info("Program stopped by user!")
        return 0
    except serial.SerialException as e:
        logger.error("(x) serial port error: %s", e)
        return 1
    finally:
        ser.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
