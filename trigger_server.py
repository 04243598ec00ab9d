import logging
import os
import subprocess
import sys

from flask import Flask, jsonify, request

from logging_config import setup_logging

logger = logging.getLogger(__name__)

app = Flask(__name__)
process = None  # the running reader, if any

READER_MODULE = "read_data"


def reader_command(serial_port=None, post_url=None):
    cmd = [sys.executable, "-m", READER_MODULE]
    if serial_port:
        cmd.append(serial_port)
    if post_url:
        cmd.extend(["--post-url", post_url])
    return cmd


def _running():
    return process is not None and process.poll() is None


@app.route('/start', methods=['POST'])
def start_reader():
    global process
    data = request.get_json(silent=True) or {}

    if _running():
        return jsonify({"status": "already running", "pid": process.pid})

    cmd = reader_command(data.get('serial_port'), data.get('post_url'))
    process = subprocess.Popen(cmd)
    logger.info("started reader pid=%s: %s", process.pid, " ".join(cmd))
    return jsonify({"status": "started", "pid": process.pid})


@app.route('/stop', methods=['POST'])
def stop_reader():
    global process
    if not _running():
        return jsonify({"status": "not running"})

    process.terminate()
    returncode = process.wait()
    logger.info("stopped reader pid=%s", process.pid)
    return jsonify({"status": "stopped", "returncode": returncode})


@app.route('/status', methods=['GET'])
def reader_status():
    if process is None:
        return jsonify({"status": "not running", "returncode": None})
    if _running():
        return jsonify({"status": "running", "pid": process.pid})
    # A reader exits on its own only after a serial error.
    return jsonify({"status": "not running", "returncode": process.returncode})


if __name__ == '__main__':
    setup_logging(os.environ.get("LOG_LEVEL", "INFO"))
    app.run(
        host=os.environ.get("TRIGGER_HOST", "0.0.0.0"),
        port=int(os.environ.get("TRIGGER_PORT", "5000")),
    )
