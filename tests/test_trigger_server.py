"""Tests for the start/stop control server."""

import subprocess
import sys

import pytest

import trigger_server


class FakeProcess:
    def __init__(self, cmd):
        self.cmd = cmd
        self.pid = 4242
        self.returncode = None

    def poll(self):
        return self.returncode

    def terminate(self):
        self.returncode = -15

    def wait(self):
        return self.returncode


@pytest.fixture
def spawned(monkeypatch):
    procs = []

    def fake_popen(cmd):
        proc = FakeProcess(cmd)
        procs.append(proc)
        return proc

    monkeypatch.setattr(subprocess, "Popen", fake_popen)
    monkeypatch.setattr(trigger_server, "process", None)
    return procs


@pytest.fixture
def client():
    trigger_server.app.config["TESTING"] = True
    return trigger_server.app.test_client()


def test_reader_command():
    assert trigger_server.reader_command() == [sys.executable, "-m", "read_data"]
    assert trigger_server.reader_command("/dev/ttyUSB1", "http://x") == [
        sys.executable, "-m", "read_data", "/dev/ttyUSB1", "--post-url", "http://x",
    ]


def test_start_spawns_reader(client, spawned):
    resp = client.post("/start", json={"serial_port": "/dev/ttyUSB1"})
    assert resp.get_json() == {"status": "started", "pid": 4242}
    assert spawned[0].cmd[-1] == "/dev/ttyUSB1"


def test_start_without_body(client, spawned):
    resp = client.post("/start")
    assert resp.get_json()["status"] == "started"
    assert spawned[0].cmd == [sys.executable, "-m", "read_data"]


def test_start_twice(client, spawned):
    client.post("/start")
    resp = client.post("/start")
    assert resp.get_json()["status"] == "already running"
    assert len(spawned) == 1


def test_stop(client, spawned):
    client.post("/start")
    resp = client.post("/stop")
    assert resp.get_json() == {"status": "stopped", "returncode": -15}

    resp = client.post("/stop")
    assert resp.get_json() == {"status": "not running"}


def test_status_reports_crashed_reader(client, spawned):
    assert client.get("/status").get_json() == {"status": "not running", "returncode": None}

    client.post("/start")
    assert client.get("/status").get_json() == {"status": "running", "pid": 4242}

    # Reader exits with 1 after a serial timeout.
    spawned[0].returncode = 1
    assert client.get("/status").get_json() == {"status": "not running", "returncode": 1}
