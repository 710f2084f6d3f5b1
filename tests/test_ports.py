"""Unit tests for port availability probing."""

import errno
import socket
from unittest import mock

import pytest

from app_catalog.ports import (
    PROBE_HOST,
    PROBE_TIMEOUT_SECONDS,
    check_ports,
    is_port_available,
)
from schemas.app import PortDefinition


@pytest.fixture
def listening_socket():
    """A TCP socket listening on an ephemeral localhost port."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    sock.listen(1)
    yield sock
    sock.close()


@pytest.fixture
def free_port():
    """A port number that was just released and has no listener."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


class TestIsPortAvailable:
    """Tests for is_port_available function."""

    def test_listening_port_is_unavailable(self, listening_socket):
        port = listening_socket.getsockname()[1]
        assert is_port_available(port) is False

    def test_unused_port_is_available(self, free_port):
        assert is_port_available(free_port) is True

    def test_default_probe_settings(self):
        """Test that the probe targets localhost with a one second timeout."""
        with mock.patch("socket.create_connection") as create_connection:
            is_port_available(8080)

        create_connection.assert_called_once_with(
            (PROBE_HOST, 8080), timeout=PROBE_TIMEOUT_SECONDS
        )
        assert PROBE_HOST == "127.0.0.1"
        assert PROBE_TIMEOUT_SECONDS == 1.0

    def test_timeout_fails_open(self):
        """Test that an indeterminate probe reports the port as available."""
        with mock.patch("socket.create_connection", side_effect=socket.timeout("timed out")):
            assert is_port_available(8080) is True

    def test_connection_refused_is_available(self):
        with mock.patch("socket.create_connection", side_effect=ConnectionRefusedError()):
            assert is_port_available(8080) is True

    def test_unresolvable_host_is_available(self):
        error = socket.gaierror(socket.EAI_NONAME, "Name or service not known")
        with mock.patch("socket.create_connection", side_effect=error):
            assert is_port_available(8080, host="no-such-host.invalid") is True

    def test_other_network_errors_are_unavailable(self):
        """Test that inconclusive failures other than timeouts block."""
        error = OSError(errno.EHOSTUNREACH, "No route to host")
        with mock.patch("socket.create_connection", side_effect=error):
            assert is_port_available(8080) is False

    @pytest.mark.parametrize("port", [0, -1, 65536])
    def test_out_of_range_port_is_unavailable(self, port):
        """Test that invalid port numbers never raise."""
        with mock.patch("socket.create_connection") as create_connection:
            assert is_port_available(port) is False
        create_connection.assert_not_called()

    def test_custom_timeout(self):
        with mock.patch("socket.create_connection") as create_connection:
            is_port_available(8080, timeout=0.25)
        assert create_connection.call_args.kwargs["timeout"] == 0.25


class TestCheckPorts:
    """Tests for check_ports function."""

    def test_probes_host_ports(self, listening_socket, free_port):
        busy = listening_socket.getsockname()[1]
        ports = [
            PortDefinition(container_port=80, default_host_port=busy),
            PortDefinition(container_port=free_port),
        ]

        assert check_ports(ports) == {busy: False, free_port: True}

    def test_udp_ports_are_not_probed(self):
        ports = [PortDefinition(container_port=53, protocol="udp")]
        with mock.patch("app_catalog.ports.is_port_available") as probe:
            assert check_ports(ports) == {53: True}
        probe.assert_not_called()

    def test_empty(self):
        assert check_ports([]) == {}
