"""Local TCP port availability probing.

A port is considered taken if something accepts a connection on it. This is
a best-effort check: the port can still be claimed between the probe and
the actual bind, which then fails on its own.
"""

import logging
import socket
from collections.abc import Iterable

from schemas.app import PortDefinition

logger = logging.getLogger(__name__)

# Probe policy
PROBE_HOST = "127.0.0.1"
PROBE_TIMEOUT_SECONDS = 1.0

# Connection failures that prove nothing is listening
AVAILABLE_ERRORS: tuple[type[OSError], ...] = (ConnectionRefusedError, socket.gaierror)

# Result when the probe neither connects nor fails before the timeout
AVAILABLE_ON_TIMEOUT = True


def is_port_available(
    port: int,
    host: str = PROBE_HOST,
    timeout: float = PROBE_TIMEOUT_SECONDS,
) -> bool:
    """Check whether nothing is listening on a TCP port.

    Args:
        port: TCP port number
        host: Address to probe
        timeout: Connection timeout in seconds

    Returns:
        False if a connection succeeds or the port number is unusable,
        True if the connection is refused, the host does not resolve,
        or the probe times out
    """
    if not 1 <= port <= 65535:
        logger.warning(f"Port {port} is outside the valid range 1-65535")
        return False

    try:
        with socket.create_connection((host, port), timeout=timeout):
            logger.debug(f"Port {port} on {host} is in use")
            return False
    except TimeoutError:
        logger.debug(f"Probe of {host}:{port} timed out after {timeout}s")
        return AVAILABLE_ON_TIMEOUT
    except AVAILABLE_ERRORS as e:
        logger.debug(f"Port {port} on {host} is free ({e})")
        return True
    except OSError as e:
        logger.debug(f"Probe of {host}:{port} failed: {e}")
        return False


def check_ports(
    ports: Iterable[PortDefinition], timeout: float = PROBE_TIMEOUT_SECONDS
) -> dict[int, bool]:
    """Probe the suggested host port of each TCP port definition.

    UDP ports cannot be probed by connecting and are reported as available.

    Returns:
        Mapping of host port number to availability
    """
    results: dict[int, bool] = {}
    for definition in ports:
        host_port = definition.host_port
        if definition.protocol == "udp":
            results[host_port] = True
        else:
            results[host_port] = is_port_available(host_port, timeout=timeout)
    return results
