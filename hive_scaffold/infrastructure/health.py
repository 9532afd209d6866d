"""Lightweight reachability checks for locally running services."""

from __future__ import annotations

import socket
import urllib.error
import urllib.request

from hive_scaffold.infrastructure.docker import ProcessRunner

DEFAULT_TIMEOUT_SECONDS = 3.0


class HealthChecker:
    """Short-timeout checks; every method returns a bool and never raises."""

    def __init__(self, runner: ProcessRunner, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self.runner = runner
        self.timeout = timeout

    def http_ok(self, url: str, expect: str | None = None) -> bool:
        """GET ``url``; healthy on a 2xx answer (containing ``expect`` if given)."""
        try:
            with urllib.request.urlopen(url, timeout=self.timeout) as response:
                if not 200 <= response.status < 300:
                    return False
                if expect is None:
                    return True
                body = response.read().decode("utf-8", errors="replace")
                return expect in body
        except (urllib.error.URLError, OSError, ValueError):
            return False

    def tcp_reachable(self, host: str, port: int) -> bool:
        """True if a TCP connection to host:port can be opened."""
        try:
            with socket.create_connection((host, port), timeout=self.timeout):
                return True
        except OSError:
            return False

    def redis_ping(self, host: str, port: int, password: str = "") -> bool:
        """``redis-cli ping`` answering PONG."""
        args = ["redis-cli", "-h", host, "-p", str(port)]
        if password:
            args.extend(["-a", password, "--no-auth-warning"])
        result = self.runner.run([*args, "ping"], timeout=self.timeout)
        return result.ok and "PONG" in result.stdout
