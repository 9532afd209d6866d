"""Console output helpers for the hive CLI.

Every user-facing line goes through these functions so that colors and
prefixes stay consistent between the pipeline, the service strategies
and the app type collectors.
"""


class Colors:
    """ANSI color codes for terminal output."""
    HEADER = '\033[95m'
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[2m'


def print_header(msg: str) -> None:
    """Print a section header."""
    print(f"{Colors.HEADER}{Colors.BOLD}{msg}{Colors.ENDC}")


def print_info(msg: str) -> None:
    print(f"{Colors.CYAN}{msg}{Colors.ENDC}")


def print_success(msg: str) -> None:
    print(f"{Colors.GREEN}✓ {msg}{Colors.ENDC}")


def print_warning(msg: str) -> None:
    print(f"{Colors.YELLOW}⚠️  {msg}{Colors.ENDC}")


def print_error(msg: str) -> None:
    print(f"{Colors.RED}❌ {msg}{Colors.ENDC}")


def print_command(command: str) -> None:
    """Echo a shell command before it runs (callers redact secrets first)."""
    print(f"{Colors.DIM}$ {command}{Colors.ENDC}")


def print_note(msg: str, title: str | None = None) -> None:
    """Print a dimmed, multi-line note block with an optional title."""
    if title:
        print(f"{Colors.BOLD}{title}{Colors.ENDC}")
    for line in msg.splitlines():
        print(f"{Colors.DIM}  {line}{Colors.ENDC}")


def mask_secret(value: str | None) -> str:
    """Return a same-length mask for a credential.

    The mask keeps the length so users can still spot an empty or
    truncated value.
    """
    if not value:
        return ""
    return "*" * len(value)
