"""
Console output for aip-man.
Coloured user messages plus a timestamped verbose log that is also handed to Sentry as breadcrumbs.
"""

import datetime
import time

import sentry_sdk  # type: ignore
from colorama import Fore, Style  # type: ignore


class Console:
    def __init__(self, verbose=False):
        self.verbose_enabled = verbose
        self.logs = []
        self._timings = {}

    def verbose(self, message, color=Fore.LIGHTBLACK_EX):
        """Record a message in the verbose log, and print it only in verbose mode.

        Messages are always kept (and sent to Sentry as breadcrumbs) so a crash report has context,
        even when the user did not ask for verbose output."""
        timestamp = datetime.datetime.now().strftime("%H:%M:%S.%f")[:-3]
        self.logs.append((timestamp, message))
        sentry_sdk.add_breadcrumb(category="aip-man", message=message, level="debug")
        if self.verbose_enabled:
            print(f"{color}[{timestamp}] VERBOSE: {message}{Style.RESET_ALL}")

    def timing_start(self, operation):
        """Start timing an operation in verbose mode."""
        if self.verbose_enabled:
            self._timings[operation] = time.time()
            self.verbose(f"Starting operation: {operation}", Fore.CYAN)

    def timing_end(self, operation):
        """End timing an operation in verbose mode."""
        if self.verbose_enabled and operation in self._timings:
            elapsed = time.time() - self._timings.pop(operation)
            self.verbose(f"Completed operation: {operation} (took {elapsed:.3f}s)", Fore.GREEN)

    def info(self, message):
        print(f"{Fore.CYAN}{message}{Style.RESET_ALL}")

    def success(self, message):
        print(f"{Fore.GREEN}{message}{Style.RESET_ALL}")

    def warn(self, message):
        self.verbose(f"Warning: {message}")
        print(f"{Fore.YELLOW}Warning: {message}{Style.RESET_ALL}")

    def error(self, message):
        self.verbose(f"Error: {message}")
        print(f"{Fore.RED}{message}{Style.RESET_ALL}")

    def plain(self, message=""):
        print(message)


# Shared console for callers that don't inject their own
default_console = Console()


def get_console(console=None):
    return console if console is not None else default_console
