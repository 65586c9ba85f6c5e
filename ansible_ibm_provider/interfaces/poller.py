import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable

from ansible_ibm_provider.errors import WaitTimeout

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TerminalStates:
    """Status values after which polling stops, split by outcome."""

    success: frozenset = field(default_factory=frozenset)
    failure: frozenset = field(default_factory=frozenset)

    def __post_init__(self):
        object.__setattr__(self, "success", frozenset(self.success))
        object.__setattr__(self, "failure", frozenset(self.failure))
        overlap = self.success & self.failure
        if overlap:
            raise ValueError(
                f"Statuses cannot be both success and failure: {sorted(overlap)}"
            )

    def is_terminal(self, status) -> bool:
        return status in self.success or status in self.failure


@dataclass(frozen=True)
class PollResult:
    resource: Any
    status: str | None
    succeeded: bool
    attempts: int


class StatusPoller:
    """
    Re-reads a resource until its status becomes terminal or the time budget
    is spent.

    Args:
        refresh: Callable returning the current resource for an identifier.
            Errors it raises stop the polling and propagate unchanged.
        terminal_states: The success and failure statuses.
        timeout: Maximum number of seconds to keep polling.
        interval: Seconds to sleep between two refreshes.
        status_field: Key of the status value in the refreshed resource.
        clock: Monotonic time source, replaceable in tests.
        sleep: Sleep function, replaceable in tests.
    """

    def __init__(
        self,
        refresh: Callable[[str], Any],
        terminal_states: TerminalStates,
        timeout: float,
        interval: float,
        status_field: str = "status",
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if timeout < 0 or interval < 0:
            raise ValueError("timeout and interval must not be negative")
        self.refresh = refresh
        self.terminal_states = terminal_states
        self.timeout = timeout
        self.interval = interval
        self.status_field = status_field
        self.clock = clock
        self.sleep = sleep

    def status_of(self, resource) -> str | None:
        if resource is None:
            return None
        if isinstance(resource, dict):
            return resource.get(self.status_field)
        return getattr(resource, self.status_field, None)

    def wait(self, identifier: str) -> PollResult:
        """
        Polls until a terminal status is observed.

        The first refresh happens immediately. A terminal status returns
        without sleeping again, and once the budget is exceeded no further
        refresh is made.

        Raises:
            WaitTimeout: if the budget elapsed before a terminal status.
        """
        start = self.clock()
        attempts = 0
        status = None

        while True:
            if attempts and self.clock() - start >= self.timeout:
                logger.info(
                    "Gave up waiting for %s after %s attempts, last status '%s'",
                    identifier,
                    attempts,
                    status,
                )
                raise WaitTimeout(identifier, self.timeout, status)

            resource = self.refresh(identifier)
            attempts += 1
            status = self.status_of(resource)
            logger.debug(
                "Poll attempt %s for %s returned status '%s'", attempts, identifier, status
            )

            if self.terminal_states.is_terminal(status):
                succeeded = status in self.terminal_states.success
                logger.info(
                    "%s reached terminal status '%s' after %s attempts",
                    identifier,
                    status,
                    attempts,
                )
                return PollResult(resource, status, succeeded, attempts)

            # Never sleep past the end of the budget.
            remaining = self.timeout - (self.clock() - start)
            if remaining > 0:
                self.sleep(min(self.interval, remaining))
