"""
Race coordinator: query every postal code service at once.

Each service runs on its own worker thread and publishes exactly one
Outcome on a bounded queue. The first successful outcome read from the
queue is returned; only when every service has failed does the caller see
an error, carrying all of the individual failures.

Services still running after a success are not cancelled. They finish in
the background and their outcomes stay in the queue, which has room for
one outcome per service so no worker ever blocks on it.
"""

import queue
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from .env import MIN_SETTLE_DELAY, get_settings
from .errors import (
    AllServicesFailed,
    InternalError,
    ServiceError,
    Source,
    UnexpectedLibraryError,
)
from .logger import get_logger
from .normalize import Address, normalize
from .services import SERVICES

logger = get_logger()

# A worker can finish without publishing, and the queue never reports that.
# Reads wake up this often to check the futures for it.
_POLL_INTERVAL = 0.05


@dataclass(frozen=True)
class Outcome:
    """What a single service arm published: an address or a failure."""

    source: Source
    address: Optional[Address] = None
    error: Optional[ServiceError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def effective_settle_delay(settle_delay: Optional[float] = None) -> float:
    """Resolve the settle delay in seconds.

    None uses the configured default (2 unless LAGOINHA_SETTLE_DELAY says
    otherwise); anything below MIN_SETTLE_DELAY is raised to it.
    """
    if settle_delay is None:
        return get_settings().settle_delay
    return max(float(settle_delay), MIN_SETTLE_DELAY)


def _run_arm(
    source: Source,
    code: str,
    channel: "queue.Queue[Outcome]",
    settle_delay: float,
    session=None,
    timeout: Optional[float] = None,
) -> None:
    """Look up one service, publish its outcome, and linger after a failure.

    The pause after a failure holds this arm open so that the first arm to
    complete is more likely to be a slower service that actually succeeded.
    """
    try:
        record = SERVICES[source].lookup(code, session=session, timeout=timeout)
        address = normalize(record)
    except ServiceError as e:
        failure = e
    except Exception as e:
        logger.error("Unexpected error in service arm", service=source.value, error=repr(e))
        failure = UnexpectedLibraryError(source, repr(e))
    else:
        channel.put(Outcome(source, address=address))
        return

    logger.debug("Service arm failed", service=source.value, error=str(failure))
    channel.put(Outcome(source, error=failure))
    time.sleep(settle_delay)


def _receive(channel: "queue.Queue[Outcome]", arms: Iterable[Future]) -> Optional[Outcome]:
    """Read the next outcome, or None once every arm is done and nothing is left."""
    while True:
        try:
            return channel.get(timeout=_POLL_INTERVAL)
        except queue.Empty:
            # Polling is the only way to see an arm that returned without publishing.
            # Arms publish before they finish, so done + empty means nothing more is coming
            if all(f.done() for f in arms) and channel.empty():
                return None


def get_address(
    code: str,
    settle_delay: Optional[float] = None,
    *,
    session=None,
    timeout: Optional[float] = None,
) -> Address:
    """
    Resolve a CEP to an Address using whichever service answers first.

    Args:
        code: Postal code, '70150903' or '70150-903'
        settle_delay: Seconds a failed service waits before finishing
            (None = configured default, minimum 1)
        session: Optional requests.Session compatible object shared by
            every service call
        timeout: Per-request timeout in seconds (default from settings,
            read once before any service starts)

    Returns:
        The first successfully normalized Address

    Raises:
        AllServicesFailed: Every service failed; one failure per service
        InternalError: A service finished without publishing an outcome
        ValueError: A LAGOINHA_* setting is not a valid number
    """
    delay = effective_settle_delay(settle_delay)
    if timeout is None:
        timeout = get_settings().http_timeout
    sources = list(SERVICES)
    channel: "queue.Queue[Outcome]" = queue.Queue(maxsize=len(sources))

    logger.debug("Starting lookup race", code=code, settle_delay=delay, services=[s.value for s in sources])
    executor = ThreadPoolExecutor(max_workers=len(sources), thread_name_prefix="lagoinha")
    try:
        arms: Dict[Future, Source] = {
            executor.submit(_run_arm, source, code, channel, delay, session, timeout): source
            for source in sources
        }
    finally:
        # Already submitted arms keep running; nothing waits for them here
        executor.shutdown(wait=False)

    done, _ = wait(arms, return_when=FIRST_COMPLETED)
    logger.debug("First service arm finished", service=arms[next(iter(done))].value)

    failures: Dict[Source, ServiceError] = {}
    for _ in range(len(arms)):
        outcome = _receive(channel, arms)
        if outcome is None:
            break
        if outcome.ok:
            logger.info("Address resolved", code=code, service=outcome.source.value)
            return outcome.address
        failures[outcome.source] = outcome.error

    missing = [s for s in sources if s not in failures]
    if missing:
        for future, source in arms.items():
            if future.done() and future.exception() is not None:
                logger.error("Service arm crashed", service=source.value, error=repr(future.exception()))
        err = InternalError(missing, [failures[s] for s in sources if s in failures])
        logger.error("Lookup race lost outcomes", code=code, error=err.to_dict())
        raise err

    err = AllServicesFailed(failures[s] for s in sources)
    logger.warning("All services failed", code=code, failures=[str(f) for f in err.failures])
    raise err
