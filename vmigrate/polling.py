"""
Blocking wait helpers.

The clock and the sleep function are injected so the wait loops can be
driven by a fake clock in tests; the defaults are time.monotonic and
time.sleep.
"""

import logging
import time

logger = logging.getLogger('vmigrate')


class Poller:
    """
    Calls a probe every `interval` seconds until it reports completion or
    more than `timeout` seconds have elapsed.
    """

    def __init__(self, interval=10, timeout=600, clock=time.monotonic, sleep=time.sleep):
        self.interval = interval
        self.timeout = timeout
        self.clock = clock
        self.sleep = sleep

    def poll(self, probe, on_timeout):
        """
        Run the wait loop.

        Args:
            probe: callable taking the elapsed seconds (int); returns True when
                   the awaited condition holds. It may raise to abort the wait.
            on_timeout: callable returning the exception raised on timeout

        Returns:
            Elapsed seconds when the probe reported completion
        """
        start = self.clock()
        while True:
            elapsed = int(self.clock() - start)
            if elapsed > self.timeout:
                raise on_timeout()
            if probe(elapsed):
                return elapsed
            self.sleep(self.interval)


class RetryPolicy:
    """
    Runs an operation up to `max_attempts` times, sleeping `backoff` seconds
    between attempts. Only exceptions whose `retryable` attribute is true are
    retried; anything else propagates immediately.
    """

    def __init__(self, max_attempts=3, backoff=30, sleep=time.sleep, logger=logger):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.backoff = backoff
        self.sleep = sleep
        self.logger = logger

    def run(self, operation, on_failure=None):
        """
        Call operation(attempt_number) until it returns without raising.

        on_failure(attempt_number, error) is called after each retryable
        failure, before the backoff. The last retryable error is re-raised
        once the attempts are used up.
        """
        attempt = 1
        while True:
            try:
                return operation(attempt)
            except Exception as e:
                if not getattr(e, 'retryable', False):
                    raise
                if on_failure is not None:
                    on_failure(attempt, e)
                if attempt >= self.max_attempts:
                    raise
                self.logger.info(f"Waiting {self.backoff} seconds before retry...")
                self.sleep(self.backoff)
                attempt += 1
