import logging
import time
import uuid
from contextlib import contextmanager

from django.conf import settings
from django.core.cache import cache

from utils.exceptions import LockUnavailableError

logger = logging.getLogger(__name__)


def artist_lock_key(artist_id):
    """Lock key guarding every mutation of one artist's calendar"""
    return f"artist:{artist_id}:availability"


class DistributedLock:
    """
    A distributed lock implementation using Django's cache backend.

    Used to serialize mutations of a single artist's availability across
    processes, while leaving other artists' calendars unaffected.
    """

    def __init__(self, key, expires=60, timeout=10, poll_interval=0.1):
        """
        Initialize a distributed lock.

        Args:
            key (str): The unique identifier for the lock
            expires (int): The number of seconds after which the lock expires
            timeout (int): The maximum number of seconds to wait to acquire the lock
            poll_interval (float): The interval in seconds to check if lock can be acquired
        """
        self.key = f"lock:{key}"
        self.expires = expires
        self.timeout = timeout
        self.poll_interval = poll_interval
        self._lock_id = str(uuid.uuid4())

    def acquire(self):
        """
        Attempt to acquire the lock.

        Returns:
            bool: True if the lock was acquired, False otherwise
        """
        logger.debug(f"Attempting to acquire lock for {self.key}")
        start_time = time.monotonic()

        while True:
            # cache.add only succeeds when the key is absent
            if cache.add(self.key, self._lock_id, self.expires):
                logger.debug(f"Lock acquired for {self.key}")
                return True

            if time.monotonic() - start_time >= self.timeout:
                break
            time.sleep(self.poll_interval)

        logger.warning(
            f"Failed to acquire lock for {self.key} after {self.timeout} seconds"
        )
        return False

    def release(self):
        """
        Release the lock if it's owned by this instance.

        Returns:
            bool: True if the lock was released, False otherwise
        """
        if cache.get(self.key) == self._lock_id:
            cache.delete(self.key)
            logger.debug(f"Lock released for {self.key}")
            return True

        logger.warning(
            f"Failed to release lock for {self.key} - lock not owned by this instance"
        )
        return False


@contextmanager
def distributed_lock(key, expires=60, timeout=10, poll_interval=0.1):
    """
    Context manager for acquiring and releasing a distributed lock.

    Yields:
        bool: True if the lock was acquired, False otherwise
    """
    lock = DistributedLock(key, expires, timeout, poll_interval)
    acquired = lock.acquire()
    try:
        yield acquired
    finally:
        if acquired:
            lock.release()


@contextmanager
def artist_calendar_lock(artist_id):
    """
    Hold the per-artist calendar lock for the duration of the block.

    Raises:
        LockUnavailableError: if the lock could not be acquired in time
    """
    config = settings.ARTISTBOOK
    with distributed_lock(
        artist_lock_key(artist_id),
        expires=config["AVAILABILITY_LOCK_EXPIRES"],
        timeout=config["AVAILABILITY_LOCK_TIMEOUT"],
    ) as acquired:
        if not acquired:
            raise LockUnavailableError(detail={"artist_id": str(artist_id)})
        yield

