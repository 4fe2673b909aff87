import logging

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .models import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

RETRY_SCHEDULE = (1, 2, 4, 8, 16, 32)
RETRY_STATUSES = (408, 500, 502, 503, 504)
KEEP_ALIVE_CACHESIZE = 10


class ScheduledRetry(Retry):
    """urllib3 Retry that waits a fixed number of seconds before each attempt."""

    def __init__(self, *args, schedule=RETRY_SCHEDULE, **kwargs):
        self.schedule = tuple(schedule)
        kwargs.setdefault('total', len(self.schedule))
        super().__init__(*args, **kwargs)

    def new(self, **kw):
        retry = super().new(**kw)
        retry.schedule = self.schedule
        return retry

    def get_backoff_time(self) -> float:
        attempts = len(self.history)
        if attempts == 0 or not self.schedule:
            return 0
        return self.schedule[min(attempts, len(self.schedule)) - 1]


class Transport:
    """Blocking HTTP exchange on top of a requests session."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, retry: bool = False,
                 session: requests.Session = None):
        self.timeout = timeout
        self.follow_redirects = True
        self.session = session or requests.Session()
        if retry:
            adapter = HTTPAdapter(
                pool_maxsize=KEEP_ALIVE_CACHESIZE,
                max_retries=ScheduledRetry(
                    status_forcelist=RETRY_STATUSES,
                    allowed_methods=None,
                    raise_on_status=False,
                ),
            )
            self.session.mount('http://', adapter)
            self.session.mount('https://', adapter)

    def send(self, method: str, url: str, headers=None, data=None) -> requests.Response:
        logger.debug("%s %s", method, url)
        return self.session.request(
            method,
            url,
            headers=headers,
            data=data,
            timeout=self.timeout,
            allow_redirects=self.follow_redirects,
        )
