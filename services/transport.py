from functools import lru_cache
from http.cookiejar import DefaultCookiePolicy

import requests


@lru_cache(maxsize=None)
def default_session() -> requests.Session:
    """
    Shared transport used when the caller does not pass a session.

    Built once per process and only read afterwards. Cookies are refused so
    responses never write into it, which keeps concurrent sends independent.
    Callers that need other behaviour should pass their own session.
    """
    session = requests.Session()
    session.cookies.set_policy(DefaultCookiePolicy(allowed_domains=[]))
    return session
