"""Builds the synthetic login request sent to the SAIS portal."""

from __future__ import annotations

from dataclasses import dataclass
from time import time
from typing import Mapping

from yarl import URL

LOGIN_URL = 'https://sais.up.edu.ph/psp/ps/?cmd=login&languageCd=ENG'

USER_AGENT = (
    'Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/141.0.0.0 Safari/537.36'
)


class ConfigurationError(Exception):
    """Raised when the bot lacks a value required to build a probe."""


@dataclass(frozen=True)
class SessionParameters:
    userid: str
    password: str
    timezone_offset: int | None
    request_id: str
    # raw Cookie header copied from a browser session, optional
    cookie: str = ''

    def __repr__(self):
        return (f'SessionParameters(userid={self.userid!r}, password=***, '
                f'timezone_offset={self.timezone_offset!r}, request_id={self.request_id!r})')


@dataclass(frozen=True)
class LoginRequest:
    url: str
    method: str
    headers: Mapping[str, str]
    form: Mapping[str, str]


def missing_fields(params):
    missing = [name for name in ('userid', 'password', 'request_id')
               if not getattr(params, name)]
    if params.timezone_offset is None:
        missing.append('timezone_offset')
    return missing


def url_problem(url):
    try:
        parsed = URL(url)
    except (TypeError, ValueError):
        return f'login URL {url!r} cannot be parsed'
    if parsed.scheme not in ('http', 'https') or not parsed.absolute or not parsed.host:
        return f'login URL {url!r} must be an absolute http(s) URL'
    return None


def cookie_problem(cookie):
    if any(ord(char) < 0x20 or ord(char) == 0x7f for char in cookie):
        return 'cookie must not contain control characters'
    return None


def build_login_request(params, url=LOGIN_URL, *, clock=time):
    """Return a fresh login POST for ``params``, stamped with ``clock()``.

    Credentials are passed through untouched, so the probe only logs in while
    the stored credentials are still valid. No I/O happens here.
    """
    missing = missing_fields(params)
    if missing:
        raise ConfigurationError(f'missing session parameters: {", ".join(missing)}')
    problems = [problem for problem in (url_problem(url), cookie_problem(params.cookie)) if problem]
    if problems:
        raise ConfigurationError('; '.join(problems))

    parsed = URL(url)
    headers = {
        'User-Agent': USER_AGENT,
        'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
        'Accept-Language': 'en-US,en;q=0.9',
        'Content-Type': 'application/x-www-form-urlencoded',
        'Origin': str(parsed.origin()),
        'Referer': url,
    }
    if params.cookie:
        headers['Cookie'] = params.cookie

    form = {
        'timezoneOffset': str(params.timezone_offset),
        'userid': params.userid,
        'pwd': params.password,
        'request_id': params.request_id,
        'timestamp': str(int(clock() * 1000)),
    }
    return LoginRequest(url=url, method='POST', headers=headers, form=form)
