"""Process configuration, read once from the environment at startup."""

import os
from dataclasses import dataclass

from .probe import LOGIN_URL, ConfigurationError, SessionParameters, cookie_problem, url_problem

DEFAULT_TIMEOUT = 10.0
DEFAULT_PREFIX = '&'

REQUIRED = (
    'DISCORD_TOKEN',
    'SAIS_TIMEZONE_OFFSET',
    'SAIS_USERID',
    'SAIS_PASSWORD',
    'SAIS_REQUEST_ID',
)


@dataclass(frozen=True)
class Settings:
    discord_token: str
    session: SessionParameters
    login_url: str = LOGIN_URL
    timeout: float = DEFAULT_TIMEOUT
    command_prefix: str = DEFAULT_PREFIX

    def __repr__(self):
        return (f'Settings(session={self.session!r}, login_url={self.login_url!r}, '
                f'timeout={self.timeout!r}, command_prefix={self.command_prefix!r})')


def load_settings(environ=None):
    """Build :class:`Settings` from ``environ`` (defaults to ``os.environ``).

    All problems are collected and reported in a single ConfigurationError.
    """
    if environ is None:
        environ = os.environ

    problems = [f'{name} is not set' for name in REQUIRED if not environ.get(name)]

    timezone_offset = None
    raw_offset = environ.get('SAIS_TIMEZONE_OFFSET')
    if raw_offset:
        try:
            timezone_offset = int(raw_offset)
        except ValueError:
            problems.append(f'SAIS_TIMEZONE_OFFSET must be an integer, got {raw_offset!r}')

    timeout = DEFAULT_TIMEOUT
    raw_timeout = environ.get('SAIS_TIMEOUT')
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError:
            timeout = None
        if timeout is None or timeout <= 0:
            problems.append(f'SAIS_TIMEOUT must be a positive number, got {raw_timeout!r}')

    login_url = environ.get('SAIS_LOGIN_URL') or LOGIN_URL
    problem = url_problem(login_url)
    if problem:
        problems.append(f'SAIS_LOGIN_URL: {problem}')

    cookie = environ.get('SAIS_COOKIE', '')
    problem = cookie_problem(cookie)
    if problem:
        problems.append(f'SAIS_COOKIE: {problem}')

    if problems:
        raise ConfigurationError('; '.join(problems))

    session = SessionParameters(
        userid=environ['SAIS_USERID'],
        password=environ['SAIS_PASSWORD'],
        timezone_offset=timezone_offset,
        request_id=environ['SAIS_REQUEST_ID'],
        cookie=cookie,
    )
    return Settings(
        discord_token=environ['DISCORD_TOKEN'],
        session=session,
        login_url=login_url,
        timeout=timeout,
        command_prefix=environ.get('SAIS_COMMAND_PREFIX') or DEFAULT_PREFIX,
    )
