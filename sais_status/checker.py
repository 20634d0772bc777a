import asyncio
import logging
from enum import Enum, auto
from time import time
from types import SimpleNamespace
from typing import NamedTuple

import aiohttp

from .probe import LOGIN_URL, build_login_request

logger = logging.getLogger(__name__)

SUCCESS_MARKERS = ('Employee-facing registry content',)
INVALID_CREDENTIALS_MARKERS = (
    'Your User ID and/or Password are invalid',
    'invalid credentials',
)


class Verdict(Enum):
    UP = auto()
    DOWN = auto()
    UNKNOWN = auto()


class CheckResult(NamedTuple):
    verdict: Verdict
    # the portal accepted the stored credentials, not just evaluated them
    logged_in: bool = False
    reason: str = ''


def _as_text(body):
    if isinstance(body, bytes):
        body = body.decode('utf-8', errors='replace')
    return body.lower()


def _contains_any(text, markers):
    return any(marker.lower() in text for marker in markers)


def is_logged_in(status, body, success_markers=SUCCESS_MARKERS):
    return 200 <= status < 300 and _contains_any(_as_text(body), success_markers)


def classify_response(status, body, *,
                      success_markers=SUCCESS_MARKERS,
                      invalid_markers=INVALID_CREDENTIALS_MARKERS):
    """Map a received response to a verdict.

    A rejected login still proves the portal is evaluating logins, so it
    counts as up. Bodies that match neither marker list are never reported
    as down.
    """
    if status >= 500:
        return Verdict.DOWN
    if not 200 <= status < 300:
        return Verdict.UNKNOWN
    text = _as_text(body)
    if _contains_any(text, success_markers) or _contains_any(text, invalid_markers):
        return Verdict.UP
    return Verdict.UNKNOWN


def classify_failure(exc, connected):
    """Map a transport failure to a verdict.

    Anything that happened before a connection was established means the
    portal is unreachable. A slow or broken response after connecting is not
    proof of an outage.
    """
    if isinstance(exc, aiohttp.ClientConnectorError):
        return Verdict.DOWN
    if connected:
        return Verdict.UNKNOWN
    return Verdict.DOWN


async def _on_connected(session, trace_config_ctx, params):
    trace_config_ctx.trace_request_ctx.connected = True


def _connection_tracer():
    tracer = aiohttp.TraceConfig()
    tracer.on_connection_create_end.append(_on_connected)
    tracer.on_connection_reuseconn.append(_on_connected)
    return tracer


class Checker:
    def __init__(
            self, params, url=LOGIN_URL, *,
            # seconds for the whole exchange, connect included
            timeout=10,
            clock=time,
            success_markers=SUCCESS_MARKERS,
            invalid_markers=INVALID_CREDENTIALS_MARKERS,
    ):
        self.params = params
        self.url = url
        self.timeout = timeout
        self.clock = clock
        self.success_markers = success_markers
        self.invalid_markers = invalid_markers

    async def check(self):
        return (await self.check_details()).verdict

    async def check_details(self):
        # ConfigurationError escapes here, before any connection is opened
        request = build_login_request(self.params, self.url, clock=self.clock)
        trace_ctx = SimpleNamespace(connected=False)

        result = await self._send(request, trace_ctx)
        logger.info('Checked %s: %s (%s, logged in: %s)',
                    self.url, result.verdict.name, result.reason, result.logged_in)
        return result

    async def _send(self, request, trace_ctx):
        # a fresh session per probe, any cookies the portal sets are dropped with it
        async with aiohttp.ClientSession(cookie_jar=aiohttp.DummyCookieJar(),
                                         trace_configs=[_connection_tracer()]) as session:
            try:
                async with session.request(request.method, request.url,
                                           headers=request.headers,
                                           data=request.form,
                                           allow_redirects=False,
                                           timeout=aiohttp.ClientTimeout(total=self.timeout),
                                           trace_request_ctx=trace_ctx) as resp:
                    body = await resp.read()
                    verdict = classify_response(resp.status, body,
                                                success_markers=self.success_markers,
                                                invalid_markers=self.invalid_markers)
                    logged_in = is_logged_in(resp.status, body, self.success_markers)
                    return CheckResult(verdict, logged_in, f'HTTP {resp.status}')
            except asyncio.TimeoutError as e:
                logger.warning('Timed out after %s s (connected: %s)', self.timeout, trace_ctx.connected)
                return CheckResult(classify_failure(e, trace_ctx.connected), reason='timeout')
            except aiohttp.ClientConnectorError as e:
                logger.warning('Connection error: %s', e)
                return CheckResult(classify_failure(e, trace_ctx.connected), reason='connection error')
            except aiohttp.ClientError as e:
                logger.warning('Transport error: %r', e)
                return CheckResult(classify_failure(e, trace_ctx.connected), reason=type(e).__name__)
