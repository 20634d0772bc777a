from dataclasses import replace
from datetime import datetime

import pytest

from sais_status import bot
from sais_status.bot import LOGIN_REJECTED_TEXT, MISCONFIGURED_TEXT, StatusCog, render_result
from sais_status.checker import Checker, CheckResult, Verdict
from sais_status.probe import ConfigurationError


class FakeChecker:
    url = 'https://sais.example.org/login'

    def __init__(self, result):
        self.result = result
        self.calls = 0

    async def check_details(self):
        self.calls += 1
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


class FakeContext:
    author = 'someone#0001'

    def __init__(self):
        self.replies = []

    async def reply(self, text):
        self.replies.append(text)


@pytest.mark.parametrize('result, text', [
    (CheckResult(Verdict.UP, logged_in=True), 'As of 09:05:07, UP SAIS is up! ✅'),
    (CheckResult(Verdict.UP, logged_in=False), 'As of 09:05:07, UP SAIS is up, but could not log in. 😰'),
    (CheckResult(Verdict.DOWN), 'As of 09:05:07, UP SAIS is down... ❌'),
    (CheckResult(Verdict.UNKNOWN), 'As of 09:05:07, could not tell whether UP SAIS is up. ❔'),
])
def test_render_result(result, text):
    assert render_result(result, datetime(2024, 1, 15, 9, 5, 7)) == text


@pytest.mark.parametrize('result, text', [
    (CheckResult(Verdict.UP, logged_in=True), bot.STATUS_TEXT[Verdict.UP]),
    (CheckResult(Verdict.UP, logged_in=False), LOGIN_REJECTED_TEXT),
    (CheckResult(Verdict.DOWN), bot.STATUS_TEXT[Verdict.DOWN]),
    (CheckResult(Verdict.UNKNOWN), bot.STATUS_TEXT[Verdict.UNKNOWN]),
])
async def test_command_replies_with_result(result, text):
    checker = FakeChecker(result)
    cog = StatusCog(checker)
    ctx = FakeContext()

    await StatusCog.sais.callback(cog, ctx)

    assert checker.calls == 1
    assert len(ctx.replies) == 1
    assert ctx.replies[0].endswith(text)


async def test_command_reports_misconfiguration():
    cog = StatusCog(FakeChecker(ConfigurationError('missing session parameters: password')))
    ctx = FakeContext()

    await StatusCog.sais.callback(cog, ctx)

    assert ctx.replies == [MISCONFIGURED_TEXT]


@pytest.mark.parametrize('cookie, url', [
    ('PS_TOKEN=abc\r\nX-Injected: yes', 'https://sais.example.org/login'),
    ('', 'sais.example.org/login'),
])
async def test_command_reports_bad_request_settings(params, cookie, url):
    cog = StatusCog(Checker(replace(params, cookie=cookie), url))
    ctx = FakeContext()

    await StatusCog.sais.callback(cog, ctx)

    assert ctx.replies == [MISCONFIGURED_TEXT]


def test_main_exits_on_bad_configuration(monkeypatch):
    monkeypatch.setattr(bot, 'load_dotenv', lambda: None)
    for name in ('DISCORD_TOKEN', 'SAIS_TIMEZONE_OFFSET', 'SAIS_USERID',
                 'SAIS_PASSWORD', 'SAIS_REQUEST_ID'):
        monkeypatch.delenv(name, raising=False)

    with pytest.raises(SystemExit) as excinfo:
        bot.main()

    assert excinfo.value.code == 1
