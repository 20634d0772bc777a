import logging
import os
import sys
from datetime import datetime

import discord
from discord.ext import commands
from dotenv import load_dotenv

from .checker import Checker, Verdict
from .config import load_settings
from .probe import ConfigurationError

logger = logging.getLogger(__name__)

STATUS_TEXT = {
    Verdict.UP: 'UP SAIS is up! ✅',
    Verdict.DOWN: 'UP SAIS is down... ❌',
    Verdict.UNKNOWN: 'could not tell whether UP SAIS is up. ❔',
}
LOGIN_REJECTED_TEXT = 'UP SAIS is up, but could not log in. 😰'
MISCONFIGURED_TEXT = '⚠️ The SAIS checker is misconfigured, please contact the bot operator.'


def render_result(result, when):
    if result.verdict is Verdict.UP and not result.logged_in:
        text = LOGIN_REJECTED_TEXT
    else:
        text = STATUS_TEXT[result.verdict]
    return f'As of {when:%H:%M:%S}, {text}'


class StatusCog(commands.Cog):
    def __init__(self, checker):
        self.checker = checker

    @commands.command(name='sais')
    async def sais(self, ctx):
        """Check whether UP SAIS is accepting logins."""
        logger.info('Checking SAIS at %s (requested by %s)', self.checker.url, ctx.author)
        try:
            result = await self.checker.check_details()
        except ConfigurationError:
            logger.exception('Cannot check SAIS')
            await ctx.reply(MISCONFIGURED_TEXT)
            return
        await ctx.reply(render_result(result, datetime.now()))


class StatusBot(commands.Bot):
    def __init__(self, checker, command_prefix='&'):
        intents = discord.Intents.default()
        intents.message_content = True
        super().__init__(command_prefix=command_prefix, intents=intents)
        self.checker = checker

    async def setup_hook(self):
        await self.add_cog(StatusCog(self.checker))

    async def on_ready(self):
        logger.info('%s is connected!', self.user)


def main():
    load_dotenv()
    logging.basicConfig(
        level=os.getenv('LOG_LEVEL', 'INFO').upper(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    try:
        settings = load_settings()
    except ConfigurationError as e:
        logger.error('Invalid configuration: %s', e)
        sys.exit(1)

    checker = Checker(settings.session, settings.login_url, timeout=settings.timeout)
    bot = StatusBot(checker, command_prefix=settings.command_prefix)
    # logging is already configured above
    bot.run(settings.discord_token, log_handler=None)


if __name__ == '__main__':
    main()
