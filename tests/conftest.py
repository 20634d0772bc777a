import pytest
from aiohttp import web

from sais_status.probe import SessionParameters


@pytest.fixture
def params():
    return SessionParameters(
        userid='201901234',
        password=' s3cret pass ',
        timezone_offset=-480,
        request_id='1712345678901',
    )


@pytest.fixture
def portal(aiohttp_server):
    """Start a fake login endpoint answering with ``handler``.

    Returns the login URL and a list of (form, headers) pairs, one per request
    the endpoint received.
    """
    async def start(handler):
        received = []

        async def login(request):
            received.append((dict(await request.post()), dict(request.headers)))
            return await handler(request)

        app = web.Application()
        app.router.add_post('/psp/ps/', login)
        server = await aiohttp_server(app)
        return str(server.make_url('/psp/ps/')) + '?cmd=login&languageCd=ENG', received

    return start
