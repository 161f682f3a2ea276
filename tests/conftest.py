"""Fixtures: a local stand-in for the Stockholmshem login and widget endpoints."""

from typing import Dict, List, Optional, Tuple

import pytest
from aiohttp import web

from storagewatch import NO_RESULTS_MARKER, Config, create_session

SESSION_COOKIE = "X"
SESSION_VALUE = "1"

AVAILABLE_BODY = 'jQuery17105048823634686723_1({"objektlista@forrad": "<ul><li>Förråd 12</li></ul>"})'
UNAVAILABLE_BODY = f'jQuery17105048823634686723_1({{"objektlista@forrad": "<p>{NO_RESULTS_MARKER}</p>"}})'


class FakeSite:
    """Records requests and answers like the real site would."""

    def __init__(
        self,
        login_status: int = 302,
        widget_body: str = AVAILABLE_BODY,
        login_body: str = "",
    ):
        self.login_status = login_status
        self.widget_body = widget_body
        self.login_body = login_body
        self.requests: List[Tuple[str, str]] = []
        self.login_forms: List[bytes] = []
        self.login_headers = []
        self.widget_cookies: List[Dict[str, str]] = []

    def paths(self) -> List[str]:
        return [path for _, path in self.requests]

    async def handle_login(self, request: web.Request) -> web.Response:
        self.requests.append((request.method, request.path))
        self.login_forms.append(await request.read())
        self.login_headers.append(request.headers.copy())
        if self.login_status == 302:
            response = web.Response(
                status=302, headers={"Location": "/mina-sidor/smaforrad/"}
            )
            response.set_cookie(SESSION_COOKIE, SESSION_VALUE)
            return response
        return web.Response(
            status=self.login_status, text=self.login_body, content_type="text/html"
        )

    async def handle_widgets(self, request: web.Request) -> web.Response:
        self.requests.append((request.method, request.path))
        self.widget_cookies.append(dict(request.cookies))
        if request.cookies.get(SESSION_COOKIE) != SESSION_VALUE:
            return web.Response(status=401, text="not logged in")
        return web.Response(
            status=200, text=self.widget_body, content_type="application/javascript"
        )

    async def handle_storage_page(self, request: web.Request) -> web.Response:
        self.requests.append((request.method, request.path))
        return web.Response(status=200, text="redirect target")

    def make_app(self) -> web.Application:
        app = web.Application()
        app.router.add_post("/logga-in/", self.handle_login)
        app.router.add_get("/widgets/", self.handle_widgets)
        app.router.add_get("/mina-sidor/smaforrad/", self.handle_storage_page)
        return app


class FakePublisher:
    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.published = []

    async def publish(self, subject: str, message: str, topic: str) -> None:
        self.published.append((subject, message, topic))
        if self.error is not None:
            raise self.error


@pytest.fixture
def site():
    return FakeSite()


@pytest.fixture
async def server(aiohttp_server, site):
    return await aiohttp_server(site.make_app())


@pytest.fixture
def site_url(server):
    return str(server.make_url("")).rstrip("/")


@pytest.fixture
def config(site_url):
    return Config(
        values={
            "PERSONNR": "199001011234",
            "PASSWORD": "hemligt",
            "TOPIC": "-1001234567890",
            "BOT_TOKEN": "123:abc",
            "SITE_URL": site_url,
        }
    )


@pytest.fixture
async def session():
    session = await create_session(2000, unsafe_cookies=True)
    yield session
    await session.close()


@pytest.fixture
def publisher():
    return FakePublisher()
