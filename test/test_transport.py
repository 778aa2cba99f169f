# test/test_transport.py
import asyncio

import pytest
from aiohttp import test_utils, web

from tenant_verification.errors import TransportError
from tenant_verification.models import TenantRecord
from tenant_verification.tools.rate_limiter import RateLimiter
from tenant_verification.tools.tax import TaxIdClient
from tenant_verification.tools.transport import HttpTransport

# -------------------------
# In-process provider stub
# -------------------------

async def _ok(request):
    body = await request.json()
    return web.json_response({"status": "active", "echo": body, "auth": request.headers.get("Authorization")})


async def _fail(request):
    return web.json_response({"error": "maintenance"}, status=503)


async def _slow(request):
    await asyncio.sleep(1.0)
    return web.json_response({"status": "active"})


async def _garbage(request):
    return web.Response(text="<html>oops</html>", content_type="text/html")


def _app():
    app = web.Application()
    app.router.add_post("/ok", _ok)
    app.router.add_post("/fail", _fail)
    app.router.add_post("/slow", _slow)
    app.router.add_post("/garbage", _garbage)
    app.router.add_post("/api/pan/verify", _fail)
    return app


def _with_server(scenario):
    """Run ``scenario(server)`` against a fresh local server."""
    async def _go():
        server = test_utils.TestServer(_app())
        await server.start_server()
        try:
            return await scenario(server)
        finally:
            await server.close()
    return asyncio.run(_go())


def _url(server, path):
    return str(server.make_url(path))


# -------------------------
# Tests
# -------------------------

def test_json_body_round_trips():
    async def scenario(server):
        transport = HttpTransport(timeout_seconds=5)
        try:
            return await transport.post_json(_url(server, "/ok"), {"pan_number": "ABCDE1234F"},
                                             {"Authorization": "Bearer k"})
        finally:
            await transport.close()

    data = _with_server(scenario)
    assert data["status"] == "active"
    assert data["echo"] == {"pan_number": "ABCDE1234F"}
    assert data["auth"] == "Bearer k"


def test_non_2xx_carries_status_code():
    async def scenario(server):
        transport = HttpTransport(timeout_seconds=5)
        try:
            with pytest.raises(TransportError) as excinfo:
                await transport.post_json(_url(server, "/fail"), {}, {})
            return excinfo.value
        finally:
            await transport.close()

    err = _with_server(scenario)
    assert err.status_code == 503


def test_slow_provider_times_out():
    async def scenario(server):
        transport = HttpTransport(timeout_seconds=0.3)
        try:
            with pytest.raises(TransportError) as excinfo:
                await transport.post_json(_url(server, "/slow"), {}, {})
            return excinfo.value
        finally:
            await transport.close()

    err = _with_server(scenario)
    assert "timed out" in str(err)
    assert err.status_code is None


def test_non_json_body_is_a_transport_error():
    async def scenario(server):
        transport = HttpTransport(timeout_seconds=5)
        try:
            with pytest.raises(TransportError, match="Invalid JSON"):
                await transport.post_json(_url(server, "/garbage"), {}, {})
        finally:
            await transport.close()

    _with_server(scenario)


def test_close_releases_session_and_next_call_reopens():
    async def scenario(server):
        transport = HttpTransport(timeout_seconds=5)
        await transport.post_json(_url(server, "/ok"), {}, {})
        first = transport._session
        await transport.close()
        closed = first.closed and transport._session is None

        await transport.post_json(_url(server, "/ok"), {}, {})
        reopened = transport._session is not None and transport._session is not first
        await transport.close()
        return closed, reopened

    assert _with_server(scenario) == (True, True)


def test_provider_error_message_over_real_http(make_config):
    async def scenario(server):
        config = make_config("tax", INCOMETAX_BASE_URL=_url(server, "/"))
        transport = HttpTransport(timeout_seconds=5)
        client = TaxIdClient(config.provider("tax"), RateLimiter.from_config(config), transport)
        try:
            return await client.verify(TenantRecord(tax_id="ABCDE1234F"))
        finally:
            await transport.close()

    result = _with_server(scenario)
    assert result.status == "error"
    assert result.error == "Income Tax API error: 503"
