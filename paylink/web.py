# paylink/web.py
"""Public HTTP endpoints for buyers: link lookup and file download."""
import logging
from aiohttp import web

logger = logging.getLogger(__name__)

SERVICES_KEY = web.AppKey("services", object)


async def health(request: web.Request) -> web.Response:
    return web.json_response({"status": "ok"})


async def payment_link(request: web.Request) -> web.Response:
    services = request.app[SERVICES_KEY]
    link = await services.payment_links.get_payment_link(request.match_info["code"])
    if link is None:
        raise web.HTTPNotFound(text="Payment link not found")

    # the file is only reachable through a confirmed link's download token
    return web.json_response(
        text=link.model_dump_json(exclude={
            "download_token": True,
            "payment_proof_url": True,
            "product": {"file_url", "file_name"},
        })
    )


async def download(request: web.Request) -> web.Response:
    services = request.app[SERVICES_KEY]
    info = await services.payment_links.download_product(request.match_info["token"])
    if info is None:
        raise web.HTTPNotFound(text="Download not found")

    logger.info(f"Download redirect for {info.file_name}")
    raise web.HTTPFound(info.file_url)


def create_app(services) -> web.Application:
    app = web.Application()
    app[SERVICES_KEY] = services
    app.router.add_get("/health", health)
    app.router.add_get("/pay/{code}", payment_link)
    app.router.add_get("/download/{token}", download)
    return app
