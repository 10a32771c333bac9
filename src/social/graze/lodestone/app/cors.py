from typing import Dict

from aiohttp import web


def get_cors_headers() -> Dict[str, str]:
    """Return the CORS headers attached to every response.

    The service is read-only and unauthenticated, so any origin may call it.
    """
    return {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": "GET, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type",
    }


@web.middleware
async def cors_middleware(request: web.Request, handler):
    if request.method == "OPTIONS":
        return web.Response(status=204, headers=get_cors_headers())

    try:
        response = await handler(request)
    except web.HTTPException as e:
        e.headers.update(get_cors_headers())
        raise e
    response.headers.update(get_cors_headers())
    return response
