"""Turn unexpected exceptions into JSON 500s inside the middleware stack."""

from starlette.requests import Request
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from qrinsights.core.exception_handlers import unhandled_error_handler


class UnhandledErrorMiddleware:
    """
    Catch anything the registered exception handlers did not.

    Sits inside CORS and request-id middleware so the 500 body still carries
    Access-Control-Allow-Origin and X-Request-ID.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_tracking_start(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_tracking_start)
        except Exception as exc:
            if response_started:
                raise
            response = await unhandled_error_handler(Request(scope), exc)
            await response(scope, receive, send)
