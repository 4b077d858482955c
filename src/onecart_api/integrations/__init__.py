"""
Framework integrations for the 1cart callback receiver.

Re-exports the endpoint classes for convenient imports:
    from onecart_api.integrations import CallbackEndpoint
    from onecart_api.integrations import CallbackWSGIApp
"""

from .wsgi import CallbackWSGIApp

__all__: list[str] = ["CallbackWSGIApp"]

# ASGI endpoint (FastAPI, Starlette)
try:
    from .asgi import CallbackEndpoint
    __all__.append("CallbackEndpoint")
except ImportError:
    pass
