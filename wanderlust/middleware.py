import logging
from urllib.parse import parse_qs

logger = logging.getLogger(__name__)


class MethodOverrideMiddleware:
    """
    WSGI middleware that lets HTML forms tunnel PUT/PATCH/DELETE through POST.

    A POST to ``/listings/3?_method=DELETE`` is routed as ``DELETE /listings/3``.
    Runs before Flask matches the URL, which is why it lives at the WSGI layer.
    """

    allowed_methods = frozenset(['PUT', 'PATCH', 'DELETE'])
    param = '_method'

    def __init__(self, app):
        self.app = app

    def __call__(self, environ, start_response):
        if environ.get('REQUEST_METHOD', '').upper() == 'POST':
            query = parse_qs(environ.get('QUERY_STRING', ''))
            override = query.get(self.param, [''])[0].upper()
            if override in self.allowed_methods:
                logger.debug(f"Method override: POST -> {override} for {environ.get('PATH_INFO')}")
                environ['REQUEST_METHOD'] = override
        return self.app(environ, start_response)
