# ipd_core/common/middleware.py
from __future__ import annotations

import logging
import re

from django.utils.deprecation import MiddlewareMixin

from ipd_core.common.api.exceptions import ensure_request_id

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-Id"
REQUEST_ID_META = "HTTP_X_REQUEST_ID"

_SAFE_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


class RequestIdMiddleware(MiddlewareMixin):
    """
    Attaches a request_id to every request and echoes it in the X-Request-Id
    response header.

    - A well-formed incoming X-Request-Id (from a gateway/client) is reused.
    - Otherwise a fresh id is generated (same one the error envelope reports).
    """

    def process_request(self, request):
        incoming = request.META.get(REQUEST_ID_META)
        if incoming and _SAFE_ID.match(incoming):
            request.request_id = incoming
        else:
            ensure_request_id(request)
        return None

    def process_response(self, request, response):
        rid = getattr(request, "request_id", None)
        if rid:
            response[REQUEST_ID_HEADER] = rid
        if response.status_code >= 500:
            logger.error("request %s %s failed with %s (request_id=%s)",
                         request.method, request.path, response.status_code, rid)
        return response
