"""
Custom middleware for accounts app.

Includes:
- Client id middleware (signed cookie naming the browser that owns a
  local recovery snapshot)
- Helpers that give HTMX/AJAX requests an auth response they can handle
  without redirect loops
"""

import logging
import uuid

from django.conf import settings
from django.http import HttpResponse
from django.shortcuts import redirect

logger = logging.getLogger(__name__)

CLIENT_ID_SALT = 'apps.accounts.client-id'


def is_ajax_or_htmx_request(request):
    """
    Check if the request is an AJAX or HTMX request.

    Returns True for:
    - HTMX requests (HX-Request header)
    - XMLHttpRequest (X-Requested-With header)
    """
    if request.headers.get('HX-Request') == 'true':
        return True

    if request.headers.get('X-Requested-With') == 'XMLHttpRequest':
        return True

    return False


def get_auth_redirect_response(request, redirect_url):
    """
    Return appropriate response for auth redirects based on request type.

    - For HTMX requests: Return 204 No Content (silent fail) for background requests,
      or HX-Redirect header for user-initiated requests
    - For AJAX requests: Return 401 with JSON
    - For normal requests: Return standard redirect
    """
    if request.headers.get('HX-Request') == 'true':
        if is_background_htmx_request(request):
            # Silent fail - the page keeps what it shows
            return HttpResponse(status=204)

        response = HttpResponse(status=200)
        response['HX-Redirect'] = redirect_url
        return response

    if request.headers.get('X-Requested-With') == 'XMLHttpRequest':
        return HttpResponse(
            '{"error": "Authentication required", "redirect": "' + redirect_url + '"}',
            content_type='application/json',
            status=401
        )

    return redirect(redirect_url)


def is_background_htmx_request(request):
    """
    Determine if an HTMX request is a background request (polling, auto-refresh)
    vs a user-initiated request (click, form submit).

    Background requests should fail silently.
    User-initiated requests should redirect the full page.
    """
    if request.headers.get('HX-Request') != 'true':
        return False

    if request.method != 'GET':
        return False

    if 'refresh' in request.path.lower():
        return True

    # hx-trigger="every 30s" and friends
    trigger = request.headers.get('HX-Trigger', '').lower()
    return any(t in trigger for t in ['every', 'poll', 'refresh'])


class ClientIdMiddleware:
    """
    Attach a stable per-browser id to every request as ``request.client_id``.

    The id lives in a signed cookie and namespaces the local recovery
    cache, so a browser can only ever recover the snapshot it stored.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        cookie_name = settings.CLIENT_ID_COOKIE
        client_id = request.get_signed_cookie(cookie_name, default=None, salt=CLIENT_ID_SALT)
        is_new = client_id is None
        if is_new:
            client_id = uuid.uuid4().hex
            logger.debug('Issued client id %s', client_id)

        request.client_id = client_id
        response = self.get_response(request)

        if is_new:
            response.set_signed_cookie(
                cookie_name,
                client_id,
                salt=CLIENT_ID_SALT,
                max_age=settings.CLIENT_ID_COOKIE_AGE,
                httponly=True,
                samesite='Lax',
                secure=settings.SESSION_COOKIE_SECURE,
            )
        return response
