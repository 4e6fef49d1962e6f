# utils/context.py

"""
Thread-local request context for audit fields.

This module provides thread-local storage for request information that
needs to be accessible while records are saved, so BaseModel can stamp
the originating IP without every service passing the request around.
"""

from threading import local
import logging

logger = logging.getLogger(__name__)

# Thread-local storage
_thread_locals = local()


def set_request_context(ip_address=None, user_agent=None, request_path=None, request=None):
    """
    Set the current request context for this thread.

    This should be called by middleware at the start of each request.

    Args:
        ip_address: Client IP address
        user_agent: Browser user agent string
        request_path: The request path/URL
        request: The full request object (alternative to individual params)
    """
    if request is not None:
        ip_address = get_client_ip(request)
        user_agent = request.META.get('HTTP_USER_AGENT', '')
        request_path = getattr(request, 'path', '')

    _thread_locals.request_context = {
        'ip_address': ip_address,
        'user_agent': user_agent or '',
        'request_path': request_path or '',
    }

    logger.debug(f"Set request context: ip={ip_address}, path={request_path}")


def get_request_context():
    """
    Get the current request context for this thread.

    Returns:
        dict: Request context containing ip_address, user_agent, request_path.
              Returns None if no context is set.
    """
    return getattr(_thread_locals, 'request_context', None)


def clear_request_context():
    """Clear the request context for this thread."""
    if hasattr(_thread_locals, 'request_context'):
        delattr(_thread_locals, 'request_context')
        logger.debug("Cleared request context")


def get_client_ip(request):
    """
    Extract the client's real IP address from the request.

    Handles X-Forwarded-For header for proxied requests.
    """
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        # X-Forwarded-For can contain multiple IPs, take the first one
        return x_forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


# ============================================================================
# CONTEXT MANAGER
# ============================================================================

class RequestContext:
    """
    Context manager for temporarily setting request context.

    Useful for management commands that import records on behalf of a
    known origin.

    Example:
        with RequestContext(ip_address='127.0.0.1'):
            employee.save()  # created_from_ip is populated
    """

    def __init__(self, ip_address=None, user_agent=None, request_path=None):
        self.context = {
            'ip_address': ip_address,
            'user_agent': user_agent or '',
            'request_path': request_path or '',
        }
        self.previous_context = None

    def __enter__(self):
        self.previous_context = get_request_context()
        _thread_locals.request_context = self.context
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.previous_context:
            _thread_locals.request_context = self.previous_context
        else:
            clear_request_context()
