from django.http import JsonResponse
from django.urls import Resolver404, resolve

EXEMPT_URL_NAMES = {
    'api_csrf',
    'api_login',
    'api_logout',
    'api_register',
}

PROTECTED_PATH_PREFIXES = (
    '/api/',
)


class ApiLoginRequiredMiddleware:
    """Answer 401 for anonymous API requests before any view runs."""
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if request.user.is_authenticated:
            return self.get_response(request)

        path = request.path
        if not any(path.startswith(prefix) for prefix in PROTECTED_PATH_PREFIXES):
            return self.get_response(request)

        # Allow named urls in exempt set
        try:
            match = resolve(path)
            if match.url_name in EXEMPT_URL_NAMES:
                return self.get_response(request)
        except Resolver404:
            pass

        return JsonResponse({'message': 'Unauthorized'}, status=401)
