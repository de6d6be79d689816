from functools import wraps

from django.http import JsonResponse

from accounts.permissions import has_role


def require_role(*roles):
    """Allow the view only for users holding one of ``roles``.

    Anonymous requests are stopped earlier by the API login middleware; this
    still answers 401 for them when the view is mounted elsewhere.
    """
    def decorator(view_func):
        @wraps(view_func)
        def _wrapped(request, *args, **kwargs):
            user = request.user
            if not user.is_authenticated:
                return JsonResponse({'message': 'Unauthorized'}, status=401)
            if not has_role(user, *roles):
                return JsonResponse({'message': 'You do not have permission to do this.'}, status=403)
            return view_func(request, *args, **kwargs)
        return _wrapped
    return decorator


def require_role_for_writes(*roles):
    """Like :func:`require_role`, but safe methods stay open to every signed-in user."""
    def decorator(view_func):
        guarded = require_role(*roles)(view_func)

        @wraps(view_func)
        def _wrapped(request, *args, **kwargs):
            if request.method in ('GET', 'HEAD', 'OPTIONS'):
                return view_func(request, *args, **kwargs)
            return guarded(request, *args, **kwargs)
        return _wrapped
    return decorator
