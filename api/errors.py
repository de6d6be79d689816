import logging
from functools import wraps

from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.db.models import ProtectedError
from django.http import Http404, JsonResponse

from accounts.services import EmailTaken, RegistrationClosed, UsernameTaken
from messaging.models import ImmutableRecordError
from messaging.services import ContactNotAuthorized
from ministry.services import ClassInUse

logger = logging.getLogger("api")


class ApiError(Exception):
    status = 400

    def __init__(self, message, status=None, errors=None):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status
        self.errors = errors


class BadRequest(ApiError):
    status = 400


class Unauthorized(ApiError):
    status = 401


def error_response(message, status, errors=None):
    body = {"message": message}
    if errors:
        body["errors"] = errors
    return JsonResponse(body, status=status)


def _validation_errors(exc: ValidationError):
    if hasattr(exc, "error_dict"):
        return {field: [str(m) for m in messages] for field, messages in exc.message_dict.items()}
    return {"__all__": [str(m) for m in exc.messages]}


def require_methods(*methods):
    """``require_http_methods`` with a JSON 405 body."""
    def decorator(view_func):
        @wraps(view_func)
        def _wrapped(request, *args, **kwargs):
            if request.method not in methods:
                logger.warning("Method not allowed: %s %s", request.method, request.path)
                response = error_response("Method not allowed", 405)
                response["Allow"] = ", ".join(methods)
                return response
            return view_func(request, *args, **kwargs)
        return _wrapped
    return decorator


def api_view(view_func):
    """Turn exceptions raised by a JSON view into ``{"message": ...}`` responses."""
    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except ApiError as exc:
            if exc.status == 400:
                logger.warning("Rejected %s %s: %s", request.method, request.path, exc.message)
            return error_response(exc.message, exc.status, exc.errors)
        except ValidationError as exc:
            errors = _validation_errors(exc)
            logger.warning("Validation failed on %s %s: %s", request.method, request.path, errors)
            return error_response("Validation failed", 400, errors)
        except (ObjectDoesNotExist, Http404):
            return error_response("Not found", 404)
        except (ClassInUse, UsernameTaken, EmailTaken, ImmutableRecordError) as exc:
            return error_response(_conflict_message(exc), 409)
        except ProtectedError:
            return error_response("This record is still referenced by other records.", 409)
        except (ContactNotAuthorized, RegistrationClosed) as exc:
            return error_response(str(exc), 403)
        except Exception:
            logger.exception("Unhandled error on %s %s", request.method, request.path)
            return error_response("Internal server error", 500)
    return _wrapped


def _conflict_message(exc):
    if isinstance(exc, UsernameTaken):
        return "Username already exists"
    if isinstance(exc, EmailTaken):
        return "Email already in use"
    return str(exc)
