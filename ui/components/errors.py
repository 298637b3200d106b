from datasource.api_client import ApiError, UnauthorizedError

# What a form catches around a service call and shows in its red label
FORM_ERRORS = (ValueError, LookupError, ApiError)


def error_message(exc: Exception) -> str:
    if isinstance(exc, UnauthorizedError):
        return "Sessão expirada. Entre novamente em Configurações."
    if isinstance(exc, ApiError):
        return exc.message
    return str(exc)
