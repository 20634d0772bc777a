from .checker import CheckResult, Checker, Verdict
from .probe import ConfigurationError, LoginRequest, SessionParameters, build_login_request

__all__ = [
    'CheckResult',
    'Checker',
    'ConfigurationError',
    'LoginRequest',
    'SessionParameters',
    'Verdict',
    'build_login_request',
]
