# src/qeinput/__init__.py
from .error import QEInputError, ErrorList, PathEncodingError, ConfigError
from .fields import push_bool_field
__all__ = ["QEInputError", "ErrorList", "PathEncodingError", "ConfigError", "push_bool_field"]
