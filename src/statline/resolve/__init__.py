"""Header-to-field resolution."""

from statline.resolve.headers import alnum_key, clean_header, normalize_header, to_camel_case
from statline.resolve.resolver import HeaderResolver, default_strategies
from statline.resolve.strategies import DIRECT_FIELDS, MISSING, HeaderKey, ResolverStrategy

__all__ = [
    "DIRECT_FIELDS",
    "MISSING",
    "HeaderKey",
    "HeaderResolver",
    "ResolverStrategy",
    "alnum_key",
    "clean_header",
    "default_strategies",
    "normalize_header",
    "to_camel_case",
]
