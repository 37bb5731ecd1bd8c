import logging
from typing import List
from typing import Optional
from urllib.parse import urlparse

from cryptojwt.jwt import utc_time_sans_frac

from fastfed.exception import ErrorAccumulator
from fastfed.exception import FastFedSecurityError

logger = logging.getLogger(__name__)


def is_urn(key) -> bool:
    return isinstance(key, str) and key.startswith("urn:")


def is_expired(item, member: str = "exp", now: Optional[int] = None) -> bool:
    if now is None:
        now = utc_time_sans_frac()
    if item.get(member) is not None:
        if item[member] < now:
            logger.debug(f'is_expired: {item[member]} < {now}')
            return True

    return False


def merge_unique(*lists) -> List[str]:
    """Union of lists that keeps the order in which the members are first seen."""
    res = []
    for _list in lists:
        for item in _list or []:
            if item not in res:
                res.append(item)
    return res


def validate_url(errors: ErrorAccumulator, name: str, value: str) -> bool:
    try:
        _url = urlparse(value)
        _port = _url.port
    except (ValueError, AttributeError, TypeError):
        _url = None

    if _url is None or not _url.scheme or not _url.netloc:
        errors.add(f'Invalid url format for "{name}" (received: "{value}")')
        return False

    if _url.scheme != "https":
        errors.add(f'Invalid url protocol for "{name}". Must be "https" (received: "{value}")')
        return False

    return True


def assert_provider_domain_is_valid(remote_url: str, provider_domain: str):
    """
    Checks that the endpoint metadata was fetched from belongs to the provider domain
    published in that metadata.

    :param remote_url: The URL the metadata was fetched from
    :param provider_domain: The provider_domain member of the metadata
    """
    _url = urlparse(remote_url)
    if not _url.scheme or not _url.hostname:
        raise ValueError(f"Malformed url: {remote_url}")

    if _url.scheme != "https":
        raise FastFedSecurityError(
            f'Protocol of the FastFed Metadata Endpoint is not HTTPS ("{remote_url}")')

    if not provider_domain or not _url.hostname.lower().endswith(provider_domain.lower()):
        _msg = "The URL of the FastFed Metadata Endpoint does not match the value of the " \
               "provider_domain received within the metadata contents " \
               f'(endpoint_url="{remote_url}", provider_domain="{provider_domain}")'
        logger.warning(_msg)
        raise FastFedSecurityError(_msg)
