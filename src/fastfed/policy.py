"""Signing algorithm agreement policies.

A policy is called with the signing algorithms advertised by the identity provider and by
the application provider and returns the list both parties will use. An empty list means
the providers can not agree.
"""
from typing import List


def prefer_identity_provider(idp_algorithms: List[str], app_algorithms: List[str]) -> List[str]:
    """Intersection of the two lists in the identity provider's order of preference."""
    _app = set(app_algorithms or [])
    return [alg for alg in (idp_algorithms or []) if alg in _app]


def prefer_application_provider(idp_algorithms: List[str],
                                app_algorithms: List[str]) -> List[str]:
    """Intersection of the two lists in the application provider's order of preference."""
    return prefer_identity_provider(app_algorithms, idp_algorithms)
