""" Working out which capabilities an identity provider and an application provider share."""
import logging
from typing import Dict
from typing import List
from typing import Optional

from fastfed.configure import Configuration
from fastfed.contract import ApplicationProvider
from fastfed.contract import Contract
from fastfed.contract import EnabledProfiles
from fastfed.contract import IdentityProvider
from fastfed.exception import IncompatibleProviders
from fastfed.metadata import ApplicationProviderMetadata
from fastfed.metadata import Capabilities
from fastfed.metadata import IdentityProviderMetadata
from fastfed.profile import ProfileRegistry
from fastfed.utils import merge_unique

logger = logging.getLogger(__name__)

IDENTITY_PROVIDER = "identity provider"
APPLICATION_PROVIDER = "application provider"

CAPABILITY_LABEL = {
    "authentication_profiles": "authentication profiles",
    "provisioning_profiles": "provisioning profiles",
    "schema_grammars": "schema grammars",
    "signing_algorithms": "signing algorithms"
}


def _capabilities(metadata) -> Capabilities:
    _caps = metadata.get("capabilities")
    if _caps is None:
        return Capabilities(configuration=metadata.configuration)
    return _caps


def shared_capabilities(idp_capabilities: Capabilities,
                        app_capabilities: Capabilities) -> Capabilities:
    """
    The capabilities both providers support, in the order the identity provider lists them.
    """
    _args = {}
    for key in Capabilities.c_param:
        _app = app_capabilities.get(key, [])
        _args[key] = [v for v in idp_capabilities.get(key, []) if v in _app]
    return Capabilities(configuration=idp_capabilities.configuration, **_args)


def assert_compatible(idp_metadata: IdentityProviderMetadata,
                      app_metadata: ApplicationProviderMetadata):
    """
    Raises IncompatibleProviders if the application provider declares something, profiles,
    schema grammars or signing algorithms, the identity provider has nothing in common with.
    """
    _idp = _capabilities(idp_metadata)
    _app = _capabilities(app_metadata)
    _shared = shared_capabilities(_idp, _app)
    for key, label in CAPABILITY_LABEL.items():
        if _app.get(key) and not _shared.get(key):
            raise IncompatibleProviders(
                f"Incompatible {label}. "
                f"(IdentityProvider='{', '.join(_idp.get(key, []))}', "
                f"ApplicationProvider='{', '.join(_app.get(key, []))}')")


def compute_enabled_profiles(idp_capabilities: Capabilities,
                             app_capabilities: Capabilities,
                             requested: List[str],
                             registry: ProfileRegistry) -> Dict[str, List[str]]:
    """
    Checks that both providers support every requested profile.

    :param idp_capabilities: What the identity provider supports
    :param app_capabilities: What the application provider supports
    :param requested: Profile URNs
    :param registry: The known profiles
    :return: The requested profiles split into authentication and provisioning profiles
    """
    _enabled = {"authentication_profiles": [], "provisioning_profiles": []}
    for urn in requested:
        if urn not in registry:
            raise IncompatibleProviders(f'Unrecognized profile URN "{urn}"', urn=urn)

        # The identity provider decides which category a profile belongs to
        _category = idp_capabilities.profile_category(urn) or \
            app_capabilities.profile_category(urn)
        if _category is None or urn not in idp_capabilities.get(_category, []):
            raise IncompatibleProviders(
                f'The {IDENTITY_PROVIDER} does not support profile "{urn}"', urn=urn,
                side=IDENTITY_PROVIDER)
        if urn not in app_capabilities.get(_category, []):
            raise IncompatibleProviders(
                f'The {APPLICATION_PROVIDER} does not support profile "{urn}"', urn=urn,
                side=APPLICATION_PROVIDER)

        if urn not in _enabled[_category]:
            _enabled[_category].append(urn)
    return _enabled


def negotiate(idp_metadata: IdentityProviderMetadata,
              app_metadata: ApplicationProviderMetadata,
              requested: Optional[List[str]] = None,
              configuration: Optional[Configuration] = None) -> Contract:
    """
    Builds the contract an identity provider and an application provider can agree on.

    :param idp_metadata: The identity provider metadata
    :param app_metadata: The application provider metadata
    :param requested: Profile URNs to enable. By default every profile either side declares.
    :param configuration: A Configuration instance, the identity provider metadata's by default
    :return: A Contract instance
    """
    _conf = configuration or idp_metadata.configuration
    _idp_caps = _capabilities(idp_metadata)
    _app_caps = _capabilities(app_metadata)

    if requested is None:
        requested = merge_unique(_idp_caps.profiles(), _app_caps.profiles())

    _enabled = compute_enabled_profiles(_idp_caps, _app_caps, requested, _conf.profile_registry)

    _idp_algs = _idp_caps.get("signing_algorithms", [])
    _app_algs = _app_caps.get("signing_algorithms", [])
    _algs = _conf.signing_algorithm_policy(_idp_algs, _app_algs)
    if not _algs:
        raise IncompatibleProviders(
            f"Incompatible signing algorithms. (IdentityProvider='{', '.join(_idp_algs)}', "
            f"ApplicationProvider='{', '.join(_app_algs)}')")

    _profiles = merge_unique(_enabled["authentication_profiles"],
                             _enabled["provisioning_profiles"])
    contract = Contract(
        configuration=_conf,
        identity_provider=IdentityProvider.from_metadata(idp_metadata, _profiles),
        application_provider=ApplicationProvider.from_metadata(app_metadata, _profiles),
        enabled_profiles=EnabledProfiles(configuration=_conf, **_enabled),
        signing_algorithms=list(_algs))
    logger.debug(f"Negotiated contract: {contract.to_dict()}")
    return contract
