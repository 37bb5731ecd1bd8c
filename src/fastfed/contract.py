""" The agreement between an identity provider and an application provider."""
import logging
from typing import List
from typing import Optional

from cryptojwt.jwt import utc_time_sans_frac
from idpyoidc.message import OPTIONAL_LIST_OF_STRINGS
from idpyoidc.message import REQUIRED_LIST_OF_STRINGS
from idpyoidc.message import SINGLE_OPTIONAL_STRING
from idpyoidc.message import SINGLE_REQUIRED_INT
from idpyoidc.message import SINGLE_REQUIRED_STRING
from idpyoidc.message import msg_ser

from fastfed.defaults import DEFAULT_PROPOSAL_LIFETIME
from fastfed.exception import ErrorAccumulator
from fastfed.exception import FastFedSecurityError
from fastfed.exception import InvalidChange
from fastfed.exception import InvalidMetadata
from fastfed.message import Metadata
from fastfed.metadata import REQUIRED_DISPLAY_SETTINGS
from fastfed.metadata import REQUIRED_PROVIDER_CONTACT_INFORMATION
from fastfed.metadata import CommonProviderMetadata
from fastfed.metadata import DesiredAttributes
from fastfed.metadata import RegistrationRequest
from fastfed.metadata import RegistrationResponse
from fastfed.profile import ExtensionPoint
from fastfed.utils import is_expired
from fastfed.utils import merge_unique

logger = logging.getLogger(__name__)


class ExtensionMap(Metadata):
    """Extension objects keyed by profile URN."""
    extensible = True

    def urns(self) -> List[str]:
        return list(self.extensions().keys())


class ApplicationProviderMetadataExtensions(ExtensionMap):
    extension_point = ExtensionPoint.APPLICATION_PROVIDER_METADATA


class IdentityProviderMetadataExtensions(ExtensionMap):
    extension_point = ExtensionPoint.IDENTITY_PROVIDER_METADATA


class RegistrationRequestExtensions(ExtensionMap):
    extension_point = ExtensionPoint.REGISTRATION_REQUEST


class RegistrationResponseExtensions(ExtensionMap):
    extension_point = ExtensionPoint.REGISTRATION_RESPONSE


OPTIONAL_APPLICATION_PROVIDER_METADATA_EXTENSIONS = (
    ApplicationProviderMetadataExtensions, False, msg_ser, None, False)
OPTIONAL_IDENTITY_PROVIDER_METADATA_EXTENSIONS = (
    IdentityProviderMetadataExtensions, False, msg_ser, None, False)
OPTIONAL_REGISTRATION_REQUEST_EXTENSIONS = (
    RegistrationRequestExtensions, False, msg_ser, None, False)
OPTIONAL_REGISTRATION_RESPONSE_EXTENSIONS = (
    RegistrationResponseExtensions, False, msg_ser, None, False)


class Provider(Metadata):
    """One party of a contract."""
    c_param = {
        "entity_id": SINGLE_REQUIRED_STRING,
        "provider_domain": SINGLE_REQUIRED_STRING,
        "provider_contact_information": REQUIRED_PROVIDER_CONTACT_INFORMATION,
        "display_settings": REQUIRED_DISPLAY_SETTINGS
    }
    # Extension map members, keyed by the extension point they hold
    extension_maps = {}
    # Extension point of the provider metadata document the provider is built from
    metadata_extension_point = None

    @classmethod
    def from_metadata(cls, metadata: CommonProviderMetadata, profiles: List[str]):
        """
        Builds a contract party from the metadata a provider published.

        :param metadata: IdentityProviderMetadata or ApplicationProviderMetadata instance
        :param profiles: URNs of the enabled profiles. Only their extensions are carried over.
        :return: A Provider instance
        """
        _provider = cls(configuration=metadata.configuration)
        for key in cls.c_param:
            if key in metadata.c_param and key in metadata:
                _val = metadata[key]
                if isinstance(_val, Metadata):
                    _val = _val.copy()
                _provider[key] = _val

        for urn in profiles:
            _ext = metadata.extension(urn)
            if _ext is not None:
                _provider.set_extension(cls.metadata_extension_point, urn, _ext.copy())
        return _provider

    def extension_map(self, point: ExtensionPoint) -> Optional[ExtensionMap]:
        _member = self.extension_maps.get(point)
        if _member is None:
            return None
        return self.get(_member)

    def extensions_at(self, point: ExtensionPoint) -> dict:
        _map = self.extension_map(point)
        if _map is None:
            return {}
        return _map.extensions()

    def set_extension(self, point: ExtensionPoint, urn: str, extension: Metadata):
        _member = self.extension_maps[point]
        _map = self.get(_member)
        if _map is None:
            _map = self.c_param[_member][0](configuration=self.configuration)
            self[_member] = _map
        _map[urn] = extension

    def extension_urns(self) -> List[str]:
        return merge_unique(*[list(self.extensions_at(p).keys()) for p in self.extension_maps])

    def retain(self, profiles: List[str]):
        """Removes the extensions of every profile not in profiles."""
        for point, _member in self.extension_maps.items():
            _map = self.get(_member)
            if _map is None:
                continue
            for urn in _map.urns():
                if urn not in profiles:
                    del _map[urn]
            if not _map.urns():
                del self[_member]


class IdentityProvider(Provider):
    c_param = Provider.c_param.copy()
    c_param.update({
        "jwks_uri": SINGLE_REQUIRED_STRING,
        "fastfed_handshake_start_uri": SINGLE_REQUIRED_STRING,
        "identity_provider_metadata_extensions": OPTIONAL_IDENTITY_PROVIDER_METADATA_EXTENSIONS,
        "registration_request_extensions": OPTIONAL_REGISTRATION_REQUEST_EXTENSIONS
    })
    c_url = ["jwks_uri", "fastfed_handshake_start_uri"]
    extension_maps = {
        ExtensionPoint.IDENTITY_PROVIDER_METADATA: "identity_provider_metadata_extensions",
        ExtensionPoint.REGISTRATION_REQUEST: "registration_request_extensions"
    }
    metadata_extension_point = ExtensionPoint.IDENTITY_PROVIDER_METADATA


class ApplicationProvider(Provider):
    c_param = Provider.c_param.copy()
    c_param.update({
        "fastfed_handshake_register_uri": SINGLE_REQUIRED_STRING,
        "fastfed_handshake_finalize_uri": SINGLE_OPTIONAL_STRING,
        "application_provider_metadata_extensions":
            OPTIONAL_APPLICATION_PROVIDER_METADATA_EXTENSIONS,
        "registration_response_extensions": OPTIONAL_REGISTRATION_RESPONSE_EXTENSIONS
    })
    c_url = ["fastfed_handshake_register_uri", "fastfed_handshake_finalize_uri"]
    extension_maps = {
        ExtensionPoint.APPLICATION_PROVIDER_METADATA: "application_provider_metadata_extensions",
        ExtensionPoint.REGISTRATION_RESPONSE: "registration_response_extensions"
    }
    metadata_extension_point = ExtensionPoint.APPLICATION_PROVIDER_METADATA


REQUIRED_IDENTITY_PROVIDER = (IdentityProvider, True, msg_ser, None, False)
REQUIRED_APPLICATION_PROVIDER = (ApplicationProvider, True, msg_ser, None, False)


class EnabledProfiles(Metadata):
    c_param = {
        "authentication_profiles": OPTIONAL_LIST_OF_STRINGS,
        "provisioning_profiles": OPTIONAL_LIST_OF_STRINGS
    }

    def profiles(self) -> List[str]:
        return merge_unique(self.get("authentication_profiles"), self.get("provisioning_profiles"))

    def includes(self, urn: str) -> bool:
        return urn in self.profiles()

    def validate(self, errors: ErrorAccumulator):
        Metadata.validate(self, errors)
        _registry = self.configuration.profile_registry
        _provisioning = self.get("provisioning_profiles", [])
        for urn in self.get("authentication_profiles", []):
            if urn in _provisioning:
                errors.add(f'Profile "{urn}" is enabled both as authentication and as '
                           f'provisioning profile')
        for urn in self.profiles():
            if urn and urn not in _registry:
                errors.add(f'Unrecognized profile URN "{urn}" in "{self.json_path}"')


REQUIRED_ENABLED_PROFILES = (EnabledProfiles, True, msg_ser, None, False)


class Contract(Metadata):
    c_param = {
        "identity_provider": REQUIRED_IDENTITY_PROVIDER,
        "application_provider": REQUIRED_APPLICATION_PROVIDER,
        "enabled_profiles": REQUIRED_ENABLED_PROFILES,
        "signing_algorithms": REQUIRED_LIST_OF_STRINGS
    }
    wrapper = "contract"

    def enabled_profiles(self) -> List[str]:
        _enabled = self.get("enabled_profiles")
        if _enabled is None:
            return []
        return _enabled.profiles()

    def validate(self, errors: ErrorAccumulator):
        Metadata.validate(self, errors)
        _idp = self.get("identity_provider")
        _app = self.get("application_provider")
        if _idp is None or _app is None:
            return

        _enabled = self.enabled_profiles()
        _registry = self.configuration.profile_registry
        for urn in _enabled:
            _profile = _registry.resolve(urn)
            if _profile is None:
                continue
            for _provider in [_idp, _app]:
                for point, _member in _provider.extension_maps.items():
                    if not _profile.supports(point):
                        continue
                    # Registration extensions only exist once registration has happened
                    if point == _provider.metadata_extension_point or _member in _provider:
                        if urn not in _provider.extensions_at(point):
                            errors.add(
                                f'Missing value for "{_provider.qualified_name(_member)}.{urn}"')

        for _provider in [_idp, _app]:
            for point, _member in _provider.extension_maps.items():
                for urn in _provider.extensions_at(point):
                    if urn not in _enabled:
                        errors.add(f'Extension for profile "{urn}" in '
                                   f'"{_provider.qualified_name(_member)}" but the profile is '
                                   f'not enabled')

    def overlay_registration_request(self, request: RegistrationRequest):
        """
        Narrows the contract down to the profiles the identity provider asked for in its
        registration request and records the request extensions.

        :param request: A validated RegistrationRequest
        """
        _enabled = self["enabled_profiles"]
        for category, label in [("authentication_profiles", "authentication"),
                                ("provisioning_profiles", "provisioning")]:
            _requested = request.get(category, [])
            _allowed = _enabled.get(category, [])
            if [urn for urn in _requested if urn not in _allowed]:
                _msg = f"Registration request contains incompatible {label} profiles " \
                       f"(requestedProfiles={_requested}, allowedProfiles={_allowed})"
                logger.warning(_msg)
                raise FastFedSecurityError(_msg)

        _requested = request.profiles()
        _extensions = request.extensions()
        for urn, _ext in _extensions.items():
            if urn not in _requested:
                _msg = f'Registration request contains an extension for profile "{urn}", ' \
                       f'which it does not request'
                logger.warning(_msg)
                raise FastFedSecurityError(_msg)
            if not isinstance(_ext, Metadata):
                raise InvalidMetadata([request.extension_error(urn)])

        self["enabled_profiles"] = EnabledProfiles(
            configuration=self.configuration,
            authentication_profiles=request.get("authentication_profiles", []),
            provisioning_profiles=request.get("provisioning_profiles", []))

        _idp = self["identity_provider"]
        for urn, _ext in _extensions.items():
            _idp.set_extension(ExtensionPoint.REGISTRATION_REQUEST, urn, _ext.copy())

        for _provider in [_idp, self["application_provider"]]:
            _provider.retain(_requested)
        logger.debug(f"Contract narrowed down to {_requested}")

    def overlay_registration_response(self, response: RegistrationResponse):
        """Records what the application provider returned in its registration response."""
        _enabled = self.enabled_profiles()
        _extensions = response.extensions()
        for urn, _ext in _extensions.items():
            if urn not in _enabled:
                _msg = f'Registration response contains an extension for profile "{urn}", ' \
                       f'which is not enabled'
                logger.warning(_msg)
                raise FastFedSecurityError(_msg)
            if not isinstance(_ext, Metadata):
                raise InvalidMetadata([response.extension_error(urn)])

        _app = self["application_provider"]
        if "fastfed_handshake_finalize_uri" in response:
            _app["fastfed_handshake_finalize_uri"] = response["fastfed_handshake_finalize_uri"]
        for urn, _ext in _extensions.items():
            _app.set_extension(ExtensionPoint.REGISTRATION_RESPONSE, urn, _ext.copy())

    def consolidated_desired_attributes(self) -> DesiredAttributes:
        """The attributes desired by all the enabled profiles taken together."""
        res = DesiredAttributes(configuration=self.configuration)
        _app = self.get("application_provider")
        if _app is None:
            return res

        _extensions = _app.extensions_at(ExtensionPoint.APPLICATION_PROVIDER_METADATA)
        for urn in self.enabled_profiles():
            _ext = _extensions.get(urn)
            if isinstance(_ext, Metadata) and "desired_attributes" in _ext:
                res = res.merge(_ext["desired_attributes"])
        return res


REQUIRED_CONTRACT = (Contract, True, msg_ser, None, False)

PROPOSED = "proposed"
ACCEPTED = "accepted"
REJECTED = "rejected"
WITHDRAWN = "withdrawn"

PROPOSAL_STATUSES = [PROPOSED, ACCEPTED, REJECTED, WITHDRAWN]
TERMINAL_STATUSES = [ACCEPTED, REJECTED, WITHDRAWN]


class ContractProposal(Metadata):
    """
    A time limited offer of a contract.

    A proposal starts out as proposed and can be moved once, to accepted, rejected or
    withdrawn. After that it can not be changed, and the contract it holds is only handed
    out as a copy. An expired proposal is not moved automatically, expiry is for the
    parties to act upon.
    """
    c_param = {
        "status": SINGLE_REQUIRED_STRING,
        "expiration_date": SINGLE_REQUIRED_INT,
        "contract": REQUIRED_CONTRACT
    }
    c_allowed_values = {
        "status": PROPOSAL_STATUSES
    }
    wrapper = "contract_proposal"
    _hydrating = False

    @classmethod
    def propose(cls, contract: Contract, lifetime: int = DEFAULT_PROPOSAL_LIFETIME,
                now: Optional[int] = None):
        if now is None:
            now = utc_time_sans_frac()
        return cls(configuration=contract.configuration, status=PROPOSED,
                   expiration_date=now + lifetime, contract=contract)

    def is_terminal(self) -> bool:
        return self._dict.get("status") in TERMINAL_STATUSES

    def is_expired(self, now: Optional[int] = None) -> bool:
        return is_expired(self, "expiration_date", now)

    def accept(self):
        self._transition(ACCEPTED)

    def reject(self):
        self._transition(REJECTED)

    def withdraw(self):
        self._transition(WITHDRAWN)

    def _transition(self, status: str):
        _current = self._dict.get("status")
        if _current != PROPOSED:
            raise InvalidChange(
                f"Can not change the status of a contract proposal from '{_current}' "
                f"to '{status}'")
        self._dict["status"] = status
        logger.debug(f"Contract proposal {status}")

    def _assert_not_terminal(self, key: str = ""):
        if self.is_terminal():
            raise InvalidChange(
                f"Contract proposal is {self._dict['status']}, can not change '{key}'")

    def hydrate(self, tree):
        if tree is None:
            return self
        self._assert_not_terminal(self.json_path)
        # A tree may itself carry a terminal status
        self._hydrating = True
        try:
            return Metadata.hydrate(self, tree)
        finally:
            self._hydrating = False

    def hydrate_member(self, key: str, value):
        if not self._hydrating:
            self._assert_not_terminal(key)
        Metadata.hydrate_member(self, key, value)

    def __delitem__(self, key):
        self._assert_not_terminal(key)
        del self._dict[key]

    def __getitem__(self, key):
        # A settled contract is handed out as a copy
        _val = self._dict[key]
        if key == "contract" and self.is_terminal() and isinstance(_val, Metadata):
            return _val.copy()
        return _val

    def get(self, key, default=None):
        try:
            return self[key]
        except KeyError:
            return default
