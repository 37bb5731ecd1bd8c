""" Classes describing the metadata FastFed providers publish and exchange."""
import logging
from typing import List
from typing import Optional

from idpyoidc.message import OPTIONAL_LIST_OF_STRINGS
from idpyoidc.message import REQUIRED_LIST_OF_STRINGS
from idpyoidc.message import SINGLE_OPTIONAL_STRING
from idpyoidc.message import SINGLE_REQUIRED_INT
from idpyoidc.message import SINGLE_REQUIRED_STRING
from idpyoidc.message import msg_ser

from fastfed.defaults import OAUTH2_JWT
from fastfed.defaults import SCHEMA_GRAMMARS
from fastfed.exception import ErrorAccumulator
from fastfed.message import Metadata
from fastfed.profile import ExtensionPoint
from fastfed.utils import assert_provider_domain_is_valid
from fastfed.utils import is_expired
from fastfed.utils import merge_unique

logger = logging.getLogger(__name__)


class ProviderContactInformation(Metadata):
    c_param = {
        "organization": SINGLE_REQUIRED_STRING,
        "phone": SINGLE_REQUIRED_STRING,
        "email": SINGLE_REQUIRED_STRING
    }


REQUIRED_PROVIDER_CONTACT_INFORMATION = (ProviderContactInformation, True, msg_ser, None, False)


class DisplaySettings(Metadata):
    c_param = {
        "display_name": SINGLE_REQUIRED_STRING,
        "logo_uri": SINGLE_OPTIONAL_STRING,
        "icon_uri": SINGLE_OPTIONAL_STRING,
        "license": SINGLE_REQUIRED_STRING
    }
    c_url = ["logo_uri", "icon_uri", "license"]


REQUIRED_DISPLAY_SETTINGS = (DisplaySettings, True, msg_ser, None, False)


class Capabilities(Metadata):
    """The profiles, schema grammars and signing algorithms a provider supports."""
    c_param = {
        "authentication_profiles": OPTIONAL_LIST_OF_STRINGS,
        "provisioning_profiles": OPTIONAL_LIST_OF_STRINGS,
        "schema_grammars": OPTIONAL_LIST_OF_STRINGS,
        "signing_algorithms": OPTIONAL_LIST_OF_STRINGS
    }

    def profiles(self) -> List[str]:
        return merge_unique(self.get("authentication_profiles"), self.get("provisioning_profiles"))

    def profile_category(self, urn: str) -> Optional[str]:
        for category in ["authentication_profiles", "provisioning_profiles"]:
            if urn in self.get(category, []):
                return category
        return None

    def validate(self, errors: ErrorAccumulator):
        Metadata.validate(self, errors)
        _registry = self.configuration.profile_registry
        for category in ["authentication_profiles", "provisioning_profiles"]:
            for urn in self.get(category, []):
                if urn and urn not in _registry:
                    errors.add(
                        f'Unrecognized profile URN "{urn}" in "{self.qualified_name(category)}"')


REQUIRED_CAPABILITIES = (Capabilities, True, msg_ser, None, False)


class AttributeSet(Metadata):
    """The user and group attributes desired in one schema grammar."""
    c_param = {
        "required_user_attributes": REQUIRED_LIST_OF_STRINGS,
        "optional_user_attributes": OPTIONAL_LIST_OF_STRINGS,
        "required_group_attributes": OPTIONAL_LIST_OF_STRINGS,
        "optional_group_attributes": OPTIONAL_LIST_OF_STRINGS
    }

    def user_attributes(self) -> List[str]:
        return merge_unique(self.get("required_user_attributes"),
                            self.get("optional_user_attributes"))

    def group_attributes(self) -> List[str]:
        return merge_unique(self.get("required_group_attributes"),
                            self.get("optional_group_attributes"))

    def merge(self, other: "AttributeSet") -> "AttributeSet":
        """An attribute that is required by either set is required in the result."""
        _args = {}
        for kind in ["user", "group"]:
            _required = merge_unique(self.get(f"required_{kind}_attributes"),
                                     other.get(f"required_{kind}_attributes"))
            _optional = merge_unique(self.get(f"optional_{kind}_attributes"),
                                     other.get(f"optional_{kind}_attributes"))
            _args[f"required_{kind}_attributes"] = _required
            _args[f"optional_{kind}_attributes"] = [a for a in _optional if a not in _required]
        return AttributeSet(configuration=self.configuration, **_args)


class DesiredAttributes(Metadata):
    """Attribute sets keyed by schema grammar URN."""
    extensible = True

    def new_extension(self, urn: str) -> Optional[Metadata]:
        if urn in SCHEMA_GRAMMARS:
            return AttributeSet(configuration=self.configuration)
        return None

    def extension_error(self, urn: str) -> str:
        _expected = ", ".join([f'"{g}"' for g in SCHEMA_GRAMMARS])
        return f'Invalid member of "{self.json_path}". Unrecognized schema grammar: "{urn}". ' \
               f'Expected one of: {_expected}'

    def for_schema_grammar(self, grammar: str) -> Optional[AttributeSet]:
        return self.extension(grammar)

    def merge(self, other: "DesiredAttributes") -> "DesiredAttributes":
        res = self.copy()
        for grammar, _set in other.extensions().items():
            if not isinstance(_set, AttributeSet):
                continue
            _mine = res.for_schema_grammar(grammar)
            if _mine is None:
                res[grammar] = _set.copy()
            else:
                res[grammar] = _mine.merge(_set)
        return res

    def validate(self, errors: ErrorAccumulator):
        if not self.extensions():
            errors.add(f'Missing value for "{self.json_path or "desired_attributes"}"')
        Metadata.validate(self, errors)


REQUIRED_DESIRED_ATTRIBUTES = (DesiredAttributes, True, msg_ser, None, False)


class Oauth2JwtClientMetadata(Metadata):
    """How a provisioning client authenticates using the OAuth 2.0 JWT profile."""
    c_param = {
        "jwks_uri": SINGLE_REQUIRED_STRING
    }
    c_url = ["jwks_uri"]


class Oauth2JwtServiceMetadata(Metadata):
    """Where and for what scope a provisioning client gets its access tokens."""
    c_param = {
        "token_endpoint": SINGLE_REQUIRED_STRING,
        "scope": SINGLE_REQUIRED_STRING
    }
    c_url = ["token_endpoint"]


PROVIDER_AUTHENTICATION_CLIENT = {
    OAUTH2_JWT: Oauth2JwtClientMetadata
}

PROVIDER_AUTHENTICATION_SERVICE = {
    OAUTH2_JWT: Oauth2JwtServiceMetadata
}


class ProviderAuthenticationMethods(Metadata):
    """Client metadata keyed by provider authentication protocol URN."""
    extensible = True

    def new_extension(self, urn: str) -> Optional[Metadata]:
        _cls = PROVIDER_AUTHENTICATION_CLIENT.get(urn)
        if _cls:
            return _cls(configuration=self.configuration)
        return None

    def extension_error(self, urn: str) -> str:
        return f'Unrecognized provider authentication protocol "{urn}" ' \
               f'(member of "{self.json_path}")'

    def protocols(self) -> List[str]:
        return list(self.extensions().keys())

    def validate(self, errors: ErrorAccumulator):
        if not self.extensions():
            errors.add(f'Missing value for "{self.json_path or "provider_authentication_methods"}"')
        Metadata.validate(self, errors)


REQUIRED_PROVIDER_AUTHENTICATION_METHODS = (
    ProviderAuthenticationMethods, True, msg_ser, None, False)


class CommonProviderMetadata(Metadata):
    """Members shared by the metadata of identity and application providers."""
    c_param = {
        "entity_id": SINGLE_REQUIRED_STRING,
        "provider_domain": SINGLE_REQUIRED_STRING,
        "provider_contact_information": REQUIRED_PROVIDER_CONTACT_INFORMATION,
        "display_settings": REQUIRED_DISPLAY_SETTINGS,
        "capabilities": REQUIRED_CAPABILITIES
    }
    extensible = True

    def declared_profiles(self) -> List[str]:
        _capabilities = self.get("capabilities")
        if _capabilities is None:
            return []
        return _capabilities.profiles()

    def validate(self, errors: ErrorAccumulator):
        Metadata.validate(self, errors)
        # A declared profile that extends this document must carry its extension
        _registry = self.configuration.profile_registry
        for urn in self.declared_profiles():
            _profile = _registry.resolve(urn)
            if _profile and _profile.supports(self.extension_point) and urn not in self:
                errors.add(f'Missing value for "{self.qualified_name(urn)}"')

    def assert_endpoint_is_valid(self, remote_url: str):
        """Raises FastFedSecurityError if the metadata didn't come from the provider's domain."""
        assert_provider_domain_is_valid(remote_url, self.get("provider_domain"))


class IdentityProviderMetadata(CommonProviderMetadata):
    c_param = CommonProviderMetadata.c_param.copy()
    c_param.update({
        "jwks_uri": SINGLE_REQUIRED_STRING,
        "fastfed_handshake_start_uri": SINGLE_REQUIRED_STRING
    })
    c_url = ["jwks_uri", "fastfed_handshake_start_uri"]
    wrapper = "identity_provider"
    extension_point = ExtensionPoint.IDENTITY_PROVIDER_METADATA


class ApplicationProviderMetadata(CommonProviderMetadata):
    c_param = CommonProviderMetadata.c_param.copy()
    c_param.update({
        "fastfed_handshake_register_uri": SINGLE_REQUIRED_STRING
    })
    c_url = ["fastfed_handshake_register_uri"]
    wrapper = "application_provider"
    extension_point = ExtensionPoint.APPLICATION_PROVIDER_METADATA


class RegistrationRequest(Metadata):
    """
    The claims of the registration request an identity provider sends to the
    application provider's fastfed_handshake_register_uri. Signing and signature
    verification of the request is done elsewhere.
    """
    c_param = {
        "iss": SINGLE_REQUIRED_STRING,
        "aud": SINGLE_REQUIRED_STRING,
        "exp": SINGLE_REQUIRED_INT,
        "authentication_profiles": OPTIONAL_LIST_OF_STRINGS,
        "provisioning_profiles": OPTIONAL_LIST_OF_STRINGS
    }
    extensible = True
    extension_point = ExtensionPoint.REGISTRATION_REQUEST

    def profiles(self) -> List[str]:
        return merge_unique(self.get("authentication_profiles"), self.get("provisioning_profiles"))

    def is_expired(self, now: Optional[int] = None) -> bool:
        return is_expired(self, "exp", now)

    def validate(self, errors: ErrorAccumulator):
        Metadata.validate(self, errors)
        _registry = self.configuration.profile_registry
        for urn in self.profiles():
            _profile = _registry.resolve(urn)
            if _profile is None:
                errors.add(f'Unrecognized profile URN "{urn}" in registration request')
            elif _profile.supports(self.extension_point) and urn not in self:
                errors.add(f'Missing value for "{self.qualified_name(urn)}"')


class RegistrationResponse(Metadata):
    """What the application provider returns after accepting a registration request."""
    c_param = {
        "fastfed_handshake_finalize_uri": SINGLE_OPTIONAL_STRING
    }
    c_url = ["fastfed_handshake_finalize_uri"]
    extensible = True
    extension_point = ExtensionPoint.REGISTRATION_RESPONSE
