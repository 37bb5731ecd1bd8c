import pytest

from fastfed.defaults import ENTERPRISE_SAML
from fastfed.defaults import ENTERPRISE_SCIM
from fastfed.defaults import OAUTH2_JWT
from fastfed.exception import ErrorAccumulator
from fastfed.metadata import Oauth2JwtClientMetadata
from fastfed.metadata import Oauth2JwtServiceMetadata
from fastfed.metadata import RegistrationRequest
from fastfed.metadata import RegistrationResponse
from fastfed.profile.saml import SamlRegistration
from fastfed.profile.scim import ScimRegistrationRequest
from fastfed.profile.scim import ScimRegistrationResponse
from tests import REGISTRATION_REQUEST
from tests import REGISTRATION_RESPONSE
from tests import tree

UNKNOWN_PROTOCOL = "urn:example:fastfed:1.0:provider_authentication:unknown"


def errors_of(item):
    errors = ErrorAccumulator()
    item.validate(errors)
    return errors.errors


class TestRegistrationRequest():

    @pytest.fixture(autouse=True)
    def create_request(self):
        self.tree = tree(REGISTRATION_REQUEST)

    def test_round_trip(self):
        _req = RegistrationRequest().hydrate(self.tree)
        assert errors_of(_req) == []
        assert _req.serialize() == REGISTRATION_REQUEST
        assert _req.profiles() == [ENTERPRISE_SAML, ENTERPRISE_SCIM]

    def test_extensions(self):
        _req = RegistrationRequest().hydrate(self.tree)
        assert isinstance(_req.extension(ENTERPRISE_SAML), SamlRegistration)
        _scim = _req.extension(ENTERPRISE_SCIM)
        assert isinstance(_scim, ScimRegistrationRequest)
        _methods = _scim["provider_authentication_methods"]
        assert _methods.protocols() == [OAUTH2_JWT]
        assert isinstance(_methods.extension(OAUTH2_JWT), Oauth2JwtClientMetadata)

    def test_expired(self):
        _req = RegistrationRequest().hydrate(self.tree)
        assert _req.is_expired(now=REGISTRATION_REQUEST["exp"] - 10) is False
        assert _req.is_expired(now=REGISTRATION_REQUEST["exp"] + 10) is True

    def test_exp_must_be_a_number(self):
        self.tree["exp"] = "tomorrow"
        _errors = errors_of(RegistrationRequest().hydrate(self.tree))
        assert _errors == [
            "Invalid type for \"exp\". Expected number (received: 'tomorrow')",
            'Missing value for "exp"'
        ]

    def test_unknown_profile(self):
        self.tree["authentication_profiles"] = ["urn:example:unknown"]
        del self.tree[ENTERPRISE_SAML]
        assert errors_of(RegistrationRequest().hydrate(self.tree)) == [
            'Unrecognized profile URN "urn:example:unknown" in registration request'
        ]

    def test_missing_extension(self):
        del self.tree[ENTERPRISE_SCIM]
        assert errors_of(RegistrationRequest().hydrate(self.tree)) == [
            f'Missing value for "{ENTERPRISE_SCIM}"'
        ]

    def test_missing_authentication_methods(self):
        self.tree[ENTERPRISE_SCIM]["provider_authentication_methods"] = {}
        assert errors_of(RegistrationRequest().hydrate(self.tree)) == [
            f'Missing value for "{ENTERPRISE_SCIM}.provider_authentication_methods"'
        ]

    def test_unknown_authentication_method(self):
        self.tree[ENTERPRISE_SCIM]["provider_authentication_methods"][UNKNOWN_PROTOCOL] = {
            "foo": "bar"}
        assert errors_of(RegistrationRequest().hydrate(self.tree)) == [
            f'Unrecognized provider authentication protocol "{UNKNOWN_PROTOCOL}" '
            f'(member of "{ENTERPRISE_SCIM}.provider_authentication_methods")'
        ]


class TestRegistrationResponse():

    @pytest.fixture(autouse=True)
    def create_response(self):
        self.tree = tree(REGISTRATION_RESPONSE)

    def test_round_trip(self):
        _resp = RegistrationResponse().hydrate(self.tree)
        assert errors_of(_resp) == []
        assert _resp.serialize() == REGISTRATION_RESPONSE

    def test_service_metadata(self):
        _resp = RegistrationResponse().hydrate(self.tree)
        _scim = _resp.extension(ENTERPRISE_SCIM)
        assert isinstance(_scim, ScimRegistrationResponse)
        _service = _scim.service_metadata()
        assert isinstance(_service, Oauth2JwtServiceMetadata)
        assert _service["scope"] == "scim"

    def test_finalize_uri_is_optional(self):
        del self.tree["fastfed_handshake_finalize_uri"]
        assert errors_of(RegistrationResponse().hydrate(self.tree)) == []

    def test_unknown_authentication_method(self):
        self.tree[ENTERPRISE_SCIM]["provider_authentication_method"] = UNKNOWN_PROTOCOL
        assert errors_of(RegistrationResponse().hydrate(self.tree)) == [
            f"Invalid value for '{ENTERPRISE_SCIM}.provider_authentication_method' "
            f"(received: '{UNKNOWN_PROTOCOL}')"
        ]

    def test_missing_service_metadata(self):
        del self.tree[ENTERPRISE_SCIM][OAUTH2_JWT]
        assert errors_of(RegistrationResponse().hydrate(self.tree)) == [
            f'Missing value for "{ENTERPRISE_SCIM}.{OAUTH2_JWT}"'
        ]

    def test_bad_service_uri(self):
        self.tree[ENTERPRISE_SCIM]["scim_service_uri"] = "http://app.example.com/scim"
        assert errors_of(RegistrationResponse().hydrate(self.tree)) == [
            f'Invalid url protocol for "{ENTERPRISE_SCIM}.scim_service_uri". Must be "https" '
            f'(received: "http://app.example.com/scim")'
        ]
