"""The Enterprise SAML authentication profile."""
from idpyoidc.message import SINGLE_REQUIRED_STRING

from fastfed.defaults import ENTERPRISE_SAML
from fastfed.message import Metadata
from fastfed.metadata import REQUIRED_DESIRED_ATTRIBUTES
from fastfed.profile import ExtensionPoint
from fastfed.profile import Profile


class SamlApplicationProviderMetadata(Metadata):
    c_param = {
        "desired_attributes": REQUIRED_DESIRED_ATTRIBUTES
    }


class SamlRegistration(Metadata):
    """Used both in the registration request and in the registration response."""
    c_param = {
        "saml_metadata_uri": SINGLE_REQUIRED_STRING
    }
    c_url = ["saml_metadata_uri"]


class EnterpriseSAML(Profile):
    urn = ENTERPRISE_SAML
    extension_class = {
        ExtensionPoint.APPLICATION_PROVIDER_METADATA: SamlApplicationProviderMetadata,
        ExtensionPoint.REGISTRATION_REQUEST: SamlRegistration,
        ExtensionPoint.REGISTRATION_RESPONSE: SamlRegistration
    }
