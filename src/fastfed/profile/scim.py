"""The Enterprise SCIM provisioning profile."""
from typing import Optional

from idpyoidc.message import SINGLE_OPTIONAL_INT
from idpyoidc.message import SINGLE_REQUIRED_STRING
from idpyoidc.message.oidc import SINGLE_OPTIONAL_BOOLEAN

from fastfed.defaults import ENTERPRISE_SCIM
from fastfed.defaults import PROVIDER_AUTHENTICATION_PROTOCOLS
from fastfed.defaults import SCIM_MAX_GROUP_MEMBERSHIP_CHANGES_LOWER_LIMIT
from fastfed.defaults import SCIM_MAX_GROUP_MEMBERSHIP_CHANGES_UPPER_LIMIT
from fastfed.exception import ErrorAccumulator
from fastfed.message import Metadata
from fastfed.metadata import PROVIDER_AUTHENTICATION_SERVICE
from fastfed.metadata import REQUIRED_DESIRED_ATTRIBUTES
from fastfed.metadata import REQUIRED_PROVIDER_AUTHENTICATION_METHODS
from fastfed.metadata import REQUIRED_PROVIDER_CONTACT_INFORMATION
from fastfed.profile import ExtensionPoint
from fastfed.profile import Profile


class ScimApplicationProviderMetadata(Metadata):
    c_param = {
        "can_support_nested_groups": SINGLE_OPTIONAL_BOOLEAN,
        "max_group_membership_changes": SINGLE_OPTIONAL_INT,
        "desired_attributes": REQUIRED_DESIRED_ATTRIBUTES
    }

    def __init__(self, configuration=None, **kwargs):
        Metadata.__init__(self, configuration, **kwargs)
        if "can_support_nested_groups" not in self:
            self["can_support_nested_groups"] = self.configuration.scim_nested_groups
        if "max_group_membership_changes" not in self:
            self["max_group_membership_changes"] = \
                self.configuration.scim_max_group_membership_changes

    def validate(self, errors: ErrorAccumulator):
        Metadata.validate(self, errors)
        _max = self.get("max_group_membership_changes")
        if _max is None:
            return
        if _max > SCIM_MAX_GROUP_MEMBERSHIP_CHANGES_UPPER_LIMIT:
            errors.add("Invalid value of 'max_group_membership_changes', the received value "
                       f"{_max} exceeds the upper limit of "
                       f"{SCIM_MAX_GROUP_MEMBERSHIP_CHANGES_UPPER_LIMIT}")
        elif _max < SCIM_MAX_GROUP_MEMBERSHIP_CHANGES_LOWER_LIMIT:
            errors.add("Invalid value of 'max_group_membership_changes', the received value "
                       f"{_max} is below the lower limit of "
                       f"{SCIM_MAX_GROUP_MEMBERSHIP_CHANGES_LOWER_LIMIT}")


class ScimRegistrationRequest(Metadata):
    c_param = {
        "provider_contact_information": REQUIRED_PROVIDER_CONTACT_INFORMATION,
        "provider_authentication_methods": REQUIRED_PROVIDER_AUTHENTICATION_METHODS
    }


class ScimRegistrationResponse(Metadata):
    """
    Where the SCIM service lives and how the identity provider authenticates to it.
    The service metadata is a member named by the chosen authentication protocol URN.
    """
    c_param = {
        "scim_service_uri": SINGLE_REQUIRED_STRING,
        "provider_authentication_method": SINGLE_REQUIRED_STRING
    }
    c_allowed_values = {
        "provider_authentication_method": PROVIDER_AUTHENTICATION_PROTOCOLS
    }
    c_url = ["scim_service_uri"]
    extensible = True

    def new_extension(self, urn: str) -> Optional[Metadata]:
        _cls = PROVIDER_AUTHENTICATION_SERVICE.get(urn)
        if _cls:
            return _cls(configuration=self.configuration)
        return None

    def extension_error(self, urn: str) -> str:
        return f'Unrecognized provider authentication protocol "{urn}" ' \
               f'(member of "{self.json_path}")'

    def service_metadata(self) -> Optional[Metadata]:
        _method = self.get("provider_authentication_method")
        if _method:
            return self.extension(_method)
        return None

    def validate(self, errors: ErrorAccumulator):
        Metadata.validate(self, errors)
        _method = self.get("provider_authentication_method")
        if _method in PROVIDER_AUTHENTICATION_PROTOCOLS and _method not in self:
            errors.add(f'Missing value for "{self.qualified_name(_method)}"')


class EnterpriseSCIM(Profile):
    urn = ENTERPRISE_SCIM
    extension_class = {
        ExtensionPoint.APPLICATION_PROVIDER_METADATA: ScimApplicationProviderMetadata,
        ExtensionPoint.REGISTRATION_REQUEST: ScimRegistrationRequest,
        ExtensionPoint.REGISTRATION_RESPONSE: ScimRegistrationResponse
    }
