import pytest

from fastfed.configure import Configuration
from fastfed.defaults import ENTERPRISE_SAML
from fastfed.defaults import ENTERPRISE_SCIM
from fastfed.exception import ProfileDefect
from fastfed.message import Metadata
from fastfed.metadata import ApplicationProviderMetadata
from fastfed.profile import ExtensionPoint
from fastfed.profile import Profile
from fastfed.profile import ProfileRegistry
from fastfed.profile.saml import EnterpriseSAML
from fastfed.profile.saml import SamlApplicationProviderMetadata
from fastfed.profile.saml import SamlRegistration
from fastfed.profile.scim import EnterpriseSCIM
from fastfed.profile.scim import ScimApplicationProviderMetadata
from fastfed.profile.scim import ScimRegistrationRequest
from fastfed.profile.scim import ScimRegistrationResponse
from tests import APP_METADATA
from tests import tree

BROKEN_URN = "urn:example:fastfed:1.0:authentication:broken"


class BrokenProfile(Profile):
    urn = BROKEN_URN
    extension_class = {ExtensionPoint.APPLICATION_PROVIDER_METADATA: Metadata}

    def make_extension(self, point, configuration=None):
        return None


def test_register_and_resolve():
    registry = ProfileRegistry()
    assert len(registry) == 0
    saml = EnterpriseSAML()
    registry.register(saml)
    assert registry.resolve(ENTERPRISE_SAML) is saml
    assert ENTERPRISE_SAML in registry
    assert registry.resolve(ENTERPRISE_SCIM) is None
    assert registry.resolve(ENTERPRISE_SAML.upper()) is None


def test_register_is_upsert():
    registry = ProfileRegistry([EnterpriseSAML()])
    _new = EnterpriseSAML()
    registry.register(_new)
    assert len(registry) == 1
    assert registry.resolve(ENTERPRISE_SAML) is _new


def test_copy():
    registry = ProfileRegistry([EnterpriseSAML()])
    _copy = registry.copy()
    _copy.register(EnterpriseSCIM())
    assert registry.urns() == [ENTERPRISE_SAML]
    assert set(_copy.urns()) == {ENTERPRISE_SAML, ENTERPRISE_SCIM}
    assert [p.urn for p in _copy] == _copy.urns()
    assert _copy.profiles()[0] is registry.resolve(ENTERPRISE_SAML)


@pytest.mark.parametrize("profile, point, cls", [
    (EnterpriseSAML(), ExtensionPoint.APPLICATION_PROVIDER_METADATA,
     SamlApplicationProviderMetadata),
    (EnterpriseSAML(), ExtensionPoint.REGISTRATION_REQUEST, SamlRegistration),
    (EnterpriseSAML(), ExtensionPoint.REGISTRATION_RESPONSE, SamlRegistration),
    (EnterpriseSAML(), ExtensionPoint.IDENTITY_PROVIDER_METADATA, None),
    (EnterpriseSCIM(), ExtensionPoint.APPLICATION_PROVIDER_METADATA,
     ScimApplicationProviderMetadata),
    (EnterpriseSCIM(), ExtensionPoint.REGISTRATION_REQUEST, ScimRegistrationRequest),
    (EnterpriseSCIM(), ExtensionPoint.REGISTRATION_RESPONSE, ScimRegistrationResponse),
    (EnterpriseSCIM(), ExtensionPoint.IDENTITY_PROVIDER_METADATA, None),
])
def test_make_extension(profile, point, cls):
    conf = Configuration()
    _ext = profile.make_extension(point, conf)
    if cls is None:
        assert profile.supports(point) is False
        assert _ext is None
    else:
        assert profile.supports(point)
        assert isinstance(_ext, cls)
        assert _ext.configuration is conf


def test_extension_bound_to_configuration():
    conf = Configuration(scim_nested_groups=True, scim_max_group_membership_changes=300)
    _ext = EnterpriseSCIM().make_extension(ExtensionPoint.APPLICATION_PROVIDER_METADATA, conf)
    assert _ext["can_support_nested_groups"] is True
    assert _ext["max_group_membership_changes"] == 300


def test_profile_defect():
    conf = Configuration().add_profiles(BrokenProfile())
    _tree = tree(APP_METADATA)
    _tree["application_provider"][BROKEN_URN] = {"foo": "bar"}
    with pytest.raises(ProfileDefect):
        ApplicationProviderMetadata(configuration=conf).hydrate(_tree)


def test_removed_profile_is_unrecognized():
    conf = Configuration(profiles=[EnterpriseSCIM()])
    _md = ApplicationProviderMetadata(configuration=conf).hydrate(tree(APP_METADATA))
    assert _md.extension(ENTERPRISE_SAML) is None
    assert isinstance(_md.extension(ENTERPRISE_SCIM), ScimApplicationProviderMetadata)
    assert ENTERPRISE_SAML in _md.extensions()
