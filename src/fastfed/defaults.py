ENTERPRISE_SAML = "urn:ietf:params:fastfed:1.0:authentication:saml:2.0:enterprise"
ENTERPRISE_SCIM = "urn:ietf:params:fastfed:1.0:provisioning:scim:2.0:enterprise"

OAUTH2_JWT = "urn:ietf:params:fastfed:1.0:provider_authentication:oauth:2.0:jwt_profile"
PROVIDER_AUTHENTICATION_PROTOCOLS = [OAUTH2_JWT]

SCIM_SCHEMA_GRAMMAR = "urn:ietf:params:fastfed:1.0:schemas:scim:2.0"
SCHEMA_GRAMMARS = [SCIM_SCHEMA_GRAMMAR]

FASTFED_LICENSE = "https://openid.net/intellectual-property/licenses/fastfed/1.0/"

SCIM_MAX_GROUP_MEMBERSHIP_CHANGES_LOWER_LIMIT = 100
SCIM_MAX_GROUP_MEMBERSHIP_CHANGES_UPPER_LIMIT = 1000

# Lifetime of a contract proposal in seconds
DEFAULT_PROPOSAL_LIFETIME = 3600

KNOWN_PROFILES = {
    ENTERPRISE_SAML: {
        "class": "fastfed.profile.saml.EnterpriseSAML",
        "kwargs": {}
    },
    ENTERPRISE_SCIM: {
        "class": "fastfed.profile.scim.EnterpriseSCIM",
        "kwargs": {}
    }
}

DEFAULT_CONFIGURATION = {
    "profiles": KNOWN_PROFILES,
    "preferred_schema_grammar": SCIM_SCHEMA_GRAMMAR,
    "scim_nested_groups": False,
    "scim_max_group_membership_changes": SCIM_MAX_GROUP_MEMBERSHIP_CHANGES_LOWER_LIMIT,
    "signing_algorithm_policy": "fastfed.policy.prefer_identity_provider"
}
