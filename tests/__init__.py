import copy

from fastfed.defaults import ENTERPRISE_SAML
from fastfed.defaults import ENTERPRISE_SCIM
from fastfed.defaults import FASTFED_LICENSE
from fastfed.defaults import OAUTH2_JWT
from fastfed.defaults import SCIM_SCHEMA_GRAMMAR

IDP_ENTITY_ID = "https://tenant-12345.idp.example.com/"
APP_ENTITY_ID = "https://tenant-67890.app.example.com/"

IDP_CONTACT_INFORMATION = {
    "organization": "Example Inc.",
    "phone": "+1-800-555-5555",
    "email": "support@idp.example.com"
}

APP_CONTACT_INFORMATION = {
    "organization": "Example Application Inc.",
    "phone": "+1-800-555-6666",
    "email": "support@app.example.com"
}

SAML_DESIRED_ATTRIBUTES = {
    SCIM_SCHEMA_GRAMMAR: {
        "required_user_attributes": ["externalId", "userName"],
        "optional_user_attributes": ["displayName", "emails[primary eq true].value"]
    }
}

SCIM_DESIRED_ATTRIBUTES = {
    SCIM_SCHEMA_GRAMMAR: {
        "required_user_attributes": ["externalId", "userName", "active"],
        "optional_user_attributes": ["displayName", "name.givenName", "name.familyName"],
        "required_group_attributes": ["displayName"],
        "optional_group_attributes": ["members"]
    }
}

IDP_METADATA = {
    "identity_provider": {
        "entity_id": IDP_ENTITY_ID,
        "provider_domain": "idp.example.com",
        "provider_contact_information": IDP_CONTACT_INFORMATION,
        "display_settings": {
            "display_name": "Example Identity Provider",
            "logo_uri": "https://tenant-12345.idp.example.com/images/logo.png",
            "icon_uri": "https://tenant-12345.idp.example.com/images/icon.png",
            "license": FASTFED_LICENSE
        },
        "capabilities": {
            "authentication_profiles": [ENTERPRISE_SAML],
            "provisioning_profiles": [ENTERPRISE_SCIM],
            "schema_grammars": [SCIM_SCHEMA_GRAMMAR],
            "signing_algorithms": ["RS256", "ES256"]
        },
        "jwks_uri": "https://tenant-12345.idp.example.com/keys",
        "fastfed_handshake_start_uri": "https://tenant-12345.idp.example.com/fastfed/start"
    }
}

IDP_METADATA_MINIMAL = {
    "identity_provider": {
        "entity_id": IDP_ENTITY_ID,
        "provider_domain": "idp.example.com",
        "provider_contact_information": IDP_CONTACT_INFORMATION,
        "display_settings": {
            "display_name": "Example Identity Provider",
            "license": FASTFED_LICENSE
        },
        "capabilities": {
            "provisioning_profiles": [ENTERPRISE_SCIM],
            "schema_grammars": [SCIM_SCHEMA_GRAMMAR],
            "signing_algorithms": ["RS256"]
        },
        "jwks_uri": "https://tenant-12345.idp.example.com/keys",
        "fastfed_handshake_start_uri": "https://tenant-12345.idp.example.com/fastfed/start"
    }
}

APP_METADATA = {
    "application_provider": {
        "entity_id": APP_ENTITY_ID,
        "provider_domain": "app.example.com",
        "provider_contact_information": APP_CONTACT_INFORMATION,
        "display_settings": {
            "display_name": "Example Application",
            "logo_uri": "https://tenant-67890.app.example.com/images/logo.png",
            "icon_uri": "https://tenant-67890.app.example.com/images/icon.png",
            "license": FASTFED_LICENSE
        },
        "capabilities": {
            "authentication_profiles": [ENTERPRISE_SAML],
            "provisioning_profiles": [ENTERPRISE_SCIM],
            "schema_grammars": [SCIM_SCHEMA_GRAMMAR],
            "signing_algorithms": ["ES256", "RS256"]
        },
        "fastfed_handshake_register_uri": "https://tenant-67890.app.example.com/fastfed/register",
        ENTERPRISE_SAML: {
            "desired_attributes": SAML_DESIRED_ATTRIBUTES
        },
        ENTERPRISE_SCIM: {
            "can_support_nested_groups": True,
            "max_group_membership_changes": 200,
            "desired_attributes": SCIM_DESIRED_ATTRIBUTES
        }
    }
}

APP_METADATA_MINIMAL = {
    "application_provider": {
        "entity_id": APP_ENTITY_ID,
        "provider_domain": "app.example.com",
        "provider_contact_information": APP_CONTACT_INFORMATION,
        "display_settings": {
            "display_name": "Example Application",
            "license": FASTFED_LICENSE
        },
        "capabilities": {
            "provisioning_profiles": [ENTERPRISE_SCIM],
            "schema_grammars": [SCIM_SCHEMA_GRAMMAR],
            "signing_algorithms": ["RS256"]
        },
        "fastfed_handshake_register_uri": "https://tenant-67890.app.example.com/fastfed/register",
        ENTERPRISE_SCIM: {
            "desired_attributes": {
                SCIM_SCHEMA_GRAMMAR: {
                    "required_user_attributes": ["externalId", "userName"]
                }
            }
        }
    }
}

# What negotiating IDP_METADATA with APP_METADATA results in
CONTRACT = {
    "contract": {
        "identity_provider": {
            "entity_id": IDP_ENTITY_ID,
            "provider_domain": "idp.example.com",
            "provider_contact_information": IDP_CONTACT_INFORMATION,
            "display_settings": IDP_METADATA["identity_provider"]["display_settings"],
            "jwks_uri": "https://tenant-12345.idp.example.com/keys",
            "fastfed_handshake_start_uri": "https://tenant-12345.idp.example.com/fastfed/start"
        },
        "application_provider": {
            "entity_id": APP_ENTITY_ID,
            "provider_domain": "app.example.com",
            "provider_contact_information": APP_CONTACT_INFORMATION,
            "display_settings": APP_METADATA["application_provider"]["display_settings"],
            "fastfed_handshake_register_uri":
                "https://tenant-67890.app.example.com/fastfed/register",
            "application_provider_metadata_extensions": {
                ENTERPRISE_SAML: APP_METADATA["application_provider"][ENTERPRISE_SAML],
                ENTERPRISE_SCIM: APP_METADATA["application_provider"][ENTERPRISE_SCIM]
            }
        },
        "enabled_profiles": {
            "authentication_profiles": [ENTERPRISE_SAML],
            "provisioning_profiles": [ENTERPRISE_SCIM]
        },
        "signing_algorithms": ["RS256", "ES256"]
    }
}

REGISTRATION_REQUEST = {
    "iss": IDP_ENTITY_ID,
    "aud": APP_ENTITY_ID,
    "exp": 1893456000,
    "authentication_profiles": [ENTERPRISE_SAML],
    "provisioning_profiles": [ENTERPRISE_SCIM],
    ENTERPRISE_SAML: {
        "saml_metadata_uri": "https://tenant-12345.idp.example.com/saml/metadata.xml"
    },
    ENTERPRISE_SCIM: {
        "provider_contact_information": IDP_CONTACT_INFORMATION,
        "provider_authentication_methods": {
            OAUTH2_JWT: {
                "jwks_uri": "https://tenant-12345.idp.example.com/keys"
            }
        }
    }
}

REGISTRATION_RESPONSE = {
    "fastfed_handshake_finalize_uri": "https://tenant-67890.app.example.com/fastfed/finalize",
    ENTERPRISE_SAML: {
        "saml_metadata_uri": "https://tenant-67890.app.example.com/saml/metadata.xml"
    },
    ENTERPRISE_SCIM: {
        "scim_service_uri": "https://tenant-67890.app.example.com/scim/v2",
        "provider_authentication_method": OAUTH2_JWT,
        OAUTH2_JWT: {
            "token_endpoint": "https://tenant-67890.app.example.com/oauth/token",
            "scope": "scim"
        }
    }
}


def tree(document: dict) -> dict:
    """A copy of a document the test can modify."""
    return copy.deepcopy(document)
