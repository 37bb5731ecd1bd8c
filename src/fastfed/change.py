""" Describing how one contract differs from another."""
import logging
from typing import List
from typing import Optional

from fastfed.contract import Contract
from fastfed.exception import FastFedSecurityError
from fastfed.metadata import ApplicationProviderMetadata
from fastfed.metadata import IdentityProviderMetadata
from fastfed.negotiate import shared_capabilities
from fastfed.profile import ExtensionPoint
from fastfed.utils import merge_unique

logger = logging.getLogger(__name__)

NONE = "none"
CREATE = "create"
METADATA_CHANGE = "metadata_change"
PROFILE_CHANGE = "profile_change"
TERMINATE = "terminate"


def _added(old: List[str], new: List[str]) -> List[str]:
    return [item for item in new if item not in old]


def _enabled(contract: Optional[Contract], category: str) -> List[str]:
    if contract is None or "enabled_profiles" not in contract:
        return []
    return contract["enabled_profiles"].get(category, [])


def _extensions(contract: Optional[Contract], party: str, point: ExtensionPoint):
    if contract is None or party not in contract:
        return {}
    return contract[party].extensions_at(point)


class ContractChange(object):
    """
    The differences between an old contract, None if there was none, and a new one.
    """

    def __init__(self, old_contract: Optional[Contract], new_contract: Contract):
        self.old_contract = old_contract
        self.new_contract = new_contract
        self.configuration = new_contract.configuration

        self.authentication_profiles_added = _added(
            _enabled(old_contract, "authentication_profiles"),
            _enabled(new_contract, "authentication_profiles"))
        self.authentication_profiles_removed = _added(
            _enabled(new_contract, "authentication_profiles"),
            _enabled(old_contract, "authentication_profiles"))
        self.provisioning_profiles_added = _added(
            _enabled(old_contract, "provisioning_profiles"),
            _enabled(new_contract, "provisioning_profiles"))
        self.provisioning_profiles_removed = _added(
            _enabled(new_contract, "provisioning_profiles"),
            _enabled(old_contract, "provisioning_profiles"))

        _grammar = self.configuration.preferred_schema_grammar
        _old = self._attribute_set(old_contract, _grammar)
        _new = self._attribute_set(new_contract, _grammar)
        self.user_attributes_added = _added(_old["user"], _new["user"])
        self.user_attributes_removed = _added(_new["user"], _old["user"])
        self.group_attributes_added = _added(_old["group"], _new["group"])
        self.group_attributes_removed = _added(_new["group"], _old["group"])

        self.change_type = self._change_type()
        logger.debug(f"Contract change: {self.change_type}")

    @staticmethod
    def _attribute_set(contract: Optional[Contract], grammar: str) -> dict:
        res = {"user": [], "group": []}
        if contract is None:
            return res
        _set = contract.consolidated_desired_attributes().for_schema_grammar(grammar)
        if _set is not None:
            res["user"] = _set.user_attributes()
            res["group"] = _set.group_attributes()
        return res

    def _extensions_changed(self) -> bool:
        for party, point in [("application_provider", ExtensionPoint.APPLICATION_PROVIDER_METADATA),
                             ("identity_provider", ExtensionPoint.IDENTITY_PROVIDER_METADATA)]:
            if _extensions(self.old_contract, party, point) != \
                    _extensions(self.new_contract, party, point):
                return True
        return False

    def _change_type(self) -> str:
        if self.old_contract is None:
            return CREATE

        if self.old_contract.enabled_profiles() and not self.new_contract.enabled_profiles():
            return TERMINATE

        if self.has_profile_changes() or self._extensions_changed():
            return PROFILE_CHANGE

        if self.old_contract != self.new_contract:
            return METADATA_CHANGE

        return NONE

    def has_profile_changes(self) -> bool:
        return bool(self.authentication_profiles_added or self.authentication_profiles_removed
                    or self.provisioning_profiles_added or self.provisioning_profiles_removed)

    def has_attribute_changes(self) -> bool:
        return bool(self.user_attributes_added or self.user_attributes_removed
                    or self.group_attributes_added or self.group_attributes_removed)

    def is_group_provisioning_activated(self) -> bool:
        return not self._attribute_set(self.old_contract,
                                       self.configuration.preferred_schema_grammar)["group"] \
            and bool(self.group_attributes_added)

    def is_group_provisioning_deactivated(self) -> bool:
        return bool(self.group_attributes_removed) and not self._attribute_set(
            self.new_contract, self.configuration.preferred_schema_grammar)["group"]


def background_refresh(contract: Contract,
                       idp_metadata: IdentityProviderMetadata,
                       app_metadata: ApplicationProviderMetadata) -> ContractChange:
    """
    Applies what may change without a new handshake, contact information, logos, icons and
    newly shared signing algorithms, to a copy of the contract.

    :param contract: The current contract
    :param idp_metadata: Freshly fetched identity provider metadata
    :param app_metadata: Freshly fetched application provider metadata
    :return: A ContractChange whose new_contract is the refreshed contract
    """
    _new = contract.copy()
    for party, metadata in [("identity_provider", idp_metadata),
                            ("application_provider", app_metadata)]:
        _provider = _new[party]
        _contact = metadata.get("provider_contact_information")
        if _contact is not None:
            _provider["provider_contact_information"] = _contact.copy()

        _display = metadata.get("display_settings")
        _settings = _provider.get("display_settings")
        if _display is not None and _settings is not None:
            for key in ["logo_uri", "icon_uri"]:
                _settings[key] = _display.get(key)

    _shared = shared_capabilities(idp_metadata["capabilities"], app_metadata["capabilities"])
    _new["signing_algorithms"] = merge_unique(contract["signing_algorithms"],
                                              _shared.get("signing_algorithms"))

    change = ContractChange(contract, _new)
    if change.change_type not in [NONE, METADATA_CHANGE]:
        _msg = f"Illegal contract change during background refresh " \
               f"(changeType='{change.change_type}')"
        logger.warning(_msg)
        raise FastFedSecurityError(_msg)
    return change
