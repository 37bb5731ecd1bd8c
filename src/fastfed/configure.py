import logging
from typing import Optional
from typing import Union

from cryptojwt.utils import importer
from idpyoidc.util import instantiate

from fastfed.defaults import DEFAULT_CONFIGURATION
from fastfed.defaults import SCHEMA_GRAMMARS
from fastfed.defaults import SCIM_MAX_GROUP_MEMBERSHIP_CHANGES_LOWER_LIMIT
from fastfed.defaults import SCIM_MAX_GROUP_MEMBERSHIP_CHANGES_UPPER_LIMIT
from fastfed.exception import ConfigurationError
from fastfed.profile import Profile
from fastfed.profile import ProfileRegistry

logger = logging.getLogger(__name__)


def build_profile(spec: Union[Profile, dict]) -> Profile:
    if isinstance(spec, Profile):
        return spec
    if isinstance(spec, dict) and "class" in spec:
        return instantiate(spec["class"], **spec.get("kwargs", {}))
    raise ConfigurationError(f"Can not build a profile from {spec!r}")


def build_registry(spec) -> ProfileRegistry:
    """
    Builds a profile registry.

    :param spec: A ProfileRegistry, a dictionary with profile URNs as keys or a list. The
        dictionary values and the list items are Profile instances or class/kwargs
        specifications.
    :return: A ProfileRegistry not shared with the caller
    """
    if isinstance(spec, ProfileRegistry):
        return spec.copy()

    if isinstance(spec, dict):
        _items = spec.values()
    elif isinstance(spec, (list, tuple)):
        _items = spec
    else:
        raise ConfigurationError(f"Can not build a profile registry from {spec!r}")

    registry = ProfileRegistry()
    for item in _items:
        registry.register(build_profile(item))
    return registry


class Configuration(object):
    """
    Settings shared by every metadata object and negotiation in a process.

    A configuration can not be changed once built. Use customize() or add_profiles() to get
    a modified copy.
    """

    def __init__(self, conf: Optional[dict] = None, **kwargs):
        _conf = DEFAULT_CONFIGURATION.copy()
        _conf.update(conf or {})
        _conf.update(kwargs)

        _registry = _conf.get("profile_registry")
        if _registry is None:
            _registry = _conf.get("profiles")
        self.profile_registry = build_registry(_registry).freeze()

        self.preferred_schema_grammar = _conf.get("preferred_schema_grammar")
        if self.preferred_schema_grammar not in SCHEMA_GRAMMARS:
            raise ConfigurationError(
                f"Unrecognized schema grammar (received: {self.preferred_schema_grammar})")

        self.scim_nested_groups = bool(_conf.get("scim_nested_groups"))

        _max = _conf.get("scim_max_group_membership_changes")
        if isinstance(_max, bool) or not isinstance(_max, int) or not (
                SCIM_MAX_GROUP_MEMBERSHIP_CHANGES_LOWER_LIMIT <= _max
                <= SCIM_MAX_GROUP_MEMBERSHIP_CHANGES_UPPER_LIMIT):
            raise ConfigurationError(
                "scim_max_group_membership_changes must be between "
                f"{SCIM_MAX_GROUP_MEMBERSHIP_CHANGES_LOWER_LIMIT} and "
                f"{SCIM_MAX_GROUP_MEMBERSHIP_CHANGES_UPPER_LIMIT} (received: {_max})")
        self.scim_max_group_membership_changes = _max

        _policy = _conf.get("signing_algorithm_policy")
        if isinstance(_policy, str):
            _policy = importer(_policy)
        if not callable(_policy):
            raise ConfigurationError(f"Signing algorithm policy is not callable: {_policy!r}")
        self.signing_algorithm_policy = _policy

        logger.debug(f"Configuration with profiles: {self.profile_registry.urns()}")
        self._frozen = True

    def __setattr__(self, key, value):
        if self.__dict__.get("_frozen"):
            raise AttributeError(f"Configuration can not be changed, tried to set {key}")
        object.__setattr__(self, key, value)

    def to_dict(self) -> dict:
        return {
            "profile_registry": self.profile_registry,
            "preferred_schema_grammar": self.preferred_schema_grammar,
            "scim_nested_groups": self.scim_nested_groups,
            "scim_max_group_membership_changes": self.scim_max_group_membership_changes,
            "signing_algorithm_policy": self.signing_algorithm_policy
        }

    def customize(self, **kwargs) -> "Configuration":
        _conf = self.to_dict()
        if "profiles" in kwargs:
            del _conf["profile_registry"]
        _conf.update(kwargs)
        return Configuration(_conf)

    def add_profiles(self, *profiles: Union[Profile, dict]) -> "Configuration":
        registry = self.profile_registry.copy()
        for profile in profiles:
            registry.register(build_profile(profile))
        return self.customize(profile_registry=registry)
