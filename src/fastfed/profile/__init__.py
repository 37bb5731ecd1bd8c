"""Protocol profiles and the registry that maps profile URNs to them.

A profile is an optional, URN identified extension of the base handshake protocol. It can
attach data to up to four places, the extension points. Metadata objects that carry
extensions consult the registry of the active configuration to find out which extension
object to build for a URN they come across.
"""
import enum
import logging
from typing import Iterable
from typing import List
from typing import Optional

from fastfed.exception import ConfigurationError

logger = logging.getLogger(__name__)


class ExtensionPoint(enum.Enum):
    APPLICATION_PROVIDER_METADATA = "application_provider_metadata"
    IDENTITY_PROVIDER_METADATA = "identity_provider_metadata"
    REGISTRATION_REQUEST = "registration_request"
    REGISTRATION_RESPONSE = "registration_response"


class Profile(object):
    """Base class for protocol profiles.

    Subclasses set `urn` and map the extension points they support to the Metadata class
    that holds the profile specific members at that point.
    """
    urn = ""
    extension_class = {}

    def supports(self, point: ExtensionPoint) -> bool:
        return point in self.extension_class

    def make_extension(self, point: ExtensionPoint, configuration=None):
        """
        Creates an empty extension object for an extension point.

        :param point: The extension point
        :param configuration: The configuration the new object is bound to
        :return: A Metadata instance or None if the profile doesn't extend this point
        """
        if not self.supports(point):
            return None
        return self.extension_class[point](configuration=configuration)

    def __repr__(self):
        return f"{self.__class__.__name__}({self.urn!r})"


class ProfileRegistry(object):
    """URN keyed table of installed profiles."""

    def __init__(self, profiles: Optional[Iterable[Profile]] = None):
        self._profiles = {}
        self._read_only = False
        for profile in profiles or []:
            self.register(profile)

    def register(self, profile: Profile):
        if self._read_only:
            raise ConfigurationError(
                f"Can not register {profile.urn}, the registry belongs to a configuration. "
                f"Use Configuration.add_profiles")
        if profile.urn in self._profiles:
            logger.debug(f"Replacing profile {profile.urn}")
        self._profiles[profile.urn] = profile

    def resolve(self, urn: str) -> Optional[Profile]:
        return self._profiles.get(urn)

    def urns(self) -> List[str]:
        return list(self._profiles.keys())

    def profiles(self) -> List[Profile]:
        return list(self._profiles.values())

    def freeze(self) -> "ProfileRegistry":
        """Makes the registry read only. A copy of it is writable again."""
        self._read_only = True
        return self

    def copy(self) -> "ProfileRegistry":
        return ProfileRegistry(self._profiles.values())

    def __contains__(self, urn):
        return urn in self._profiles

    def __len__(self):
        return len(self._profiles)

    def __iter__(self):
        return iter(self._profiles.values())
