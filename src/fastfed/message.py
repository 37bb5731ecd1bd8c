""" The base class of every structured object in the FastFed metadata model."""
import copy
import json
import logging
from typing import Optional

from idpyoidc.message import Message

from fastfed.configure import Configuration
from fastfed.exception import ErrorAccumulator
from fastfed.exception import InvalidMetadata
from fastfed.exception import ProfileDefect
from fastfed.utils import is_urn
from fastfed.utils import validate_url

logger = logging.getLogger(__name__)

TYPE_NAME = {
    str: "string",
    int: "number",
    bool: "boolean",
    dict: "object"
}


class Metadata(Message):
    """
    A Message that can be hydrated from, validated and serialized to a generic tree.

    Hydration never raises on bad input. Type mismatches are remembered and reported,
    together with missing members and malformed values, when the object is validated.
    """
    c_param = {}
    c_allowed_values = {}
    # Members that must hold https URLs
    c_url = []
    # Member a document is wrapped in on the wire
    wrapper = ""
    # URN named members are extensions
    extensible = False
    extension_point = None

    def __init__(self, configuration: Optional[Configuration] = None, **kwargs):
        self.configuration = configuration or Configuration()
        self.json_path = self.wrapper
        self._hydration_errors = {}
        Message.__init__(self)
        self.hydrate(kwargs)

    def qualified_name(self, member: str) -> str:
        if self.json_path:
            return f"{self.json_path}.{member}"
        return member

    def relocate(self, path: str):
        """Moves the object, and everything it holds, to path in the tree."""
        self.json_path = path
        for key, val in self._dict.items():
            if isinstance(val, Metadata):
                val.relocate(self.qualified_name(key))

    def from_dict(self, dictionary, **kwargs):
        return self.hydrate(dictionary)

    def hydrate(self, tree):
        if tree is None:
            return self

        if isinstance(tree, Message):
            tree = tree.to_dict()

        if self.wrapper and isinstance(tree, dict) and list(tree.keys()) == [self.wrapper]:
            tree = tree[self.wrapper]
            if tree is None:
                return self

        if not isinstance(tree, dict):
            _msg = f'Invalid type for "{self.json_path or self.__class__.__name__}". ' \
                   f'Expected object (received: {tree!r})'
            logger.debug(_msg)
            self._hydration_errors[""] = _msg
            return self

        self._hydration_errors.pop("", None)
        for key, value in tree.items():
            self.hydrate_member(key, value)
        return self

    def hydrate_member(self, key: str, value):
        self._hydration_errors.pop(key, None)
        if value is None:
            self._dict.pop(key, None)
            return

        try:
            vtyp = self.c_param[key][0]
        except KeyError:
            if self.extensible and is_urn(key):
                self._hydrate_extension(key, value)
            else:
                self._dict[key] = value
            return

        _name = self.qualified_name(key)
        if isinstance(vtyp, type) and issubclass(vtyp, Metadata):
            if isinstance(value, vtyp):
                value.relocate(_name)
            elif isinstance(value, dict):
                _item = vtyp(configuration=self.configuration)
                _item.json_path = _name
                value = _item.hydrate(value)
            else:
                self._type_error(key, "object", value)
                return
        elif isinstance(vtyp, list):
            if not isinstance(value, list) or [v for v in value if
                                               v is not None and not isinstance(v, str)]:
                self._type_error(key, "list of strings", value)
                return
            if not value:
                self._dict.pop(key, None)
                return
            value = list(value)
        elif vtyp is str:
            if not isinstance(value, str):
                self._type_error(key, "string", value)
                return
            if not value.strip():
                self._dict.pop(key, None)
                return
        elif vtyp is int:
            if isinstance(value, bool) or not isinstance(value, int):
                self._type_error(key, "number", value)
                return
        elif vtyp in TYPE_NAME:
            if not isinstance(value, vtyp):
                self._type_error(key, TYPE_NAME[vtyp], value)
                return

        self._dict[key] = value

    def _type_error(self, key: str, expected: str, value):
        _msg = f'Invalid type for "{self.qualified_name(key)}". Expected {expected} ' \
               f'(received: {value!r})'
        logger.debug(_msg)
        self._hydration_errors[key] = _msg
        self._dict.pop(key, None)

    def _hydrate_extension(self, urn: str, value):
        if isinstance(value, Metadata):
            _ext = value
        elif isinstance(value, dict):
            _ext = self.new_extension(urn)
            if _ext is None:
                logger.debug(f"No extension defined for {urn} in {self.json_path}")
                self._dict[urn] = value
                return
        else:
            self._type_error(urn, "object", value)
            return

        _ext.relocate(self.qualified_name(urn))
        if _ext is not value:
            _ext.hydrate(value)
        self._dict[urn] = _ext

    def new_extension(self, urn: str) -> Optional["Metadata"]:
        """
        Creates the extension object for a URN named member.

        :param urn: A profile URN
        :return: An empty Metadata instance or None if the URN is unknown here
        """
        if self.extension_point is None:
            return None

        _profile = self.configuration.profile_registry.resolve(urn)
        if _profile is None or not _profile.supports(self.extension_point):
            return None

        _ext = _profile.make_extension(self.extension_point, self.configuration)
        if _ext is None:
            raise ProfileDefect(
                f"Profile '{urn}' supports {self.extension_point.value} extensions but "
                f"didn't create one")
        return _ext

    def extension_error(self, urn: str) -> str:
        _where = self.json_path or self.__class__.__name__
        if urn not in self.configuration.profile_registry:
            return f'Unrecognized profile URN "{urn}" (member of "{_where}")'
        return f'Profile "{urn}" defines no {self.extension_point.value} extension ' \
               f'(member of "{_where}")'

    def extensions(self) -> dict:
        return {k: v for k, v in self._dict.items() if is_urn(k) and k not in self.c_param}

    def extension(self, urn: str) -> Optional["Metadata"]:
        _ext = self._dict.get(urn)
        if isinstance(_ext, Metadata):
            return _ext
        return None

    def __setitem__(self, key, value):
        self.hydrate_member(key, value)

    def validate(self, errors: ErrorAccumulator):
        for _msg in self._hydration_errors.values():
            errors.add(_msg)

        for key, spec in self.c_param.items():
            _value = self._dict.get(key)
            _name = self.qualified_name(key)
            if _value is None:
                if spec[1]:
                    errors.add(f'Missing value for "{_name}"')
                continue

            if isinstance(_value, Metadata):
                _value.validate(errors)
                continue

            if isinstance(_value, list):
                if [v for v in _value if v is None or not v.strip()]:
                    errors.add(f'Invalid contents for "{_name}". List contains empty or '
                               f'null members.')
                    continue

            if key in self.c_url:
                validate_url(errors, _name, _value)

            _allowed = self.c_allowed_values.get(key)
            if _allowed:
                for _val in (_value if isinstance(_value, list) else [_value]):
                    if _val not in _allowed:
                        errors.add(f"Invalid value for '{_name}' (received: '{_val}')")

        self.validate_extensions(errors)

    def validate_extensions(self, errors: ErrorAccumulator):
        for urn, _ext in self.extensions().items():
            if isinstance(_ext, Metadata):
                _ext.validate(errors)
            elif self.extensible:
                errors.add(self.extension_error(urn))

    def verify(self, **kwargs):
        errors = ErrorAccumulator()
        self.validate(errors)
        if errors.has_errors():
            logger.debug(f"{self.__class__.__name__} failed validation: {errors.errors}")
            raise InvalidMetadata(errors, tree=kwargs.get("tree"))
        return True

    def to_dict(self, lev=0):
        _res = {}
        for key, val in self._dict.items():
            if isinstance(val, Message):
                _res[key] = val.to_dict(lev + 1)
            elif isinstance(val, (list, dict)):
                _res[key] = copy.deepcopy(val)
            else:
                _res[key] = val
        return _res

    def serialize(self, method="dict", lev=0, **kwargs):
        if method == "dict":
            if self.wrapper and not lev:
                return {self.wrapper: self.to_dict(lev)}
            return self.to_dict(lev)
        return Message.serialize(self, method=method, lev=lev, **kwargs)

    def to_json(self, lev=0, indent=None):
        return json.dumps(self.serialize(lev=lev), indent=indent)

    def copy(self):
        _item = self.__class__(configuration=self.configuration)
        _item.json_path = self.json_path
        return _item.hydrate(self.to_dict())

    def __eq__(self, other):
        if other.__class__ is not self.__class__:
            return False
        return self._dict == other._dict

    def __ne__(self, other):
        return not self.__eq__(other)

    def __hash__(self):
        return hash(json.dumps(self.to_dict(), sort_keys=True))


def hydrate_and_verify(cls, tree, configuration: Optional[Configuration] = None):
    """
    Builds a Metadata object of class cls from a tree and raises InvalidMetadata, carrying
    every error found and the tree, if it's not valid.
    """
    _item = cls(configuration=configuration)
    _item.hydrate(tree)
    _item.verify(tree=tree)
    return _item
