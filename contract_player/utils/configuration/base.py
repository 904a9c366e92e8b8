from collections.abc import Mapping
from typing import Optional, Union

import structlog

from contract_player.exceptions.config import ConfigurationError
from contract_player.utils.formatting import parse_felt

log = structlog.get_logger(__name__)


class ConfigMapping(Mapping):
    """Read-only view on one top-level section of the run definition.

    Subclasses set :attr:`SECTION` to the key they read, expose options as
    properties with defaults, and check them in :meth:`validate`.
    """

    SECTION: str = ""
    CONFIGURATION_ERROR = ConfigurationError

    def __init__(self, loaded_definition: Optional[Mapping]):
        loaded_definition = loaded_definition or {}
        self.dict = loaded_definition.get(self.SECTION) or {}
        self.assert_option(
            isinstance(self.dict, Mapping),
            f"'{self.SECTION}' must be a mapping, not {self.dict!r}",
        )
        self.validate()

    def __getitem__(self, item):
        return self.dict[item]

    def __iter__(self):
        return iter(self.dict)

    def __len__(self):
        return len(self.dict)

    def __eq__(self, other):
        if isinstance(other, dict):
            return self.dict == other
        elif isinstance(other, ConfigMapping):
            return self.dict == other.dict
        raise TypeError(f"Incomparable types! {self.__class__.__qualname__} and {type(other)}")

    def __str__(self):
        return str(self.dict)

    def __repr__(self):
        return f"{self.__class__.__qualname__}({self.dict})"

    @classmethod
    def assert_option(cls, expression, err: Optional[Union[str, Exception]] = None):
        """Wrap `assert` to raise a ConfigurationError instead of an AssertionError."""
        try:
            assert expression
        except AssertionError as e:
            if err is None or isinstance(err, str):
                raise cls.CONFIGURATION_ERROR(err) from e
            raise err from e

    def felt_option(self, key: str, default=None) -> Optional[int]:
        """Return option `key` parsed as a felt, or `default` if it is absent."""
        value = self.dict.get(key, default)
        if value is None:
            return None
        try:
            return parse_felt(value)
        except (TypeError, ValueError) as e:
            raise self.CONFIGURATION_ERROR(
                f"{self.SECTION}.{key} must be an integer or hex string, not {value!r}"
            ) from e

    def validate(self):
        """Validate the configuration section.

        Subclasses check their options here; the default accepts anything.
        """
