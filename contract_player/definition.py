import os
import pathlib
from typing import Any, Dict, Mapping, Optional

import jinja2
import structlog
import yaml

from contract_player.exceptions.config import DefinitionConfigurationError
from contract_player.utils.configuration.settings import (
    AccountConfig,
    ContractConfig,
    NodeConfig,
    SettingsConfig,
    TransferConfig,
)

log = structlog.get_logger(__name__)


class RunDefinition:
    """Interface for a run definition `.yaml` file.

    Every section is optional; without a file at all the defaults describe a
    run against a local development node.

    The file is rendered as a jinja template against the process environment
    before it is parsed, so secrets need not be stored in it::

        account:
          private_key: "{{ ACCOUNT_PRIVATE_KEY }}"

    `overrides` take precedence over the file. They are given as
    ``{section: {key: value}}``, keys with a `None` value are ignored.
    """

    def __init__(
        self,
        yaml_path: Optional[pathlib.Path] = None,
        overrides: Optional[Mapping[str, Mapping[str, Any]]] = None,
        environment: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.path = yaml_path
        self._loaded: Dict[str, Any] = {}
        if yaml_path is not None:
            self._loaded = self.load(yaml_path, os.environ if environment is None else environment)
        self._apply_overrides(overrides or {})

        self.node = NodeConfig(self._loaded)
        self.account = AccountConfig(self._loaded)
        self.contract = ContractConfig(self._loaded)
        self.transfer = TransferConfig(self._loaded)
        self.settings = SettingsConfig(self._loaded)

    @staticmethod
    def load(yaml_path: pathlib.Path, environment: Mapping[str, str]) -> Dict[str, Any]:
        """Render and parse the definition file.

        :raises DefinitionConfigurationError:
            if the template references an unset variable, the YAML is
            malformed or does not describe a mapping.
        """
        try:
            with yaml_path.open() as f:
                template = jinja2.Template(f.read(), undefined=jinja2.StrictUndefined)
            loaded = yaml.safe_load(template.render(**environment))
        except jinja2.TemplateError as e:
            raise DefinitionConfigurationError(f"Cannot render {yaml_path}: {e}") from e
        except yaml.YAMLError as e:
            raise DefinitionConfigurationError(f"Cannot parse {yaml_path}: {e}") from e

        if loaded is None:
            return {}
        if not isinstance(loaded, dict):
            raise DefinitionConfigurationError(f"{yaml_path} must contain a mapping")
        return loaded

    def _apply_overrides(self, overrides: Mapping[str, Mapping[str, Any]]) -> None:
        for section, options in overrides.items():
            values = {key: value for key, value in options.items() if value is not None}
            if not values:
                continue
            current = self._loaded.get(section) or {}
            if not isinstance(current, Mapping):
                raise DefinitionConfigurationError(
                    f"'{section}' must be a mapping, not {current!r}"
                )
            self._loaded[section] = {**current, **values}
            log.debug("Definition override", section=section, keys=sorted(values))

    @property
    def name(self) -> str:
        """Return the name of the definition file, sans extension."""
        if self.path is None:
            return "<default>"
        return self.path.stem
