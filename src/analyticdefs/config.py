"""Transform configuration.

Defaults reproduce the wire conventions of the NetSuite analytic definition
files; a JSON file may override them for experiments or new tag values.
"""

import json
from pathlib import Path
from typing import FrozenSet, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from analyticdefs.errors import ConfigError
from analyticdefs.kernel.raw import DEFAULT_TRANSLATION_PREFIX

DEFAULT_IGNORED_DISCRIMINATORS = frozenset({"workbook", "dataSet", "formula"})
DEFAULT_DISCRIMINATED_KEYS = frozenset({"formula"})


class TransformConfig(BaseModel):
    """Settings shared by the fetch and deploy transforms."""
    ignored_discriminators: FrozenSet[str] = Field(
        default=DEFAULT_IGNORED_DISCRIMINATORS,
        description="`_T_` values dropped on fetch instead of nesting the variant under its tag",
    )
    discriminated_keys: FrozenSet[str] = Field(
        default=DEFAULT_DISCRIMINATED_KEYS,
        description="Keys whose value gets `_T_: <key>` back on deploy",
    )
    translation_prefix: str = DEFAULT_TRANSLATION_PREFIX
    pretty_xml: bool = True
    xml_indent: str = "  "

    model_config = ConfigDict(frozen=True, extra="forbid")


DEFAULT_CONFIG = TransformConfig()


def load_config(path: Union[str, Path]) -> TransformConfig:
    """Load a TransformConfig from a JSON file.

    Raises:
        ConfigError: If the file cannot be read or does not validate
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read config '{path}': {e}") from e
    try:
        return TransformConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config '{path}': {e}") from e
