"""
Schema registry

An immutable table of schema type definitions. Validators receive a registry
at construction, so tests and callers can substitute their own vocabulary
(for example one loaded from a YAML file) without touching global state.
"""

import json
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from sdvalidator.config import settings
from sdvalidator.exceptions import RegistryLoadError
from sdvalidator.schema_definitions import DEFAULT_TYPE_DEFINITIONS

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")


def _unique(names: Iterable[str]) -> Tuple[str, ...]:
    """Ordered de-duplication."""
    return tuple(dict.fromkeys(names))


class TypeDefinitionModel(BaseModel):
    """Validated shape of one type entry in a registry file."""

    properties: Dict[str, Union[str, List[str]]] = Field(
        default_factory=dict,
        description="Property name to expected kind or list of kinds"
    )
    required: List[str] = Field(
        default_factory=list,
        description="Properties whose absence is an error"
    )
    recommended: List[str] = Field(
        default_factory=list,
        description="Properties whose absence is a warning"
    )
    extends: Optional[str] = Field(
        default=None,
        description="Parent type whose property kinds are inherited"
    )

    @field_validator("properties")
    @classmethod
    def kinds_not_empty(cls, value: Dict[str, Union[str, List[str]]]):
        for name, kinds in value.items():
            if not kinds:
                raise ValueError(f"property '{name}' has no expected kinds")
        return value


class RegistryFileModel(BaseModel):
    """Validated shape of a registry file: `types: {Name: {...}}`."""

    types: Dict[str, TypeDefinitionModel]


@dataclass(frozen=True)
class TypeDefinition:
    """Required, recommended and expected property kinds of one schema type."""

    name: str
    required: Tuple[str, ...] = ()
    recommended: Tuple[str, ...] = ()
    property_types: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    extends: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "required", _unique(self.required))
        object.__setattr__(self, "recommended", _unique(self.recommended))
        object.__setattr__(
            self,
            "property_types",
            MappingProxyType({k: _unique(v) for k, v in dict(self.property_types).items()}),
        )

    @classmethod
    def from_model(cls, name: str, model: TypeDefinitionModel) -> "TypeDefinition":
        property_types = {
            prop: (kinds,) if isinstance(kinds, str) else tuple(kinds)
            for prop, kinds in model.properties.items()
        }
        return cls(
            name=name,
            required=tuple(model.required),
            recommended=tuple(model.recommended),
            property_types=property_types,
            extends=model.extends,
        )

    def to_dict(self) -> dict:
        data = {
            "properties": {k: list(v) for k, v in self.property_types.items()},
            "required": list(self.required),
            "recommended": list(self.recommended),
        }
        if self.extends:
            data["extends"] = self.extends
        return data


class SchemaRegistry:
    """Immutable lookup of type definitions by name.

    Unknown type names are tolerated everywhere: `get` returns None and
    validators downgrade them to warnings.

    Args:
        definitions: TypeDefinition objects, or a mapping of name to definition
    """

    def __init__(self, definitions: Union[Iterable[TypeDefinition], Mapping[str, TypeDefinition]] = ()):
        if isinstance(definitions, Mapping):
            definitions = definitions.values()
        self._definitions = MappingProxyType({d.name: d for d in definitions})
        self._resolved = MappingProxyType(
            {name: self._resolve_property_types(name) for name in self._definitions}
        )

    def _resolve_property_types(self, name: str) -> Mapping[str, Tuple[str, ...]]:
        """Own property kinds overlaid on every ancestor's."""
        chain: List[TypeDefinition] = []
        seen = set()
        current = self._definitions.get(name)
        while current is not None and current.name not in seen:
            seen.add(current.name)
            chain.append(current)
            if current.extends and current.extends not in self._definitions:
                logger.debug(f"Type '{current.name}' extends unknown type '{current.extends}'")
            current = self._definitions.get(current.extends) if current.extends else None

        merged: Dict[str, Tuple[str, ...]] = {}
        for definition in reversed(chain):
            merged.update(definition.property_types)
        return MappingProxyType(merged)

    def get(self, name: str) -> Optional[TypeDefinition]:
        return self._definitions.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)

    def __iter__(self) -> Iterator[TypeDefinition]:
        return iter(self._definitions.values())

    @property
    def type_names(self) -> List[str]:
        return sorted(self._definitions)

    def property_types(self, name: str) -> Mapping[str, Tuple[str, ...]]:
        """Expected kinds per property for one type, inherited kinds included."""
        return self._resolved.get(name, MappingProxyType({}))

    def property_types_for(self, types: Iterable[str]) -> Dict[str, Tuple[str, ...]]:
        """Union of expected kinds across several assigned types.

        Args:
            types: Type names assigned to one item (unknown names ignored)

        Returns:
            Property name to the de-duplicated union of expected kinds
        """
        union: Dict[str, Tuple[str, ...]] = {}
        for type_name in types:
            for prop, kinds in self.property_types(type_name).items():
                union[prop] = _unique(union.get(prop, ()) + kinds)
        return union

    def with_definitions(self, *definitions: TypeDefinition) -> "SchemaRegistry":
        """New registry with `definitions` added or replacing same-named ones."""
        merged = dict(self._definitions)
        for definition in definitions:
            merged[definition.name] = definition
        return SchemaRegistry(merged)

    def to_dict(self) -> dict:
        return {"types": {name: d.to_dict() for name, d in self._definitions.items()}}

    @classmethod
    def from_mapping(cls, data: Mapping) -> "SchemaRegistry":
        """Build a registry from `{"types": {...}}` or a bare name mapping.

        Raises:
            RegistryLoadError: If the mapping does not describe type definitions
        """
        if not isinstance(data, Mapping):
            raise RegistryLoadError("Registry data must be a mapping of type definitions")
        if "types" not in data:
            data = {"types": data}

        try:
            parsed = RegistryFileModel.model_validate(data)
        except ValidationError as e:
            raise RegistryLoadError(f"Invalid registry definition: {e}") from e

        return cls(
            TypeDefinition.from_model(name, model) for name, model in parsed.types.items()
        )

    @classmethod
    def from_file(cls, path: Union[str, Path], merge_default: bool = False) -> "SchemaRegistry":
        """Load a registry from a YAML or JSON file.

        Args:
            path: .yaml/.yml or .json file
            merge_default: Overlay the file's types on the built-in table

        Returns:
            SchemaRegistry

        Raises:
            RegistryLoadError: If the file cannot be read or parsed
        """
        file_path = Path(path)
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                if file_path.suffix.lower() in YAML_SUFFIXES:
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
            raise RegistryLoadError(f"Could not load registry file {file_path}: {e}") from e

        registry = cls.from_mapping(data or {})
        logger.info(f"Loaded {len(registry)} type definitions from {file_path}")

        if merge_default:
            return default_registry().with_definitions(*registry)
        return registry


@lru_cache(maxsize=None)
def default_registry() -> SchemaRegistry:
    """The built-in schema.org table (cached, immutable)."""
    return SchemaRegistry.from_mapping(DEFAULT_TYPE_DEFINITIONS)


def load_registry(path: Optional[str] = None, merge_default: bool = True) -> SchemaRegistry:
    """Registry from an explicit file or SDV_REGISTRY_FILE, else the built-in table."""
    path = path or settings.REGISTRY_FILE
    if path:
        return SchemaRegistry.from_file(path, merge_default=merge_default)
    return default_registry()
