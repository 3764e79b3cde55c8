"""YAML metadata provider: compiles type catalogs into descriptors.

A catalog file looks like::

    namespace: Sample
    enums:
      - name: Color
        members: [Red, Green, Blue]
    types:
      - name: Product
        base: Item
        members:
          - name: ID
            type: int32
            annotations: [key]
          - name: Category
            type: Category?
            annotations:
              - foreign_key: CategoryId
          - name: Tags
            type: Collection(string)
          - name: Extra
            type: Dictionary(string, object)

Type names without a dot are taken relative to the file's namespace.
"""

import logging
from pathlib import Path

import yaml

from convention_model.domain.entities import (
    Annotation,
    EnumDescriptor,
    MemberDescriptor,
    Primitive,
    PrimitiveKind,
    TypeDescriptor,
    TypeRef,
)
from convention_model.domain.entities.annotations import MEMBER_ANNOTATIONS, TYPE_ANNOTATIONS
from convention_model.infrastructure.metadata.in_memory_provider import InMemoryTypeMetadataProvider

logger = logging.getLogger(__name__)

_PRIMITIVE_NAMES = {kind.value for kind in PrimitiveKind}


class YamlTypeMetadataProvider(InMemoryTypeMetadataProvider):
    """Provider compiled from one or more YAML catalog files or directories.

    All files are read before any type is compiled, so a type may refer to
    an enum or type declared in another file.
    """

    def __init__(self, *paths: str | Path):
        super().__init__()
        documents = []
        for path in paths:
            documents.extend(self._load_documents(Path(path)))

        for namespace, data in documents:
            for entry in data.get("enums", []) or []:
                if not isinstance(entry, dict) or "name" not in entry:
                    logger.warning("Skipping malformed enum entry in namespace %s: %r", namespace, entry)
                    continue
                self.add_enum(EnumDescriptor(
                    name=entry["name"],
                    namespace=entry.get("namespace", namespace),
                    members=tuple(entry.get("members", [])),
                ))

        for namespace, data in documents:
            for entry in data.get("types", []) or []:
                if not isinstance(entry, dict) or "name" not in entry:
                    logger.warning("Skipping malformed type entry in namespace %s: %r", namespace, entry)
                    continue
                self.add(self._build_type(entry, namespace))

        logger.info(
            "Compiled %d types and %d enums from %d catalog(s)",
            len(self.registered_types()), len(self._enums), len(documents),
        )

    # ── Loading ──────────────────────────────────────────────────────

    def _load_documents(self, path: Path) -> list[tuple[str, dict]]:
        files = sorted(path.glob("*.yaml")) + sorted(path.glob("*.yml")) if path.is_dir() else [path]
        documents = []
        for file in files:
            data = self._load_yaml(file)
            if data is None:
                continue
            if not isinstance(data, dict):
                logger.warning("Ignoring catalog %s: top level is not a mapping", file)
                continue
            documents.append((data.get("namespace", ""), data))
        return documents

    def _load_yaml(self, path: Path) -> dict | None:
        """Load and parse a YAML file, returning None on error."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                return yaml.safe_load(f)
        except (OSError, yaml.YAMLError):
            logger.exception("Failed to parse YAML file: %s", path)
            return None

    # ── Compilation ──────────────────────────────────────────────────

    def _build_type(self, entry: dict, namespace: str) -> TypeDescriptor:
        namespace = entry.get("namespace", namespace)
        members = tuple(
            MemberDescriptor(
                name=m["name"],
                type_ref=self.parse_type(m.get("type", "string"), namespace),
                annotations=self._annotations(m.get("annotations", []), MEMBER_ANNOTATIONS),
            )
            for m in entry.get("members", []) or []
            if isinstance(m, dict) and "name" in m
        )
        base = entry.get("base")
        return TypeDescriptor(
            name=entry["name"],
            namespace=namespace,
            base=self._qualify(base, namespace) if base else None,
            members=members,
            annotations=self._annotations(entry.get("annotations", []), TYPE_ANNOTATIONS),
            is_abstract=bool(entry.get("abstract", False)),
        )

    def _annotations(self, raw: list, vocabulary: dict[str, type[Annotation]]) -> tuple:
        """Build annotations from names or single-key ``{name: argument}`` maps."""
        result = []
        for item in raw or []:
            if isinstance(item, dict):
                if len(item) != 1:
                    logger.warning("Ignoring annotation %r: expected a single key", item)
                    continue
                label, argument = next(iter(item.items()))
            else:
                label, argument = str(item), None

            cls = vocabulary.get(label)
            if cls is None:
                logger.warning("Ignoring unknown annotation '%s'", label)
                continue
            if argument is None:
                result.append(cls())
            elif isinstance(argument, dict):
                result.append(cls(**argument))
            elif cls is Primitive:
                result.append(Primitive(PrimitiveKind(argument)))
            else:
                result.append(cls(argument))
        return tuple(result)

    @staticmethod
    def _qualify(name: str, namespace: str) -> str:
        return name if "." in name or not namespace else f"{namespace}.{name}"

    def parse_type(self, expression: str, namespace: str = "") -> TypeRef:
        """Parse a type expression such as ``Collection(Address)`` or ``int32?``."""
        text = str(expression).strip()
        nullable = text.endswith("?")
        if nullable:
            text = text[:-1].strip()

        if text.startswith("Collection(") and text.endswith(")"):
            element = self.parse_type(text[len("Collection("):-1], namespace)
            return TypeRef.collection(element, nullable=nullable)
        if text.startswith("Dictionary(") and text.endswith(")"):
            key, value = _split_arguments(text[len("Dictionary("):-1])
            return TypeRef.dictionary(
                self.parse_type(key, namespace), self.parse_type(value, namespace), nullable=nullable,
            )
        if text == "object":
            return TypeRef.opaque()
        if text in _PRIMITIVE_NAMES:
            return TypeRef.primitive(text, nullable=nullable)

        full_name = self._qualify(text, namespace)
        if self.get_enum(full_name) is not None:
            return TypeRef.enum(full_name, nullable=nullable)
        return TypeRef.structured(full_name, nullable=nullable)


def _split_arguments(text: str) -> tuple[str, str]:
    """Split ``"K, V"`` at the top-level comma."""
    depth = 0
    for i, char in enumerate(text):
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        elif char == "," and depth == 0:
            return text[:i], text[i + 1:]
    raise ValueError(f"Expected two type arguments in '{text}'")
