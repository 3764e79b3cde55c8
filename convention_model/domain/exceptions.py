"""Schema build exceptions, framework-independent.

Every error below is raised from ``ConventionModelBuilder.build()``; the
registration surface never raises for model problems. A failed build
returns no graph at all.
"""


def _article(kind: str) -> str:
    return f"an {kind}" if kind[:1].lower() in "aeiou" else f"a {kind}"


class SchemaBuildError(Exception):
    """Base class for every failure raised while building a schema graph."""


class UnknownTypeError(SchemaBuildError):
    """Raised when a metadata provider has no descriptor for a type."""

    def __init__(self, type_name: str):
        self.type_name = type_name
        super().__init__(f"The type '{type_name}' is not known to the metadata provider")


# ── Invalid configuration (caller-correctable) ─────────────────────

class InvalidConfigurationError(SchemaBuildError):
    """The caller's registrations contradict each other or the type metadata."""


class TypeKindConflictError(InvalidConfigurationError):
    """Raised when a type is configured with both the entity and complex kind."""

    def __init__(self, type_name: str, requested_kind: str, prior_kind: str):
        self.type_name = type_name
        self.requested_kind = requested_kind
        self.prior_kind = prior_kind
        super().__init__(
            f"The type '{type_name}' cannot be configured as {_article(requested_kind)} type. "
            f"It was previously configured as {_article(prior_kind)} type."
        )


class DuplicateDynamicPropertyContainerError(InvalidConfigurationError):
    """Raised when a type ends up with more than one dynamic property container."""

    def __init__(self, type_name: str, property_names: list[str]):
        self.type_name = type_name
        self.property_names = property_names
        super().__init__(
            f"Found more than one dynamic property container in type '{type_name}' "
            f"({', '.join(property_names)}). Each open type must have at most one "
            f"dynamic property container."
        )


class RecursiveComplexTypeError(InvalidConfigurationError):
    """Raised when a complex type references itself without a collection in between."""

    def __init__(self, type_name: str, property_name: str):
        self.type_name = type_name
        self.property_name = property_name
        super().__init__(
            f"The complex type '{type_name}' has a reference to itself through the "
            f"property '{property_name}'. A recursive loop of complex types is not allowed."
        )


class InheritanceCycleError(InvalidConfigurationError):
    """Raised when base type links loop back to a type already in the chain."""

    def __init__(self, cycle: list[str]):
        self.type_name = cycle[0]
        self.cycle = cycle
        super().__init__(
            f"The base type links of '{cycle[0]}' form a cycle: {' -> '.join(cycle + cycle[:1])}"
        )


class UnknownMemberError(InvalidConfigurationError):
    """Raised when an explicit property or key names a member the type does not have."""

    def __init__(self, type_name: str, member_name: str):
        self.type_name = type_name
        self.member_name = member_name
        super().__init__(f"The type '{type_name}' has no member named '{member_name}'")


# ── Invalid model (structural) ──────────────────────────────────────

class InvalidModelError(SchemaBuildError):
    """The inferred model violates a structural rule."""


class AmbiguousTypeKindError(InvalidModelError):
    """Raised when derived types of one base disagree on entity vs. complex."""

    def __init__(self, type_name: str, entity_type: str, complex_type: str):
        self.type_name = type_name
        self.entity_type = entity_type
        self.complex_type = complex_type
        super().__init__(
            f"Cannot determine the schema kind of the type '{type_name}' because the derived "
            f"type '{entity_type}' is configured as entity type and another derived type "
            f"'{complex_type}' is configured as complex type."
        )


class DerivedTypeKeyError(InvalidModelError):
    """Raised when a derived entity type declares a key below an already keyed ancestor."""

    def __init__(self, type_name: str, base_type: str):
        self.type_name = type_name
        self.base_type = base_type
        super().__init__(
            f"Cannot define keys on type '{type_name}' deriving from '{base_type}'. "
            f"The base type in the entity inheritance hierarchy already contains keys."
        )


class MissingKeyError(InvalidModelError):
    """Raised when an entity set or singleton is based on a keyless entity type."""

    def __init__(self, source_name: str, type_name: str):
        self.source_name = source_name
        self.type_name = type_name
        super().__init__(
            f"The entity set or singleton '{source_name}' is based on type '{type_name}' "
            f"that has no keys defined."
        )


class ComplexTypeReferencesEntityError(InvalidModelError):
    """Raised when a complex type points at an explicitly configured entity type."""

    def __init__(self, complex_type: str, entity_type: str, property_name: str):
        self.complex_type = complex_type
        self.entity_type = entity_type
        self.property_name = property_name
        super().__init__(
            f"The complex type '{complex_type}' refers to the entity type '{entity_type}' "
            f"through the property '{property_name}'."
        )
