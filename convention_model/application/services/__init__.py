from .build_context import BuildContext
from .classification_engine import ClassificationEngine
from .convention_engine import ConventionEngine
from .inheritance_resolver import InheritanceResolver
from .model_builder import ConventionModelBuilder
from .navigation_binding_resolver import NavigationBindingResolver
from .pruner import Pruner
from .schema_export_service import SchemaExportService

__all__ = [
    "BuildContext",
    "ClassificationEngine",
    "ConventionEngine",
    "InheritanceResolver",
    "ConventionModelBuilder",
    "NavigationBindingResolver",
    "Pruner",
    "SchemaExportService",
]
