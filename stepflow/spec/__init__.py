"""
stepflow/spec - Declarative flow definitions.

This package provides the definition layer of the engine:
- types: typed step configs and FlowDefinition
- validation: JSON Schema + referential checks on raw definitions
- storage: FlowStorage contract and the file-backed implementation
- manager: FlowManager (storage + validation + StepFactory -> Flow)

Usage:
    from stepflow.spec.manager import FlowManager
    from stepflow.spec.validation import validate_flow_definition

    definition = validate_flow_definition(raw)  # raises FlowValidationError
    flow = FlowManager().load_flow("plan-issue")

The manager is imported from its module directly; it depends on the runtime
package, which itself imports the types defined here.
"""

from .storage import FileFlowStorage, FlowStorage
from .types import (
    FlowDefinition,
    StepConfig,
    StepType,
    flow_definition_from_dict,
    step_config_from_dict,
)
from .validation import (
    FlowValidator,
    ValidationError,
    ValidationResult,
    validate_flow_definition,
    validate_step_definition,
)

__all__ = [
    "FileFlowStorage",
    "FlowDefinition",
    "FlowStorage",
    "FlowValidator",
    "StepConfig",
    "StepType",
    "ValidationError",
    "ValidationResult",
    "flow_definition_from_dict",
    "step_config_from_dict",
    "validate_flow_definition",
    "validate_step_definition",
]
