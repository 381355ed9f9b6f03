# =============================================================================
# VALIDATE LINEAGE EVENT
# =============================================================================
# - Decide whether a single lineage event may enter the lineage graph
# - Block events with missing datasets, self-referencing datasets,
#   unknown event types, or START events without an environment facet
# - Pure decision over a read-only event: no I/O, no logging, no shared state


import os
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from lineage_pipeline.lineage_event import COMPLETE, START, DataEntity, Event


# ------------------------------------------------------------
# CONFIGURATIONS
# ------------------------------------------------------------

SPECIAL_CASE_NAMESPACES_ENV = 'LINEAGE_SPECIAL_CASE_NAMESPACES'

# Sources that only report outputs outside of START; their pairing
# with inputs is done later by the aggregation stage.
DEFAULT_SPECIAL_CASE_NAMESPACES = ('azurecosmos://', 'iceberg://')


def unique_prefixes(prefixes: Iterable[str]) -> Tuple[str, ...]:
    cleaned = (prefix.strip() for prefix in prefixes)

    return tuple(dict.fromkeys(prefix for prefix in cleaned if prefix))


def load_special_case_namespaces() -> Tuple[str, ...]:
    """
    Read special-case namespace prefixes from the environment.
    Comma separated; falls back to the defaults when unset or blank.
    """

    raw = os.getenv(SPECIAL_CASE_NAMESPACES_ENV, '')
    prefixes = unique_prefixes(raw.split(','))

    return prefixes or DEFAULT_SPECIAL_CASE_NAMESPACES


# ------------------------------------------------------------
# OUTCOMES
# ------------------------------------------------------------

class ValidationOutcome(str, Enum):
    ACCEPTED = 'ACCEPTED'
    REJECTED_SHAPE = 'REJECTED_SHAPE'
    REJECTED_SELF_REFERENCE = 'REJECTED_SELF_REFERENCE'
    REJECTED_EVENT_TYPE = 'REJECTED_EVENT_TYPE'
    REJECTED_MISSING_ENVIRONMENT = 'REJECTED_MISSING_ENVIRONMENT'

    @property
    def accepted(self) -> bool:
        return self is ValidationOutcome.ACCEPTED


# ------------------------------------------------------------
# NORMALIZATION
# ------------------------------------------------------------

def normalize_identifier(value: str) -> str:
    return value.rstrip('/').lower()


def _sorted_names(entities: Iterable[DataEntity]) -> List[str]:
    return sorted(normalize_identifier(entity.name) for entity in entities)


def _sorted_namespaces(entities: Iterable[DataEntity]) -> List[str]:
    return sorted(normalize_identifier(entity.namespace) for entity in entities)


# ------------------------------------------------------------
# VALIDATOR
# ------------------------------------------------------------

class EventValidator:
    """
    Gatekeeper for lineage events.

    Gates run in order and stop at the first failure:
    1. Shape: outputs are required; inputs too, unless the event is a
       special case (non-START event writing to a special-case namespace)
    2. Self-reference: inputs and outputs must not name the same datasets
    3. Event type: COMPLETE passes, START passes only with an
       environment facet, anything else fails
    """

    def __init__(self, special_case_namespaces: Optional[Iterable[str]] = None):
        if special_case_namespaces is None:
            special_case_namespaces = load_special_case_namespaces()

        elif isinstance(special_case_namespaces, str):
            special_case_namespaces = (special_case_namespaces,)

        self.special_case_namespaces = unique_prefixes(special_case_namespaces)

    def is_special_case(self, event: Event) -> bool:
        # START events of these sources carry both sides already
        if event.event_type == START:
            return False

        return any(
            output.namespace.startswith(self.special_case_namespaces)
            for output in event.outputs
        )

    def has_required_datasets(self, event: Event) -> bool:
        if not event.outputs:
            return False

        return bool(event.inputs) or self.is_special_case(event)

    def inputs_equal_outputs(self, event: Event) -> bool:
        """
        Compare inputs and outputs after trimming trailing slashes and
        lower-casing.

        Names and namespaces are compared as two independent sorted
        lists, not as (namespace, name) pairs.
        """

        return (
            _sorted_names(event.inputs) == _sorted_names(event.outputs)
            and _sorted_namespaces(event.inputs) == _sorted_namespaces(event.outputs)
        )

    def evaluate(self, event: Event) -> ValidationOutcome:
        if not self.has_required_datasets(event):
            return ValidationOutcome.REJECTED_SHAPE

        if self.inputs_equal_outputs(event):
            return ValidationOutcome.REJECTED_SELF_REFERENCE

        if event.event_type == START:
            if event.run.facets.environment_properties is None:
                return ValidationOutcome.REJECTED_MISSING_ENVIRONMENT

            return ValidationOutcome.ACCEPTED

        if event.event_type == COMPLETE:
            return ValidationOutcome.ACCEPTED

        return ValidationOutcome.REJECTED_EVENT_TYPE

    def validate(self, event: Event) -> bool:
        """Return True if the event may be admitted for lineage processing."""

        return self.evaluate(event).accepted


# =============================================================================
# END OF SCRIPT
# =============================================================================
