# =============================================================================
# LINEAGE EVENT MODEL
# =============================================================================
# - Read-only snapshot of one job-run lineage event (inputs, outputs, facets)
# - Map already-decoded OpenLineage JSON objects into that snapshot
# - Reject payloads too broken to build a snapshot from


from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple


# ------------------------------------------------------------
# EVENT TYPES
# ------------------------------------------------------------

START = 'START'
COMPLETE = 'COMPLETE'

ENVIRONMENT_FACET = 'environment-properties'


class MalformedEventError(ValueError):
    """Raised when a payload cannot be mapped into an Event."""


# ------------------------------------------------------------
# MODEL
# ------------------------------------------------------------

@dataclass(frozen=True)
class DataEntity:
    """Dataset referenced by an event, identified by namespace and name."""
    namespace: str      # source system / location, e.g. 'abfss://container@account'
    name: str


@dataclass(frozen=True)
class RunFacets:
    # None means the facet was not sent; an empty mapping still counts as sent
    environment_properties: Optional[Mapping[str, Any]] = None


@dataclass(frozen=True)
class Run:
    facets: RunFacets = field(default_factory=RunFacets)


@dataclass(frozen=True)
class Event:
    """
    One lineage event as consumed by the validator.

    Inputs and outputs keep their arrival order, but only their
    membership matters downstream.
    """
    event_type: str
    inputs: Tuple[DataEntity, ...] = ()
    outputs: Tuple[DataEntity, ...] = ()
    run: Run = field(default_factory=Run)


# ------------------------------------------------------------
# PAYLOAD MAPPING
# ------------------------------------------------------------

def entity_from_dict(payload: Any, location: str) -> DataEntity:
    if not isinstance(payload, dict):
        raise MalformedEventError(f'{location}: dataset must be an object')

    missing = [key for key in ('namespace', 'name') if payload.get(key) is None]
    if missing:
        raise MalformedEventError(f'{location}: missing dataset field(s): {missing}')

    not_text = [key for key in ('namespace', 'name') if not isinstance(payload[key], str)]
    if not_text:
        raise MalformedEventError(f'{location}: dataset field(s) must be strings: {not_text}')

    return DataEntity(namespace=payload['namespace'], name=payload['name'])


def _entities(payload: Dict[str, Any], key: str) -> Tuple[DataEntity, ...]:
    datasets = payload.get(key) or []
    if not isinstance(datasets, list):
        raise MalformedEventError(f'{key}: expected a list of datasets')

    return tuple(
        entity_from_dict(dataset, f'{key}[{i}]') for i, dataset in enumerate(datasets)
    )


def event_from_dict(payload: Any) -> Event:
    """
    Build an Event from a decoded OpenLineage JSON object.

    Absent inputs, outputs or facets become empty values so that the
    validator can judge them; anything that cannot be read at all
    raises MalformedEventError.
    """

    if not isinstance(payload, dict):
        raise MalformedEventError('event payload must be a JSON object')

    run = payload.get('run') or {}
    if not isinstance(run, dict):
        raise MalformedEventError('run: expected an object')

    facets = run.get('facets') or {}
    if not isinstance(facets, dict):
        raise MalformedEventError('run.facets: expected an object')

    return Event(
        event_type=str(payload.get('eventType') or ''),
        inputs=_entities(payload, 'inputs'),
        outputs=_entities(payload, 'outputs'),
        run=Run(facets=RunFacets(environment_properties=facets.get(ENVIRONMENT_FACET))),
    )


# =============================================================================
# END OF SCRIPT
# =============================================================================
