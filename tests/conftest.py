"""Pytest fixtures for lineage event validation tests."""

import pytest

from lineage_pipeline.lineage_event import DataEntity, Event, Run, RunFacets
from lineage_pipeline.validate_lineage_event import EventValidator


def entity(namespace, name):
    return DataEntity(namespace=namespace, name=name)


@pytest.fixture
def make_event():
    """Factory for events; datasets are given as (namespace, name) pairs."""

    def _make(event_type='COMPLETE', inputs=(), outputs=(), environment=None):
        return Event(
            event_type=event_type,
            inputs=tuple(entity(ns, name) for ns, name in inputs),
            outputs=tuple(entity(ns, name) for ns, name in outputs),
            run=Run(facets=RunFacets(environment_properties=environment)),
        )

    return _make


@pytest.fixture
def validator():
    """Validator with the default special-case namespaces."""
    return EventValidator(['azurecosmos://', 'iceberg://'])


@pytest.fixture
def event_payload():
    """Decoded OpenLineage COMPLETE event with one input and one output."""
    return {
        'eventType': 'COMPLETE',
        'run': {'runId': '7c2a5e4e-1f0b-4c57-9d4b-2f4d0e9d1a11', 'facets': {}},
        'job': {'namespace': 'adb-5445974573286168.8', 'name': 'notebook_ingest'},
        'inputs': [{'namespace': 'abfss://raw@lakeaccount.dfs.core.windows.net', 'name': '/orders'}],
        'outputs': [{'namespace': 'abfss://curated@lakeaccount.dfs.core.windows.net', 'name': '/orders'}],
    }
