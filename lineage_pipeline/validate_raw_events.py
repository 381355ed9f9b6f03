# =============================================================================
# VALIDATE RAW LINEAGE EVENTS
# =============================================================================
# - Gate batches of raw lineage events before they reach lineage ingestion
# - Block events that would add bogus edges or drop real ones from the graph
# - Designed for deterministic execution in CI/CD pipelines


import os
import sys
import glob
import json
from typing import Any, Dict, List, Optional, Tuple
import pandas as pd

from lineage_pipeline.lineage_event import MalformedEventError, event_from_dict
from lineage_pipeline.validate_lineage_event import EventValidator


# ------------------------------------------------------------
# CONFIGURATIONS
# ------------------------------------------------------------

EVENT_DATA_BASE_PATH = os.getenv('LINEAGE_EVENT_PATH', 'data/lineage')
VALIDATE_REPLAY = os.getenv('VALIDATE_REPLAY', 'false').lower() == 'true'
FAIL_ON_REJECTED = os.getenv('FAIL_ON_REJECTED', 'true').lower() == 'true'

PARTITIONS = ['incoming']

if VALIDATE_REPLAY:
    PARTITIONS.append('replay')

EVENT_FILE_PATTERNS = ('*.json', '*.jsonl', '*.ndjson')
LINE_DELIMITED_SUFFIXES = ('.jsonl', '.ndjson')

MALFORMED = 'MALFORMED'

VERDICT_COLUMNS = ['source_file', 'position', 'event_type', 'outcome', 'accepted']


# ------------------------------------------------------------
# VALIDATION REPORT & LOGS
# ------------------------------------------------------------

def init_report() -> Dict[str, List[str]]:

    return {
        'errors': [],
        'warnings': [],
        'info': []
    }


def log_info(message: str, report: Dict[str, List[str]]) -> None:
    print(f'[INFO] {message}')
    report['info'].append(message)


def log_warning(message: str, report: Dict[str, List[str]]) -> None:
    print(f'[WARNING] {message}')
    report['warnings'].append(message)


def log_error(message: str, report: Dict[str, List[str]]) -> None:
    print(f'[ERROR] {message}')
    report['errors'].append(message)


# ------------------------------------------------------------
# EVENT VALIDATIONS
# ------------------------------------------------------------

def run_event_validations(records: List[Tuple[str, int, Any]],
                          validator: EventValidator,
                          report: Dict[str, List[str]]
                          ) -> pd.DataFrame:
    """
    Validate every event record.

    One verdict row per record; payloads that cannot be mapped
    into an event are reported as MALFORMED.
    """

    rows = []

    for source_file, position, payload in records:
        location = f'{source_file}#{position}'

        try:
            event = event_from_dict(payload)

        except MalformedEventError as e:
            log_error(f'{location}: malformed event: {e}', report)
            rows.append([source_file, position, None, MALFORMED, False])

            continue

        outcome = validator.evaluate(event)
        if not outcome.accepted:
            log_warning(
                f'{location}: {event.event_type or "<no eventType>"} event rejected ({outcome.value})',
                report
                )

        rows.append([source_file, position, event.event_type, outcome.value, outcome.accepted])

    return pd.DataFrame(rows, columns=VERDICT_COLUMNS)


def summarize_verdicts(verdicts: pd.DataFrame,
                       partition: str,
                       report: Dict[str, List[str]]
                       ) -> None:

    if verdicts.empty:
        log_warning(f'{partition}: no events to validate', report)

        return

    accepted_count = int(verdicts['accepted'].sum())
    log_info(
        f'{partition}: {accepted_count} of {len(verdicts)} event(s) accepted',
        report
        )

    for outcome, count in verdicts['outcome'].value_counts().sort_index().items():
        log_info(f'{partition}: {outcome}: {count}', report)


# ------------------------------------------------------------
# Input-Output Helpers
# ------------------------------------------------------------

def load_event_file(event_path: str,
                    report: Dict[str, List[str]]
                    ) -> Optional[List[Any]]:
    """
    Load raw event payloads from one file.

    .json files hold one event or a list of events;
    .jsonl / .ndjson files hold one event per line.
    """

    try:
        with open(event_path, encoding='utf-8') as f:
            if event_path.endswith(LINE_DELIMITED_SUFFIXES):
                payloads = [json.loads(line) for line in f if line.strip()]

            else:
                content = json.load(f)
                payloads = content if isinstance(content, list) else [content]

        log_info(f'Loaded event file: {os.path.basename(event_path)} ({len(payloads)} events)', report)

        return payloads

    except (OSError, ValueError) as e:
        log_error(f'Failed to load event file {event_path}: {e}', report)

        return None


def load_event_batch(partition_path: str,
                     report: Dict[str, List[str]]
                     ) -> List[Tuple[str, int, Any]]:
    """
    Load all event files of a partition.
    Records are (file name, position in file, payload).
    """

    event_files = sorted(
        path
        for pattern in EVENT_FILE_PATTERNS
        for path in glob.glob(os.path.join(partition_path, pattern))
    )

    if not event_files:
        log_error(f'{partition_path}: no event files found', report)

        return []

    records = []
    for event_path in event_files:
        payloads = load_event_file(event_path, report)
        if payloads is None:

            continue

        source_file = os.path.basename(event_path)
        records.extend((source_file, i, payload) for i, payload in enumerate(payloads))

    return records


# ------------------------------------------------------------
# MAIN EXECUTION
# ------------------------------------------------------------

def main() -> None:
    report = init_report()
    validator = EventValidator()
    rejected_count = 0

    log_info(
        f'Special-case namespaces: {list(validator.special_case_namespaces)}', report)

    for partition in PARTITIONS:
        partition_path = os.path.join(EVENT_DATA_BASE_PATH, partition)

        if not os.path.isdir(partition_path):
            log_error(f'Missing partition directory: {partition_path}', report)

            continue

        records = load_event_batch(partition_path, report)
        verdicts = run_event_validations(records, validator, report)
        summarize_verdicts(verdicts, partition, report)

        rejected_count += int((~verdicts['accepted'].astype(bool)).sum())

    if report['errors']:
        sys.exit(1)

    if FAIL_ON_REJECTED and rejected_count > 0:
        sys.exit(1)

    sys.exit(0)


if __name__ == '__main__':
    main()


# =============================================================================
# END OF SCRIPT
# =============================================================================
