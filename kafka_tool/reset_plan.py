"""Offset reset plans for rewinding a consumer group on one topic."""

import csv
import logging
import os
import tempfile
from contextlib import contextmanager
from typing import List, NamedTuple

logger = logging.getLogger(__name__)

RESET_PLAN_PREFIX = ".reset_plan"

HEADER_COLUMNS = ("TOPIC", "PARTITION", "CURRENT-OFFSET")


class OffsetRow(NamedTuple):
    topic: str
    partition: int
    offset: int


def _column_positions(tokens):
    return tuple(tokens.index(name) for name in HEADER_COLUMNS)


def parse_group_offsets(describe_output: str, topic: str) -> List[OffsetRow]:
    """
    Extract the committed offsets of ``topic`` from the text printed by
    ``kafka-consumer-groups.sh --describe``.

    Column positions are taken from the header row when there is one.
    Older tool versions print no group column, so without a header the
    first three columns are read as topic, partition and current offset.
    """
    positions = (0, 1, 2)
    rows = []
    for line in describe_output.splitlines():
        tokens = line.split()
        if not tokens:
            continue
        if all(name in tokens for name in HEADER_COLUMNS):
            positions = _column_positions(tokens)
            continue

        topic_pos, partition_pos, offset_pos = positions
        if len(tokens) <= max(positions) or tokens[topic_pos] != topic:
            continue

        try:
            partition = int(tokens[partition_pos])
            offset = int(tokens[offset_pos])
        except ValueError:
            logger.warning(f"Skipping row without a committed offset: {line.strip()}")
            continue
        rows.append(OffsetRow(topic, partition, offset))
    return rows


def compute_reset_plan(current: List[OffsetRow], delta: int) -> List[OffsetRow]:
    """Subtract ``delta`` from every offset. Targets are not clamped at zero."""
    plan = []
    for row in current:
        target = row.offset - delta
        if target < 0:
            logger.warning(
                f"Target offset {target} for {row.topic}:{row.partition} is negative "
                f"(current {row.offset}, delta {delta})"
            )
        plan.append(row._replace(offset=target))
    return plan


@contextmanager
def reset_plan_file(plan: List[OffsetRow], directory="."):
    """Write ``plan`` to a dot-prefixed CSV file and remove it on exit."""
    fd, path = tempfile.mkstemp(prefix=f"{RESET_PLAN_PREFIX}_", suffix=".csv", dir=directory)
    try:
        with os.fdopen(fd, "w", newline="") as f:
            writer = csv.writer(f, lineterminator="\n")
            for row in plan:
                writer.writerow(row)
        yield path
    finally:
        os.remove(path)
