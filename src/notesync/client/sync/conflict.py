"""Last-writer-wins merge of local and remote records.

This module provides:
- resolve_conflicts: Merge local and remote record sets by updated_at
- changed_records: Select merged records that differ from local storage

Rules:
    | Remote record vs local          | Result                        |
    |---------------------------------|-------------------------------|
    | absent locally                  | remote, synced=True           |
    | remote.updated_at > local       | remote, synced=True           |
    | remote.updated_at <= local      | local (ties favor local)      |
    | local record absent remotely    | local, untouched              |

The server is never a source of deletions here: deletions travel only
through queued DELETE mutations.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from datetime import UTC, datetime

from notesync.core.types import Record

_EPOCH = datetime.min.replace(tzinfo=UTC)


def _updated(record: Record) -> datetime:
    return record.updated_at or _EPOCH


def resolve_conflicts(
    local_records: Iterable[Record],
    remote_records: Iterable[Record],
) -> dict[str, Record]:
    """Merge two record sets with last-writer-wins on updated_at.

    Args:
        local_records: Records currently stored locally.
        remote_records: Records listed by the server.

    Returns:
        Mapping of record id to the winning record.
    """
    merged = {record.id: record for record in local_records}

    for remote in remote_records:
        local = merged.get(remote.id)
        if local is None or _updated(remote) > _updated(local):
            merged[remote.id] = replace(remote, synced=True)

    return merged


def changed_records(
    merged: dict[str, Record],
    local_records: Iterable[Record],
) -> list[Record]:
    """Get merged records that must be written locally.

    A record needs writing if it is missing locally or its updated_at
    differs from the stored copy.
    """
    local_by_id = {record.id: record for record in local_records}
    changed = []
    for record in merged.values():
        local = local_by_id.get(record.id)
        if local is None or local.updated_at != record.updated_at:
            changed.append(record)
    return changed
