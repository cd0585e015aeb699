# ipd_core/journals/management/commands/check_journal_integrity.py
from __future__ import annotations

from collections import Counter

from django.core.management.base import BaseCommand

from ipd_core.journals import store
from ipd_core.journals.entries import normalize_contributors
from ipd_core.journals.exceptions import ConcurrentWriteError
from ipd_core.journals.models import JournalRecord


def inspect_record(record: JournalRecord) -> list[str]:
    """Human readable problems found in one record (empty when clean)."""
    problems = []
    entries = record.entries or []

    ids = Counter(str(e.get("entry_id")) for e in entries)
    dupes = sorted(i for i, n in ids.items() if n > 1)
    if dupes:
        problems.append(f"duplicate entry ids: {', '.join(dupes)}")

    missing_ids = sum(1 for e in entries if not e.get("entry_id"))
    if missing_ids:
        problems.append(f"{missing_ids} entries without an entry id")

    if isinstance(record.contributors, str):
        problems.append("contributors stored as a single string")

    known = set(normalize_contributors(record.contributors))
    actors = []
    for e in entries:
        actors.append(e.get("author_id"))
        actors.append(e.get("deleted_by"))
        actors.extend(h.get("edited_by") for h in e.get("edit_history") or [])
        actors.extend(s.get("by") for s in e.get("signatures") or [])
    missing = sorted({a for a in actors if a and a not in known})
    if missing:
        problems.append(f"contributors missing: {', '.join(missing)}")

    return problems


def repaired_contributors(record: JournalRecord) -> list[str]:
    out = normalize_contributors(record.contributors)
    for e in record.entries or []:
        for actor in [
            e.get("author_id"),
            e.get("deleted_by"),
            *[h.get("edited_by") for h in e.get("edit_history") or []],
            *[s.get("by") for s in e.get("signatures") or []],
        ]:
            if actor and actor not in out:
                out.append(actor)
    return out


class Command(BaseCommand):
    help = "Report journal records with duplicate entry ids or incomplete contributor sets. --fix repairs contributors."

    def add_arguments(self, parser):
        parser.add_argument("--admission-id", type=int, default=None, help="Only check this admission.")
        parser.add_argument("--category", type=str, default=None, help="Only check this category.")
        parser.add_argument("--fix", action="store_true", help="Rewrite contributor sets that are incomplete.")
        parser.add_argument("--limit", type=int, default=None, help="Optional limit records scanned.")

    def handle(self, *args, **opts):
        qs = JournalRecord.objects.filter(deleted_data__isnull=True).order_by("created_at")
        if opts["admission_id"]:
            qs = qs.filter(admission_id=opts["admission_id"])
        if opts["category"]:
            qs = qs.filter(category=opts["category"])
        if opts["limit"]:
            qs = qs[: opts["limit"]]

        examined = 0
        flagged = 0
        fixed = 0

        for record in qs:
            examined += 1
            problems = inspect_record(record)
            if not problems:
                continue

            flagged += 1
            for p in problems:
                self.stdout.write(f"{record.category} / IPD {record.admission_id} ({record.id}): {p}")

            if opts["fix"]:
                contributors = repaired_contributors(record)
                if contributors == record.contributors:
                    continue
                record.contributors = contributors
                try:
                    store.upsert(record, expected_version=record.version)
                except ConcurrentWriteError:
                    self.stderr.write(f"skipped {record.id}: changed while checking, run again")
                    continue
                fixed += 1

        self.stdout.write(f"Records examined: {examined}")
        self.stdout.write(f"Records with problems: {flagged}")
        if opts["fix"]:
            self.stdout.write(f"Records fixed: {fixed}")
