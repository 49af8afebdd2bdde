from __future__ import annotations

import csv
from collections import Counter
from pathlib import Path
from typing import Dict, Iterable, List, Sequence, Tuple

from models.lead import Lead

CSV_COLUMNS = [
    "name",
    "role",
    "company",
    "location",
    "canonicalUrl",
    "confidence",
    "matchedTopics",
    "discoveredAt",
    "snippet",
]


def lead_to_row(lead: Lead) -> Dict[str, str]:
    record = lead.to_record()
    row = {col: "" if record.get(col) is None else str(record.get(col)) for col in CSV_COLUMNS}
    row["matchedTopics"] = "; ".join(lead.matched_topics)
    return row


def export_leads_csv(leads: Iterable[Lead], path: str | Path) -> int:
    """Write leads to CSV. Fields with commas, quotes or newlines are quoted and
    embedded quotes doubled. Returns the number of rows written."""
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with out.open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_COLUMNS, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
        writer.writeheader()
        for lead in leads:
            writer.writerow(lead_to_row(lead))
            count += 1
    return count


def leads_by_company(leads: Sequence[Lead], top: int = 10) -> Tuple[List[Tuple[str, int]], int]:
    """Most common companies (count desc, first-seen order on ties) and how many more exist."""
    counts = Counter(lead.company for lead in leads)
    ranked = counts.most_common()
    return ranked[:top], max(0, len(ranked) - top)
