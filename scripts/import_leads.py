# scripts/import_leads.py
from __future__ import annotations

import argparse
import json
import os
import sys
from dataclasses import asdict
from pathlib import Path

# project root = one level above /scripts
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = str(PROJECT_ROOT / "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from lead_takip.db import get_session, init_db, make_engine, DATABASE_URL  # noqa: E402
from lead_takip.errors import LeadTakipError  # noqa: E402
from lead_takip.logs import configure_logging  # noqa: E402
from lead_takip.services.ingest import import_file  # noqa: E402
from lead_takip.services.leads import load_sample_data  # noqa: E402


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Lead dosyasını (xlsx/xls/csv/json) veritabanına aktarır.")
    ap.add_argument("file", nargs="?", help="İçe aktarılacak dosya")
    ap.add_argument("--db-url", default=os.getenv("DATABASE_URL", DATABASE_URL), help="SQLAlchemy URL")
    ap.add_argument("--sample", action="store_true", help="Dosya yerine örnek veriyi yükle")
    ap.add_argument("--json", action="store_true", help="Raporu JSON olarak yazdır")
    ap.add_argument("--log-level", default=None)
    args = ap.parse_args(argv)

    configure_logging(args.log_level)
    if not args.file and not args.sample:
        ap.error("dosya ya da --sample gerekli")

    eng = make_engine(args.db_url)
    init_db(eng)

    with get_session(eng) as sess:
        if args.sample:
            n = load_sample_data(sess)
            print(f"{n} örnek lead yüklendi.")
            return 0

        path = Path(args.file)
        try:
            report = import_file(sess, path.name, path.read_bytes())
        except (LeadTakipError, OSError) as e:
            print(f"[Hata] {e}", file=sys.stderr)
            return 1

    if args.json:
        out = asdict(report)
        out["skipped"] = report.skipped
        print(json.dumps(out, ensure_ascii=False, indent=2))
    else:
        w = report.warnings
        print(report.message)
        print(f"Satır          : {w.total_records}")
        print(f"Boş satır      : {report.skipped_empty}")
        print(f"Tekrar (ID)    : {report.duplicates.by_customer_id + report.duplicates.by_contact_id}")
        print(f"Tekrar (isim)  : {report.duplicates.by_name}")
        print(f"Tarihsiz       : {w.date_format_issues}")
        print(f"Durumsuz       : {w.missing_status_count}")
        if report.created_reps:
            print("Yeni personel  : " + ", ".join(report.created_reps))
        for err in report.errors:
            print(f"[Satır {err.row}] {err.message}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
