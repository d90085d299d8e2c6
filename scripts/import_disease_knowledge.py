"""
Import disease knowledge into Supabase (plant_disease_knowledge)

Usage:
    python scripts/import_disease_knowledge.py [--file FILE] [--dry-run]

Options:
    --file FILE  JSON (list of records) or CSV file, default data/disease_knowledge.json
    --dry-run    Validate only, do not write to Supabase

CSV columns: crop_type, disease_name, symptoms (separated by ;), treatment,
prevention, causes, confidence_threshold
"""

import os
import sys
import csv
import json
import argparse
from pathlib import Path
from typing import Dict, List, Tuple

from dotenv import load_dotenv
from supabase import create_client, Client

sys.path.insert(0, str(Path(__file__).parent.parent))

from app.config import KNOWLEDGE_TABLE
from app.models import DiseaseRecord
from app.services.knowledge_base import parse_disease_record

DEFAULT_FILE = Path(__file__).parent.parent / "data" / "disease_knowledge.json"


def read_csv(file_path: Path) -> List[Dict]:
    """Read CSV file and return list of dicts"""
    rows = []
    with open(file_path, mode='r', encoding='utf-8-sig') as csvfile:
        reader = csv.DictReader(csvfile)
        for row in reader:
            clean_row = {k.strip(): v.strip() if v else '' for k, v in row.items() if k}
            clean_row['symptoms'] = [s.strip() for s in clean_row.get('symptoms', '').split(';') if s.strip()]
            for key in ('prevention', 'causes', 'confidence_threshold'):
                if not clean_row.get(key):
                    clean_row[key] = None
            rows.append(clean_row)
    return rows


def read_records(file_path: Path) -> Tuple[List[DiseaseRecord], int]:
    """Return (valid records, skipped row count)"""
    if file_path.suffix.lower() == '.csv':
        rows = read_csv(file_path)
    else:
        with open(file_path, encoding='utf-8') as f:
            rows = json.load(f)

    records = []
    for row in rows:
        record = parse_disease_record(row)
        if record:
            records.append(record)
    return records, len(rows) - len(records)


def is_duplicate(supabase: Client, record: DiseaseRecord) -> bool:
    result = supabase.table(KNOWLEDGE_TABLE)\
        .select('id')\
        .eq('crop_type', record.crop_type.value)\
        .eq('disease_name', record.disease_name)\
        .limit(1)\
        .execute()
    return bool(result.data)


def import_records(supabase: Client, records: List[DiseaseRecord]) -> int:
    inserted = 0
    for record in records:
        label = f"{record.crop_type.value}/{record.disease_name}"
        if is_duplicate(supabase, record):
            print(f"   ⏭️ Skipping duplicate: {label}")
            continue
        supabase.table(KNOWLEDGE_TABLE).insert(record.model_dump(mode='json')).execute()
        print(f"   ✅ {label}")
        inserted += 1
    return inserted


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Import disease knowledge into Supabase")
    parser.add_argument('--file', type=Path, default=DEFAULT_FILE)
    parser.add_argument('--dry-run', action='store_true')
    args = parser.parse_args(argv)

    if not args.file.exists():
        print(f"❌ File not found: {args.file}")
        return 1

    records, skipped = read_records(args.file)
    print(f"📂 {args.file.name}: {len(records)} valid records, {skipped} skipped")

    if args.dry_run:
        for record in records:
            print(f"   • {record.crop_type.value}/{record.disease_name} ({len(record.symptoms)} symptoms)")
        return 0

    load_dotenv()
    supabase_url = os.getenv("SUPABASE_URL")
    supabase_key = os.getenv("SUPABASE_KEY")
    if not supabase_url or not supabase_key:
        print("❌ Error: Missing environment variables")
        print("   Required: SUPABASE_URL, SUPABASE_KEY")
        return 1

    supabase = create_client(supabase_url, supabase_key)
    inserted = import_records(supabase, records)
    print(f"\n✅ Imported {inserted}/{len(records)} records into {KNOWLEDGE_TABLE}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
