"""
Knowledge Store
Reads plant disease records (plant_disease_knowledge) by crop type.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError
from supabase import Client

from app.config import KNOWLEDGE_TABLE, KNOWLEDGE_CACHE_PREFIX
from app.errors import KnowledgeStoreError
from app.models import CropType, DiseaseRecord
from app.services.cache import KnowledgeCache

logger = logging.getLogger(__name__)


def _parse_list_field(data) -> List[str]:
    """
    Parse a symptoms column that could be a list, a JSON string or a bare string.
    """
    if data is None:
        return []
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except ValueError:
            return [data]
    if isinstance(data, str):
        return [data]
    if not isinstance(data, list):
        return []
    return [str(item) for item in data if item is not None]


def parse_disease_record(row: Dict[str, Any]) -> Optional[DiseaseRecord]:
    """Build a DiseaseRecord from a table row; None when the row is unusable"""
    try:
        return DiseaseRecord(
            crop_type=row.get('crop_type'),
            disease_name=row.get('disease_name'),
            symptoms=_parse_list_field(row.get('symptoms')),
            treatment=row.get('treatment') or '',
            prevention=row.get('prevention'),
            causes=row.get('causes'),
            confidence_threshold=row.get('confidence_threshold'),
        )
    except ValidationError as e:
        logger.warning(f"Skipping disease record {row.get('disease_name')!r}: {e.error_count()} invalid field(s)")
        return None


def parse_disease_records(rows: Iterable[Dict[str, Any]]) -> List[DiseaseRecord]:
    records = []
    for row in rows:
        record = parse_disease_record(row)
        if record:
            records.append(record)
    return records


class KnowledgeStore(ABC):
    """Read-only source of disease records, keyed by crop type"""

    @abstractmethod
    async def fetch_disease_records(self, crop_type: CropType) -> List[DiseaseRecord]:
        """
        Return every record stored for the crop type ([] when there are none).
        Raises KnowledgeStoreError when the store cannot be read.
        """


class SupabaseKnowledgeStore(KnowledgeStore):
    def __init__(self, supabase_client: Optional[Client], table: str = KNOWLEDGE_TABLE):
        self.supabase = supabase_client
        self.table = table

    async def fetch_disease_records(self, crop_type: CropType) -> List[DiseaseRecord]:
        if not self.supabase:
            raise KnowledgeStoreError("Supabase client not available")

        crop = CropType(crop_type).value
        try:
            result = self.supabase.table(self.table)\
                .select('*')\
                .eq('crop_type', crop)\
                .execute()
        except Exception as e:
            logger.error(f"Knowledge base read failed for {crop}: {e}", exc_info=True)
            raise KnowledgeStoreError(f"Failed to fetch knowledge base for {crop}") from e

        records = parse_disease_records(result.data or [])
        logger.info(f"✓ Loaded {len(records)} disease records for {crop}")
        return records


class InMemoryKnowledgeStore(KnowledgeStore):
    def __init__(self, records: Iterable[DiseaseRecord] = ()):
        self._records: Dict[CropType, List[DiseaseRecord]] = {}
        for record in records:
            self.add(record)

    def add(self, record: DiseaseRecord):
        self._records.setdefault(record.crop_type, []).append(record)

    async def fetch_disease_records(self, crop_type: CropType) -> List[DiseaseRecord]:
        return list(self._records.get(CropType(crop_type), []))


class CachedKnowledgeStore(KnowledgeStore):
    """
    Wraps another store with an injected KnowledgeCache.
    Records are cached as JSON dicts. Only successful reads are cached.
    """

    def __init__(self, store: KnowledgeStore, cache: KnowledgeCache):
        self.store = store
        self.cache = cache

    @staticmethod
    def _key(crop_type: CropType) -> str:
        return f"{KNOWLEDGE_CACHE_PREFIX}{CropType(crop_type).value}"

    def _from_cache(self, key: str) -> Optional[List[DiseaseRecord]]:
        cached = self.cache.get(key)
        if cached is None:
            return None
        try:
            if not isinstance(cached, list):
                raise TypeError(type(cached).__name__)
            return [DiseaseRecord.model_validate(item) for item in cached]
        except (TypeError, ValidationError) as e:
            logger.warning(f"Discarding unreadable cache entry {key}: {e}")
            self.cache.invalidate(key)
            return None

    async def fetch_disease_records(self, crop_type: CropType) -> List[DiseaseRecord]:
        key = self._key(crop_type)
        records = self._from_cache(key)
        if records is not None:
            return records

        records = await self.store.fetch_disease_records(crop_type)
        self.cache.set(key, [record.model_dump(mode="json") for record in records])
        return records

    def invalidate(self, crop_type: Optional[CropType] = None) -> int:
        if crop_type is None:
            return self.cache.invalidate()
        return self.cache.invalidate(self._key(crop_type))
