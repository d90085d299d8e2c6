import logging
from supabase import create_client, Client

from app.config import SUPABASE_URL, SUPABASE_KEY
from app.services.cache import KnowledgeCache, init_redis
from app.services.knowledge_base import SupabaseKnowledgeStore, CachedKnowledgeStore
from app.services.diagnosis_recorder import DiagnosisRecorder
from app.services.symptom_matcher import SymptomMatcher

logger = logging.getLogger(__name__)

# Initialize Supabase
supabase_client: Client = None
if SUPABASE_URL and SUPABASE_KEY:
    try:
        supabase_client = create_client(SUPABASE_URL, SUPABASE_KEY)
        logger.info("Supabase initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize Supabase: {e}")

# Knowledge base reads go through one shared Redis cache (disabled without REDIS_URL)
knowledge_cache = KnowledgeCache(init_redis())
knowledge_store = CachedKnowledgeStore(SupabaseKnowledgeStore(supabase_client), knowledge_cache)

symptom_matcher = SymptomMatcher(knowledge_store)
diagnosis_recorder = DiagnosisRecorder(supabase_client)
