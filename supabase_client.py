"""
Supabase Client Configuration

Lazily initializes the Supabase client used by the document store.
"""

# Standard library
import logging
import os

# Third-party
from dotenv import load_dotenv
from supabase import create_client, Client

# Configure logging
logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv(dotenv_path=os.path.join(os.path.dirname(__file__), 'config.env'))

supabase: Client | None = None
_initialized = False


def get_supabase() -> Client | None:
    """
    Returns the shared Supabase client, creating it on first access.

    Returns None (and logs a warning once) when SUPABASE_URL or SUPABASE_KEY
    is missing or the client cannot be created.
    """
    global supabase, _initialized

    if _initialized:
        return supabase
    _initialized = True

    url = os.getenv("SUPABASE_URL")
    key = os.getenv("SUPABASE_KEY")
    if not url or not key:
        logger.warning("SUPABASE_URL or SUPABASE_KEY not found - database features disabled")
        return None

    try:
        supabase = create_client(url, key)
        logger.info("Supabase client initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize Supabase client: {e}")
        supabase = None
    return supabase


def reset_supabase_for_tests() -> None:
    """Forgets the cached client so the next access re-reads the environment."""
    global supabase, _initialized
    supabase = None
    _initialized = False
