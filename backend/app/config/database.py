from dotenv import load_dotenv
from supabase._async.client import create_client as create_async_client, AsyncClient
from config.settings import get_settings
import logging

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

async def get_async_supabase_client() -> AsyncClient:
    """
    Initialize and return an async Supabase client using the service key.

    One client is created per request; FastAPI routes receive it through Depends().

    Raises:
        ValueError: If the Supabase URL or service key is not configured
    """
    settings = get_settings()
    if not settings.supabase_url or not settings.supabase_service_key:
        raise ValueError(
            "Supabase configuration not found. Please set SUPABASE_URL and SUPABASE_SERVICE_KEY environment variables."
        )

    client = await create_async_client(
        supabase_url=settings.supabase_url,
        supabase_key=settings.supabase_service_key
    )
    return client
