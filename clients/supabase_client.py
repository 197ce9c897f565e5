import os
import logging
from typing import Dict, Any, List, Optional
from dotenv import load_dotenv
from supabase import create_client, Client

from models.learning_models import ModelConfig
from utils.exceptions import StorageError
from utils.model_config import MODEL_CONFIG_TABLE, row_to_model_config

load_dotenv()

logger = logging.getLogger(__name__)

_supabase_client: Optional[Client] = None


def get_supabase() -> Client:
    global _supabase_client
    if _supabase_client is None:
        url = os.getenv("SUPABASE_URL")
        key = os.getenv("SUPABASE_KEY")
        if not url or not key:
            raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set")
        _supabase_client = create_client(url, key)
    return _supabase_client


# ─── Model configuration ─────────────────────────────────────────────────────

def fetch_model_configs() -> Dict[str, ModelConfig]:
    """
    Read the whole model-config table.
    Returns:
        Dict mapping function_type -> ModelConfig. Empty if the table is empty.
    Raises:
        Exception if credentials are missing or the request fails.
    """
    response = get_supabase().table(MODEL_CONFIG_TABLE) \
        .select("function_type, provider, model, max_tokens, fallback_model, temperature") \
        .execute()

    configs: Dict[str, ModelConfig] = {}
    for row in response.data or []:
        try:
            configs[row["function_type"]] = row_to_model_config(row)
        except (KeyError, ValueError, TypeError) as e:
            logger.warning(f"Skipping malformed model config row {row.get('function_type')}: {e}")
    return configs


# ─── Learning steps ──────────────────────────────────────────────────────────

def get_step_detailed_content(step_id: str) -> Optional[str]:
    """Return cached detailed_content for a step, or None if not generated yet."""
    response = get_supabase().table("learning_steps") \
        .select("detailed_content").eq("id", step_id).execute()
    if response.data and len(response.data) > 0:
        return response.data[0].get("detailed_content") or None
    return None


def save_step_detailed_content(step_id: str, content: str) -> None:
    """Persist generated content on the step row."""
    try:
        get_supabase().table("learning_steps") \
            .update({"detailed_content": content}).eq("id", step_id).execute()
    except Exception as e:
        raise StorageError(
            f"Failed to save generated content: {e}",
            context={"step_id": step_id},
        )
    logger.info(f"Saved content for step {step_id} ({len(content)} characters)")


def get_steps_for_paths(path_ids: List[str]) -> List[Dict[str, Any]]:
    if not path_ids:
        return []
    response = get_supabase().table("learning_steps") \
        .select("id, path_id, title, completed").in_("path_id", path_ids).execute()
    return response.data or []


# ─── Learning paths ──────────────────────────────────────────────────────────

def list_paths_by_user(user_id: str) -> List[Dict[str, Any]]:
    """All learning paths for a user, newest first."""
    response = get_supabase().table("learning_paths") \
        .select("*").eq("user_id", user_id) \
        .order("created_at", desc=True).execute()
    return response.data or []


def update_path_title(path_id: str, title: str) -> None:
    get_supabase().table("learning_paths") \
        .update({"title": title}).eq("id", path_id).execute()
