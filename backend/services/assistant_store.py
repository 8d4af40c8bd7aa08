"""Assistant store backed by a Supabase (PostgreSQL) table."""
import logging
from typing import Any, Dict, List, Optional
from supabase import create_client, Client

from models.assistant import AssistantProfile
from services.errors import ChatError, NotFoundError, StorageError
from config import SUPABASE_URL, SUPABASE_KEY, ASSISTANTS_TABLE

logger = logging.getLogger(__name__)

ASSISTANT_FIELDS = ("name", "description", "user_role", "model_info")


class AssistantStore:
    """Create, list and fetch assistant records."""

    def __init__(
        self,
        supabase_url: Optional[str] = SUPABASE_URL,
        supabase_key: Optional[str] = SUPABASE_KEY,
        table_name: str = ASSISTANTS_TABLE
    ):
        """
        Initialize the store with a Supabase client.

        The table is created by migrations/001_create_assistants_table.sql.

        Args:
            supabase_url: Supabase project URL
            supabase_key: Supabase API key
            table_name: Name of the assistants table

        Raises:
            ValueError: If Supabase credentials are missing
        """
        if not supabase_url or not supabase_key:
            raise ValueError("SUPABASE_URL and SUPABASE_KEY environment variables are required")

        self.table_name = table_name
        self.client: Client = create_client(supabase_url, supabase_key)

        logger.info(f"Initialized AssistantStore with table: {table_name}")

    def create(self, fields: Dict[str, Any]) -> AssistantProfile:
        """
        Insert a new assistant.

        Fields are free-form and all optional; unknown keys are ignored.

        Returns:
            The stored record, including its assigned id

        Raises:
            StorageError: If the insert fails
        """
        record = {key: fields.get(key) for key in ASSISTANT_FIELDS}

        try:
            result = self.client.table(self.table_name).insert(record).execute()
        except Exception as e:
            raise self._storage_error("create", e) from e

        if not result.data:
            raise self._storage_error("create", RuntimeError("insert returned no rows"))

        assistant = AssistantProfile.from_row(result.data[0])
        logger.info(f"Created assistant {assistant.id}")
        return assistant

    def list(self) -> List[AssistantProfile]:
        """
        Return every assistant in insertion order.

        Raises:
            StorageError: If the query fails
        """
        try:
            result = self.client.table(self.table_name).select("*").order("id", desc=False).execute()
        except Exception as e:
            raise self._storage_error("list", e) from e

        assistants = [AssistantProfile.from_row(row) for row in (result.data or [])]
        logger.debug(f"Listed {len(assistants)} assistants")
        return assistants

    def get_by_id(self, assistant_id: int) -> AssistantProfile:
        """
        Fetch one assistant.

        Raises:
            NotFoundError: If no assistant has this id
            StorageError: If the query fails
        """
        try:
            result = self.client.table(self.table_name).select("*").eq("id", assistant_id).execute()
        except Exception as e:
            raise self._storage_error("get", e, assistant_id=assistant_id) from e

        if not result.data:
            logger.info(f"Assistant {assistant_id} not found")
            raise NotFoundError(ChatError(
                code="NOT_FOUND",
                message="Assistant not found",
                details={"assistant_id": assistant_id}
            ))

        return AssistantProfile.from_row(result.data[0])

    def _storage_error(self, operation: str, error: Exception, **details: Any) -> StorageError:
        error_msg = f"Failed to {operation} assistant: {str(error)}"
        logger.error(error_msg, exc_info=error)
        return StorageError(ChatError(
            code="STORAGE_ERROR",
            message=error_msg,
            details={"operation": operation, "table": self.table_name, **details}
        ))
