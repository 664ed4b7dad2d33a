"""Remote store integrations."""

from sitecontent.integrations.supabase import SupabaseContentClient

__all__ = ["SupabaseContentClient"]
