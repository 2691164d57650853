from .schema import SCHEMA_VERSION, add_column_step

__all__ = ["SCHEMA_VERSION", "add_column_step"]
