"""Export configuration."""

import os
from enum import Enum
from typing import Optional, Dict, Any

from pydantic import BaseModel, Field

DEFAULT_OUTPUT_PATH = "metadata.jcatalog"
DEFAULT_CATALOG_NAME = "default"

# Defaults of the in-application (host runtime) export
RUNTIME_OUTPUT_PATH = "mendix_metadata.jcatalog"
RUNTIME_CATALOG_NAME = "mendix"

ENV_PREFIX = "JCATALOG_"

# Directory the service may write exports into (defaults to the working directory)
EXPORT_DIR_ENV = f"{ENV_PREFIX}EXPORT_DIR"


class AssociationScope(str, Enum):
    """Which schemas receive the associations found during a run."""
    SCHEMA = "schema"    # the schema owning the junction table
    CATALOG = "catalog"  # every non-empty schema, accumulated over the run


class ExportOptions(BaseModel):
    """Options of one export run."""
    output_path: str = DEFAULT_OUTPUT_PATH
    include_system_tables: bool = False
    default_catalog_name: str = DEFAULT_CATALOG_NAME
    association_scope: AssociationScope = AssociationScope.SCHEMA
    skip_failing_tables: bool = True
    deadline_seconds: Optional[float] = Field(default=None, gt=0)

    @classmethod
    def from_env(cls, defaults: Optional[Dict[str, Any]] = None, **overrides) -> "ExportOptions":
        """Build options from JCATALOG_* environment variables.

        Precedence: keyword overrides that are not None, then the environment,
        then ``defaults``, then the field defaults.
        """
        values = dict(defaults or {})
        for name in cls.model_fields:
            raw = os.getenv(f"{ENV_PREFIX}{name.upper()}")
            if raw not in (None, ""):
                values[name] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
