"""Generator configuration.

Per-declaration options (such as the schema version) are ClassVars on the
declaration itself, see :class:`parcelwire.models.Parcelled`. Options that
apply to a whole generation run live here.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class GeneratorConfig(BaseModel):
    """Options for a generation run.

    Attributes:
        record_prefix: Prefix of generated record class names
        interface_prefix: Prefix of generated setter-interface names
        strict_resolution: Fail generation instead of falling back to dynamic
            values when a field type has no wire representation
        max_workers: Number of schemas generated concurrently in a batch
        write_header: Start generated modules with a "do not edit" header

    Example:
        >>> config = GeneratorConfig(strict_resolution=True)
        >>> process_batch([Person, Address], config=config)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    record_prefix: str = Field(default="Parcelled_", min_length=1)
    interface_prefix: str = Field(default="IParcelled_", min_length=1)
    strict_resolution: bool = False
    max_workers: int = Field(default=1, ge=1)
    write_header: bool = True


DEFAULT_CONFIG = GeneratorConfig()
