"""
Configuration for the schema resolution pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .schema_ast.parser import DEFAULT_SCHEMA_SECTIONS


class RemoteReferencePolicy(str, Enum):
    """What happens to an http(s) $ref that is not allow-listed."""

    ERROR = "error"  # Default: fail the schema with RemoteReferenceDisallowedError
    UNRESOLVED = "unresolved"  # Keep an unresolved RefField and log a warning


class MergePolicy(str, Enum):
    """How oneOf/allOf entries written under the same key are combined."""

    LAST_WINS = "last_wins"  # Default: a later entry replaces an earlier one
    MERGE = "merge"  # Union the members of object entries, reject other collisions
    ERROR = "error"  # Reject any collision


class UnknownTypePolicy(str, Enum):
    """What happens to a node with neither a known type nor a $ref."""

    ERROR = "error"  # Default: raise UnknownSchemaTypeError
    UNKNOWN = "unknown"  # Emit a field typed "unknown"
    SKIP = "skip"  # Emit nothing


@dataclass
class ResolverConfig:
    """Configuration options for schema resolution."""

    # URL prefixes of http(s) references that may be handed to the document loader
    allowed_remote_prefixes: list[str] = field(default_factory=list)

    remote_reference_policy: RemoteReferencePolicy = RemoteReferencePolicy.ERROR

    all_of_merge_policy: MergePolicy = MergePolicy.LAST_WINS

    unknown_type_policy: UnknownTypePolicy = UnknownTypePolicy.ERROR

    # Emit a plain RefField instead of raising when a $ref loops back
    allow_recursive_references: bool = False

    # Infer "object" from properties/allOf/oneOf and "array" from items when type is absent
    infer_missing_types: bool = False

    # Seconds allowed for reading one referenced document
    load_timeout: float = 10.0

    # Variable names that get a trailing underscore
    reserved_words: list[str] = field(default_factory=list)

    # JSON pointers searched (in order) for named schemas in a document
    schema_sections: list[str] = field(default_factory=lambda: list(DEFAULT_SCHEMA_SECTIONS))

    @staticmethod
    def from_dict(d: dict) -> ResolverConfig:
        """Create a config from a dictionary."""
        config = ResolverConfig()
        for k, v in d.items():
            if k == "remote_reference_policy":
                config.remote_reference_policy = RemoteReferencePolicy(v)
            elif k == "all_of_merge_policy":
                config.all_of_merge_policy = MergePolicy(v)
            elif k == "unknown_type_policy":
                config.unknown_type_policy = UnknownTypePolicy(v)
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "allowed_remote_prefixes": self.allowed_remote_prefixes,
            "remote_reference_policy": self.remote_reference_policy.value,
            "all_of_merge_policy": self.all_of_merge_policy.value,
            "unknown_type_policy": self.unknown_type_policy.value,
            "allow_recursive_references": self.allow_recursive_references,
            "infer_missing_types": self.infer_missing_types,
            "load_timeout": self.load_timeout,
            "reserved_words": self.reserved_words,
            "schema_sections": self.schema_sections,
        }
