from .schema import ConfigError, FORMAT_VERSION, validate
from .mindmap_config import (
    ConfigMetadata,
    ImportedConfig,
    create_sample_config,
    dumps_config,
    export_filename,
    import_config_file,
    parse_config,
    sample_document,
    serialize_config,
    write_config_file,
)

__all__ = [
    "ConfigError",
    "ConfigMetadata",
    "FORMAT_VERSION",
    "ImportedConfig",
    "create_sample_config",
    "dumps_config",
    "export_filename",
    "import_config_file",
    "parse_config",
    "sample_document",
    "serialize_config",
    "validate",
    "write_config_file",
]
