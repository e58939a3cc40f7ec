from flake.codec import (
    IdCodec,
    configure,
    build,
    decompose,
    describe,
    from_json,
    from_json_value,
    from_string,
    generate,
    get_codec,
    set_epoch,
    set_precision,
    to_json,
    to_string,
)
from flake.layout import DEFAULT_EPOCH_MS, DEFAULT_TIMESTAMP_BITS, MAX_ID, FlakeLayout

__all__ = [
    "IdCodec",
    "configure",
    "FlakeLayout",
    "build",
    "generate",
    "decompose",
    "describe",
    "set_epoch",
    "set_precision",
    "to_string",
    "from_string",
    "to_json",
    "from_json",
    "from_json_value",
    "get_codec",
    "DEFAULT_EPOCH_MS",
    "DEFAULT_TIMESTAMP_BITS",
    "MAX_ID",
]
