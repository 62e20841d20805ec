"""Project-wide constants (directory layout, sniffing limits, copy sizes)."""

OBJECTS_DIR: str = "objects"
META_DIR: str = "meta"
CONFIG_FILENAME: str = "config.json"

NAMED_OBJECT_SUFFIX: str = ".dabba"
META_SUFFIX: str = ".meta"

HASH_HEX_LENGTH: int = 40  # SHA-1
SHARD_PREFIX_LENGTH: int = 2

SNIFF_LENGTH_BYTES: int = 512
COPY_PIECE_SIZE_BYTES: int = 64 * 1024  # 64 KiB read size when hashing/copying

TEXT_MIME_PREFIX: str = "text/plain"
IMAGE_MIME_TYPES: frozenset = frozenset({
    "image/avif",
    "image/gif",
    "image/jpeg",
    "image/png",
    "image/svg+xml",
    "image/webp",
})

# formats the sniffer recognizes by signature before falling back to text
SIGNATURE_MIME_TYPES: frozenset = frozenset({
    "text/html",
    "text/xml",
    "application/xml",
    "application/pdf",
    "application/postscript",
})

# control bytes that mark content as binary rather than text
BINARY_DATA_BYTES: frozenset = frozenset(
    list(range(0x00, 0x09)) + [0x0B] + list(range(0x0E, 0x1B)) + list(range(0x1C, 0x20))
)
