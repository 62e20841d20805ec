"""Store handle: wires object storage, the revision index and named files."""

from pathlib import Path
from typing import Optional, Union

from common.exceptions import StorageIOError, StoreClosedError
from common.logging_config import get_logger, setup_logging
from dabba.config import DATABASE_FILENAME, DEFAULT_STORE_ROOT, LOG_LEVEL, StoreSettings, load_store_settings
from dabba.database import Database
from dabba.meta_store import MetaStore
from dabba.services.file_service import FileService
from dabba.services.revision_index import RevisionIndex
from objectstore.object_storage import ObjectStorage

logger = get_logger(__name__)


class Store:
    """
    An open store rooted at one directory.

    Holds the root path and loaded settings for its lifetime. Create it with
    open_store() and release it with close() or a ``with`` block. Every
    accessor raises StoreClosedError once the store is closed.
    """

    def __init__(
        self,
        root: Path,
        settings: StoreSettings,
        database: Database,
        objects: ObjectStorage,
        revisions: RevisionIndex,
        meta: MetaStore,
    ):
        self.root = root
        self.settings = settings
        self.database = database
        self._objects = objects
        self._revisions = revisions
        self._files = FileService(objects, revisions)
        self._meta = meta
        self.closed = False

    def _check_open(self) -> None:
        if self.closed:
            raise StoreClosedError(f"store at {self.root} is closed")

    @property
    def objects(self) -> ObjectStorage:
        self._check_open()
        return self._objects

    @property
    def revisions(self) -> RevisionIndex:
        self._check_open()
        return self._revisions

    @property
    def files(self) -> FileService:
        self._check_open()
        return self._files

    @property
    def meta(self) -> MetaStore:
        self._check_open()
        return self._meta

    def __enter__(self) -> "Store":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def index(self) -> Optional[str]:
        """Name of the default document, from ``start-file`` in config.json."""
        self._check_open()
        return self.settings.start_file

    def close(self) -> None:
        # connections are opened per operation
        if not self.closed:
            self.closed = True
            logger.debug(f"Closed store at {self.root}")


def open_store(root: Union[str, Path, None] = None, database_filename: str = DATABASE_FILENAME) -> Store:
    """
    Open (and if needed initialize) a store at root.

    Creates the root, ``objects/``, ``meta/``, ``config.json`` and the
    SQLite index.

    Raises:
        ConfigError: If config.json exists but can't be decoded
        StorageIOError: If the directory layout can't be created
        TransactionError: If the index schema can't be created
    """
    setup_logging("dabba", LOG_LEVEL)
    setup_logging("objectstore", LOG_LEVEL)

    root = Path(root if root is not None else DEFAULT_STORE_ROOT)
    try:
        root.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageIOError("mkdir", str(root), e) from e

    settings = load_store_settings(root)

    objects = ObjectStorage(root)
    objects.ensure_objects_directory()
    meta = MetaStore(root)
    meta.ensure_directories()

    database = Database(root / database_filename)
    database.init_schema()

    logger.info(f"Opened store at {root}")
    return Store(
        root=root,
        settings=settings,
        database=database,
        objects=objects,
        revisions=RevisionIndex(database),
        meta=meta,
    )
