"""File service: persist objects, then index them; assemble read results."""

from typing import BinaryIO, List

from common.exceptions import StorageIOError
from common.logging_config import get_logger
from dabba.schemas.files import FileResponse, RevisionResponse
from dabba.services.revision_index import RevisionIndex
from objectstore.content_type import classify, decode_text, is_text
from objectstore.object_storage import ObjectStorage

logger = get_logger(__name__)


class FileService:
    def __init__(self, objects: ObjectStorage, revisions: RevisionIndex):
        self.objects = objects
        self.revisions = revisions

    def create_file(self, file_data: BinaryIO) -> int:
        """
        Store content and register a new logical file for it.

        The object is written before the index transaction. If the commit
        fails the object stays on disk unreferenced; retrying reuses it.

        Returns:
            The new file id
        """
        object_id = self.objects.write_object(file_data)
        return self.revisions.create(object_id)

    def update_file(self, file_id: int, file_data: BinaryIO) -> str:
        """
        Store new content and make it the current revision of file_id.

        Returns:
            The object id of the new revision
        """
        object_id = self.objects.write_object(file_data)
        self.revisions.update(file_id, object_id)
        return object_id

    def read(self, file_id: int) -> FileResponse:
        """
        Resolve a logical file and classify its current object.

        Raises:
            NotFoundError: If the file id or its object is missing
        """
        logical_file = self.revisions.resolve(file_id)

        with self.objects.open_object(logical_file.object_id) as f:
            content_type = classify(f)
            content = ""
            if is_text(content_type):
                try:
                    content = decode_text(f.read())
                except OSError as e:
                    logger.error(f"Failed to read object [file_id={file_id}, object_id={logical_file.object_id}]: {e}")
                    raise StorageIOError("read", logical_file.object_id, e) from e

        return FileResponse.from_logical_file(logical_file, type=content_type, content=content)

    def open_content(self, file_id: int) -> BinaryIO:
        """
        Open the current object of a file for reading, e.g. to serve a binary
        object by reference. The caller closes the handle.
        """
        logical_file = self.revisions.resolve(file_id)
        return self.objects.open_object(logical_file.object_id)

    def history(self, file_id: int) -> List[RevisionResponse]:
        return [RevisionResponse.from_entry(entry) for entry in self.revisions.history(file_id)]

    def verify(self, file_id: int) -> bool:
        """
        Check that the current object of a file still hashes to its id.

        Raises:
            NotFoundError: If the file id or its object is missing
        """
        logical_file = self.revisions.resolve(file_id)
        return self.objects.verify_object(logical_file.object_id)

    def unreferenced_objects(self) -> List[str]:
        """
        Objects on disk that no revision points at, e.g. left behind by a
        failed commit. Reported only; nothing is deleted.
        """
        referenced = self.revisions.referenced_objects()
        return [object_id for object_id in self.objects.list_objects() if object_id not in referenced]
