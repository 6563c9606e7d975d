import io
import re

import pytest
from werkzeug.datastructures import FileStorage

from app.domain.exceptions import ValidationError
from app.utils.uploads import UploadStore, file_extension


def _file(name: str, content: bytes = b"\x89PNG fake") -> FileStorage:
    return FileStorage(stream=io.BytesIO(content), filename=name, content_type="image/png")


def test_file_extension():
    assert file_extension("Leaf.JPG") == "jpg"
    assert file_extension("../../etc/passwd") == ""
    assert file_extension(None) == ""


def test_save_uses_unique_name(tmp_path):
    store = UploadStore(str(tmp_path / "uploads"))

    path = store.save(_file("basil.png"))

    assert re.fullmatch(r"/uploads/\d+-[0-9a-f]{8}\.png", path)
    saved = tmp_path / "uploads" / path.rsplit("/", 1)[1]
    assert saved.read_bytes() == b"\x89PNG fake"


def test_save_without_file_returns_none(tmp_path):
    store = UploadStore(str(tmp_path))
    assert store.save(None) is None
    assert store.save(FileStorage(stream=io.BytesIO(b""), filename="")) is None


def test_save_rejects_other_types(tmp_path):
    store = UploadStore(str(tmp_path))
    with pytest.raises(ValidationError):
        store.save(_file("notes.txt"))


def test_remove(tmp_path):
    store = UploadStore(str(tmp_path))
    path = store.save(_file("basil.jpg"))

    assert store.remove(path) is True
    assert store.remove(path) is False
    assert store.remove("/elsewhere/x.jpg") is False
    assert store.remove(None) is False
