import os

from ...application.ports.storage_repo import StorageRepository


class LocalStorageRepository(StorageRepository):
    def __init__(self, upload_dir: str = "uploads") -> None:
        self.upload_dir = upload_dir

    def save_bytes(self, subdir: str, filename: str, data: bytes) -> str:
        dest_dir = os.path.join(self.upload_dir, subdir) if subdir else self.upload_dir
        os.makedirs(dest_dir, exist_ok=True)
        path = os.path.join(dest_dir, filename)
        with open(path, "wb") as f:
            f.write(data)
        return path
