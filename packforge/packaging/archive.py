"""
Archive Primitives - 压缩包读写

资源包一律是 zip 文件。写入端先在内存中按路径收集条目（同一路径重复写入时
后写覆盖前写），最后一次性写到临时文件再原子替换目标；读取端对同一个
ZipFile 的并发读取加锁。
"""
from __future__ import annotations

import io
import json
import logging
import os
import tempfile
import threading
import zipfile
import zlib
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from ..errors import PackIOError, StructuralParseError

logger = logging.getLogger(__name__)

ArchiveSource = Union[str, Path, bytes]


# ============================================================================
# 写入
# ============================================================================

class ArchiveWriter:
    """内存中的 zip 构建器"""

    def __init__(self, compression_level: int = 9):
        self.compression_level = compression_level
        self.entries: Dict[str, bytes] = {}

    def write_bytes(self, path: str, data: bytes) -> None:
        if path in self.entries:
            logger.debug(f"Replacing archive entry {path}")
        self.entries[path] = bytes(data)

    def write_text(self, path: str, text: str) -> None:
        self.write_bytes(path, text.encode('utf-8'))

    def write_json(self, path: str, data: Any) -> None:
        self.write_text(path, json.dumps(data, ensure_ascii=False, indent=2))

    def __contains__(self, path: str) -> bool:
        return path in self.entries

    def names(self) -> List[str]:
        return list(self.entries.keys())

    def to_bytes(self) -> bytes:
        buf = io.BytesIO()
        self._write_to(buf)
        return buf.getvalue()

    def _write_to(self, fileobj) -> None:
        with zipfile.ZipFile(
            fileobj, 'w',
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=self.compression_level,
        ) as zf:
            for path, data in self.entries.items():
                zf.writestr(path, data)

    def save(self, output_path: Path) -> Path:
        """写到临时文件后原子替换，失败时不留下半成品"""
        output_path = Path(output_path)
        tmp_name: Optional[str] = None
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix='.packforge-', suffix='.zip', dir=output_path.parent)
            with os.fdopen(fd, 'wb') as f:
                self._write_to(f)
            os.replace(tmp_name, output_path)
            tmp_name = None
        except OSError as e:
            raise PackIOError(f"Cannot write archive: {e}", str(output_path))
        finally:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
        return output_path


# ============================================================================
# 读取
# ============================================================================

class ArchiveReader:
    """
    zip 读取器

    Usage:
        with ArchiveReader(path) as archive:
            for name in archive.names():
                ...
    """

    def __init__(self, source: ArchiveSource, name: Optional[str] = None):
        self._lock = threading.Lock()
        if isinstance(source, (bytes, bytearray)):
            fileobj = io.BytesIO(source)
            self.name = name or "archive"
        else:
            fileobj = Path(source)
            self.name = name or Path(source).name
        try:
            self._zip = zipfile.ZipFile(fileobj, 'r')
        except (OSError, zipfile.BadZipFile) as e:
            raise PackIOError(f"Cannot open archive: {e}", self.name)
        self._infos: Dict[str, zipfile.ZipInfo] = {i.filename: i for i in self._zip.infolist()}

    def names(self) -> List[str]:
        """归档内部索引顺序，不保证排序"""
        return [i.filename for i in self._zip.infolist()]

    def files(self) -> Iterator[str]:
        for info in self._zip.infolist():
            if not info.is_dir():
                yield info.filename

    def exists(self, path: str) -> bool:
        info = self._infos.get(path)
        return info is not None and not info.is_dir()

    def is_dir(self, path: str) -> bool:
        info = self._infos.get(path)
        return info is not None and info.is_dir()

    def read(self, path: str) -> bytes:
        with self._lock:
            try:
                return self._zip.read(path)
            except KeyError:
                raise PackIOError(f"Entry not found: {path}", self.name)
            except (OSError, zipfile.BadZipFile, zlib.error) as e:
                raise PackIOError(f"Cannot read entry {path}: {e}", self.name)

    def read_text(self, path: str) -> str:
        data = self.read(path)
        try:
            return data.decode('utf-8-sig')
        except UnicodeDecodeError as e:
            raise StructuralParseError(f"Not UTF-8 text: {e}", path)

    def read_json(self, path: str) -> Any:
        text = self.read_text(path)
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise StructuralParseError(f"Malformed JSON: {e}", path)

    def close(self) -> None:
        self._zip.close()

    def __enter__(self) -> 'ArchiveReader':
        return self

    def __exit__(self, *args) -> None:
        self.close()
