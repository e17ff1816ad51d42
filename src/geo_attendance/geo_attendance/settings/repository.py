from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Setting


class SettingRepository(Protocol):
    def get(self, key: str) -> Optional[Setting]:
        raise NotImplementedError

    def list_public(self, *, category: Optional[str] = None) -> Sequence[Setting]:
        raise NotImplementedError

    def upsert(self, setting: Setting) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> bool:
        raise NotImplementedError
