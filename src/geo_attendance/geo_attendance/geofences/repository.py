from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Geofence


class GeofenceRepository(Protocol):
    def get_by_id(self, geofence_id: int) -> Optional[Geofence]:
        raise NotImplementedError

    def list_active(self) -> Sequence[Geofence]:
        raise NotImplementedError

    def list_all(self, *, is_active: Optional[bool] = None, limit: int, offset: int = 0) -> Sequence[Geofence]:
        """Newest first, optionally filtered by activity."""
        raise NotImplementedError

    def create(self, geofence: Geofence) -> int:
        raise NotImplementedError

    def update(self, geofence: Geofence) -> None:
        raise NotImplementedError

    def set_active(self, geofence_id: int, is_active: bool) -> None:
        raise NotImplementedError

    def delete(self, geofence_id: int) -> None:
        raise NotImplementedError
