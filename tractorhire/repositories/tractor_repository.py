import logging
from typing import List

from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.tractor import Tractor
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class TractorRepository(BaseRepository[Tractor]):
    def __init__(self, db: Session):
        super().__init__(db, Tractor)

    def get_owned_by(self, owner_id: str) -> List[Tractor]:
        try:
            return (
                self.db.query(Tractor)
                .filter(Tractor.owner_id == owner_id)
                .order_by(Tractor.name)
                .all()
            )
        except Exception as e:
            self.logger.error(f"Error getting tractors for owner {owner_id}: {str(e)}")
            raise RepositoryException(f"Failed to get owner tractors: {str(e)}")

    def get_listed(self) -> List[Tractor]:
        try:
            return (
                self.db.query(Tractor)
                .filter(Tractor.available.is_(True))
                .order_by(Tractor.name)
                .all()
            )
        except Exception as e:
            self.logger.error(f"Error listing available tractors: {str(e)}")
            raise RepositoryException(f"Failed to list tractors: {str(e)}")
