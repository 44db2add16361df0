"""
Store Map Services Package.

Business logic services for the store-mapping backend including:
- StoreRepository: Read queries over stores, sectors, products and map records
- SectorTreeAssembler: Builds a store's nested sector/product tree
- SectorService: Sector hierarchy writes (parent validation, cascading delete)
- QueueService: Checkout queue lengths kept in Redis
"""

from storemap.services.store_repository import StoreRepository
from storemap.services.sector_tree import (
    SectorTreeAssembler,
    SectorNode,
    SectorTreeError,
    SectorCycleError,
    SectorTreeDepthError,
    SectorOrphanError,
    build_sector_tree,
)
from storemap.services.sector_service import SectorService, SectorValidationError
from storemap.services.queue_service import QueueService, QueueUnavailableError

__all__ = [
    'StoreRepository',
    'SectorTreeAssembler',
    'SectorNode',
    'SectorTreeError',
    'SectorCycleError',
    'SectorTreeDepthError',
    'SectorOrphanError',
    'build_sector_tree',
    'SectorService',
    'SectorValidationError',
    'QueueService',
    'QueueUnavailableError',
]
