"""Infrastructure layer: concrete implementations of application ports."""

from contact_threads.infrastructure.addresses import make_address
from contact_threads.infrastructure.config import Neo4jSettings, get_driver, load_env
from contact_threads.infrastructure.memory_store import InMemoryThreadStore
from contact_threads.infrastructure.persistence.neo4j_store import Neo4jThreadStore
from contact_threads.infrastructure.phone import normalize_phone

__all__ = [
    "InMemoryThreadStore",
    "Neo4jSettings",
    "Neo4jThreadStore",
    "get_driver",
    "load_env",
    "make_address",
    "normalize_phone",
]
