"""Neo4j connection settings from the environment (.env supported)."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv
from neo4j import GraphDatabase

# Repo root: src/contact_threads/infrastructure/config.py -> up four levels.
_REPO_ROOT = Path(__file__).resolve().parent.parent.parent.parent


def load_env() -> Path | None:
    """Load .env from the repo root or the current dir. Returns the file used, if any."""
    for path in (_REPO_ROOT / ".env", Path.cwd() / ".env"):
        if path.exists():
            load_dotenv(path)
            return path
    return None


@dataclass(frozen=True)
class Neo4jSettings:
    uri: str = "bolt://localhost:7687"
    user: str = "neo4j"
    password: str = "password"
    database: str | None = None

    @classmethod
    def from_env(cls) -> "Neo4jSettings":
        return cls(
            uri=os.environ.get("NEO4J_URI", "bolt://localhost:7687").strip(),
            user=os.environ.get("NEO4J_USER", "neo4j").strip(),
            password=os.environ.get("NEO4J_PASSWORD", "password").strip(),
            database=os.environ.get("NEO4J_DATABASE", "").strip() or None,
        )


def get_driver(settings: Neo4jSettings):
    return GraphDatabase.driver(settings.uri, auth=(settings.user, settings.password))
