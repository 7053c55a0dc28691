# src/neo4jfluent/config.py
"""
Connection and behaviour settings, read from ``NEO4J_*`` environment variables.
"""

from typing import Tuple

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Neo4jSettings(BaseSettings):
    """
    Settings for the engine and gateway.

    Environment variables are prefixed with ``NEO4J_``; a local ``.env`` file
    is honoured as well.
    """

    model_config = SettingsConfigDict(env_prefix="NEO4J_", env_file=".env", extra="ignore")

    uri: str = Field(default="bolt://localhost:7687", description="Bolt URI of the server")
    username: str = Field(default="neo4j")
    password: str = Field(default="password")
    database: str = Field(default="neo4j", description="Default database for sessions")

    log_queries: bool = Field(default=False, description="Log every statement at INFO")
    auto_uuid: bool = Field(default=True, description="Generate ids for new nodes")
    log_level: str = Field(default="INFO", description="Python logging level for the CLI")

    @property
    def auth(self) -> Tuple[str, str]:
        return (self.username, self.password)
