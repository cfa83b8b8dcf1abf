"""
Application configuration via Pydantic Settings.
Loads from environment variables with validation and defaults.
"""

from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field
from functools import lru_cache

VERSION = "1.2.0"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # === Server ===
    server_host: str = Field(default="0.0.0.0", alias="SERVER_HOST")
    server_port: int = Field(default=8001, alias="SERVER_PORT")
    debug: bool = Field(default=False, alias="DEBUG")

    # === Supabase ===
    supabase_url: str = Field(..., alias="SUPABASE_URL")
    supabase_service_role_key: str = Field(..., alias="SUPABASE_SERVICE_ROLE_KEY")
    supabase_jwt_secret: Optional[str] = Field(default=None, alias="SUPABASE_JWT_SECRET")

    # === CORS ===
    allowed_origins: str = Field(default="*", alias="ALLOWED_ORIGINS")

    # === AWS Rekognition ===
    aws_region: str = Field(default="us-east-1", alias="AWS_REGION")
    aws_access_key_id: Optional[str] = Field(default=None, alias="AWS_ACCESS_KEY_ID")
    aws_secret_access_key: Optional[str] = Field(default=None, alias="AWS_SECRET_ACCESS_KEY")
    collection_prefix: str = Field(default="savta-user-", alias="REKOGNITION_COLLECTION_PREFIX")

    # === Face pipeline thresholds ===
    max_faces_per_image: int = Field(default=10, ge=1, le=100, alias="MAX_FACES_PER_IMAGE")
    min_face_width: float = Field(default=0.03, ge=0, le=1, alias="MIN_FACE_WIDTH")
    min_face_height: float = Field(default=0.03, ge=0, le=1, alias="MIN_FACE_HEIGHT")
    match_similarity_floor: float = Field(default=80.0, ge=0, le=100, alias="MATCH_SIMILARITY_FLOOR")
    max_matches: int = Field(default=5, ge=1, le=4096, alias="MAX_MATCHES")
    auto_assign_similarity: float = Field(default=95.0, ge=0, le=100, alias="AUTO_ASSIGN_SIMILARITY")
    max_suggestions: int = Field(default=3, ge=0, alias="MAX_SUGGESTIONS")

    # === Re-search of already indexed faces ===
    rematch_min_matches: int = Field(default=2, ge=1, alias="REMATCH_MIN_MATCHES")
    rematch_single_similarity: float = Field(default=97.0, ge=0, le=100, alias="REMATCH_SINGLE_SIMILARITY")

    # === Photo storage ===
    image_fetch_timeout: float = Field(default=30.0, gt=0, alias="IMAGE_FETCH_TIMEOUT")

    @property
    def cors_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS into list."""
        return [origin.strip() for origin in self.allowed_origins.split(",")]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        populate_by_name = True
        extra = "ignore"  # Ignore extra env vars


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
