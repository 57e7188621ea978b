from __future__ import annotations

import os
from dataclasses import dataclass, field


@dataclass
class Config:
    secret_key: str = "change-me"
    database_url: str = "sqlite:///dev.db"
    jwt_secrets: list[str] = field(default_factory=list)  # first element used for signing; all accepted for verification
    jwt_max_age_seconds: int = 43200  # 12h
    jwt_leeway_seconds: int = 60
    blob_bucket: str = ""
    blob_endpoint_url: str | None = None
    blob_region: str | None = None
    blob_public_base_url: str = ""  # defaults to the virtual-hosted bucket URL when empty
    legacy_page_size: int = 1000
    insert_batch_size: int = 500

    @classmethod
    def from_env(cls) -> Config:
        jwt_multi = os.getenv("JWT_SECRETS", "")
        # JWT_SECRETS allows key rotation: comma-separated secrets; first used for signing.
        jwt_list = [s for s in [j.strip() for j in jwt_multi.split(",")] if s]
        return cls(
            secret_key=os.getenv("SECRET_KEY", "change-me"),
            database_url=os.getenv("DATABASE_URL", "sqlite:///dev.db"),
            jwt_secrets=jwt_list,
            jwt_max_age_seconds=int(os.getenv("JWT_MAX_AGE_SECONDS", "43200")),
            jwt_leeway_seconds=int(os.getenv("JWT_LEEWAY_SECONDS", "60")),
            blob_bucket=os.getenv("BLOB_BUCKET", ""),
            blob_endpoint_url=os.getenv("BLOB_ENDPOINT_URL") or None,
            blob_region=os.getenv("BLOB_REGION") or None,
            blob_public_base_url=os.getenv("BLOB_PUBLIC_BASE_URL", ""),
            legacy_page_size=int(os.getenv("MIGRATE_PAGE_SIZE", "1000")),
            insert_batch_size=int(os.getenv("MIGRATE_BATCH_SIZE", "500")),
        )

    def override(self, d: dict):
        for k, v in d.items():
            if hasattr(self, k):
                setattr(self, k, v)

    def public_base_url(self) -> str:
        if self.blob_public_base_url:
            return self.blob_public_base_url.rstrip("/")
        if self.blob_endpoint_url:
            # path-style addressing for S3-compatible endpoints (minio, localstack)
            return f"{self.blob_endpoint_url.rstrip('/')}/{self.blob_bucket}"
        return f"https://{self.blob_bucket}.s3.amazonaws.com"

    def to_flask_dict(self):
        return {
            "SECRET_KEY": self.secret_key,
            "SQLALCHEMY_DATABASE_URI": self.database_url,
            "JWT_SECRETS": self.jwt_secrets,
            "JWT_MAX_AGE_SECONDS": self.jwt_max_age_seconds,
            "JWT_LEEWAY_SECONDS": self.jwt_leeway_seconds,
            "MIGRATE_PAGE_SIZE": self.legacy_page_size,
            "MIGRATE_BATCH_SIZE": self.insert_batch_size,
            # Harden session cookie defaults (still allow override in tests)
            "SESSION_COOKIE_HTTPONLY": True,
            "SESSION_COOKIE_SAMESITE": "Lax",
        }
