from functools import lru_cache

from minio import Minio
from app.core.config import settings

def _normalize_minio_endpoint(endpoint: str, default_secure: bool) -> tuple[str, bool]:
  ep = (endpoint or "").strip()
  secure = default_secure
  if ep.startswith("http://"):
    secure = False
    ep = ep[len("http://"):]
  elif ep.startswith("https://"):
    secure = True
    ep = ep[len("https://"):]
  if "/" in ep:
    ep = ep.split("/", 1)[0]
  return ep, secure


@lru_cache(maxsize=1)
def get_minio_client() -> Minio:
  """Build the MinIO client on first use and make sure the photo bucket exists."""
  endpoint, secure = _normalize_minio_endpoint(settings.MINIO_ENDPOINT, settings.MINIO_SECURE)
  client = Minio(
    endpoint,
    access_key=settings.MINIO_ACCESS_KEY,
    secret_key=settings.MINIO_SECRET_KEY,
    secure=secure,
  )
  if not client.bucket_exists(settings.MINIO_BUCKET):
    client.make_bucket(settings.MINIO_BUCKET)
  return client
