#!/usr/bin/env python3
"""Create the bookings bucket on a local S3 endpoint (MinIO, LocalStack).

Optionally rebuilds index.json afterwards so a copied-in set of records is
immediately listable.

Usage:
    python scripts/create_local_bucket.py [--rebuild-index]
"""

import sys
from pathlib import Path

import boto3
from botocore.exceptions import ClientError

# Add src to path for config import
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from core.config import get_config
from core.services.index import BookingIndex
from core.store import S3BlobStore


def create_bucket(s3, bucket: str) -> None:
    try:
        s3.create_bucket(Bucket=bucket)
        print(f"✓ Created bucket {bucket}")
    except ClientError as e:
        if e.response["Error"]["Code"] in ("BucketAlreadyOwnedByYou", "BucketAlreadyExists"):
            print(f"✓ Bucket {bucket} already exists")
        else:
            raise


def main():
    config = get_config()

    endpoint_url = config.s3_endpoint or "http://localhost:9000"

    print(f"Creating S3 bucket at {endpoint_url}...")

    # Local S3 emulators accept dummy credentials
    s3 = boto3.client(
        "s3",
        endpoint_url=endpoint_url,
        region_name=config.aws_region,
        aws_access_key_id="dummy",
        aws_secret_access_key="dummy",
    )

    create_bucket(s3, config.bookings_bucket)

    if "--rebuild-index" in sys.argv[1:]:
        count = BookingIndex(S3BlobStore(s3, config.bookings_bucket, config.store_name)).rebuild()
        print(f"✓ Rebuilt index.json ({count} records)")

    print("✅ Local storage ready")


if __name__ == "__main__":
    main()
