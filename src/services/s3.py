"""
S3 access for raw inbound emails stored by the SES receipt rule.
"""

import logging

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

# Single attempt, bounded timeouts
s3_config = Config(
    retries={
        'max_attempts': 1,
        'mode': 'standard'
    },
    connect_timeout=10,
    read_timeout=60
)

s3_client = boto3.client('s3', config=s3_config)


def fetch_raw_email(bucket: str, key: str) -> bytes:
    """
    Fetch the raw MIME bytes of an inbound email.

    Args:
        bucket: S3 bucket name from the SES receipt action
        key: S3 object key from the SES receipt action

    Returns:
        bytes: The raw email

    Raises:
        ValueError: If the bucket or object does not exist
        ClientError: For other S3 errors
    """
    logger.info(f"Fetching email from: s3://{bucket}/{key}")
    try:
        response = s3_client.get_object(Bucket=bucket, Key=key)
    except ClientError as e:
        error_code = e.response.get('Error', {}).get('Code', '')
        if error_code == 'NoSuchKey':
            logger.error(f"S3 object not found: s3://{bucket}/{key}")
            raise ValueError(f"Email file not found in S3: {key}")
        if error_code == 'NoSuchBucket':
            logger.error(f"S3 bucket not found: {bucket}")
            raise ValueError(f"S3 bucket not found: {bucket}")
        logger.error(f"Failed to fetch s3://{bucket}/{key}: {error_code}")
        raise

    raw_email = response['Body'].read()
    logger.info(f"Fetched {len(raw_email):,} bytes from S3")
    return raw_email
