"""
Prompt management utilities.

Rewrite prompts are loaded with the following priority:
1. S3 override (optional, for prompt changes without redeploy)
2. Local filesystem (prompts/ directory packaged with the Lambda)

Loaded prompts are cached in memory for warm Lambda invocations with a TTL.
"""

import logging
import os
import time
from pathlib import Path
from typing import Dict, Tuple

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = 'rewrite_system.txt'
USER_PROMPT = 'rewrite_user.txt'

# Seconds before a cached prompt is reloaded
CACHE_TTL_SECONDS = int(os.environ.get('PROMPT_CACHE_TTL', '300'))

# {prompt_name: (content, loaded_at)}
_prompt_cache: Dict[str, Tuple[str, float]] = {}

s3_config = Config(
    retries={
        'max_attempts': 1,
        'mode': 'standard'
    },
    connect_timeout=10,
    read_timeout=30
)

s3_client = boto3.client('s3', config=s3_config)

PROMPT_BUCKET = os.environ.get('PROMPT_BUCKET')
PROMPT_KEY_PREFIX = os.environ.get('PROMPT_KEY_PREFIX', 'prompts/')

# src/services/prompts.py -> src/prompts/
PROMPTS_DIR = Path(__file__).parent.parent / 'prompts'


def _load_from_filesystem(prompt_name: str) -> str:
    """
    Load a prompt packaged with the function.

    Raises:
        FileNotFoundError: If the prompt file doesn't exist
    """
    prompt_path = PROMPTS_DIR / prompt_name
    with open(prompt_path, 'r', encoding='utf-8') as f:
        content = f.read()

    logger.info(f"Loaded prompt from filesystem: {prompt_path} ({len(content)} characters)")
    return content


def _load_from_s3(prompt_name: str) -> str:
    """
    Load a prompt override from S3.

    Raises:
        ValueError: If PROMPT_BUCKET is not set
        ClientError: If the object cannot be read
    """
    if not PROMPT_BUCKET:
        raise ValueError("PROMPT_BUCKET environment variable not set")

    s3_key = f"{PROMPT_KEY_PREFIX}{prompt_name}"
    response = s3_client.get_object(Bucket=PROMPT_BUCKET, Key=s3_key)
    content = response['Body'].read().decode('utf-8')

    logger.info(f"Loaded prompt from s3://{PROMPT_BUCKET}/{s3_key} ({len(content)} characters)")
    return content


def load_prompt(prompt_name: str, use_cache: bool = True) -> str:
    """
    Load a prompt template, preferring a fresh cache entry, then S3, then disk.

    Args:
        prompt_name: Prompt file name (e.g. "rewrite_system.txt")
        use_cache: Use the cached version if it is younger than the TTL

    Returns:
        str: Prompt template content

    Raises:
        ValueError: If the prompt is found neither in S3 nor on disk
    """
    now = time.time()

    if use_cache and prompt_name in _prompt_cache:
        content, loaded_at = _prompt_cache[prompt_name]
        if now - loaded_at < CACHE_TTL_SECONDS:
            return content
        logger.info(f"Cache expired for prompt {prompt_name}, reloading")

    content = None

    if PROMPT_BUCKET:
        try:
            content = _load_from_s3(prompt_name)
        except (ClientError, ValueError) as e:
            logger.info(
                f"S3 override for {prompt_name} not available "
                f"({e.__class__.__name__}), using packaged prompt"
            )

    if content is None:
        try:
            content = _load_from_filesystem(prompt_name)
        except FileNotFoundError:
            logger.error(f"Prompt not found: {PROMPTS_DIR / prompt_name}")
            raise ValueError(f"Prompt '{prompt_name}' not found in S3 or local filesystem")

    _prompt_cache[prompt_name] = (content, now)
    return content


def format_prompt(template: str, **variables) -> str:
    """
    Substitute {placeholders} in a template.

    Values are inserted as-is: str.format never re-reads substituted text, so
    an email body containing "{something}" comes through literally.

    Raises:
        ValueError: If the template references a variable that was not given

    Example:
        >>> format_prompt("Body:\\n{body}", body="a {b} c")
        'Body:\\na {b} c'
    """
    try:
        return template.format(**variables)
    except KeyError as e:
        missing_var = str(e).strip("'")
        logger.error(f"Missing variable in prompt template: {missing_var}")
        raise ValueError(f"Missing required variable in prompt: {missing_var}")


def clear_cache() -> None:
    """Drop all cached prompts."""
    _prompt_cache.clear()
