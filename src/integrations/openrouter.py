"""
Rewriting service client (OpenRouter chat completions).

Sends a cleaned email body with the rewrite prompts and returns the rewritten
markdown. One attempt per message: no retries, no streaming.

Usage:
    from integrations.openrouter import RewriteClient

    client = RewriteClient(api_key="sk-or-...")
    markdown = client.rewrite("Hola, ¿cómo estás?")
"""

import logging
import time
from typing import Any, Dict, List, Optional

import httpx

from config import DEFAULT_REWRITE_API_URL, DEFAULT_REWRITE_MODEL
from domain.errors import RewriteError
from services import prompts as prompt_service

logger = logging.getLogger(__name__)


def build_messages(body: str) -> List[Dict[str, str]]:
    """
    Build the chat messages for one rewrite request.

    Returns:
        List with the system instruction and the user instruction wrapping the body
    """
    system_prompt = prompt_service.load_prompt(prompt_service.SYSTEM_PROMPT).strip()
    user_template = prompt_service.load_prompt(prompt_service.USER_PROMPT).strip()
    return [
        {'role': 'system', 'content': system_prompt},
        {'role': 'user', 'content': prompt_service.format_prompt(user_template, body=body)},
    ]


def extract_completion(data: Any) -> str:
    """
    Return choices[0].message.content from a chat-completions response.

    Raises:
        RewriteError: If the response does not have that shape or the content is empty
    """
    try:
        content = data['choices'][0]['message']['content']
    except (KeyError, IndexError, TypeError):
        raise RewriteError("Failed to get response from AI: unexpected response shape")

    if not isinstance(content, str) or not content.strip():
        raise RewriteError("Failed to get response from AI: empty completion")
    return content


class RewriteClient:
    """
    Translates and cleans email bodies through a chat-completions API.

    The httpx client may be injected (tests use httpx.MockTransport); otherwise
    one is created with `timeout` seconds, no timeout when it is None.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_REWRITE_MODEL,
        api_url: str = DEFAULT_REWRITE_API_URL,
        http_client: Optional[httpx.Client] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.api_url = api_url
        if http_client is None:
            http_client = httpx.Client(timeout=timeout)
        self.http_client = http_client

    def rewrite(self, body: str) -> str:
        """
        Rewrite an email body into clean English markdown.

        Args:
            body: Cleaned, non-empty email body

        Returns:
            str: The rewritten body

        Raises:
            RewriteError: On transport failure, non-2xx status, invalid JSON
                or a response without completion text
        """
        start_time = time.time()
        headers = {
            'Authorization': f"Bearer {self.api_key}",
            'Content-Type': 'application/json',
        }
        payload = {
            'model': self.model,
            'messages': build_messages(body),
        }

        logger.info(f"Rewriting email: model={self.model}, body_length={len(body)}")

        try:
            response = self.http_client.post(self.api_url, headers=headers, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Rewrite request failed: {e.__class__.__name__}: {e}")
            raise RewriteError(f"Rewrite request failed: {e}") from e

        if not response.is_success:
            logger.error(
                f"Rewrite service returned HTTP {response.status_code}: {response.text[:500]}"
            )
            raise RewriteError(f"Rewrite service returned HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Rewrite service returned invalid JSON: {response.text[:200]}")
            raise RewriteError("Rewrite service returned invalid JSON") from e

        content = extract_completion(data)

        logger.info(
            f"Rewrite succeeded: response_length={len(content)}, "
            f"execution_time={time.time() - start_time:.2f}s"
        )
        return content
