"""
Pytest configuration and fixtures for all tests.
"""

import os
import sys
import pytest

# Add src to Python path before any imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

# Set up test environment variables before importing any modules
os.environ.setdefault('AWS_DEFAULT_REGION', 'us-west-2')
os.environ.setdefault('OPENROUTER_API_KEY', 'sk-or-test-key')
os.environ.setdefault('WEBHOOK_URL', 'https://hooks.example.com/email')
os.environ.setdefault('LOG_LEVEL', 'INFO')


@pytest.fixture
def sample_email_content():
    """Sample raw email with both plain text and HTML parts."""
    return b"""From: Ann Sender <sender@example.com>
To: inbox@yourdomain.com
Subject: Test Email Subject
Message-ID: <abc123@example.com>
Date: Wed, 12 Nov 2025 10:30:00 +0000
MIME-Version: 1.0
Content-Type: multipart/alternative; boundary="boundary123"

--boundary123
Content-Type: text/plain; charset="UTF-8"

This is a test email body in plain text.

--boundary123
Content-Type: text/html; charset="UTF-8"

<html><body><p>This is a test email body in <strong>HTML</strong>.</p></body></html>

--boundary123--
"""
