"""
Service functions wrapping email parsing, HTML conversion, prompts and AWS
(S3 and SES) access.
"""

__all__ = ['email', 'html', 'prompts', 's3', 'ses']
