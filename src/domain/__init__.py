"""
Domain layer for the email relay.

This layer contains:
- Data models (parsed email, delivery payload, pipeline outcome)
- Body extraction and cleanup (pure functions)
- The pipeline orchestrator with its rejection policy
"""
