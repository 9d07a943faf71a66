"""Prompt templates sent to the rewriting service."""
