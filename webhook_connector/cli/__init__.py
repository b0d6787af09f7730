"""Webhook connector CLI — Typer-based command-line interface.

Provides the ``webhook-connector`` command with subcommands for running
the server, validating sink descriptors, and generating webhook keys.
"""
