"""
CodeArtifact SSO — cached AWS CodeArtifact credentials for Python tooling
=========================================================================
Hexagonal (Ports & Adapters) architecture.

Layer map
─────────────────────────────────────────────────────
  config/       All tuneable settings (env vars / .env)
  domain/       Pure business objects (models, exceptions) — no I/O
  ports/        Abstract interfaces (Python Protocols)
  adapters/     Concrete implementations of each Port (subprocess, file cache)
  services/     URL parsing, SSO session check, token fetch, orchestration
  interfaces/   Delivery layer: CLI, keyring backend for pip/twine
  tests/        Full test suite: unit / integration / e2e

Swapping an external dependency (e.g. boto3 instead of the AWS CLI):
  1. Write a new adapter in adapters/ implementing the relevant Port
  2. Change the single wiring line in services/container.py
  3. Done — zero other files touched
"""
__version__ = "1.0.0"
