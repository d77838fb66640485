"""
NeoWatch Alerting.

Components:
- schemas: Preference, threat and match-result models
- matcher: Pure per-user decision (skip or notify with one threat)
- channels: Email senders (SMTP, log-only)
- dispatcher: Formats one notification and hands it to a sender
"""
