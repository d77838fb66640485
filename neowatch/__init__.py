"""
NeoWatch — near-Earth object hazard refresh and notification scheduler.

Architecture:
    neowatch/
    ├── db/              # SQLAlchemy models and async engine
    ├── feed/            # Upstream NEO feed client and risk scoring
    ├── stores/          # Hazard store and preference store
    ├── alerting/        # Preference matcher, dispatcher, email senders
    ├── jobs/            # Data refresh job, risk analysis job
    ├── services/        # Trigger manager (APScheduler)
    └── scripts/         # Operator scripts (run a job once, seed data)

Data Flow:
    Trigger Manager → Data Refresh Job → Feed → Risk scoring → Hazard Store
    Trigger Manager → Risk Analysis Job → Hazard Store + Preference Store
    → Preference Matcher → Notification Dispatcher → Email Sender

Version: 1.0.0
"""

__version__ = "1.0.0"
