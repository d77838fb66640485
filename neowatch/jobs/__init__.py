"""
Scheduled jobs.

- refresh: pull the upstream feed, score, upsert into the hazard store
- analysis: once a day, match today's threats against user preferences
"""
