"""Engine services: scheduling, analytics, notifications, cash ledger."""
