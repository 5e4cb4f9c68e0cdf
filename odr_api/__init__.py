"""ODR mediation API: disputes, parties, mediation sessions, settlements and audit log."""

__version__ = "1.0.0"
