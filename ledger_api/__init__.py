"""HTTP surface of the ledger kernel (FastAPI)."""
