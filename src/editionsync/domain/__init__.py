"""Domain layer: edition ledger model, ports and pipeline stages."""
