"""Application layer: matching service and ranking run orchestration."""
