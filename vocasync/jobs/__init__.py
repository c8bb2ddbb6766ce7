"""Remote composite job tracking: status normalization and completion polling."""
