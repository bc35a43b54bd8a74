"""Pure domain types for the cashbook kernel: records, calendar, clock."""
