"""Unit tests for the payroll extraction stages."""
